"""Configuration loading with pydantic-settings.

Supports loading configuration from multiple sources with precedence:
1. Direct kwargs (highest priority)
2. Environment variables (MODELDOC__SECTION__KEY)
3. Project config (<project>/.modeldoc.yaml)
4. Laravel .env database settings (DB_CONNECTION, DB_DATABASE, ...)
5. Global config (~/.config/modeldoc/config.yaml)
6. Built-in defaults (lowest priority)
"""

from pathlib import Path
from typing import Any

import yaml
from dotenv import dotenv_values
from pydantic import ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict
from sqlalchemy.engine import URL

from modeldoc.config.models import (
    DatabaseConfig,
    LoggingConfig,
    ModelDocConfig,
    ModelsConfig,
    RunnerConfig,
)
from modeldoc.core.errors import ConfigError

GLOBAL_CONFIG_PATH = Path("~/.config/modeldoc/config.yaml").expanduser()
PROJECT_CONFIG_NAME = ".modeldoc.yaml"

# Laravel DB_CONNECTION driver -> SQLAlchemy dialect+driver
_LARAVEL_DRIVERS = {
    "mysql": "mysql+pymysql",
    "mariadb": "mysql+pymysql",
    "pgsql": "postgresql+psycopg",
    "sqlsrv": "mssql+pyodbc",
}


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with path.open() as f:
            return yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError.parse_error(str(path), str(e)) from e


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _laravel_database(project_root: Path) -> dict[str, Any]:
    """Derive the default connection from a Laravel project's .env file."""
    env_path = project_root / ".env"
    if not env_path.exists():
        return {}

    env = dotenv_values(env_path)
    driver = env.get("DB_CONNECTION")
    if not driver:
        return {}

    if driver == "sqlite":
        database = env.get("DB_DATABASE") or "database/database.sqlite"
        db_path = Path(database)
        if not db_path.is_absolute():
            db_path = project_root / db_path
        url = URL.create("sqlite", database=str(db_path))
    elif driver in _LARAVEL_DRIVERS:
        port = env.get("DB_PORT")
        url = URL.create(
            _LARAVEL_DRIVERS[driver],
            username=env.get("DB_USERNAME") or None,
            password=env.get("DB_PASSWORD") or None,
            host=env.get("DB_HOST") or None,
            port=int(port) if port else None,
            database=env.get("DB_DATABASE") or None,
        )
    else:
        return {}

    return {
        "default": driver,
        "connections": {driver: url.render_as_string(hide_password=False)},
    }


class _YamlSource(PydanticBaseSettingsSource):
    """Settings source that reads from pre-loaded YAML config."""

    def __init__(self, settings_cls: type[BaseSettings], yaml_config: dict[str, Any]) -> None:
        super().__init__(settings_cls)
        self._yaml_config = yaml_config

    def get_field_value(
        self,
        field: Any,  # noqa: ARG002
        field_name: str,
    ) -> tuple[Any, str, bool]:
        val = self._yaml_config.get(field_name)
        return val, field_name, val is not None

    def __call__(self) -> dict[str, Any]:
        return self._yaml_config


def _make_settings_class(yaml_config: dict[str, Any]) -> type[BaseSettings]:
    """Create a Settings class with instance-based YAML source (thread-safe)."""

    class ModelDocSettings(BaseSettings):
        """Root config. Env vars: MODELDOC__LOGGING__LEVEL, MODELDOC__MODELS__PATH, etc."""

        model_config = SettingsConfigDict(
            env_prefix="MODELDOC__",
            env_nested_delimiter="__",
            case_sensitive=False,
        )

        logging: LoggingConfig = LoggingConfig()
        models: ModelsConfig = ModelsConfig()
        database: DatabaseConfig = DatabaseConfig()
        runner: RunnerConfig = RunnerConfig()

        @classmethod
        def settings_customise_sources(
            cls,
            settings_cls: type[BaseSettings],
            init_settings: PydanticBaseSettingsSource,
            env_settings: PydanticBaseSettingsSource,
            dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
            file_secret_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        ) -> tuple[PydanticBaseSettingsSource, ...]:
            # Precedence (first wins): init kwargs > env vars > yaml files
            return (init_settings, env_settings, _YamlSource(settings_cls, yaml_config))

    return ModelDocSettings


def load_config(project_root: Path | None = None, **kwargs: Any) -> ModelDocConfig:
    """Load config: defaults < global < .env < project config < env vars < kwargs.

    Args:
        project_root: Laravel project root to load config from.
                      Defaults to current working directory.
        **kwargs: Override values (highest precedence).

    Returns:
        Fully resolved configuration object.

    Raises:
        ConfigError: On invalid YAML syntax or validation errors.
    """
    project_root = project_root or Path.cwd()

    yaml_config = _load_yaml(GLOBAL_CONFIG_PATH)

    database = _laravel_database(project_root)
    if database:
        yaml_config = _deep_merge(yaml_config, {"database": database})

    project_config = _load_yaml(project_root / PROJECT_CONFIG_NAME)
    if project_config:
        yaml_config = _deep_merge(yaml_config, project_config)

    settings_cls = _make_settings_class(yaml_config)
    try:
        settings = settings_cls(**kwargs)
    except ValidationError as e:
        err = e.errors()[0]
        field = ".".join(str(loc) for loc in err["loc"])
        raise ConfigError.invalid_value(field, err.get("input"), err["msg"]) from e

    return ModelDocConfig.model_validate(settings.model_dump())
