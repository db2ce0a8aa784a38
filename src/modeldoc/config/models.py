"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (MODELDOC__SECTION__KEY)
3. Project YAML (<project>/.modeldoc.yaml)
4. Global YAML (~/.config/modeldoc/config.yaml)
5. Built-in defaults (this file)

Environment Variable Format:
    MODELDOC__<SECTION>__<KEY>=<VALUE>

Examples:
    MODELDOC__LOGGING__LEVEL=DEBUG
    MODELDOC__MODELS__PATH=src/Domain/Models
    MODELDOC__DATABASE__DEFAULT=mysql
    MODELDOC__RUNNER__MAX_WORKERS=4
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration.

    Env vars: Not directly configurable via env (use YAML for multi-output).
    """

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        MODELDOC__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="WARNING",
        description="Root log level. The CLI prints its own status lines, so "
        "structured logs stay quiet unless asked for.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class ModelsConfig(BaseModel):
    """Where models and other PHP classes live.

    Env vars:
        MODELDOC__MODELS__PATH: Models directory, relative to the project root
        MODELDOC__MODELS__SOURCE_ROOTS: Directories scanned for class declarations
    """

    path: str = Field(
        default="app/Models",
        description="Directory documented when neither --path nor --model is given.",
    )
    source_roots: list[str] = Field(
        default_factory=lambda: ["app"],
        description="Directories scanned for class/enum/interface declarations. "
        "Cast and accessor types only resolve to classes found here.",
    )
    exclude_dirs: list[str] = Field(
        default_factory=lambda: ["vendor", "node_modules", "storage", ".git"],
        description="Directory names skipped while scanning source roots.",
    )


class DatabaseConfig(BaseModel):
    """Database connections used for schema introspection.

    Connections are SQLAlchemy URLs keyed by the Laravel connection name a
    model declares through its $connection property.

    Env vars:
        MODELDOC__DATABASE__DEFAULT: Connection used when a model declares none
    """

    default: str = Field(
        default="default",
        description="Connection name used for models without $connection.",
    )
    connections: dict[str, str] = Field(
        default_factory=dict,
        description="Connection name -> SQLAlchemy URL "
        "(e.g. sqlite:///database/database.sqlite, mysql+pymysql://user@host/db).",
    )


class RunnerConfig(BaseModel):
    """Directory processing configuration.

    Env vars:
        MODELDOC__RUNNER__MAX_WORKERS: Parallel model workers
    """

    max_workers: int = Field(
        default=1,
        description="Models processed in parallel in directory mode. "
        "Each model file is handled by exactly one worker.",
    )

    @field_validator("max_workers")
    @classmethod
    def validate_max_workers(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"max_workers must be >= 1, got {v}")
        return v


class ModelDocConfig(BaseModel):
    """Root configuration for modeldoc."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    models: ModelsConfig = Field(default_factory=ModelsConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    runner: RunnerConfig = Field(default_factory=RunnerConfig)
