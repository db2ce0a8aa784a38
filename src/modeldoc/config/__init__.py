"""Config module exports."""

from modeldoc.config.loader import load_config
from modeldoc.config.models import (
    DatabaseConfig,
    LoggingConfig,
    ModelDocConfig,
    ModelsConfig,
    RunnerConfig,
)

__all__ = [
    "load_config",
    "ModelDocConfig",
    "LoggingConfig",
    "ModelsConfig",
    "DatabaseConfig",
    "RunnerConfig",
]
