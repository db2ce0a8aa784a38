"""Core module exports."""

from modeldoc.core.errors import (
    ConfigError,
    ErrorCode,
    InternalError,
    ModelDocError,
    ModelError,
    ReflectionError,
    SchemaError,
    SourceError,
)
from modeldoc.core.logging import (
    clear_run_id,
    configure_logging,
    get_logger,
    get_run_id,
    set_run_id,
)
from modeldoc.core.progress import spinner, status

__all__ = [
    # Errors
    "ModelDocError",
    "ErrorCode",
    "ModelError",
    "ConfigError",
    "SourceError",
    "ReflectionError",
    "SchemaError",
    "InternalError",
    # Logging
    "clear_run_id",
    "configure_logging",
    "get_logger",
    "get_run_id",
    "set_run_id",
    # Progress
    "spinner",
    "status",
]
