"""modeldoc error types with typed error codes.

Error code ranges:
- 1xxx: Model (lookup, instantiability, model capability)
- 2xxx: Config
- 3xxx: Source (read/parse of PHP files)
- 4xxx: Reflection
- 5xxx: Schema
- 9xxx: Internal
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Model (1xxx)
    NOT_FOUND = 1001
    NOT_INSTANTIABLE = 1002
    NOT_A_MODEL = 1003
    DIRECTORY_NOT_FOUND = 1004

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002
    CONFIG_FILE_NOT_FOUND = 2004

    # Source (3xxx)
    READ_ERROR = 3001
    PARSE_ERROR = 3002

    # Reflection (4xxx)
    REFLECTION_FAILURE = 4001
    UNSUPPORTED_EXPRESSION = 4002

    # Schema (5xxx)
    UNKNOWN_CONNECTION = 5001
    SCHEMA_UNAVAILABLE = 5002

    # Internal (9xxx)
    INTERNAL_ERROR = 9001


@dataclass(frozen=True, slots=True)
class ModelDocError(Exception):
    """Base error with structured context for CLI and result reporting."""

    code: ErrorCode
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'PARSE_ERROR')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ModelError(ModelDocError):
    """Target class or directory problems, reported per target."""

    @classmethod
    def not_found(cls, class_name: str) -> "ModelError":
        return cls(
            code=ErrorCode.NOT_FOUND,
            message="Class not found.",
            details={"class": class_name},
        )

    @classmethod
    def not_instantiable(cls, class_name: str) -> "ModelError":
        return cls(
            code=ErrorCode.NOT_INSTANTIABLE,
            message="Class is not instantiable.",
            details={"class": class_name},
        )

    @classmethod
    def not_a_model(cls, class_name: str) -> "ModelError":
        return cls(
            code=ErrorCode.NOT_A_MODEL,
            message="Class is not an Eloquent model.",
            details={"class": class_name},
        )

    @classmethod
    def directory_not_found(cls, path: str) -> "ModelError":
        return cls(
            code=ErrorCode.DIRECTORY_NOT_FOUND,
            message=f"Directory not found: {path}",
            details={"path": path},
        )


class ConfigError(ModelDocError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )

    @classmethod
    def file_not_found(cls, path: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_FILE_NOT_FOUND,
            message=f"Config file not found: {path}",
            details={"path": path},
        )


class SourceError(ModelDocError):
    """A PHP source file could not be read or parsed."""

    @classmethod
    def read_error(cls, path: str, reason: str) -> "SourceError":
        return cls(
            code=ErrorCode.READ_ERROR,
            message=f"Could not read file: {path}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def parse_error(cls, path: str, line: int | None = None) -> "SourceError":
        where = f" (line {line})" if line is not None else ""
        return cls(
            code=ErrorCode.PARSE_ERROR,
            message=f"Could not parse file: {path}{where}",
            details={"path": path, "line": line},
        )


class ReflectionError(ModelDocError):
    """A single reflection probe could not be analyzed.

    Raised inside the reflector and caught per probe: the probe is then
    treated as absent rather than failing the whole model.
    """

    @classmethod
    def failure(cls, probe: str, reason: str) -> "ReflectionError":
        return cls(
            code=ErrorCode.REFLECTION_FAILURE,
            message=f"Could not analyze {probe}: {reason}",
            details={"probe": probe, "reason": reason},
        )

    @classmethod
    def unsupported_expression(cls, node_type: str, text: str) -> "ReflectionError":
        return cls(
            code=ErrorCode.UNSUPPORTED_EXPRESSION,
            message=f"Cannot statically evaluate {node_type}: {text[:60]}",
            details={"node_type": node_type, "text": text},
        )


class SchemaError(ModelDocError):
    """Schema introspection errors."""

    @classmethod
    def unknown_connection(cls, name: str) -> "SchemaError":
        return cls(
            code=ErrorCode.UNKNOWN_CONNECTION,
            message=f"No database connection configured with name '{name}'",
            details={"connection": name},
        )

    @classmethod
    def unavailable(cls, table: str, reason: str) -> "SchemaError":
        return cls(
            code=ErrorCode.SCHEMA_UNAVAILABLE,
            message=f"Could not read columns of table '{table}': {reason}",
            details={"table": table, "reason": reason},
        )


class InternalError(ModelDocError):
    """Internal/unexpected errors."""

    @classmethod
    def unexpected(cls, reason: str, **details: Any) -> "InternalError":
        return cls(
            code=ErrorCode.INTERNAL_ERROR,
            message=f"Internal error: {reason}",
            details=details,
        )
