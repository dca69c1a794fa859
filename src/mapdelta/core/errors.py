"""mapdelta error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Input (map files, uploads)
- 9xxx: Internal

Malformed map lines and cache misses are not errors: the parser skips what
it cannot match and the cache returns None.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002
    CONFIG_FILE_NOT_FOUND = 2004

    # Input (3xxx)
    INPUT_FILE_NOT_FOUND = 3001
    INPUT_INVALID_MAP = 3002
    INPUT_TOO_LARGE = 3003
    INPUT_MISSING_FIELD = 3004

    # Internal (9xxx)
    INTERNAL_ERROR = 9001


@dataclass(frozen=True, slots=True)
class MapDeltaError(Exception):
    """Base error with structured context for JSON responses."""

    code: ErrorCode
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'INPUT_INVALID_MAP')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON responses."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(MapDeltaError):
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


class InputError(MapDeltaError):
    """Problems with the map files handed to the service."""

    @classmethod
    def file_not_found(cls, path: str) -> "InputError":
        return cls(
            code=ErrorCode.INPUT_FILE_NOT_FOUND,
            message=f"Map file not found: {path}",
            details={"path": path},
        )

    @classmethod
    def invalid_map(cls, source: str) -> "InputError":
        return cls(
            code=ErrorCode.INPUT_INVALID_MAP,
            message=f"No sections found in {source}; is it a GCC linker map file?",
            details={"source": source},
        )

    @classmethod
    def too_large(cls, source: str, size: int, limit: int) -> "InputError":
        return cls(
            code=ErrorCode.INPUT_TOO_LARGE,
            message=f"Upload {source} is {size} bytes, limit is {limit}",
            details={"source": source, "size": size, "limit": limit},
        )

    @classmethod
    def missing_field(cls, *fields: str) -> "InputError":
        joined = " and ".join(fields)
        if len(fields) > 1:
            message = f"Both {joined} are required"
        else:
            message = f"{joined} is required"
        return cls(
            code=ErrorCode.INPUT_MISSING_FIELD,
            message=message,
            details={"fields": list(fields)},
        )


class InternalError(MapDeltaError):
    """Internal/unexpected errors."""

    @classmethod
    def unexpected(cls, reason: str, **details: Any) -> "InternalError":
        return cls(
            code=ErrorCode.INTERNAL_ERROR,
            message=f"Internal error: {reason}",
            details=details,
        )
