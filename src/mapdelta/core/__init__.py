"""Core module exports."""

from mapdelta.core.errors import (
    ConfigError,
    ErrorCode,
    InputError,
    InternalError,
    MapDeltaError,
)
from mapdelta.core.logging import (
    clear_request_id,
    configure_logging,
    get_logger,
    get_request_id,
    set_request_id,
)

__all__ = [
    # Errors
    "ConfigError",
    "ErrorCode",
    "InputError",
    "InternalError",
    "MapDeltaError",
    # Logging
    "clear_request_id",
    "configure_logging",
    "get_logger",
    "get_request_id",
    "set_request_id",
]
