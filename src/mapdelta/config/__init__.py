"""Config module exports."""

from mapdelta.config.loader import load_config
from mapdelta.config.models import (
    CacheConfig,
    CompareConfig,
    DiffConfig,
    LoggingConfig,
    MapDeltaConfig,
    ParserConfig,
    ServerConfig,
)

__all__ = [
    "load_config",
    "CacheConfig",
    "CompareConfig",
    "DiffConfig",
    "LoggingConfig",
    "MapDeltaConfig",
    "ParserConfig",
    "ServerConfig",
]
