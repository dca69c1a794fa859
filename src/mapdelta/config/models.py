"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (MAPDELTA__SECTION__KEY)
3. YAML config (--config path, ./mapdelta.yaml, or ~/.config/mapdelta/config.yaml)
4. Built-in defaults (this file)

Environment Variable Format:
    MAPDELTA__<SECTION>__<KEY>=<VALUE>

Examples:
    MAPDELTA__LOGGING__LEVEL=DEBUG
    MAPDELTA__SERVER__PORT=8080
    MAPDELTA__CACHE__TTL_SEC=3600
    MAPDELTA__COMPARE__ANOMALY_THRESHOLD_BYTES=2048
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration."""

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
        MAPDELTA__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="INFO",
        description="Root log level. DEBUG logs every parsed file and cache sweep.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class ServerConfig(BaseModel):
    """HTTP server configuration.

    Env vars:
        MAPDELTA__SERVER__HOST: Bind address (default: 127.0.0.1)
        MAPDELTA__SERVER__PORT: Port number (default: 5000)
        MAPDELTA__SERVER__MAX_UPLOAD_MB: Per-file upload cap
    """

    host: str = Field(
        default="127.0.0.1",
        description="Bind address. Use 0.0.0.0 for network access (no auth is performed).",
    )
    port: int = Field(
        default=5000,
        description="Server port.",
    )
    max_upload_mb: int = Field(
        default=50,
        description="Reject uploaded map files larger than this (MB). "
        "The parser itself has no limit and holds the whole file in memory.",
    )

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        if not (0 <= v <= 65535):
            raise ValueError(f"Port must be 0-65535, got {v}")
        return v

    @field_validator("max_upload_mb")
    @classmethod
    def validate_max_upload(cls, v: int) -> int:
        if v <= 0:
            raise ValueError(f"max_upload_mb must be positive, got {v}")
        return v


class CacheConfig(BaseModel):
    """Result cache configuration.

    Env vars:
        MAPDELTA__CACHE__TTL_SEC: Lifetime of stored comparisons
        MAPDELTA__CACHE__SWEEP_INTERVAL_SEC: Background sweep period
    """

    ttl_sec: float = Field(
        default=86400.0,
        gt=0,
        description="Stored comparisons expire after this many seconds (24h default).",
    )
    sweep_interval_sec: float = Field(
        default=3600.0,
        gt=0,
        description="Background sweep period. Expired entries are also removed on every store.",
    )


class ParserConfig(BaseModel):
    """Map file parser configuration.

    Env vars:
        MAPDELTA__PARSER__JOIN_WRAPPED_NAMES: Join names ld wrapped onto their own line
    """

    join_wrapped_names: bool = Field(
        default=False,
        description="Join section names that ld wrapped onto a line of their own with the "
        "address/size line that follows. Off by default: such sections are otherwise skipped.",
    )


class CompareConfig(BaseModel):
    """Defaults for summary comparisons when a request omits them.

    Env vars:
        MAPDELTA__COMPARE__TOP_N
        MAPDELTA__COMPARE__ANOMALY_THRESHOLD_PCT
        MAPDELTA__COMPARE__ANOMALY_THRESHOLD_BYTES
    """

    top_n: int = Field(default=20, ge=0, description="Length of the top increase/decrease lists.")
    anomaly_threshold_pct: float = Field(
        default=20.0,
        ge=0,
        description="Flag sections whose size changed by more than this percentage.",
    )
    anomaly_threshold_bytes: int = Field(
        default=1024,
        ge=0,
        description="Flag sections whose size changed by more than this many bytes. "
        "File-group and .bss thresholds are multiples of it.",
    )


class DiffConfig(BaseModel):
    """Defaults for version diffs when a request omits them.

    Env vars:
        MAPDELTA__DIFF__ANOMALY_GROWTH_THRESHOLD
        MAPDELTA__DIFF__ANOMALY_SHRINK_THRESHOLD
        MAPDELTA__DIFF__ADDRESS_SHIFT_THRESHOLD
    """

    anomaly_growth_threshold: float = Field(default=10.0, ge=0, description="Growth % to flag.")
    anomaly_shrink_threshold: float = Field(default=10.0, ge=0, description="Shrink % to flag.")
    address_shift_threshold: int = Field(
        default=0x1000,
        ge=0,
        description="Flag sections whose start address moved by more than this many bytes.",
    )


class MapDeltaConfig(BaseModel):
    """Root configuration for mapdelta.

    All settings can be configured via:
    1. Environment variables: MAPDELTA__SECTION__KEY
    2. A YAML config file
    3. Direct kwargs to load_config()
    """

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    parser: ParserConfig = Field(default_factory=ParserConfig)
    compare: CompareConfig = Field(default_factory=CompareConfig)
    diff: DiffConfig = Field(default_factory=DiffConfig)
