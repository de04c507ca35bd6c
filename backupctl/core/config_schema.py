"""
Configuration Schemas.

Pydantic models defining the expected structure of the backupctl config file
and of the resolved settings snapshot.

    ConfigFileSchema  → ~/.backupctl.yaml (or the file given with --config-file)
    Settings          → the merged, immutable view handed to every component

Unknown keys or wrong types in the config file are rejected at load time
instead of being silently ignored.
"""

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

SERVER_COMPRESSORS = ("gzip", "deflate", "none", "")
LOG_FORMATS = ("console", "json")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class _StrictBase(BaseModel):
    """Base with extra='forbid' so unknown config keys are caught immediately."""

    model_config = ConfigDict(extra="forbid")


# =============================================================================
# Config file
# =============================================================================


class ConfigFileSchema(_StrictBase):
    """Keys accepted in the config file. All of them are optional."""

    api_token: str | None = None
    server_address: str | None = Field(
        default=None,
        validation_alias=AliasChoices("server_address", "server_addr"),
    )
    server_compressor: str | None = None
    tls: bool | None = None
    tls_ca_file: str | None = None
    connect_timeout: float | None = None
    log_level: str | None = None
    log_format: str | None = None
    log_file: str | None = None


# =============================================================================
# Resolved settings
# =============================================================================


class Settings(_StrictBase):
    """Immutable snapshot of the configuration for one invocation."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    # Connection
    server_address: str
    api_token: str
    server_compressor: str
    tls: bool
    tls_ca_file: str
    connect_timeout: float

    # Logging
    log_level: str
    log_format: str
    log_file: str

    # Per-command parameters
    backup_type: str
    compression_algorithm: str
    encryption_algorithm: str
    description: str
    storage_name: str
    restore_metadata_file: str
    skip_users_and_roles: bool
    verbose: bool

    @field_validator("server_address")
    @classmethod
    def _address_not_empty(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("server address must not be empty")
        return value

    @field_validator("server_compressor")
    @classmethod
    def _known_compressor(cls, value: str) -> str:
        if value not in SERVER_COMPRESSORS:
            allowed = ", ".join(c for c in SERVER_COMPRESSORS if c)
            raise ValueError(f"server compressor {value!r} is invalid (expected one of: {allowed})")
        return value

    @field_validator("connect_timeout")
    @classmethod
    def _positive_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("connect timeout must be positive")
        return value

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log level {value!r} is invalid")
        return level

    @field_validator("log_format")
    @classmethod
    def _known_format(cls, value: str) -> str:
        if value not in LOG_FORMATS:
            raise ValueError(f"log format {value!r} is invalid (expected console or json)")
        return value
