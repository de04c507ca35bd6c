"""
Configuration Management.

Resolves the settings for one invocation from four layers, lowest to highest
precedence:

    defaults     - DEFAULTS below
    config file  - YAML file given with --config-file, else BACKUPCTL_CONFIG_FILE,
                   else ~/.backupctl.yaml
    environment  - BACKUPCTL_<FLAG_NAME> variables (pydantic-settings)
    flags        - values typed on the command line

The default config file is optional and skipped when it does not exist. A
config file named explicitly, by flag or variable, must exist.
BACKUPCTL_DEBUG=true sets the log level to DEBUG like --debug.

Usage:
    from backupctl.core.config import resolve_settings

    settings = resolve_settings(config_file=None, flags={"server_address": "db1:10001"})
"""

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from backupctl.core.config_schema import ConfigFileSchema, Settings
from backupctl.core.exceptions import ConfigError

DEFAULT_CONFIG_FILE = "~/.backupctl.yaml"
DEFAULT_SERVER_ADDRESS = "127.0.0.1:10001"
DEFAULT_SERVER_COMPRESSOR = "gzip"
DEFAULT_BACKUP_TYPE = "logical"
ENV_PREFIX = "BACKUPCTL_"

DEFAULTS: dict[str, Any] = {
    "server_address": DEFAULT_SERVER_ADDRESS,
    "api_token": "",
    "server_compressor": DEFAULT_SERVER_COMPRESSOR,
    "tls": False,
    "tls_ca_file": "",
    "connect_timeout": 10.0,
    "log_level": "WARNING",
    "log_format": "console",
    "log_file": "",
    "backup_type": DEFAULT_BACKUP_TYPE,
    "compression_algorithm": "",
    "encryption_algorithm": "",
    "description": "",
    "storage_name": "",
    "restore_metadata_file": "",
    "skip_users_and_roles": False,
    "verbose": False,
}


class EnvironmentOverrides(BaseSettings):
    """
    One environment variable per command-line flag.

    Variable names follow the flag names: --server-address is read from
    BACKUPCTL_SERVER_ADDRESS, --storage from BACKUPCTL_STORAGE.
    Unset variables stay None and do not override lower layers.
    """

    api_token: str | None = None
    server_address: str | None = None
    server_compressor: str | None = None
    tls: bool | None = None
    tls_ca_file: str | None = None
    connect_timeout: float | None = None
    log_level: str | None = None
    log_format: str | None = None
    log_file: str | None = None
    backup_type: str | None = None
    compression_algorithm: str | None = None
    encryption_algorithm: str | None = None
    description: str | None = None
    storage_name: str | None = Field(default=None, validation_alias=f"{ENV_PREFIX}STORAGE")
    skip_users_and_roles: bool | None = None
    verbose: bool | None = None
    config_file: str | None = None
    debug: bool | None = None

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        case_sensitive=False,
        extra="ignore",
    )


def find_config_file(config_file: str | Path | None, default: str = DEFAULT_CONFIG_FILE) -> Path | None:
    """
    Locate the config file to load.

    Returns the explicit path when given, the default path when it exists,
    or None when there is nothing to load.

    Raises:
        ConfigError: If an explicitly named file does not exist
    """
    if config_file:
        path = Path(config_file).expanduser()
        if not path.is_file():
            raise ConfigError(f"Config file not found: {path}")
        return path

    path = Path(default).expanduser()
    if path.is_file():
        return path
    return None


def load_config_file(path: Path) -> dict[str, Any]:
    """
    Load and validate a YAML config file.

    Returns only the keys present in the file, named after Settings fields.

    Raises:
        ConfigError: If the file is unreadable, malformed or has unknown keys
    """
    try:
        with open(path, encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Malformed config file {path}: {e}") from e

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Config file {path} must contain a mapping, got {type(raw).__name__}")

    try:
        schema = ConfigFileSchema.model_validate(raw)
    except PydanticValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}:\n{e}") from e

    return schema.model_dump(exclude_none=True)


def load_environment() -> dict[str, Any]:
    """
    Read BACKUPCTL_* overrides from the environment.

    Raises:
        ConfigError: If a variable cannot be converted to its field type
    """
    try:
        overrides = EnvironmentOverrides()
    except PydanticValidationError as e:
        raise ConfigError(f"Invalid environment override:\n{e}") from e
    return overrides.model_dump(exclude_none=True)


def resolve_settings(
    config_file: str | Path | None = None,
    flags: Mapping[str, Any] | None = None,
    default_config_file: str = DEFAULT_CONFIG_FILE,
) -> Settings:
    """
    Merge defaults, config file, environment and flags into Settings.

    Args:
        config_file: Path given with --config-file, if any. Takes precedence
            over BACKUPCTL_CONFIG_FILE.
        flags: Values explicitly typed on the command line, keyed by
            Settings field name. Values left at their defaults must not be
            included, or they would mask the file and environment layers.
        default_config_file: Config file to use when none is given.

    Returns:
        Frozen Settings instance.

    Raises:
        ConfigError: If any layer is invalid or the merged values are rejected
    """
    merged: dict[str, Any] = dict(DEFAULTS)
    environment = load_environment()
    env_config_file = environment.pop("config_file", None)
    if environment.pop("debug", False):
        environment["log_level"] = "DEBUG"

    path = find_config_file(config_file or env_config_file, default_config_file)
    if path is not None:
        merged.update(load_config_file(path))

    merged.update(environment)

    if flags:
        unknown = set(flags) - set(DEFAULTS)
        if unknown:
            raise ConfigError(f"Unknown setting(s): {', '.join(sorted(unknown))}")
        merged.update(flags)

    try:
        return Settings(**merged)
    except PydanticValidationError as e:
        raise ConfigError(f"Invalid settings:\n{e}") from e
