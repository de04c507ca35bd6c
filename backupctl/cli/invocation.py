"""
Command Invocation.

Glue between Typer commands and the router: collects the flags typed on the
command line, resolves settings, configures logging and turns the router's
result into the process exit code.
"""

import sys
from enum import Enum
from typing import Any

import typer
from rich.console import Console

from backupctl.cli.router import EXIT_OK, CommandKind, dispatch
from backupctl.cli.runtime import INTERRUPTED_EXIT_CODE, CommandInterrupted, run_command
from backupctl.core.config import resolve_settings
from backupctl.core.config_schema import Settings
from backupctl.core.exceptions import ConfigError
from backupctl.core.logging import get_logger, setup_logging

logger = get_logger(__name__)
error_console = Console(stderr=True)

EXIT_CONFIG_ERROR = 1

# Global option param name -> Settings field
GLOBAL_PARAMS = {
    "api_token": "api_token",
    "server_address": "server_address",
    "server_compressor": "server_compressor",
    "tls": "tls",
    "tls_ca_file": "tls_ca_file",
    "connect_timeout": "connect_timeout",
}


def explicit_params(ctx: typer.Context, names: dict[str, str]) -> dict[str, Any]:
    """
    Values of ctx params that were typed on the command line.

    Params left at their declared default are skipped so they do not mask
    the config file and environment layers.

    Args:
        ctx: Typer context holding parsed params.
        names: Param name -> Settings field name.
    """
    values: dict[str, Any] = {}
    for param, field in names.items():
        # Typer may ship its own click, so ParameterSource is matched by name.
        source = ctx.get_parameter_source(param)
        if source is None or source.name != "COMMANDLINE":
            continue
        value = ctx.params[param]
        values[field] = value.value if isinstance(value, Enum) else value
    return values


def global_flags(ctx: typer.Context) -> tuple[str | None, dict[str, Any]]:
    """Config file path and explicit global flags from the root context."""
    root = ctx.find_root()
    flags = explicit_params(root, GLOBAL_PARAMS)
    if root.params.get("debug"):
        flags["log_level"] = "DEBUG"
    return root.params.get("config_file"), flags


def prepare_settings(ctx: typer.Context, command_flags: dict[str, Any]) -> Settings:
    """Resolve settings for this invocation and set up logging."""
    config_file, flags = global_flags(ctx)
    try:
        settings = resolve_settings(config_file=config_file, flags={**flags, **command_flags})
    except ConfigError as e:
        error_console.print(f"Error: {e.message}", style="red", markup=False, highlight=False)
        raise typer.Exit(EXIT_CONFIG_ERROR)

    setup_logging(
        level=settings.log_level,
        format_type=settings.log_format,
        log_file=settings.log_file or None,
    )
    return settings


def require(ctx: typer.Context, settings: Settings, fields: dict[str, str]) -> None:
    """
    Fail like a missing option when a required value resolved to empty.

    Args:
        fields: Settings field -> option name shown to the user.
    """
    for field, option in fields.items():
        if not getattr(settings, field):
            raise typer.BadParameter("a value is required", ctx=ctx, param_hint=f"'{option}'")


def execute(
    ctx: typer.Context,
    kind: CommandKind,
    command_flags: dict[str, Any],
    required: dict[str, str] | None = None,
) -> None:
    """Resolve settings, run the command and exit with its status."""
    settings = prepare_settings(ctx, command_flags)
    if required:
        require(ctx, settings, required)

    try:
        code = run_command(dispatch(kind, settings, sys.stdout))
    except CommandInterrupted:
        logger.warning("Interrupted", command=kind.value)
        raise typer.Exit(INTERRUPTED_EXIT_CODE)

    if code != EXIT_OK:
        raise typer.Exit(code)
