"""
backupctl CLI.

Command-line client for the backup coordinator.
Built with Typer; every command resolves its settings from defaults, the
config file, BACKUPCTL_* environment variables and flags, in that order.

Usage:
    backupctl --help

    # Listings
    backupctl list nodes [--verbose]
    backupctl list backups
    backupctl list storage

    # Operations
    backupctl run backup --backup-type logical --description nightly --storage s3-main
    backupctl run restore <metadata-file> --storage s3-main [--skip-users-and-roles]

    # Build information
    backupctl version

Options:
    --config-file, -c     Config file (default ~/.backupctl.yaml when present)
    --server-address, -s  Backup coordinator address (host:port)
    --api-token           Bearer token sent with every call
    --tls / --no-tls      Use TLS for the coordinator connection
    --debug, -d           Enable debug logging
"""

from enum import Enum
from typing import Optional

import typer

from backupctl.cli.commands import list_app, run_app
from backupctl.cli.invocation import execute
from backupctl.cli.router import CommandKind
from backupctl.core.config import DEFAULT_SERVER_ADDRESS, DEFAULT_SERVER_COMPRESSOR


class ServerCompressor(str, Enum):
    GZIP = "gzip"
    DEFLATE = "deflate"
    NONE = "none"


app = typer.Typer(
    name="backupctl",
    help="Backup coordinator CLI - list agents, backups and storage; run backups and restores.",
    no_args_is_help=True,
)

app.add_typer(list_app, name="list")
app.add_typer(run_app, name="run")


@app.command()
def version(ctx: typer.Context) -> None:
    """
    Show program version and exit.
    """
    execute(ctx, CommandKind.SHOW_VERSION, {})


@app.callback()
def cli_options(
    config_file: Optional[str] = typer.Option(
        None,
        "--config-file",
        "-c",
        help="Config file name [env: BACKUPCTL_CONFIG_FILE]",
    ),
    api_token: str = typer.Option(
        "",
        "--api-token",
        help="Security token to use when connecting to the backup coordinator",
    ),
    server_address: str = typer.Option(
        DEFAULT_SERVER_ADDRESS,
        "--server-address",
        "-s",
        help="Backup coordinator address (host:port)",
    ),
    server_compressor: ServerCompressor = typer.Option(
        ServerCompressor(DEFAULT_SERVER_COMPRESSOR),
        "--server-compressor",
        help="Backup coordinator gRPC compression",
    ),
    tls: bool = typer.Option(
        False,
        "--tls/--no-tls",
        help="Connection uses TLS if true, else plain TCP",
    ),
    tls_ca_file: str = typer.Option(
        "",
        "--tls-ca-file",
        help="The file containing the CA root cert file",
    ),
    connect_timeout: float = typer.Option(
        10.0,
        "--connect-timeout",
        help="Seconds to wait for the coordinator connection",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        "-d",
        help="Enable debug mode (DEBUG level logging) [env: BACKUPCTL_DEBUG]",
    ),
) -> None:
    """
    Backup coordinator CLI.

    Global options apply to every command. Values not given on the command
    line come from BACKUPCTL_* environment variables, then the config file.
    """


def main() -> None:
    """Console script entry point."""
    app()


if __name__ == "__main__":
    main()
