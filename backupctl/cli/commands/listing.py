"""
Listing Commands.

Read-only views of the coordinator: connected agents, stored backups and
remote storage. A failed listing is logged and the command still exits 0.
"""

import typer

from backupctl.cli.invocation import execute, explicit_params
from backupctl.cli.router import CommandKind

app = typer.Typer(help="List objects (connected nodes, backups, storage)", no_args_is_help=True)


@app.command()
def nodes(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", help="Include extra node info"),
) -> None:
    """
    List agents connected to the backup coordinator.

    Examples:
        backupctl list nodes
        backupctl list nodes --verbose
    """
    execute(ctx, CommandKind.LIST_NODES, explicit_params(ctx, {"verbose": "verbose"}))


@app.command()
def backups(ctx: typer.Context) -> None:
    """
    List stored backups.
    """
    execute(ctx, CommandKind.LIST_BACKUPS, {})


@app.command()
def storage(ctx: typer.Context) -> None:
    """
    List available remote storage.
    """
    execute(ctx, CommandKind.LIST_STORAGE, {})
