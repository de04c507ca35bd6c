"""
Run Commands.

Start a backup or a restore on the coordinator. Any failure, including an
invalid option value, ends the process with a non-zero status.
"""

import typer

from backupctl.cli.completion import complete_metadata_file
from backupctl.cli.invocation import execute, explicit_params
from backupctl.cli.router import CommandKind
from backupctl.core.config import DEFAULT_BACKUP_TYPE

app = typer.Typer(help="Start a new backup or restore process", no_args_is_help=True)


@app.command()
def backup(
    ctx: typer.Context,
    backup_type: str = typer.Option(DEFAULT_BACKUP_TYPE, "--backup-type", help="Backup type (logical or hot)"),
    compression_algorithm: str = typer.Option(
        "", "--compression-algorithm", help="Compression algorithm used for the backup (none or gzip)"
    ),
    encryption_algorithm: str = typer.Option(
        "", "--encryption-algorithm", help="Encryption algorithm used for the backup (not implemented yet)"
    ),
    description: str = typer.Option("", "--description", help="Backup description [required]"),
    storage: str = typer.Option("", "--storage", help="Storage name [required]"),
) -> None:
    """
    Start a backup.

    Examples:
        backupctl run backup --description nightly --storage s3-main
        backupctl run backup --backup-type hot --compression-algorithm gzip --description weekly --storage fs
    """
    flags = explicit_params(
        ctx,
        {
            "backup_type": "backup_type",
            "compression_algorithm": "compression_algorithm",
            "encryption_algorithm": "encryption_algorithm",
            "description": "description",
            "storage": "storage_name",
        },
    )
    execute(
        ctx,
        CommandKind.RUN_BACKUP,
        flags,
        required={"description": "--description", "storage_name": "--storage"},
    )


@app.command()
def restore(
    ctx: typer.Context,
    metadata_file: str = typer.Argument(
        ...,
        help="Metadata file having the backup info for restore",
        autocompletion=complete_metadata_file,
    ),
    skip_users_and_roles: bool = typer.Option(
        False, "--skip-users-and-roles", help="Do not restore users and roles"
    ),
    storage: str = typer.Option("", "--storage", help="Storage name [required]"),
) -> None:
    """
    Restore a backup given its metadata file name.

    Examples:
        backupctl run restore 2024-05-01T00:00:00Z.json --storage s3-main
    """
    flags = explicit_params(
        ctx,
        {"skip_users_and_roles": "skip_users_and_roles", "storage": "storage_name"},
    )
    flags["restore_metadata_file"] = metadata_file
    execute(ctx, CommandKind.RUN_RESTORE, flags, required={"storage_name": "--storage"})
