"""
Shell Completion.

Completes the metadata-file argument of `run restore` with the backups the
coordinator knows about. Settings are resolved exactly like a normal command
(defaults, config file, environment, and any global flags already typed on
the command line), so completion talks to the same coordinator.

Completion must never fail the shell: any error yields no suggestions.
Stdout carries the suggestions, so logging is set up on stderr first.
"""

import asyncio

import typer

from backupctl.cli.invocation import global_flags
from backupctl.client import protocol
from backupctl.client.collector import StreamCollector, drain_with_timeout
from backupctl.client.transport import open_channel
from backupctl.core.config import resolve_settings
from backupctl.core.config_schema import Settings
from backupctl.core.exceptions import BackupCtlError
from backupctl.core.logging import get_logger, setup_logging

logger = get_logger(__name__)

COMPLETION_TIMEOUT = 3.0


async def fetch_backup_names(settings: Settings, timeout: float = COMPLETION_TIMEOUT) -> list[tuple[str, str]]:
    """(filename, description) for every stored backup, sorted by filename."""
    settings = settings.model_copy(update={"connect_timeout": min(settings.connect_timeout, timeout)})
    async with open_channel(settings) as channel:
        stub = protocol.ApiStub(channel)
        entries = await drain_with_timeout(
            StreamCollector("available backups"),
            stub.BackupsMetadata(protocol.BackupsMetadataParams()),
            timeout,
        )
    latest = {entry.filename: entry.metadata.description for entry in entries}
    return sorted(latest.items())


def complete_metadata_file(ctx: typer.Context, incomplete: str) -> list[tuple[str, str]]:
    """Typer autocompletion callback for `run restore <metadata-file>`."""
    setup_logging()
    config_file, flags = global_flags(ctx)
    try:
        settings = resolve_settings(config_file=config_file, flags=flags)
        setup_logging(
            level=settings.log_level,
            format_type=settings.log_format,
            log_file=settings.log_file or None,
        )
        names = asyncio.run(fetch_backup_names(settings))
    except (BackupCtlError, OSError) as e:
        logger.debug("Backup name completion unavailable", error=str(e))
        return []

    return [(name, description) for name, description in names if name.startswith(incomplete)]
