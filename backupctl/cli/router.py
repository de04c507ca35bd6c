"""
Command Router.

Maps a CommandKind to its handler and runs it with an InvocationContext.

Handlers validate their input before connecting, so a bad option value never
reaches the network. A handler connects at most once per invocation.

Error policy:
    listing commands  - StreamError / RemoteCallError are logged, exit 0
    run commands      - any backupctl error is logged, exit 1
    transport setup   - ConnectionFailedError / CredentialError, exit 1
"""

import platform
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from dataclasses import dataclass
from enum import Enum
from typing import TextIO

import structlog

import backupctl
from backupctl.client.coordinator import CoordinatorClient
from backupctl.client.protocol import ApiStub
from backupctl.client.transport import open_channel
from backupctl.cli.render import OutputRenderer, TemplateName
from backupctl.cli.requests import build_backup_request, build_restore_request
from backupctl.core.config_schema import Settings
from backupctl.core.exceptions import BackupCtlError, RemoteCallError, StreamError
from backupctl.core.logging import get_logger

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1

NO_BACKUPS_MESSAGE = "No backups found"


class CommandKind(str, Enum):
    LIST_NODES = "list nodes"
    LIST_BACKUPS = "list backups"
    LIST_STORAGE = "list storage"
    RUN_BACKUP = "run backup"
    RUN_RESTORE = "run restore"
    SHOW_VERSION = "version"


Connector = Callable[[Settings], AbstractAsyncContextManager[CoordinatorClient]]


@asynccontextmanager
async def connect_coordinator(settings: Settings) -> AsyncIterator[CoordinatorClient]:
    """Open the coordinator channel and yield a client bound to it."""
    async with open_channel(settings) as channel:
        yield CoordinatorClient(ApiStub(channel))


@dataclass(frozen=True)
class InvocationContext:
    """Everything a handler needs for one invocation."""

    settings: Settings
    renderer: OutputRenderer
    connector: Connector = connect_coordinator

    def connect(self) -> AbstractAsyncContextManager[CoordinatorClient]:
        return self.connector(self.settings)


Handler = Callable[[InvocationContext], Awaitable[None]]

HANDLERS: dict[CommandKind, Handler] = {}


def handles(kind: CommandKind) -> Callable[[Handler], Handler]:
    """Register the decorated coroutine as the handler for kind."""

    def decorator(func: Handler) -> Handler:
        if kind in HANDLERS:
            raise ValueError(f"Command {kind.value!r} already has a handler")
        HANDLERS[kind] = func
        return func

    return decorator


# =============================================================================
# Listing commands
# =============================================================================


@handles(CommandKind.LIST_NODES)
async def list_nodes(ctx: InvocationContext) -> None:
    async with ctx.connect() as client:
        try:
            agents = await client.connected_agents()
        except (StreamError, RemoteCallError) as e:
            logger.error("Cannot get the list of connected agents", error=e.message, code=e.code)
            return

    template = TemplateName.CONNECTED_NODES_VERBOSE if ctx.settings.verbose else TemplateName.CONNECTED_NODES
    ctx.renderer.render(template, agents)


@handles(CommandKind.LIST_BACKUPS)
async def list_backups(ctx: InvocationContext) -> None:
    async with ctx.connect() as client:
        try:
            backups = await client.available_backups()
        except (StreamError, RemoteCallError) as e:
            logger.error("Cannot get the list of available backups", error=e.message, code=e.code)
            return

    if not backups:
        ctx.renderer.write_line(NO_BACKUPS_MESSAGE)
        return
    ctx.renderer.render(TemplateName.AVAILABLE_BACKUPS, backups)


@handles(CommandKind.LIST_STORAGE)
async def list_storage(ctx: InvocationContext) -> None:
    async with ctx.connect() as client:
        try:
            storages = await client.storages()
        except (StreamError, RemoteCallError) as e:
            logger.error("Cannot get the storage list", error=e.message, code=e.code)
            return

    ctx.renderer.render(TemplateName.AVAILABLE_STORAGES, storages)


# =============================================================================
# Run commands
# =============================================================================


@handles(CommandKind.RUN_BACKUP)
async def run_backup(ctx: InvocationContext) -> None:
    request = build_backup_request(ctx.settings)
    async with ctx.connect() as client:
        await client.run_backup(request.to_message())
    ctx.renderer.write_line("Backup completed")


@handles(CommandKind.RUN_RESTORE)
async def run_restore(ctx: InvocationContext) -> None:
    request = build_restore_request(ctx.settings)
    async with ctx.connect() as client:
        await client.run_restore(request.to_message())
    ctx.renderer.write_line("Restore completed")


# =============================================================================
# Version
# =============================================================================


def build_info() -> dict[str, str]:
    return {
        "version": backupctl.__version__,
        "commit": backupctl.__commit__,
        "build": backupctl.__build__,
        "branch": backupctl.__branch__,
        "python_version": platform.python_version(),
    }


@handles(CommandKind.SHOW_VERSION)
async def show_version(ctx: InvocationContext) -> None:
    ctx.renderer.render(TemplateName.VERSION, build_info())


# =============================================================================
# Dispatch
# =============================================================================


async def dispatch(
    kind: CommandKind,
    settings: Settings,
    sink: TextIO,
    connector: Connector = connect_coordinator,
) -> int:
    """Run the handler for kind and return the process exit code."""
    handler = HANDLERS[kind]
    ctx = InvocationContext(settings=settings, renderer=OutputRenderer(sink), connector=connector)

    structlog.contextvars.bind_contextvars(command=kind.value)
    try:
        await handler(ctx)
    except BackupCtlError as e:
        logger.error(e.message, code=e.code)
        return EXIT_FAILURE
    finally:
        structlog.contextvars.unbind_contextvars("command")

    return EXIT_OK
