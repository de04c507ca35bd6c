"""
Command Runtime.

Runs one command coroutine as an asyncio task and cancels it when the
process receives SIGINT. Every RPC of the command awaits inside that task,
so cancellation reaches stream reads and unary calls alike.
"""

import asyncio
import signal
from collections.abc import Coroutine
from typing import Any, TypeVar

from backupctl.core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

INTERRUPTED_EXIT_CODE = 130


class CommandInterrupted(Exception):
    """Raised when a command was cancelled by an interrupt signal."""


async def run_interruptible(coro: Coroutine[Any, Any, T], signals: tuple[int, ...] = (signal.SIGINT,)) -> T:
    """
    Await coro, cancelling it when one of `signals` arrives.

    Raises:
        CommandInterrupted: If the command was cancelled by a signal
    """
    loop = asyncio.get_running_loop()
    task = asyncio.ensure_future(coro)
    interrupted = False

    def on_signal() -> None:
        nonlocal interrupted
        interrupted = True
        logger.debug("Interrupt received, cancelling command")
        task.cancel()

    installed = []
    for sig in signals:
        try:
            loop.add_signal_handler(sig, on_signal)
        except (NotImplementedError, RuntimeError):
            # No loop signal support (Windows, non-main thread): KeyboardInterrupt still applies.
            continue
        installed.append(sig)

    try:
        return await task
    except asyncio.CancelledError:
        if interrupted:
            raise CommandInterrupted("Interrupted") from None
        raise
    finally:
        for sig in installed:
            loop.remove_signal_handler(sig)


def run_command(coro: Coroutine[Any, Any, T]) -> T:
    """Run a command coroutine to completion on a fresh event loop."""
    return asyncio.run(run_interruptible(coro))
