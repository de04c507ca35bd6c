"""
Unit Test Fixtures.

Fixtures for unit tests - the coordinator is never contacted.
Server streams are simulated with FakeStreamingCall.
"""

import asyncio
from collections.abc import Iterable
from typing import Any

import grpc
import pytest


# =============================================================================
# Streaming Call Fakes
# =============================================================================


class FakeStreamingCall:
    """
    Stand-in for grpc.aio.UnaryStreamCall.

    Yields `items`, then either raises `error`, blocks until cancelled
    (`block=True`) or returns grpc.aio.EOF.
    """

    def __init__(
        self,
        items: Iterable[Any] = (),
        error: BaseException | None = None,
        block: bool = False,
        finish_on_eof: bool = True,
        cancel_error: Exception | None = None,
    ) -> None:
        self._items = list(items)
        self._error = error
        self._block = block
        self._finish_on_eof = finish_on_eof
        self._cancel_error = cancel_error
        self._done = False
        self.cancelled = False
        self.reads = 0

    async def read(self) -> Any:
        self.reads += 1
        if self._items:
            return self._items.pop(0)
        if self._error is not None:
            self._done = True
            raise self._error
        if self._block:
            await asyncio.Event().wait()
        self._done = self._finish_on_eof
        return grpc.aio.EOF

    def done(self) -> bool:
        return self._done

    def cancel(self) -> bool:
        if self._cancel_error is not None:
            raise self._cancel_error
        if self._done:
            return False
        self._done = True
        self.cancelled = True
        return True


def make_rpc_error(
    code: grpc.StatusCode = grpc.StatusCode.UNAVAILABLE,
    details: str = "connection reset by peer",
) -> grpc.aio.AioRpcError:
    """Build the error grpc.aio raises for a failed call."""
    return grpc.aio.AioRpcError(
        code,
        grpc.aio.Metadata(),
        grpc.aio.Metadata(),
        details=details,
    )


@pytest.fixture
def fake_stream() -> type[FakeStreamingCall]:
    """Provide FakeStreamingCall for building simulated server streams."""
    return FakeStreamingCall


@pytest.fixture
def rpc_error() -> Any:
    """Provide make_rpc_error."""
    return make_rpc_error
