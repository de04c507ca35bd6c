"""
Stream Collector.

Drains a server-streaming call into a complete in-memory collection.

A collection is returned only when the server ended the stream cleanly
(grpc.aio.EOF). Any RPC failure while reading raises StreamError and the
items received so far are dropped. The call is closed after draining on
every path; a failure to close is reported only when the drain itself
succeeded. asyncio.CancelledError is never wrapped.

Usage:
    collector = StreamCollector("connected agents", AgentRecord.from_message)
    agents = await collector.to_list(stub.GetClients(Empty()), sort_key=lambda a: a.node_name)
"""

import asyncio
from collections.abc import Callable, Hashable
from typing import Any, Generic, Protocol, TypeVar

import grpc

from backupctl.core.exceptions import StreamError
from backupctl.core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")
K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class StreamingCall(Protocol):
    """The part of grpc.aio.UnaryStreamCall the collector relies on."""

    async def read(self) -> Any: ...

    def done(self) -> bool: ...

    def cancel(self) -> bool: ...


def close_stream(call: StreamingCall) -> None:
    """Release the call. A finished call is left untouched."""
    if not call.done():
        call.cancel()


class StreamCollector(Generic[T]):
    """
    Collects the items of one listing operation.

    Args:
        operation: Human readable name used in error messages
            (e.g. "connected agents").
        convert: Applied to each received message. Defaults to identity.
    """

    def __init__(self, operation: str, convert: Callable[[Any], T] | None = None) -> None:
        self.operation = operation
        self._convert = convert

    async def drain(self, call: StreamingCall) -> list[T]:
        """
        Read every item until clean end of stream.

        Raises:
            StreamError: If the stream fails or cannot be closed
        """
        try:
            items = await self._receive_all(call)
        except grpc.RpcError as e:
            self._close_after_failure(call)
            raise StreamError.from_rpc_error(f"Cannot get the list of {self.operation}", e) from e
        except BaseException:
            self._close_after_failure(call)
            raise

        try:
            close_stream(call)
        except Exception as e:
            raise StreamError(f"Cannot close the stream for {self.operation}: {e}") from e

        logger.debug("Stream drained", operation=self.operation, items=len(items))
        return items

    async def to_list(
        self,
        call: StreamingCall,
        sort_key: Callable[[T], Any] | None = None,
    ) -> list[T]:
        """Drain the stream; sort ascending by sort_key when given (stable)."""
        items = await self.drain(call)
        if sort_key is not None:
            items.sort(key=sort_key)
        return items

    async def to_mapping(
        self,
        call: StreamingCall,
        key: Callable[[T], K],
        value: Callable[[T], V],
    ) -> dict[K, V]:
        """Drain the stream into a mapping. Later duplicate keys win."""
        items = await self.drain(call)
        return {key(item): value(item) for item in items}

    async def _receive_all(self, call: StreamingCall) -> list[T]:
        items: list[T] = []
        while True:
            message = await call.read()
            if message is grpc.aio.EOF:
                return items
            items.append(self._convert(message) if self._convert else message)

    def _close_after_failure(self, call: StreamingCall) -> None:
        # A close error never replaces the drain failure.
        try:
            close_stream(call)
        except Exception as e:
            logger.debug("Ignoring stream close failure", operation=self.operation, error=str(e))


async def drain_with_timeout(collector: StreamCollector[T], call: StreamingCall, timeout: float) -> list[T]:
    """Drain a stream that must finish within timeout seconds."""
    try:
        return await asyncio.wait_for(collector.drain(call), timeout=timeout)
    except asyncio.TimeoutError:
        raise StreamError(f"Timed out reading the list of {collector.operation}") from None
