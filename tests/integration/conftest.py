"""
Integration Test Fixtures.

Fixtures for integration tests - a real grpc.aio server implementing the
coordinator Api runs in-process on a free local port. Nothing is mocked
between the client and the wire.
"""

from collections.abc import AsyncGenerator
from dataclasses import dataclass, field
from typing import Any

import grpc
import pytest
import pytest_asyncio

from backupctl.client import protocol


# =============================================================================
# Fake Coordinator
# =============================================================================


@dataclass
class FakeCoordinator:
    """
    State behind the in-process Api service.

    Tests fill the listings, optionally set a failure, then inspect what the
    service received.
    """

    clients: list[Any] = field(default_factory=list)
    backups: list[Any] = field(default_factory=list)
    storages: list[Any] = field(default_factory=list)
    stream_error_after: int | None = None
    run_error: tuple[grpc.StatusCode, str] | None = None
    metadata: dict[str, list[tuple[str, str]]] = field(default_factory=dict)
    requests: dict[str, list[Any]] = field(default_factory=dict)

    def record(self, method: str, request: Any, context: grpc.aio.ServicerContext) -> None:
        self.metadata[method] = [(m.key, m.value) for m in context.invocation_metadata()]
        self.requests.setdefault(method, []).append(request)

    def authorization(self, method: str) -> list[str]:
        return [value for key, value in self.metadata.get(method, []) if key == "authorization"]

    def streaming(self, method: str, items_attr: str):
        async def handler(request, context):
            self.record(method, request, context)
            for index, item in enumerate(getattr(self, items_attr)):
                if self.stream_error_after is not None and index == self.stream_error_after:
                    await context.abort(grpc.StatusCode.INTERNAL, "stream interrupted")
                yield item
            if self.stream_error_after is not None and self.stream_error_after >= len(getattr(self, items_attr)):
                await context.abort(grpc.StatusCode.INTERNAL, "stream interrupted")

        return handler

    def unary(self, method: str):
        async def handler(request, context):
            self.record(method, request, context)
            if self.run_error is not None:
                await context.abort(*self.run_error)
            return protocol.RunOperationResponse()

        return handler

    def generic_handler(self) -> grpc.GenericRpcHandler:
        return grpc.method_handlers_generic_handler(
            protocol.SERVICE,
            {
                "GetClients": grpc.unary_stream_rpc_method_handler(
                    self.streaming("GetClients", "clients"),
                    request_deserializer=protocol.Empty.FromString,
                    response_serializer=protocol.Client.SerializeToString,
                ),
                "BackupsMetadata": grpc.unary_stream_rpc_method_handler(
                    self.streaming("BackupsMetadata", "backups"),
                    request_deserializer=protocol.BackupsMetadataParams.FromString,
                    response_serializer=protocol.MetadataFile.SerializeToString,
                ),
                "ListStorages": grpc.unary_stream_rpc_method_handler(
                    self.streaming("ListStorages", "storages"),
                    request_deserializer=protocol.ListStoragesParams.FromString,
                    response_serializer=protocol.StorageInfo.SerializeToString,
                ),
                "RunBackup": grpc.unary_unary_rpc_method_handler(
                    self.unary("RunBackup"),
                    request_deserializer=protocol.RunBackupParams.FromString,
                    response_serializer=protocol.RunOperationResponse.SerializeToString,
                ),
                "RunRestore": grpc.unary_unary_rpc_method_handler(
                    self.unary("RunRestore"),
                    request_deserializer=protocol.RunRestoreParams.FromString,
                    response_serializer=protocol.RunOperationResponse.SerializeToString,
                ),
            },
        )


# =============================================================================
# Server Fixtures
# =============================================================================


@pytest.fixture
def coordinator() -> FakeCoordinator:
    return FakeCoordinator()


@pytest_asyncio.fixture
async def coordinator_address(coordinator: FakeCoordinator) -> AsyncGenerator[str, None]:
    """
    Start the fake coordinator and yield its host:port.

    Usage:
        async def test_list(coordinator, coordinator_address, make_settings):
            settings = make_settings(server_address=coordinator_address)
    """
    server = grpc.aio.server()
    server.add_generic_rpc_handlers((coordinator.generic_handler(),))
    port = server.add_insecure_port("127.0.0.1:0")
    await server.start()
    try:
        yield f"127.0.0.1:{port}"
    finally:
        await server.stop(None)
