"""
Backup Coordinator Client.

Typed wrapper around the Api stub. Listing methods drain their streams
through StreamCollector; run methods wrap RPC failures in RemoteCallError.
"""

import grpc

from backupctl.client import protocol
from backupctl.client.collector import StreamCollector
from backupctl.client.models import AgentRecord, BackupRecord, StorageDescriptor
from backupctl.core.exceptions import RemoteCallError
from backupctl.core.logging import get_logger

logger = get_logger(__name__)


class CoordinatorClient:
    """
    Client for the backup coordinator API.

    Features:
    - Complete, ordered collections from server streams
    - Structured logging of calls
    - RPC errors translated into backupctl exceptions

    Usage:
        async with open_channel(settings) as channel:
            client = CoordinatorClient(protocol.ApiStub(channel))
            agents = await client.connected_agents()
    """

    def __init__(self, stub: protocol.ApiStub) -> None:
        self._stub = stub

    async def connected_agents(self) -> list[AgentRecord]:
        """Agents connected to the coordinator, sorted by node name."""
        collector = StreamCollector("connected agents", AgentRecord.from_message)
        return await collector.to_list(
            self._stub.GetClients(protocol.Empty()),
            sort_key=lambda agent: agent.node_name,
        )

    async def available_backups(self) -> dict[str, BackupRecord]:
        """Stored backups keyed by metadata filename."""
        collector = StreamCollector("available backups")
        return await collector.to_mapping(
            self._stub.BackupsMetadata(protocol.BackupsMetadataParams()),
            key=lambda entry: entry.filename,
            value=lambda entry: BackupRecord.from_message(entry.metadata),
        )

    async def storages(self) -> list[StorageDescriptor]:
        """Remote storage targets in the order the coordinator lists them."""
        collector = StreamCollector("remote storage", StorageDescriptor.from_message)
        return await collector.to_list(self._stub.ListStorages(protocol.ListStoragesParams()))

    async def run_backup(self, params) -> None:
        """
        Start a backup.

        Args:
            params: RunBackupParams message

        Raises:
            RemoteCallError: If the coordinator fails the call
        """
        logger.info(
            "Sending RunBackup",
            storage=params.storage_name,
            backup_type=protocol.BackupType.Name(params.backup_type),
        )
        try:
            await self._stub.RunBackup(params)
        except grpc.RpcError as e:
            raise RemoteCallError.from_rpc_error(
                "Cannot send the RunBackup command to the coordinator", e
            ) from e

    async def run_restore(self, params) -> None:
        """
        Restore a backup.

        Args:
            params: RunRestoreParams message

        Raises:
            RemoteCallError: If the coordinator fails the call
        """
        logger.info(
            "Sending RunRestore",
            metadata_file=params.metadata_file,
            storage=params.storage_name,
        )
        try:
            await self._stub.RunRestore(params)
        except grpc.RpcError as e:
            raise RemoteCallError.from_rpc_error(
                "Cannot send the RunRestore command to the coordinator", e
            ) from e
