"""
Result Records.

Typed, immutable views of the messages streamed back by the coordinator.
Templates render these instead of raw protobuf messages.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict

from backupctl.client import protocol


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True)


class AgentRecord(_Record):
    """One agent connected to the coordinator."""

    node_name: str
    node_type: str = ""
    replicaset_name: str = ""
    cluster_id: str = ""
    agent_id: str = ""
    version: str = ""
    last_seen: int = 0

    @classmethod
    def from_message(cls, message: Any) -> "AgentRecord":
        return cls(
            node_name=message.node_name,
            node_type=message.node_type,
            replicaset_name=message.replicaset_name,
            cluster_id=message.cluster_id,
            agent_id=message.id,
            version=message.version,
            last_seen=message.last_seen,
        )


class BackupRecord(_Record):
    """Metadata of one stored backup."""

    description: str = ""
    backup_type: str = ""
    compression_type: str = ""
    storage_name: str = ""
    start_ts: int = 0
    end_ts: int = 0

    @property
    def completed(self) -> bool:
        """A backup is finished once the coordinator recorded its end time."""
        return self.end_ts > 0

    @classmethod
    def from_message(cls, message: Any) -> "BackupRecord":
        return cls(
            description=message.description,
            backup_type=_enum_label(protocol.BackupType, message.backup_type, "BACKUP_TYPE_"),
            compression_type=_enum_label(
                protocol.CompressionType, message.compression_type, "COMPRESSION_TYPE_"
            ),
            storage_name=message.storage_name,
            start_ts=message.start_ts,
            end_ts=message.end_ts,
        )


class StorageDescriptor(_Record):
    """A remote storage target known to the coordinator."""

    name: str
    type: str = ""
    valid: bool = False
    can_read: bool = False
    can_write: bool = False

    @classmethod
    def from_message(cls, message: Any) -> "StorageDescriptor":
        return cls(
            name=message.name,
            type=message.type,
            valid=message.valid,
            can_read=message.can_read,
            can_write=message.can_write,
        )


def _enum_label(enum: Any, number: int, prefix: str) -> str:
    """BACKUP_TYPE_HOTBACKUP -> hotbackup; unknown numbers are shown as is."""
    try:
        name = enum.Name(number)
    except ValueError:
        return str(number)
    return name.removeprefix(prefix).lower()
