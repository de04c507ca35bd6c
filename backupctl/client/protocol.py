"""
Backup Coordinator Wire Contract.

Protobuf messages and the gRPC stub for the coordinator's `api.Api` service.

The descriptors are assembled here with the protobuf runtime and registered
through DescriptorPool.AddSerializedFile, the same call generated *_pb2
modules make, so no protoc step is needed at build time. Field numbers match
the coordinator's api.proto. Fields the client never reads are left out;
protobuf skips unknown fields when parsing.

    service Api {
      rpc GetClients(Empty) returns (stream Client);
      rpc BackupsMetadata(BackupsMetadataParams) returns (stream MetadataFile);
      rpc RunBackup(RunBackupParams) returns (RunOperationResponse);
      rpc RunRestore(RunRestoreParams) returns (RunOperationResponse);
      rpc ListStorages(ListStoragesParams) returns (stream StorageInfo);
    }
"""

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory
from google.protobuf.internal import enum_type_wrapper

PACKAGE = "api"
SERVICE = f"{PACKAGE}.Api"

_F = descriptor_pb2.FieldDescriptorProto

_ENUMS: dict[str, list[tuple[str, int]]] = {
    "BackupType": [
        ("BACKUP_TYPE_LOGICAL", 0),
        ("BACKUP_TYPE_HOTBACKUP", 1),
    ],
    "CompressionType": [
        ("COMPRESSION_TYPE_NO_COMPRESSION", 0),
        ("COMPRESSION_TYPE_GZIP", 1),
        ("COMPRESSION_TYPE_SNAPPY", 2),
        ("COMPRESSION_TYPE_LZ4", 3),
    ],
    "Cypher": [
        ("CYPHER_NO_CYPHER", 0),
        ("CYPHER_AES", 1),
        ("CYPHER_RC4", 2),
    ],
}

# (name, number, type, type_name, repeated)
_MESSAGES: dict[str, list[tuple[str, int, int, str, bool]]] = {
    "Empty": [],
    "Client": [
        ("version", 1, _F.TYPE_STRING, "", False),
        ("id", 2, _F.TYPE_STRING, "", False),
        ("node_type", 3, _F.TYPE_STRING, "", False),
        ("node_name", 4, _F.TYPE_STRING, "", False),
        ("cluster_id", 5, _F.TYPE_STRING, "", False),
        ("replicaset_name", 6, _F.TYPE_STRING, "", False),
        ("replicaset_id", 7, _F.TYPE_STRING, "", False),
        ("last_command_sent", 8, _F.TYPE_INT64, "", False),
        ("last_seen", 9, _F.TYPE_INT64, "", False),
    ],
    "BackupsMetadataParams": [],
    "BackupMetadata": [
        ("start_ts", 1, _F.TYPE_INT64, "", False),
        ("end_ts", 2, _F.TYPE_INT64, "", False),
        ("backup_type", 3, _F.TYPE_ENUM, "BackupType", False),
        ("compression_type", 5, _F.TYPE_ENUM, "CompressionType", False),
        ("cypher", 6, _F.TYPE_ENUM, "Cypher", False),
        ("description", 7, _F.TYPE_STRING, "", False),
        ("storage_name", 9, _F.TYPE_STRING, "", False),
    ],
    "MetadataFile": [
        ("filename", 1, _F.TYPE_STRING, "", False),
        ("metadata", 2, _F.TYPE_MESSAGE, "BackupMetadata", False),
    ],
    "ListStoragesParams": [],
    "StorageInfo": [
        ("name", 1, _F.TYPE_STRING, "", False),
        ("type", 2, _F.TYPE_STRING, "", False),
        ("valid", 3, _F.TYPE_BOOL, "", False),
        ("can_read", 4, _F.TYPE_BOOL, "", False),
        ("can_write", 5, _F.TYPE_BOOL, "", False),
    ],
    "RunBackupParams": [
        ("backup_type", 1, _F.TYPE_ENUM, "BackupType", False),
        ("compression_type", 2, _F.TYPE_ENUM, "CompressionType", False),
        ("cypher", 3, _F.TYPE_ENUM, "Cypher", False),
        ("description", 4, _F.TYPE_STRING, "", False),
        ("storage_name", 5, _F.TYPE_STRING, "", False),
    ],
    "RunRestoreParams": [
        ("metadata_file", 1, _F.TYPE_STRING, "", False),
        ("skip_users_and_roles", 2, _F.TYPE_BOOL, "", False),
        ("storage_name", 3, _F.TYPE_STRING, "", False),
    ],
    "Error": [
        ("message", 1, _F.TYPE_STRING, "", False),
    ],
    "RunOperationResponse": [
        ("error", 1, _F.TYPE_MESSAGE, "Error", True),
    ],
}


def _build_file() -> descriptor_pb2.FileDescriptorProto:
    file_proto = descriptor_pb2.FileDescriptorProto(
        name="backupctl/api.proto",
        package=PACKAGE,
        syntax="proto3",
    )

    for enum_name, values in _ENUMS.items():
        enum_proto = file_proto.enum_type.add(name=enum_name)
        for value_name, number in values:
            enum_proto.value.add(name=value_name, number=number)

    for message_name, fields in _MESSAGES.items():
        message_proto = file_proto.message_type.add(name=message_name)
        for name, number, field_type, type_name, repeated in fields:
            field = message_proto.field.add(
                name=name,
                number=number,
                type=field_type,
                label=_F.LABEL_REPEATED if repeated else _F.LABEL_OPTIONAL,
            )
            if type_name:
                field.type_name = f".{PACKAGE}.{type_name}"

    return file_proto


_pool = descriptor_pool.DescriptorPool()
_pool.AddSerializedFile(_build_file().SerializeToString())


def _message(name: str) -> type:
    return message_factory.GetMessageClass(_pool.FindMessageTypeByName(f"{PACKAGE}.{name}"))


def _enum(name: str) -> enum_type_wrapper.EnumTypeWrapper:
    return enum_type_wrapper.EnumTypeWrapper(_pool.FindEnumTypeByName(f"{PACKAGE}.{name}"))


BackupType = _enum("BackupType")
CompressionType = _enum("CompressionType")
Cypher = _enum("Cypher")

BACKUP_TYPE_LOGICAL = BackupType.Value("BACKUP_TYPE_LOGICAL")
BACKUP_TYPE_HOTBACKUP = BackupType.Value("BACKUP_TYPE_HOTBACKUP")
COMPRESSION_TYPE_NO_COMPRESSION = CompressionType.Value("COMPRESSION_TYPE_NO_COMPRESSION")
COMPRESSION_TYPE_GZIP = CompressionType.Value("COMPRESSION_TYPE_GZIP")
CYPHER_NO_CYPHER = Cypher.Value("CYPHER_NO_CYPHER")

Empty = _message("Empty")
Client = _message("Client")
BackupsMetadataParams = _message("BackupsMetadataParams")
BackupMetadata = _message("BackupMetadata")
MetadataFile = _message("MetadataFile")
ListStoragesParams = _message("ListStoragesParams")
StorageInfo = _message("StorageInfo")
RunBackupParams = _message("RunBackupParams")
RunRestoreParams = _message("RunRestoreParams")
Error = _message("Error")
RunOperationResponse = _message("RunOperationResponse")


def method_path(name: str) -> str:
    """Full gRPC method path for an Api method, e.g. /api.Api/RunBackup."""
    return f"/{SERVICE}/{name}"


class ApiStub:
    """Client stub for the coordinator Api service."""

    def __init__(self, channel):
        """
        Args:
            channel: A grpc.aio.Channel.
        """
        self.GetClients = channel.unary_stream(
            method_path("GetClients"),
            request_serializer=Empty.SerializeToString,
            response_deserializer=Client.FromString,
        )
        self.BackupsMetadata = channel.unary_stream(
            method_path("BackupsMetadata"),
            request_serializer=BackupsMetadataParams.SerializeToString,
            response_deserializer=MetadataFile.FromString,
        )
        self.ListStorages = channel.unary_stream(
            method_path("ListStorages"),
            request_serializer=ListStoragesParams.SerializeToString,
            response_deserializer=StorageInfo.FromString,
        )
        self.RunBackup = channel.unary_unary(
            method_path("RunBackup"),
            request_serializer=RunBackupParams.SerializeToString,
            response_deserializer=RunOperationResponse.FromString,
        )
        self.RunRestore = channel.unary_unary(
            method_path("RunRestore"),
            request_serializer=RunRestoreParams.SerializeToString,
            response_deserializer=RunOperationResponse.FromString,
        )
