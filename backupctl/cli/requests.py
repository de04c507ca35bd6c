"""
Request Builders.

Turn resolved settings into validated RunBackup / RunRestore requests.
Both builders are pure: no network, no filesystem.
"""

from dataclasses import dataclass

from backupctl.client import protocol
from backupctl.core.config_schema import Settings
from backupctl.core.exceptions import UnsupportedFeatureError, ValidationError

BACKUP_TYPES = {
    "logical": protocol.BACKUP_TYPE_LOGICAL,
    "hot": protocol.BACKUP_TYPE_HOTBACKUP,
}

COMPRESSION_TYPES = {
    "": protocol.COMPRESSION_TYPE_NO_COMPRESSION,
    "none": protocol.COMPRESSION_TYPE_NO_COMPRESSION,
    "gzip": protocol.COMPRESSION_TYPE_GZIP,
}


@dataclass(frozen=True)
class BackupRequest:
    backup_type: int
    compression_type: int
    cypher: int
    description: str
    storage_name: str

    def to_message(self):
        return protocol.RunBackupParams(
            backup_type=self.backup_type,
            compression_type=self.compression_type,
            cypher=self.cypher,
            description=self.description,
            storage_name=self.storage_name,
        )


@dataclass(frozen=True)
class RestoreRequest:
    metadata_file: str
    skip_users_and_roles: bool
    storage_name: str

    def to_message(self):
        return protocol.RunRestoreParams(
            metadata_file=self.metadata_file,
            skip_users_and_roles=self.skip_users_and_roles,
            storage_name=self.storage_name,
        )


def build_backup_request(settings: Settings) -> BackupRequest:
    """
    Build a backup request.

    Raises:
        ValidationError: If the backup type or compression algorithm is unknown
        UnsupportedFeatureError: If an encryption algorithm is requested
    """
    try:
        backup_type = BACKUP_TYPES[settings.backup_type]
    except KeyError:
        raise ValidationError(
            f"backup type {settings.backup_type!r} is invalid", value=settings.backup_type
        ) from None

    try:
        compression_type = COMPRESSION_TYPES[settings.compression_algorithm]
    except KeyError:
        raise ValidationError(
            f"compression algorithm {settings.compression_algorithm!r} is invalid",
            value=settings.compression_algorithm,
        ) from None

    if settings.encryption_algorithm != "":
        raise UnsupportedFeatureError("encryption is not implemented yet")

    return BackupRequest(
        backup_type=backup_type,
        compression_type=compression_type,
        cypher=protocol.CYPHER_NO_CYPHER,
        description=settings.description,
        storage_name=settings.storage_name,
    )


def build_restore_request(settings: Settings) -> RestoreRequest:
    """Build a restore request. Fields are passed through unchanged."""
    return RestoreRequest(
        metadata_file=settings.restore_metadata_file,
        skip_users_and_roles=settings.skip_users_and_roles,
        storage_name=settings.storage_name,
    )
