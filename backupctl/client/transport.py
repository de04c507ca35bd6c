"""
Transport Factory.

Opens the gRPC channel to the backup coordinator. One channel is opened per
invocation and closed on every exit path.

Usage:
    async with open_channel(settings) as channel:
        stub = ApiStub(channel)
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

import grpc

from backupctl.client.interceptors import credential_interceptors
from backupctl.core.config_schema import Settings
from backupctl.core.exceptions import ConnectionFailedError, CredentialError
from backupctl.core.logging import get_logger

logger = get_logger(__name__)

DEFAULT_TLS_CA_FILE = "~/.backupctl/ca.pem"
PEM_CERTIFICATE_MARKER = b"-----BEGIN CERTIFICATE-----"

_COMPRESSORS = {
    "gzip": grpc.Compression.Gzip,
    "deflate": grpc.Compression.Deflate,
}


def load_root_certificates(ca_file: str | None) -> bytes:
    """
    Read the CA bundle used to verify the coordinator.

    Falls back to DEFAULT_TLS_CA_FILE when no path is configured.

    Raises:
        CredentialError: If the file cannot be read or holds no certificate
    """
    path = Path(ca_file or DEFAULT_TLS_CA_FILE).expanduser()
    try:
        data = path.read_bytes()
    except OSError as e:
        raise CredentialError(f"Failed to create TLS credentials from {path}: {e}") from e

    if PEM_CERTIFICATE_MARKER not in data:
        raise CredentialError(f"Failed to create TLS credentials: {path} contains no PEM certificate")
    return data


def channel_compression(name: str) -> grpc.Compression | None:
    """Map the configured server compressor to a grpc.Compression, or None."""
    if not name or name == "none":
        return None
    try:
        return _COMPRESSORS[name]
    except KeyError:
        raise ConnectionFailedError(f"Unsupported server compressor {name!r}") from None


def create_channel(settings: Settings) -> grpc.aio.Channel:
    """
    Create (but do not connect) the channel described by settings.

    Raises:
        CredentialError: If TLS is requested and the CA file is unusable
        ConnectionFailedError: If the compressor is unsupported
    """
    compression = channel_compression(settings.server_compressor)
    interceptors = credential_interceptors(settings.api_token)

    if settings.tls:
        credentials = grpc.ssl_channel_credentials(
            root_certificates=load_root_certificates(settings.tls_ca_file),
        )
        return grpc.aio.secure_channel(
            settings.server_address,
            credentials,
            compression=compression,
            interceptors=interceptors,
        )

    return grpc.aio.insecure_channel(
        settings.server_address,
        compression=compression,
        interceptors=interceptors,
    )


@asynccontextmanager
async def open_channel(settings: Settings) -> AsyncIterator[grpc.aio.Channel]:
    """
    Open a ready channel to the coordinator and close it on exit.

    Raises:
        CredentialError: If TLS credentials cannot be loaded
        ConnectionFailedError: If the channel is not ready within connect_timeout
    """
    channel = create_channel(settings)
    try:
        logger.debug(
            "Connecting to backup coordinator",
            address=settings.server_address,
            tls=settings.tls,
            compressor=settings.server_compressor,
        )
        try:
            await asyncio.wait_for(channel.channel_ready(), timeout=settings.connect_timeout)
        except asyncio.TimeoutError:
            raise ConnectionFailedError(
                f"Cannot connect to the backup coordinator at {settings.server_address} "
                f"within {settings.connect_timeout:g}s"
            ) from None

        logger.debug("Connected to backup coordinator", address=settings.server_address)
        yield channel
    finally:
        await channel.close()
