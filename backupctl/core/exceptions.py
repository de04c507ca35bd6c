"""
Custom Exceptions.

Application-specific exception classes for consistent error handling.
Every error raised by backupctl derives from BackupCtlError and carries a
stable code that is included in log records.
"""

import grpc


class BackupCtlError(Exception):
    """Base exception for all backupctl errors."""

    def __init__(self, message: str, code: str = "SYS_INTERNAL_ERROR") -> None:
        self.message = message
        self.code = code
        super().__init__(self.message)


class ValidationError(BackupCtlError):
    """Raised when a user-supplied value is not one of the accepted values."""

    def __init__(self, message: str = "Validation failed", value: str | None = None) -> None:
        self.value = value
        super().__init__(message, code="VAL_INVALID_VALUE")


class UnsupportedFeatureError(BackupCtlError):
    """Raised when a requested feature is not implemented yet."""

    def __init__(self, message: str = "Feature not supported") -> None:
        super().__init__(message, code="VAL_UNSUPPORTED_FEATURE")


class ConfigError(BackupCtlError):
    """Raised when the config file or resolved settings are invalid."""

    def __init__(self, message: str = "Invalid configuration") -> None:
        super().__init__(message, code="CFG_INVALID")


class ConnectionFailedError(BackupCtlError):
    """Raised when the channel to the backup coordinator cannot be established."""

    def __init__(self, message: str = "Cannot connect to the backup coordinator") -> None:
        super().__init__(message, code="NET_CONNECTION_FAILED")


class CredentialError(BackupCtlError):
    """Raised when the TLS trust anchor cannot be loaded."""

    def __init__(self, message: str = "Cannot load TLS credentials") -> None:
        super().__init__(message, code="NET_CREDENTIALS")


class RemoteCallError(BackupCtlError):
    """Raised when the backup coordinator rejects or fails a call."""

    def __init__(self, message: str = "Remote call failed", status: str | None = None) -> None:
        self.status = status
        super().__init__(message, code="RPC_CALL_FAILED")

    @classmethod
    def from_rpc_error(cls, message: str, exc: grpc.RpcError) -> "RemoteCallError":
        status, details = _describe_rpc_error(exc)
        return cls(f"{message}: {details}", status=status)


class StreamError(BackupCtlError):
    """Raised when a server stream terminates with anything but a clean end."""

    def __init__(self, message: str = "Stream failed", status: str | None = None) -> None:
        self.status = status
        super().__init__(message, code="RPC_STREAM_FAILED")

    @classmethod
    def from_rpc_error(cls, message: str, exc: grpc.RpcError) -> "StreamError":
        status, details = _describe_rpc_error(exc)
        return cls(f"{message}: {details}", status=status)


class RenderError(BackupCtlError):
    """Raised when an output template cannot be rendered."""

    def __init__(self, message: str = "Cannot render output") -> None:
        super().__init__(message, code="OUT_RENDER_FAILED")


def _describe_rpc_error(exc: grpc.RpcError) -> tuple[str | None, str]:
    """Return the status code name and details of an RPC error, when present."""
    code = exc.code() if hasattr(exc, "code") else None
    details = exc.details() if hasattr(exc, "details") else None
    status = code.name if code is not None else None
    return status, details or str(exc) or "unknown error"
