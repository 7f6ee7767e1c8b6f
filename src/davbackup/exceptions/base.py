"""Base exception classes for davbackup.

All davbackup exceptions include structured error information:
- code: Machine-readable error identifier
- message: Human-readable error description
- details: Additional context for debugging/recovery
"""

from typing import Any, Dict, Optional


class DavBackupError(Exception):
    """Base exception for all davbackup errors.

    Attributes:
        code: Machine-readable error code (e.g., "WRITE_ERROR")
        message: Human-readable error message
        details: Optional additional context for debugging/recovery
    """

    default_code = "DAVBACKUP_ERROR"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        """Initialize error with structured information.

        Args:
            message: Human-readable error message
            code: Machine-readable error code (defaults to the class code)
            details: Optional additional context
        """
        self.code = code or self.default_code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.code}: {self.message} (details: {self.details})"
        return f"{self.code}: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON serialization."""
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class NotInitializedError(DavBackupError):
    """Raised when no usable remote store is available."""

    default_code = "NOT_INITIALIZED"


class ConfigurationError(DavBackupError):
    """Raised when connection or rotation settings are missing or invalid."""

    default_code = "CONFIGURATION_ERROR"


class RotationError(DavBackupError):
    """Base for failures of a single rotation step.

    The failing store exception is kept as ``__cause__``.
    """

    default_code = "ROTATION_ERROR"


class DirectoryError(RotationError):
    """Checking or creating the backup directory failed."""

    default_code = "DIRECTORY_ERROR"


class RenameError(RotationError):
    """Archiving the existing file under a timestamped name failed."""

    default_code = "RENAME_ERROR"


class PruneError(RotationError):
    """Listing the directory or deleting an old variant failed."""

    default_code = "PRUNE_ERROR"


class WriteError(RotationError):
    """Writing the new backup content failed."""

    default_code = "WRITE_ERROR"


class ReadError(RotationError):
    """Reading a backup failed, including when it does not exist."""

    default_code = "READ_ERROR"


class RemoteStoreError(DavBackupError):
    """Raised by a remote store when a protocol call fails.

    Attributes:
        status_code: HTTP status of the failed response, None for transport errors
    """

    default_code = "REMOTE_STORE_ERROR"

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.status_code = status_code
        details = dict(details or {})
        if status_code is not None:
            details.setdefault("status_code", status_code)
        super().__init__(message, code=code, details=details)


class RemoteNotFoundError(RemoteStoreError):
    """Raised when the remote path does not exist."""

    default_code = "REMOTE_NOT_FOUND"
