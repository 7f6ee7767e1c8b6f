"""Exceptions for davbackup.

All exceptions include structured error information:
- code: Machine-readable error identifier
- message: Human-readable error description
- details: Additional context for debugging/recovery

Usage:
    from davbackup.exceptions import DavBackupError, WriteError

    try:
        await rotator.put_backup("data.json", payload)
    except WriteError as e:
        print(e.to_dict())
"""

from davbackup.exceptions.base import (
    ConfigurationError,
    DavBackupError,
    DirectoryError,
    NotInitializedError,
    PruneError,
    ReadError,
    RemoteNotFoundError,
    RemoteStoreError,
    RenameError,
    RotationError,
    WriteError,
)

__all__ = [
    "DavBackupError",
    "NotInitializedError",
    "ConfigurationError",
    # Rotation steps
    "RotationError",
    "DirectoryError",
    "RenameError",
    "PruneError",
    "WriteError",
    "ReadError",
    # Remote store
    "RemoteStoreError",
    "RemoteNotFoundError",
]
