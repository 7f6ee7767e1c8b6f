"""davbackup - Rotating backups on WebDAV storage.

This package provides:
- rotation: BackupRotator (archive, prune, write) and its naming helpers
- store: RemoteFileStore protocol with WebDAV (httpx) and in-memory stores
- config: Typed WebDAV and rotation settings with .env support
- logger: Structured logging with text or JSON output
- exceptions: Structured exception hierarchy
"""

__version__ = "1.0.0"

from davbackup.logger import (
    Logger,
    StructuredLogger,
    create_logger,
    get_logger,
)

from davbackup.exceptions import (
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

from davbackup.config import (
    EnvLoader,
    RotationPolicy,
    WebDavConfig,
)

from davbackup.store import (
    FileStat,
    GetOptions,
    MemoryFileStore,
    PutOptions,
    RemoteFileStore,
    WebDavFileStore,
    WriteResult,
    create_store,
)

from davbackup.rotation import (
    BackupRotator,
    create_rotator_from_env,
)

__all__ = [
    "__version__",
    # Logger
    "Logger",
    "StructuredLogger",
    "create_logger",
    "get_logger",
    # Exceptions
    "DavBackupError",
    "NotInitializedError",
    "ConfigurationError",
    "RotationError",
    "DirectoryError",
    "RenameError",
    "PruneError",
    "WriteError",
    "ReadError",
    "RemoteStoreError",
    "RemoteNotFoundError",
    # Config
    "EnvLoader",
    "WebDavConfig",
    "RotationPolicy",
    # Store
    "RemoteFileStore",
    "FileStat",
    "PutOptions",
    "GetOptions",
    "WriteResult",
    "MemoryFileStore",
    "WebDavFileStore",
    "create_store",
    # Rotation
    "BackupRotator",
    "create_rotator_from_env",
]
