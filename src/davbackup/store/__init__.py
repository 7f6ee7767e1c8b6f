"""Remote file stores for davbackup.

- RemoteFileStore - protocol every store satisfies
- MemoryFileStore - in-memory store for testing
- WebDavFileStore - WebDAV server over httpx

Usage:
    from davbackup.store import MemoryFileStore, WebDavFileStore, create_store

    store = create_store("memory")
"""

from .base import (
    Content,
    FileStat,
    GetOptions,
    PutOptions,
    RemoteFileStore,
    WriteResult,
    as_byte_stream,
    read_all,
)
from .factory import BackendType, create_store, create_store_from_env
from .memory import MemoryFileStore
from .webdav import WebDavFileStore

__all__ = [
    "RemoteFileStore",
    "FileStat",
    "PutOptions",
    "GetOptions",
    "WriteResult",
    "Content",
    "as_byte_stream",
    "read_all",
    "MemoryFileStore",
    "WebDavFileStore",
    "BackendType",
    "create_store",
    "create_store_from_env",
]
