"""In-memory remote file store for testing.

Mimics the status codes a WebDAV server answers with, so rotation logic can
be exercised without a network. Data is lost when the instance is discarded.
"""

from __future__ import annotations

import hashlib
import posixpath
from dataclasses import dataclass
from datetime import datetime, timezone
from email.utils import format_datetime
from typing import Callable, Dict, List, Optional, Set, Union

from davbackup.exceptions import NotInitializedError, RemoteNotFoundError, RemoteStoreError

from .base import Content, FileStat, GetOptions, PutOptions, WriteResult, read_all


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _normalize(path: str) -> str:
    path = posixpath.normpath("/" + path.strip())
    # normpath keeps a leading "//" as-is
    return "/" + path.lstrip("/")


@dataclass
class _StoredFile:
    data: bytes
    modified: datetime
    etag: str


class MemoryFileStore:
    """In-memory RemoteFileStore.

    Example:
        store = MemoryFileStore()
        await store.create_directory("/backups", recursive=True)
        await store.put_file_contents("/backups/data.json", b"{}")

    Args:
        clock: Callable returning the current aware datetime; stamps lastmod
    """

    def __init__(self, clock: Optional[Callable[[], datetime]] = None) -> None:
        self._clock = clock or _utcnow
        self._files: Dict[str, _StoredFile] = {}
        self._dirs: Set[str] = {"/"}
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def _ensure_open(self) -> None:
        if self._closed:
            raise NotInitializedError("Memory store is closed")

    def _require_parent(self, path: str) -> None:
        parent = posixpath.dirname(path)
        if parent not in self._dirs:
            raise RemoteStoreError(
                f"Parent collection does not exist: {parent}", status_code=409
            )

    async def exists(self, path: str) -> bool:
        self._ensure_open()
        path = _normalize(path)
        return path in self._files or path in self._dirs

    async def create_directory(self, path: str, recursive: bool = False) -> None:
        self._ensure_open()
        path = _normalize(path)

        if not recursive:
            if path in self._dirs or path in self._files:
                raise RemoteStoreError(f"Resource already exists: {path}", status_code=405)
            self._require_parent(path)
            self._dirs.add(path)
            return

        current = ""
        for segment in path.strip("/").split("/"):
            if not segment:
                continue
            current = f"{current}/{segment}"
            if current in self._files:
                raise RemoteStoreError(f"A file is in the way: {current}", status_code=409)
            self._dirs.add(current)

    async def get_directory_contents(self, path: str) -> List[FileStat]:
        self._ensure_open()
        path = _normalize(path)
        if path not in self._dirs:
            raise RemoteNotFoundError(f"Not found: {path}", status_code=404)

        entries = []
        for dir_path in self._dirs:
            if dir_path != path and posixpath.dirname(dir_path) == path:
                entries.append(
                    FileStat(
                        basename=posixpath.basename(dir_path),
                        filename=dir_path,
                        type="directory",
                    )
                )
        for file_path, stored in self._files.items():
            if posixpath.dirname(file_path) == path:
                entries.append(
                    FileStat(
                        basename=posixpath.basename(file_path),
                        filename=file_path,
                        type="file",
                        lastmod=format_datetime(stored.modified.astimezone(timezone.utc), usegmt=True),
                        size=len(stored.data),
                        etag=stored.etag,
                    )
                )
        return sorted(entries, key=lambda e: e.basename)

    async def move_file(self, source: str, destination: str) -> None:
        self._ensure_open()
        source = _normalize(source)
        destination = _normalize(destination)
        if source not in self._files:
            raise RemoteNotFoundError(f"Not found: {source}", status_code=404)
        self._require_parent(destination)
        self._files[destination] = self._files.pop(source)

    async def delete_file(self, path: str) -> None:
        self._ensure_open()
        path = _normalize(path)
        if path not in self._files:
            raise RemoteNotFoundError(f"Not found: {path}", status_code=404)
        del self._files[path]

    async def put_file_contents(
        self, path: str, content: Content, options: Optional[PutOptions] = None
    ) -> WriteResult:
        self._ensure_open()
        options = options or PutOptions()
        path = _normalize(path)
        self._require_parent(path)

        existed = path in self._files
        if existed and not options.overwrite:
            raise RemoteStoreError(f"Precondition failed: {path} exists", status_code=412)

        data = await read_all(content)
        etag = f'"{hashlib.sha256(data).hexdigest()[:16]}"'
        self._files[path] = _StoredFile(data=data, modified=self._clock(), etag=etag)
        return WriteResult(path=path, status_code=204 if existed else 201, etag=etag)

    async def get_file_contents(
        self, path: str, options: Optional[GetOptions] = None
    ) -> Union[bytes, str]:
        self._ensure_open()
        options = options or GetOptions()
        path = _normalize(path)
        stored = self._files.get(path)
        if stored is None:
            raise RemoteNotFoundError(f"Not found: {path}", status_code=404)
        if options.format == "text":
            return stored.data.decode(options.encoding)
        return stored.data

    async def aclose(self) -> None:
        self._closed = True

    async def __aenter__(self) -> "MemoryFileStore":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    def add_file(self, path: str, data: bytes, modified: Optional[datetime] = None) -> None:
        """Seed a file, creating parent directories.

        Useful for test setup.
        """
        path = _normalize(path)
        parent = posixpath.dirname(path)
        current = ""
        for segment in parent.strip("/").split("/"):
            if segment:
                current = f"{current}/{segment}"
                self._dirs.add(current)
        etag = f'"{hashlib.sha256(data).hexdigest()[:16]}"'
        self._files[path] = _StoredFile(data=data, modified=modified or self._clock(), etag=etag)

    def list_paths(self) -> List[str]:
        """Sorted paths of all stored files."""
        return sorted(self._files)

    def clear(self) -> None:
        """Remove all files and directories."""
        self._files.clear()
        self._dirs = {"/"}
