"""Base protocol for remote file stores.

Defines the capability set the rotator relies on. Uses Python's Protocol for
structural subtyping, so any object with matching async methods is a store.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import (
    Any,
    AsyncIterable,
    AsyncIterator,
    Iterable,
    List,
    Literal,
    Optional,
    Protocol,
    Union,
    runtime_checkable,
)

# Content accepted by put_file_contents
Content = Union[bytes, str, AsyncIterable[bytes], Iterable[bytes], Any]

EntryType = Literal["file", "directory"]

STREAM_CHUNK_SIZE = 64 * 1024


@dataclass
class FileStat:
    """One entry of a directory listing.

    Attributes:
        basename: Last path segment
        filename: Full remote path
        type: "file" or "directory"
        lastmod: Last-modified value as reported by the server (RFC 1123)
        size: Content length in bytes, if known
        etag: Entity tag, if known
    """

    basename: str
    filename: str
    type: EntryType
    lastmod: Optional[str] = None
    size: Optional[int] = None
    etag: Optional[str] = None

    @property
    def is_file(self) -> bool:
        return self.type == "file"


@dataclass
class PutOptions:
    """Options for put_file_contents.

    Attributes:
        overwrite: Replace an existing file; False fails with 412 instead
        content_length: Declared length for streamed content
        content_type: MIME type sent with the upload
    """

    overwrite: bool = True
    content_length: Optional[int] = None
    content_type: Optional[str] = None


@dataclass
class GetOptions:
    """Options for get_file_contents."""

    format: Literal["binary", "text"] = "binary"
    encoding: str = "utf-8"


@dataclass
class WriteResult:
    """Outcome of a successful write, passed back to callers unchanged."""

    path: str
    status_code: int
    etag: Optional[str] = None


@runtime_checkable
class RemoteFileStore(Protocol):
    """Protocol for remote file stores.

    All paths are absolute POSIX-style strings ("/backups/data.json").
    Implementations raise RemoteStoreError (RemoteNotFoundError for missing
    paths) and NotInitializedError once closed.
    """

    @property
    def closed(self) -> bool:
        """True once aclose() has been called."""
        ...

    async def exists(self, path: str) -> bool:
        ...

    async def create_directory(self, path: str, recursive: bool = False) -> None:
        ...

    async def get_directory_contents(self, path: str) -> List[FileStat]:
        """List the immediate children of a directory."""
        ...

    async def move_file(self, source: str, destination: str) -> None:
        ...

    async def delete_file(self, path: str) -> None:
        ...

    async def put_file_contents(
        self, path: str, content: Content, options: Optional[PutOptions] = None
    ) -> WriteResult:
        ...

    async def get_file_contents(
        self, path: str, options: Optional[GetOptions] = None
    ) -> Union[bytes, str]:
        ...

    async def aclose(self) -> None:
        ...


def as_byte_stream(content: Content) -> Union[bytes, AsyncIterator[bytes]]:
    """Normalize upload content to bytes or an async byte iterator.

    Accepts bytes, str, async iterables, binary file objects and sync
    iterables of bytes.
    """
    if isinstance(content, (bytes, bytearray, memoryview)):
        return bytes(content)
    if isinstance(content, str):
        return content.encode("utf-8")
    if hasattr(content, "__aiter__"):
        return content.__aiter__()
    if hasattr(content, "read"):
        return _iter_file(content)
    if isinstance(content, Iterable):
        return _iter_sync(content)
    raise TypeError(f"Unsupported content type: {type(content).__name__}")


async def _iter_file(fileobj: Any) -> AsyncIterator[bytes]:
    while True:
        chunk = fileobj.read(STREAM_CHUNK_SIZE)
        if not chunk:
            break
        yield chunk.encode("utf-8") if isinstance(chunk, str) else chunk


async def _iter_sync(chunks: Iterable[bytes]) -> AsyncIterator[bytes]:
    for chunk in chunks:
        yield chunk


async def read_all(content: Content) -> bytes:
    """Collect upload content into a single bytes object."""
    stream = as_byte_stream(content)
    if isinstance(stream, bytes):
        return stream
    parts = []
    async for chunk in stream:
        parts.append(bytes(chunk))
    return b"".join(parts)
