"""Shared pytest fixtures for davbackup tests.

Provides:
- FakeClock: deterministic, manually advanced clock
- RecordingStore: RemoteFileStore wrapper that records calls and injects failures
- memory_store / recording_store / rotator fixtures
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Set, Tuple

import pytest

from davbackup.exceptions import RemoteStoreError
from davbackup.logger import create_logger
from davbackup.rotation import BackupRotator
from davbackup.store import MemoryFileStore

START = datetime(2024, 1, 1, 0, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime = START) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float = 1) -> datetime:
        self.now = self.now + timedelta(seconds=seconds)
        return self.now


class RecordingStore:
    """Wraps a store, records every call and optionally fails some of them.

    ``fail_on`` maps a method name to the 1-based call number that fails
    (0 fails every call).
    """

    def __init__(self, inner: MemoryFileStore, fail_on: Optional[Dict[str, int]] = None) -> None:
        self.inner = inner
        self.fail_on = dict(fail_on or {})
        self.calls: List[Tuple[str, Tuple[Any, ...]]] = []
        self._counts: Dict[str, int] = {}

    @property
    def closed(self) -> bool:
        return self.inner.closed

    def names(self) -> List[str]:
        return [name for name, _ in self.calls]

    def count(self, name: str) -> int:
        return self.names().count(name)

    def methods_called(self) -> Set[str]:
        return set(self.names())

    async def _call(self, name: str, *args: Any) -> Any:
        self.calls.append((name, args))
        self._counts[name] = self._counts.get(name, 0) + 1
        fail_at = self.fail_on.get(name)
        if fail_at is not None and (fail_at == 0 or fail_at == self._counts[name]):
            raise RemoteStoreError(f"Injected failure in {name}", status_code=500)
        return await getattr(self.inner, name)(*args)

    async def exists(self, path):
        return await self._call("exists", path)

    async def create_directory(self, path, recursive=False):
        return await self._call("create_directory", path, recursive)

    async def get_directory_contents(self, path):
        return await self._call("get_directory_contents", path)

    async def move_file(self, source, destination):
        return await self._call("move_file", source, destination)

    async def delete_file(self, path):
        return await self._call("delete_file", path)

    async def put_file_contents(self, path, content, options=None):
        return await self._call("put_file_contents", path, content, options)

    async def get_file_contents(self, path, options=None):
        return await self._call("get_file_contents", path, options)

    async def aclose(self):
        await self.inner.aclose()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def memory_store(clock: FakeClock) -> MemoryFileStore:
    return MemoryFileStore(clock=clock)


@pytest.fixture
def recording_store(memory_store: MemoryFileStore) -> RecordingStore:
    return RecordingStore(memory_store)


@pytest.fixture
def rotation_logger():
    return create_logger(name="davbackup-test")


@pytest.fixture
def rotator(recording_store: RecordingStore, clock: FakeClock, rotation_logger) -> BackupRotator:
    return BackupRotator(recording_store, "/backups", logger=rotation_logger, clock=clock)
