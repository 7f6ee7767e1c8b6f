"""Tests for the in-memory remote file store."""

import io
from datetime import datetime, timezone

import pytest

from davbackup.exceptions import NotInitializedError, RemoteNotFoundError, RemoteStoreError
from davbackup.store import GetOptions, MemoryFileStore, PutOptions, RemoteFileStore


class TestMemoryFileStore:
    """Tests for MemoryFileStore behavior."""

    def test_is_remote_file_store(self):
        assert isinstance(MemoryFileStore(), RemoteFileStore)

    @pytest.mark.asyncio
    async def test_root_exists(self, memory_store):
        assert await memory_store.exists("/") is True
        assert await memory_store.exists("/backups") is False

    @pytest.mark.asyncio
    async def test_create_directory_recursive(self, memory_store):
        await memory_store.create_directory("/a/b/c", recursive=True)

        assert await memory_store.exists("/a")
        assert await memory_store.exists("/a/b/c")

    @pytest.mark.asyncio
    async def test_create_directory_recursive_is_idempotent(self, memory_store):
        await memory_store.create_directory("/a/b", recursive=True)
        await memory_store.create_directory("/a/b", recursive=True)

        assert await memory_store.exists("/a/b")

    @pytest.mark.asyncio
    async def test_create_directory_needs_parent(self, memory_store):
        with pytest.raises(RemoteStoreError) as exc_info:
            await memory_store.create_directory("/a/b")
        assert exc_info.value.status_code == 409

    @pytest.mark.asyncio
    async def test_create_existing_directory(self, memory_store):
        await memory_store.create_directory("/a")

        with pytest.raises(RemoteStoreError) as exc_info:
            await memory_store.create_directory("/a")
        assert exc_info.value.status_code == 405

    @pytest.mark.asyncio
    async def test_put_requires_parent(self, memory_store):
        with pytest.raises(RemoteStoreError) as exc_info:
            await memory_store.put_file_contents("/missing/data.json", b"{}")
        assert exc_info.value.status_code == 409

    @pytest.mark.asyncio
    async def test_put_and_get(self, memory_store):
        await memory_store.create_directory("/b")

        created = await memory_store.put_file_contents("/b/f.txt", b"one")
        replaced = await memory_store.put_file_contents("/b/f.txt", "two")

        assert created.status_code == 201
        assert replaced.status_code == 204
        assert created.etag != replaced.etag
        assert await memory_store.get_file_contents("/b/f.txt") == b"two"
        assert await memory_store.get_file_contents("/b/f.txt", GetOptions(format="text")) == "two"

    @pytest.mark.asyncio
    async def test_put_accepts_streams(self, memory_store):
        await memory_store.create_directory("/b")

        async def chunks():
            yield b"a"
            yield b"b"

        await memory_store.put_file_contents("/b/async", chunks())
        await memory_store.put_file_contents("/b/file", io.BytesIO(b"cd"))
        await memory_store.put_file_contents("/b/list", [b"e", b"f"])

        assert await memory_store.get_file_contents("/b/async") == b"ab"
        assert await memory_store.get_file_contents("/b/file") == b"cd"
        assert await memory_store.get_file_contents("/b/list") == b"ef"

    @pytest.mark.asyncio
    async def test_put_rejects_unsupported_content(self, memory_store):
        await memory_store.create_directory("/b")

        with pytest.raises(TypeError):
            await memory_store.put_file_contents("/b/x", 42)

    @pytest.mark.asyncio
    async def test_put_without_overwrite(self, memory_store):
        memory_store.add_file("/b/f.txt", b"one")

        with pytest.raises(RemoteStoreError) as exc_info:
            await memory_store.put_file_contents("/b/f.txt", b"two", PutOptions(overwrite=False))

        assert exc_info.value.status_code == 412
        assert await memory_store.get_file_contents("/b/f.txt") == b"one"

    @pytest.mark.asyncio
    async def test_get_missing(self, memory_store):
        with pytest.raises(RemoteNotFoundError):
            await memory_store.get_file_contents("/b/none")

    @pytest.mark.asyncio
    async def test_move(self, memory_store):
        memory_store.add_file("/b/f.txt", b"x")

        await memory_store.move_file("/b/f.txt", "/b/f.txt.1")

        assert memory_store.list_paths() == ["/b/f.txt.1"]

    @pytest.mark.asyncio
    async def test_move_missing(self, memory_store):
        with pytest.raises(RemoteNotFoundError):
            await memory_store.move_file("/b/none", "/b/none.1")

    @pytest.mark.asyncio
    async def test_delete(self, memory_store):
        memory_store.add_file("/b/f.txt", b"x")

        await memory_store.delete_file("/b/f.txt")

        assert memory_store.list_paths() == []
        with pytest.raises(RemoteNotFoundError):
            await memory_store.delete_file("/b/f.txt")

    @pytest.mark.asyncio
    async def test_directory_contents(self, memory_store):
        modified = datetime(2024, 3, 4, 5, 6, 7, tzinfo=timezone.utc)
        memory_store.add_file("/b/f.txt", b"12345", modified=modified)
        memory_store.add_file("/b/sub/g.txt", b"x")

        entries = await memory_store.get_directory_contents("/b")

        assert [(e.basename, e.type) for e in entries] == [("f.txt", "file"), ("sub", "directory")]
        f = entries[0]
        assert f.filename == "/b/f.txt"
        assert f.size == 5
        assert f.lastmod == "Mon, 04 Mar 2024 05:06:07 GMT"
        assert f.etag

    @pytest.mark.asyncio
    async def test_directory_contents_missing(self, memory_store):
        with pytest.raises(RemoteNotFoundError):
            await memory_store.get_directory_contents("/nothing")

    @pytest.mark.asyncio
    async def test_paths_are_normalized(self, memory_store):
        memory_store.add_file("backups//data.json/", b"x")

        assert memory_store.list_paths() == ["/backups/data.json"]
        assert await memory_store.exists("/backups/./data.json")

    @pytest.mark.asyncio
    async def test_closed_store(self):
        async with MemoryFileStore() as store:
            assert store.closed is False
        assert store.closed is True

        with pytest.raises(NotInitializedError):
            await store.exists("/")

    def test_clear(self, memory_store):
        memory_store.add_file("/b/f.txt", b"x")

        memory_store.clear()

        assert memory_store.list_paths() == []
