"""Backup rotation on top of a remote file store

Workflow of put_backup:
1. Ensure the backup directory exists (created recursively when missing)
2. Archive the current file by renaming it with a timestamp suffix
3. List the directory and delete the oldest variants beyond the policy limit
4. Write the new content

Steps run strictly in order and the first failure aborts the call. Work
already done (directory created, file archived, variants deleted) is not
rolled back. Calls for the same file are not serialized here; callers that
need a single writer per file must serialize them.
"""

from datetime import datetime, timezone
from typing import Callable, List, Optional, Union

from davbackup.config import EnvLoader, RotationPolicy, WebDavConfig
from davbackup.exceptions import (
    DirectoryError,
    NotInitializedError,
    PruneError,
    ReadError,
    RenameError,
    WriteError,
)
from davbackup.logger import Logger, create_logger
from davbackup.store import (
    Content,
    FileStat,
    GetOptions,
    PutOptions,
    RemoteFileStore,
    WebDavFileStore,
    WriteResult,
)

from .naming import archive_suffix, join_path, plan_prune, select_variants


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BackupRotator:
    """
    Writes backups to a remote directory while keeping a bounded history.

    Example:
        async with WebDavFileStore(config) as store:
            rotator = BackupRotator(store, "/backups")
            await rotator.put_backup("data.json", payload)
            restored = await rotator.get_backup("data.json")
    """

    def __init__(
        self,
        store: Optional[RemoteFileStore],
        directory: str,
        policy: Optional[RotationPolicy] = None,
        logger: Optional[Logger] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize the rotator.

        Args:
            store: Connected remote file store
            directory: Remote directory holding the backups
            policy: Retention and suffix settings (default: 10 versions, UTC+8)
            logger: Optional logger instance
            clock: Callable returning the current aware datetime

        Raises:
            NotInitializedError: If no store is given
        """
        if store is None:
            raise NotInitializedError("Remote file store not initialized")

        self.store = store
        self.directory = "/" + directory.strip().strip("/")
        self.policy = policy or RotationPolicy()
        self.logger = logger or create_logger(name="davbackup")
        self._clock = clock or _utcnow

    def remote_path(self, base_filename: str) -> str:
        return join_path(self.directory, base_filename)

    def _ensure_ready(self) -> None:
        if self.store.closed:
            raise NotInitializedError("Remote file store is closed")

    async def put_backup(
        self,
        base_filename: str,
        content: Content,
        options: Optional[PutOptions] = None,
    ) -> WriteResult:
        """
        Archive the current file, prune old variants and write new content.

        Args:
            base_filename: Name of the file inside the backup directory
            content: bytes, str, a binary file object or a (async) byte iterator
            options: Upload options passed through to the store

        Returns:
            WriteResult reported by the store

        Raises:
            NotInitializedError: If the store is closed
            DirectoryError: If the directory check or creation fails
            RenameError: If archiving the existing file fails
            PruneError: If listing or deleting old variants fails
            WriteError: If the upload fails
        """
        self._ensure_ready()

        await self._ensure_directory()

        remote_path = self.remote_path(base_filename)
        await self._archive_existing(remote_path)
        await self._prune(base_filename)

        try:
            result = await self.store.put_file_contents(remote_path, content, options)
        except Exception as e:
            self.logger.error("Error putting file contents", path=remote_path, error=str(e))
            raise WriteError(
                f"Failed to write {remote_path}: {e}", details={"path": remote_path}
            ) from e

        self.logger.info("Backup written", path=remote_path)
        return result

    async def get_backup(
        self,
        base_filename: str,
        options: Optional[GetOptions] = None,
    ) -> Union[bytes, str]:
        """
        Read the current backup.

        Raises:
            NotInitializedError: If the store is closed
            ReadError: If the read fails, including when the file does not exist
        """
        self._ensure_ready()

        remote_path = self.remote_path(base_filename)
        try:
            return await self.store.get_file_contents(remote_path, options)
        except Exception as e:
            self.logger.error("Error getting file contents", path=remote_path, error=str(e))
            raise ReadError(
                f"Failed to read {remote_path}: {e}", details={"path": remote_path}
            ) from e

    async def list_backups(self, base_filename: str) -> List[FileStat]:
        """
        Variants of base_filename as retention sees them, oldest first.

        Raises:
            PruneError: If the directory cannot be listed
        """
        self._ensure_ready()
        return select_variants(await self._list_directory(), base_filename)

    async def _ensure_directory(self) -> None:
        try:
            if not await self.store.exists(self.directory):
                await self.store.create_directory(self.directory, recursive=True)
                self.logger.info("Created backup directory", path=self.directory)
        except Exception as e:
            self.logger.error("Error creating directory", path=self.directory, error=str(e))
            raise DirectoryError(
                f"Failed to prepare directory {self.directory}: {e}",
                details={"path": self.directory},
            ) from e

    async def _archive_existing(self, remote_path: str) -> None:
        try:
            if not await self.store.exists(remote_path):
                return

            archive_path = f"{remote_path}.{archive_suffix(self._clock(), self.policy)}"
            candidate = archive_path
            collisions = 0
            # Same-second rotations get -1, -2, ... instead of replacing an archive
            while await self.store.exists(candidate):
                collisions += 1
                candidate = f"{archive_path}-{collisions}"

            await self.store.move_file(remote_path, candidate)
        except Exception as e:
            self.logger.error("Error archiving existing file", path=remote_path, error=str(e))
            raise RenameError(
                f"Failed to archive {remote_path}: {e}", details={"path": remote_path}
            ) from e

        self.logger.info("Renamed existing file", source=remote_path, destination=candidate)

    async def _list_directory(self) -> List[FileStat]:
        try:
            return await self.store.get_directory_contents(self.directory)
        except Exception as e:
            self.logger.error("Error listing backup files", path=self.directory, error=str(e))
            raise PruneError(
                f"Failed to list {self.directory}: {e}", details={"path": self.directory}
            ) from e

    async def _prune(self, base_filename: str) -> int:
        variants = select_variants(await self._list_directory(), base_filename)
        to_delete = plan_prune(variants, self.policy.max_versions)

        for deleted, variant in enumerate(to_delete):
            try:
                await self.store.delete_file(variant.filename)
            except Exception as e:
                self.logger.error(
                    "Error deleting old backup file",
                    path=variant.filename,
                    deleted=deleted,
                    error=str(e),
                )
                raise PruneError(
                    f"Failed to delete {variant.filename}: {e}",
                    details={"path": variant.filename, "deleted": deleted},
                ) from e
            self.logger.info("Deleted old backup file", path=variant.filename)

        return len(to_delete)


def create_rotator_from_env(
    prefix: str = "DAVBACKUP",
    env_file: Optional[str] = None,
    logger: Optional[Logger] = None,
) -> BackupRotator:
    """
    Build a WebDAV-backed rotator from environment variables.

    Reads the variables documented on WebDavConfig.from_env and
    RotationPolicy.from_env, with an optional .env file underneath.
    The returned rotator owns its store; close it with ``await rotator.store.aclose()``.
    """
    env = EnvLoader(env_file).load()
    config = WebDavConfig.from_env(prefix=prefix, env=env)
    policy = RotationPolicy.from_env(prefix=prefix, env=env)
    store = WebDavFileStore(config, logger=logger)
    return BackupRotator(store, config.remote_path, policy=policy, logger=logger)
