"""Factory functions for creating remote file stores."""

from __future__ import annotations

from typing import Literal, Mapping, Optional

from davbackup.config import EnvLoader, WebDavConfig
from davbackup.exceptions import ConfigurationError
from davbackup.logger import Logger

from .base import RemoteFileStore
from .memory import MemoryFileStore
from .webdav import WebDavFileStore

BackendType = Literal["memory", "webdav"]


def create_store(
    backend: BackendType,
    *,
    config: Optional[WebDavConfig] = None,
    logger: Optional[Logger] = None,
) -> RemoteFileStore:
    """Create a remote file store based on backend type.

    Args:
        backend: "memory" or "webdav"
        config: WebDavConfig for the webdav backend (required for "webdav")
        logger: Optional logger instance

    Raises:
        ConfigurationError: If required options are missing or backend is unknown

    Example:
        store = create_store("memory")
        store = create_store("webdav", config=WebDavConfig(url="https://dav.example.com"))
    """
    if backend == "memory":
        return MemoryFileStore()

    if backend == "webdav":
        if config is None:
            raise ConfigurationError("config is required for webdav backend")
        return WebDavFileStore(config, logger=logger)

    raise ConfigurationError(f"Unknown store backend: {backend}")


def create_store_from_env(
    prefix: str = "DAVBACKUP",
    env: Optional[Mapping[str, str]] = None,
    logger: Optional[Logger] = None,
) -> RemoteFileStore:
    """Create a store from {PREFIX}_BACKEND (default: webdav) and related variables."""
    if env is None:
        env = EnvLoader().load()

    backend = env.get(f"{prefix}_BACKEND", "webdav").lower()
    if backend == "memory":
        return create_store("memory", logger=logger)
    if backend == "webdav":
        return create_store(
            "webdav", config=WebDavConfig.from_env(prefix=prefix, env=env), logger=logger
        )
    raise ConfigurationError(
        f"Invalid {prefix}_BACKEND: {backend!r} (expected 'memory' or 'webdav')"
    )
