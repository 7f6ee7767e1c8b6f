"""Configuration Module for davbackup

Example:
    from davbackup.config import EnvLoader, RotationPolicy, WebDavConfig

    env = EnvLoader(".env").load()
    config = WebDavConfig.from_env(prefix="DAVBACKUP", env=env)
    policy = RotationPolicy.from_env(prefix="DAVBACKUP", env=env)
"""

from davbackup.config.env_loader import EnvLoader
from davbackup.config.settings import (
    DEFAULT_MAX_VERSIONS,
    DEFAULT_TIMESTAMP_FORMAT,
    DEFAULT_UTC_OFFSET_HOURS,
    RotationPolicy,
    WebDavConfig,
)

__all__ = [
    "EnvLoader",
    "WebDavConfig",
    "RotationPolicy",
    "DEFAULT_MAX_VERSIONS",
    "DEFAULT_UTC_OFFSET_HOURS",
    "DEFAULT_TIMESTAMP_FORMAT",
]
