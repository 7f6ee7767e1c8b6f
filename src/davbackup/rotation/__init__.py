"""Backup rotation

Usage:
    from davbackup.rotation import BackupRotator

    rotator = BackupRotator(store, "/backups")
    await rotator.put_backup("data.json", payload)
"""

from .naming import archive_suffix, join_path, parse_lastmod, plan_prune, select_variants
from .rotator import BackupRotator, create_rotator_from_env

__all__ = [
    "BackupRotator",
    "create_rotator_from_env",
    "archive_suffix",
    "join_path",
    "parse_lastmod",
    "plan_prune",
    "select_variants",
]
