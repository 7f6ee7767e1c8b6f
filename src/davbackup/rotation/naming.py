"""Archive naming and retention selection

Pure helpers used by BackupRotator; none of them touch the remote store.
"""

from datetime import datetime, timedelta, timezone
from email.utils import parsedate_to_datetime
from functools import cmp_to_key
from typing import List, Optional, Sequence

from davbackup.config import RotationPolicy
from davbackup.store import FileStat


def join_path(directory: str, filename: str) -> str:
    """Remote path of a file inside the backup directory."""
    return f"{directory.rstrip('/')}/{filename}"


def archive_suffix(now: datetime, policy: RotationPolicy) -> str:
    """Timestamp suffix for an archived file.

    ``now`` is shifted from UTC by the policy's fixed offset, e.g. with the
    default +8 hours 2024-01-01T00:00:00Z becomes "20240101080000".
    """
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    shifted = now.astimezone(timezone.utc) + timedelta(hours=policy.utc_offset_hours)
    return shifted.strftime(policy.timestamp_format)


def parse_lastmod(value: Optional[str]) -> Optional[datetime]:
    """Parse a getlastmodified value (RFC 1123, ISO 8601 accepted too).

    Returns None when the value is missing or unparseable.
    """
    if not value:
        return None

    parsed: Optional[datetime] = None
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError):
        try:
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None

    if parsed is None:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _compare_lastmod(a: FileStat, b: FileStat) -> int:
    # Pairs with a missing timestamp keep their listing order
    ta, tb = parse_lastmod(a.lastmod), parse_lastmod(b.lastmod)
    if ta is None or tb is None:
        return 0
    if ta < tb:
        return -1
    if ta > tb:
        return 1
    return 0


def select_variants(entries: Sequence[FileStat], base_filename: str) -> List[FileStat]:
    """Files whose name starts with base_filename, oldest first."""
    variants = [
        entry for entry in entries
        if entry.is_file and entry.basename.startswith(base_filename)
    ]
    return sorted(variants, key=cmp_to_key(_compare_lastmod))


def plan_prune(variants: Sequence[FileStat], max_versions: int) -> List[FileStat]:
    """Oldest variants beyond max_versions, in deletion order."""
    excess = len(variants) - max_versions
    if excess <= 0:
        return []
    return list(variants[:excess])
