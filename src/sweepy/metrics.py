"""Directory size and last-modified helpers.

Both walks use os.scandir and never follow symbolic links, so a link is
counted once (by its own lstat) and link cycles cannot occur.
"""

import os
from datetime import datetime, timezone
from pathlib import Path

from sweepy.exceptions import MetricsError

# Returned by last_modified() for an empty subtree
ZERO_TIME = datetime.min.replace(tzinfo=timezone.utc)


def _walk_files(path: Path):
    """Yield lstat results for every non-directory entry under path.

    Raises MetricsError if the top-level directory cannot be listed.
    Unreadable entries and subdirectories below it are skipped.
    """
    try:
        with os.scandir(path) as it:
            root_entries = list(it)
    except OSError as e:
        raise MetricsError(f"cannot read {path}: {e}") from e

    def _scan(entries):
        for entry in entries:
            try:
                if entry.is_dir(follow_symlinks=False):
                    with os.scandir(entry.path) as children:
                        yield from _scan(children)
                else:
                    yield entry.stat(follow_symlinks=False)
            except OSError:
                continue

    yield from _scan(root_entries)


def directory_size(path: Path) -> int:
    """
    Sum the sizes of all non-directory entries under a directory.

    Best effort: entries that cannot be stat'ed contribute zero.

    Args:
        path: Directory to measure

    Returns:
        Total size in bytes
    """
    return sum(st.st_size for st in _walk_files(Path(path)))


def last_modified(path: Path) -> datetime:
    """
    Find the newest modification time of any file under a directory.

    Args:
        path: Directory to inspect (normally a project root)

    Returns:
        Aware UTC datetime, or ZERO_TIME when the subtree holds no files
    """
    newest = max((st.st_mtime for st in _walk_files(Path(path))), default=None)
    if newest is None:
        return ZERO_TIME
    return datetime.fromtimestamp(newest, tz=timezone.utc)


def staleness_days(last: datetime, now: datetime) -> int:
    """Whole days between last and now, truncated and never negative."""
    hours = (now - last).total_seconds() / 3600
    return max(0, int(hours / 24))
