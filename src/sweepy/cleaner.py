"""Deletion of node_modules directories.

The filesystem is always changed first and the index second. A failure to
update the index after a successful delete is reported as CacheReconcileError
and never rolls the deletion back.
"""

import logging
import os
import shutil
import threading
from pathlib import Path
from typing import Callable, Optional

from sweepy.cache import Index, get_cache
from sweepy.exceptions import (
    CacheError,
    CacheReconcileError,
    CandidateNotFoundError,
    CleanupError,
    DeletionError,
)
from sweepy.models import CleanupResult

logger = logging.getLogger(__name__)

# Held across load, delete and save so concurrent deletes cannot resurrect entries
_reconcile_lock = threading.Lock()


def delete_node_module(path: str, cache: Optional[Index] = None) -> None:
    """
    Delete a node_modules directory and drop it from the index.

    Args:
        path: Directory to delete
        cache: Index to update (defaults to the process-wide one)

    Raises:
        CandidateNotFoundError: Path is missing or not a directory (nothing changed)
        DeletionError: Removing the tree failed (index untouched)
        CacheReconcileError: Deleted, but the index could not be updated
    """
    target = Path(path)
    if not target.is_dir():
        raise CandidateNotFoundError(path, f"{path} does not exist or has been deleted")

    try:
        shutil.rmtree(target)
    except OSError as e:
        logger.error("Error deleting %s: %s", path, e)
        raise DeletionError(path, f"Could not delete {path}: {e}") from e

    logger.info("Deleted %s", path)

    index = cache if cache is not None else get_cache()
    try:
        with _reconcile_lock:
            if not index.load():
                return
            # Results are keyed by the path the scanner reported
            index.delete(path)
            index.delete(os.path.abspath(path))
            index.save()
    except CacheError as e:
        logger.error("Deleted %s but could not update the index: %s", path, e)
        raise CacheReconcileError(path, f"{path} was deleted but the index may be stale: {e}") from e


def delete_many(
    paths: list[str],
    cache: Optional[Index] = None,
    progress_callback: Callable[[str, int, int], None] | None = None,
) -> list[CleanupResult]:
    """
    Delete several node_modules directories one at a time.

    There is no batch atomicity: each path succeeds or fails on its own.

    Args:
        paths: Directories to delete
        cache: Index to update (defaults to the process-wide one)
        progress_callback: Optional callback(path, current, total)

    Returns:
        One CleanupResult per path, in order
    """
    results = []
    total = len(paths)

    for i, path in enumerate(paths):
        if progress_callback:
            progress_callback(path, i + 1, total)

        try:
            delete_node_module(path, cache=cache)
            results.append(CleanupResult(path=path))
        except CacheReconcileError as e:
            results.append(CleanupResult(path=path, success=True, index_stale=True, error=str(e)))
        except CleanupError as e:
            results.append(CleanupResult(path=path, success=False, error=str(e)))

    return results
