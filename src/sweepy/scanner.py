"""node_modules discovery and measurement.

A scan walks the root directory once on the calling thread. Each node_modules
directory it finds is handed to a thread pool that measures the owning
project's staleness and the directory's size, so slow measurements never hold
up the walk. Results are reconciled into the persisted index afterwards.
"""

import logging
import os
import stat
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Callable, Optional

from sweepy.cache import CACHE_TTL, Index, get_cache
from sweepy.exceptions import CacheError, ScanError
from sweepy.metrics import directory_size, last_modified, staleness_days
from sweepy.models import ScanConfig, ScanResult, ScanStats
from sweepy.progress import ProgressChannel

logger = logging.getLogger(__name__)

CANDIDATE_NAME = "node_modules"


def is_under(path: str, root: str) -> bool:
    """True if path is root itself or lies below it."""
    path = os.path.normpath(path)
    root = os.path.normpath(root)
    if path == root:
        return True
    prefix = root if root.endswith(os.sep) else root + os.sep
    return path.startswith(prefix)


def passes_threshold(days: int, threshold: int) -> bool:
    """A threshold of 0 disables filtering."""
    return threshold == 0 or days >= threshold


def sort_results(results: list[ScanResult]) -> None:
    """Sort in place, stalest first."""
    results.sort(key=lambda r: r.staleness_days, reverse=True)


def _reage(result: ScanResult, now: datetime) -> ScanResult:
    """Recompute staleness of a cached result against the current scan clock."""
    return result.model_copy(
        update={"staleness_days": staleness_days(result.last_modified, now)}
    )


def walk_candidates(
    root: str,
    on_candidate: Callable[[str], None],
    on_denied: Optional[Callable[[str, OSError], None]] = None,
) -> None:
    """
    Depth-first walk of root, calling on_candidate for each node_modules.

    Candidates are never descended into and symbolic links are not followed.
    Permission errors skip the affected subtree.

    Raises:
        ScanError: If root is missing or any other traversal error occurs
    """
    try:
        st = os.stat(root)
    except OSError as e:
        raise ScanError(f"Cannot scan {root}: {e}") from e
    if not stat.S_ISDIR(st.st_mode):
        raise ScanError(f"Cannot scan {root}: not a directory")

    if os.path.basename(os.path.normpath(root)) == CANDIDATE_NAME:
        on_candidate(root)
        return

    def _walk(path: str) -> None:
        try:
            with os.scandir(path) as entries:
                for entry in entries:
                    try:
                        if not entry.is_dir(follow_symlinks=False):
                            continue
                    except PermissionError:
                        continue

                    if entry.name == CANDIDATE_NAME:
                        on_candidate(entry.path)
                        continue

                    _walk(entry.path)
        except PermissionError as e:
            if on_denied:
                on_denied(path, e)
        except OSError as e:
            raise ScanError(f"Error walking {path}: {e}") from e

    _walk(root)


class _Scan:
    """State for one scan invocation."""

    def __init__(self, config: ScanConfig, progress: Optional[ProgressChannel], index: Index):
        self.config = config
        self.progress = progress
        self.index = index
        self.now = datetime.now(timezone.utc)
        self.results: list[ScanResult] = []
        self.seen: set[str] = set()
        self.lock = threading.Lock()
        self.index_valid = False

        self.use_cache = not config.no_cache and not config.reset_cache
        self.persist = not config.no_cache or config.reset_cache

    def report(self, line: str, verbose_only: bool = True) -> None:
        if self.progress is None:
            return
        if verbose_only and not self.config.verbose:
            return
        self.progress.put(line)

    def add(self, result: ScanResult, remember: bool = False) -> None:
        with self.lock:
            self.results.append(result)
            self.seen.add(result.path)
            if remember and self.persist:
                self.index.set(result.path, result)

    # -- index -------------------------------------------------------------

    def prepare_index(self) -> None:
        """Load the index when allowed, otherwise start a fresh validity window."""
        if self.use_cache:
            try:
                loaded = self.index.load()
            except CacheError as e:
                logger.error("%s", e)
                self.report(f"Error loading cache: {e}", verbose_only=False)
                loaded = False
            self.index_valid = loaded and not self.index.is_expired()
            if loaded and not self.index_valid:
                logger.info("Index %s expired, starting over", self.index.path)

        if self.persist and not self.index_valid:
            self.index.clear()
            self.index.set_validity(time.time() + CACHE_TTL)

    def from_index(self) -> None:
        """Emit every valid cached entry under the root."""
        for key, cached in self.index.items():
            if not is_under(key, self.config.path):
                continue
            result = _reage(cached, self.now)
            if not passes_threshold(result.staleness_days, self.config.staleness):
                continue
            self.add(result)
            self.report(f"Found {result.path} in cache", verbose_only=False)

    def save_index(self) -> None:
        if not self.persist:
            return
        try:
            self.index.save()
        except CacheError as e:
            logger.error("%s", e)
            self.report(f"Error saving cache: {e}", verbose_only=False)

    # -- walk --------------------------------------------------------------

    def on_denied(self, path: str, error: OSError) -> None:
        logger.info("Permission denied: %s", path)
        self.report(f"Permission denied: {error}")

    def on_candidate(self, executor: ThreadPoolExecutor, path: str) -> None:
        if path in self.seen:
            return

        if self.index_valid:
            cached = self.index.get(path)
            if cached is not None:
                result = _reage(cached, self.now)
                self.report(f"Found {path} in cache")
                if passes_threshold(result.staleness_days, self.config.staleness):
                    self.add(result)
                return

        logger.debug("Scanning %s", path)
        self.report(f"Scanning {path}")
        executor.submit(self.measure, path)

    def measure(self, path: str) -> None:
        """Measure one candidate; any failure drops it from the results."""
        try:
            modified = last_modified(os.path.dirname(path))
            days = staleness_days(modified, self.now)
            if not passes_threshold(days, self.config.staleness):
                self.report(f"Skipping {path} ({days} days stale)")
                return
            size = directory_size(path)
            result = ScanResult(
                path=path, size_bytes=size, staleness_days=days, last_modified=modified
            )
        except Exception as e:
            logger.warning("Error when scanning %s: %s", path, e)
            self.report(f"Error when scanning {path}: {e}")
            return

        self.add(result, remember=True)
        self.report(f"Measured {path}")

    def walk(self) -> None:
        # Leaving the executor block joins every submitted measurement
        with ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
            walk_candidates(
                self.config.path,
                lambda p: self.on_candidate(executor, p),
                self.on_denied,
            )


def scan(
    config: ScanConfig,
    progress: Optional[ProgressChannel] = None,
    cache: Optional[Index] = None,
) -> tuple[list[ScanResult], ScanStats]:
    """
    Find node_modules directories under config.path.

    A valid, non-empty index short-circuits the walk entirely: candidates
    created since the last scan are only picked up once the index is expired,
    disabled or reset, or when config.full_walk is set.

    Args:
        config: Scan options
        progress: Optional channel for progress lines; closed before returning
        cache: Index to use (defaults to the process-wide one)

    Returns:
        Tuple of (results sorted stalest first, statistics)

    Raises:
        ScanError: If the walk fails for a reason other than permissions
    """
    started = time.monotonic()
    state = _Scan(config, progress, cache if cache is not None else get_cache())

    try:
        state.prepare_index()

        walked = True
        if state.index_valid:
            state.from_index()
            walked = not state.results or config.full_walk

        if walked:
            state.walk()

        results = state.results
        sort_results(results)
        stats = ScanStats.from_results(results, time.monotonic() - started)

        if walked:
            state.save_index()
    finally:
        if progress is not None:
            progress.close()

    logger.info(
        "Scanned %s: %d results, %d bytes in %.2fs",
        config.path,
        stats.count,
        stats.total_size,
        stats.scan_duration,
    )
    return results, stats
