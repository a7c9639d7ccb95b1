"""Persisted scan index.

The index maps an absolute node_modules path to its last ScanResult. A single
validity timestamp covers the whole index. It is stored as JSON in a fixed
location so that later runs can skip re-measuring.
"""

import json
import logging
import os
import threading
import time
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from sweepy.exceptions import CacheError
from sweepy.models import ScanResult

logger = logging.getLogger(__name__)

CACHE_FILENAME = ".sweepy.cache.json"
CACHE_TTL = 24 * 60 * 60  # 24 hours


def default_cache_path() -> Path:
    """Location of the index file (``SWEEPY_CACHE_FILE`` overrides it)."""
    override = os.environ.get("SWEEPY_CACHE_FILE")
    if override:
        return Path(os.path.expanduser(override))
    return Path.home() / CACHE_FILENAME


class Index:
    """Thread-safe, TTL-bounded map of path -> ScanResult."""

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path is not None else default_cache_path()
        self.validity = int(time.time()) + CACHE_TTL
        self._data: dict[str, ScanResult] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    def __contains__(self, path: str) -> bool:
        with self._lock:
            return path in self._data

    def get(self, path: str) -> Optional[ScanResult]:
        with self._lock:
            return self._data.get(path)

    def set(self, path: str, result: ScanResult) -> None:
        with self._lock:
            self._data[path] = result

    def delete(self, path: str) -> None:
        with self._lock:
            self._data.pop(path, None)

    def clear(self) -> None:
        with self._lock:
            self._data.clear()

    def items(self) -> list[tuple[str, ScanResult]]:
        """Snapshot of all entries."""
        with self._lock:
            return list(self._data.items())

    def is_expired(self) -> bool:
        with self._lock:
            return time.time() > self.validity

    def set_validity(self, timestamp: float) -> None:
        """Start a new validity window ending at timestamp (Unix seconds)."""
        with self._lock:
            self.validity = int(timestamp)

    def load(self) -> bool:
        """
        Replace the in-memory index with the persisted one.

        Returns:
            False if no index file exists (nothing is changed), True otherwise

        Raises:
            CacheError: If the file cannot be read or is malformed
        """
        with self._lock:
            if not self.path.exists():
                return False

            try:
                raw = json.loads(self.path.read_text(encoding="utf-8"))
                validity = int(raw["validity"])
                entries = raw.get("data") or {}
                data = {key: ScanResult.model_validate(value) for key, value in entries.items()}
            except OSError as e:
                raise CacheError(f"Could not read index {self.path}: {e}") from e
            except (ValueError, KeyError, TypeError, AttributeError, ValidationError) as e:
                raise CacheError(f"Malformed index {self.path}: {e}") from e

            self.validity = validity
            self._data = data
            logger.debug("Loaded %d index entries from %s", len(data), self.path)
            return True

    def save(self) -> None:
        """
        Write the complete index, replacing any previous file.

        Raises:
            CacheError: If the file cannot be written
        """
        with self._lock:
            payload = {
                "validity": self.validity,
                "data": {
                    key: result.model_dump(mode="json", by_alias=True)
                    for key, result in self._data.items()
                },
            }
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                self.path.write_text(json.dumps(payload), encoding="utf-8")
            except OSError as e:
                raise CacheError(f"Could not write index {self.path}: {e}") from e
            logger.debug("Saved %d index entries to %s", len(self._data), self.path)


# =============================================================================
# Process-wide accessor
# =============================================================================

_cache: Optional[Index] = None
_cache_lock = threading.Lock()


def get_cache() -> Index:
    """Return the process-wide index, creating it on first use."""
    global _cache
    with _cache_lock:
        if _cache is None:
            _cache = Index()
        return _cache


def set_cache(index: Index) -> None:
    """Install index as the process-wide instance."""
    global _cache
    with _cache_lock:
        _cache = index


def reset_global_cache() -> None:
    """Drop the process-wide instance so the next get_cache() builds a new one."""
    global _cache
    with _cache_lock:
        _cache = None
