"""Exception hierarchy for sweepy."""


class SweepyError(Exception):
    """Base class for all sweepy errors."""


class MetricsError(SweepyError):
    """A subtree could not be measured at all."""


class CacheError(SweepyError):
    """The persisted index could not be read or written."""


class ScanError(SweepyError):
    """Fatal traversal failure (e.g. the root path is missing)."""


class CleanupError(SweepyError):
    """Base class for failures while removing a candidate."""

    def __init__(self, path: str, message: str):
        super().__init__(message)
        self.path = path


class CandidateNotFoundError(CleanupError):
    """Path does not exist or is not a directory. Nothing was touched."""


class DeletionError(CleanupError):
    """Removing the directory tree failed. The index was not touched."""


class CacheReconcileError(CleanupError):
    """The directory was deleted but the index could not be updated."""


class StalenessParseError(ValueError):
    """A staleness flag value could not be understood."""
