"""Data models for sweepy."""

import os
import re
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Index files written by older builds carry nanosecond precision timestamps
_FRACTION_RE = re.compile(r"(\.\d{6})\d+")


def format_size(size_bytes: int) -> str:
    """Format bytes to a human-readable string (binary units)."""
    if size_bytes > 1024**3:
        return f"{size_bytes / 1024**3:.2f} GB"
    elif size_bytes > 1024**2:
        return f"{size_bytes / 1024**2:.2f} MB"
    elif size_bytes > 1024:
        return f"{size_bytes / 1024:.2f} KB"
    else:
        return f"{size_bytes} bytes"


class ScanResult(BaseModel):
    """A single discovered node_modules directory."""

    model_config = ConfigDict(populate_by_name=True)

    path: str = Field(..., alias="Path", description="Absolute path of the node_modules directory")
    size_bytes: int = Field(..., alias="Size", ge=0, description="Total size of regular files in bytes")
    staleness_days: int = Field(
        ..., alias="Staleness", ge=0, description="Whole days since the project was last modified"
    )
    last_modified: datetime = Field(
        ...,
        alias="LastModified",
        description="Newest file modification time under the parent project directory",
    )

    @field_validator("last_modified", mode="before")
    @classmethod
    def _normalize_timestamp(cls, value):
        if isinstance(value, str):
            value = _FRACTION_RE.sub(r"\1", value)
        return value

    @field_validator("last_modified")
    @classmethod
    def _ensure_aware(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @property
    def project_name(self) -> str:
        """Name of the project directory that owns this node_modules."""
        return os.path.basename(os.path.dirname(self.path))

    @property
    def size_human(self) -> str:
        """Human-readable size string."""
        return format_size(self.size_bytes)


class ScanConfig(BaseModel):
    """Options for a single scan invocation."""

    model_config = ConfigDict(frozen=True)

    path: str = Field(..., description="Root directory to scan")
    staleness: int = Field(0, ge=0, description="Minimum staleness in days (0 = no filter)")
    no_cache: bool = Field(False, description="Neither read nor persist the index")
    reset_cache: bool = Field(False, description="Ignore the existing index and overwrite it")
    verbose: bool = Field(False, description="Push progress lines onto the progress channel")
    full_walk: bool = Field(
        False, description="Walk the filesystem even when the index already produced results"
    )
    max_workers: Optional[int] = Field(
        None, gt=0, description="Size of the measurement pool (None = executor default)"
    )

    @field_validator("path")
    @classmethod
    def _absolute(cls, value: str) -> str:
        return os.path.abspath(os.path.expanduser(value))


class ScanStats(BaseModel):
    """Aggregate statistics for a finished scan."""

    count: int = Field(0, description="Number of returned results")
    total_size: int = Field(0, description="Sum of size_bytes over all results")
    avg_staleness: float = Field(0.0, description="Mean staleness_days, 0 when empty")
    scan_duration: float = Field(0.0, description="Wall-clock duration in seconds")

    @classmethod
    def from_results(cls, results: list[ScanResult], duration: float) -> "ScanStats":
        """Build statistics from a result list."""
        count = len(results)
        total_size = sum(r.size_bytes for r in results)
        avg = sum(r.staleness_days for r in results) / count if count > 0 else 0.0
        return cls(count=count, total_size=total_size, avg_staleness=avg, scan_duration=duration)


class CleanupResult(BaseModel):
    """Outcome of deleting one node_modules directory."""

    path: str = Field(..., description="Path that was cleaned")
    success: bool = Field(True, description="Whether the directory is gone")
    index_stale: bool = Field(False, description="Deleted, but the index could not be updated")
    error: Optional[str] = Field(None, description="Error message if something failed")
