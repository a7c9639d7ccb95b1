"""Shared fixtures for sweepy tests."""

import os
import time
from pathlib import Path

import pytest

from sweepy.cache import Index, reset_global_cache, set_cache


@pytest.fixture(autouse=True)
def isolated_cache(tmp_path, monkeypatch):
    """Give every test its own index file and process-wide Index."""
    cache_file = tmp_path / "sweepy.cache.json"
    monkeypatch.setenv("SWEEPY_CACHE_FILE", str(cache_file))
    index = Index(cache_file)
    set_cache(index)
    yield index
    reset_global_cache()


@pytest.fixture
def project_tree(tmp_path):
    """Three projects, each with a node_modules holding one small file."""
    root = tmp_path / "projects"
    candidates = [
        root / "project1" / "node_modules",
        root / "project2" / "node_modules",
        root / "project3" / "subfolder" / "node_modules",
    ]
    for nm in candidates:
        nm.mkdir(parents=True)
        (nm / "dummy.js").write_text("dummy content")
        (nm.parent / "package.json").write_text("{}")
    return root, candidates


@pytest.fixture
def backdate():
    """Return a helper that ages every file under a directory by N days."""

    def _backdate(project: Path, days: int) -> None:
        stamp = time.time() - days * 86400
        for dirpath, _, filenames in os.walk(project):
            for name in filenames:
                os.utime(os.path.join(dirpath, name), (stamp, stamp))

    return _backdate
