"""Shared test fixtures for foldersize."""

import logging
import os
from pathlib import Path

import pytest

MiB = 1024 * 1024


def write_file(path: Path, size: int) -> Path:
    """Create a file of exactly ``size`` bytes (sparse where supported)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "wb") as f:
        f.truncate(size)
    return path


@pytest.fixture
def make_file():
    """Return a helper that creates a file with a given size."""
    return write_file


@pytest.fixture
def sample_tree(tmp_path: Path) -> Path:
    """Create a small tree.

    root/
      top.bin            100 bytes
      A/                 a1 1 MiB, a2 2 MiB
        B/               b1 3 MiB
          C/             c1 10 bytes
      D/                 d1 5 bytes
      E/                 (empty)
    """
    root = tmp_path / "root"
    root.mkdir()
    write_file(root / "top.bin", 100)
    write_file(root / "A" / "a1.bin", MiB)
    write_file(root / "A" / "a2.bin", 2 * MiB)
    write_file(root / "A" / "B" / "b1.bin", 3 * MiB)
    write_file(root / "A" / "B" / "C" / "c1.bin", 10)
    write_file(root / "D" / "d1.bin", 5)
    (root / "E").mkdir()
    return root


@pytest.fixture
def deny_listing(monkeypatch):
    """Make os.scandir fail with PermissionError for the given paths.

    Usage: ``deny_listing(path_a, path_b)``. Works regardless of the
    privileges the tests run with.
    """
    real_scandir = os.scandir
    denied: set[str] = set()

    def fake_scandir(path="."):
        if os.path.abspath(os.fspath(path)) in denied:
            raise PermissionError(13, "Permission denied", os.fspath(path))
        return real_scandir(path)

    monkeypatch.setattr(os, "scandir", fake_scandir)

    def deny(*paths):
        denied.update(os.path.abspath(os.fspath(p)) for p in paths)

    return deny


@pytest.fixture
def isolated_logging():
    """Undo configure_logging() changes made by CLI tests."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
