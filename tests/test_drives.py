"""Unit tests for volume usage lookup."""

from pathlib import Path

import psutil

from foldersize import drives


def test_volume_usage_for_existing_dir(tmp_path: Path):
    usage = drives.volume_usage(str(tmp_path))

    assert usage is not None
    assert set(usage) == {"mountpoint", "total", "used", "free", "percent"}
    assert usage["total"] > 0
    assert str(tmp_path).startswith(usage["mountpoint"].rstrip("/\\") or "/")


def test_volume_usage_when_psutil_fails(tmp_path: Path, monkeypatch):
    def boom(path):
        raise OSError("unsupported")

    monkeypatch.setattr(psutil, "disk_usage", boom)
    assert drives.volume_usage(str(tmp_path)) is None
