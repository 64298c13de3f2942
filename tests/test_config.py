"""Unit tests for configuration loading."""

from pathlib import Path

import pytest

from foldersize.config import (
    AppConfig,
    LoggingConfig,
    ReportConfig,
    ScanConfig,
    load_config,
    merge_overrides,
)
from foldersize.errors import ConfigError
from foldersize.models import RootSummaryMode, SizeUnit


class TestDefaults:
    def test_load_without_path(self):
        config = load_config(None)
        assert config == AppConfig()
        assert config.scan.max_depth == 1
        assert config.scan.mode is RootSummaryMode.OMIT
        assert config.report.size_unit is SizeUnit.MB
        assert config.report.formats == ("html", "csv")
        assert config.logging.level == "warning"


class TestLoadConfig:
    def test_full_file(self, tmp_path: Path):
        path = tmp_path / "foldersize.toml"
        path.write_text(
            """
[scan]
max_depth = 3
root_summary = "files-only"
sort_children = true
workers = 2
timeout = 30

[report]
output_dir = "out"
unit = "GB"
formats = ["csv"]
top = 0

[logging]
level = "debug"
format = "json"
""",
            encoding="utf-8",
        )

        config = load_config(path)

        assert config.scan.max_depth == 3
        assert config.scan.mode is RootSummaryMode.FILES_ONLY
        assert config.scan.sort_children is True
        assert config.scan.workers == 2
        assert config.scan.timeout == 30
        assert config.report.output_dir == Path("out")
        assert config.report.size_unit is SizeUnit.GB
        assert config.report.formats == ("csv",)
        assert config.report.top == 0
        assert config.logging.level == "debug"
        assert config.logging.format == "json"

    def test_partial_file_keeps_defaults(self, tmp_path: Path):
        path = tmp_path / "c.toml"
        path.write_text("[scan]\nmax_depth = 2\n", encoding="utf-8")

        config = load_config(path)

        assert config.scan.max_depth == 2
        assert config.report == ReportConfig()

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="Cannot read"):
            load_config(tmp_path / "nope.toml")

    def test_invalid_toml(self, tmp_path: Path):
        path = tmp_path / "bad.toml"
        path.write_text("[scan\nmax_depth = ", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid TOML"):
            load_config(path)

    def test_unknown_section(self, tmp_path: Path):
        path = tmp_path / "c.toml"
        path.write_text("[server]\nport = 1\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="server"):
            load_config(path)

    def test_unknown_key(self, tmp_path: Path):
        path = tmp_path / "c.toml"
        path.write_text("[scan]\ndepth = 1\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="depth"):
            load_config(path)

    def test_invalid_value(self, tmp_path: Path):
        path = tmp_path / "c.toml"
        path.write_text("[scan]\nmax_depth = 0\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="max_depth"):
            load_config(path)

    @pytest.mark.parametrize(
        "body,key",
        [
            ("[logging]\nlevel = 5\n", "level"),
            ('[logging]\nfile = "x.log"\nmax_bytes = "big"\n', "max_bytes"),
            ("[scan]\ntimeout = true\n", "timeout"),
        ],
    )
    def test_wrongly_typed_values(self, tmp_path: Path, body, key):
        path = tmp_path / "c.toml"
        path.write_text(body, encoding="utf-8")
        with pytest.raises(ConfigError, match=key):
            load_config(path)


class TestValidation:
    @pytest.mark.parametrize(
        "kwargs",
        [
            {"max_depth": 0},
            {"max_depth": True},
            {"root_summary": "all"},
            {"workers": 0},
            {"timeout": -1},
            {"timeout": True},
            {"timeout": "30"},
        ],
    )
    def test_scan_config(self, kwargs):
        with pytest.raises(ConfigError):
            ScanConfig(**kwargs)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"unit": "tb"},
            {"formats": ()},
            {"formats": ("pdf",)},
            {"top": -1},
            {"top": "10"},
        ],
    )
    def test_report_config(self, kwargs):
        with pytest.raises(ConfigError):
            ReportConfig(**kwargs)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"level": "trace"},
            {"format": "xml"},
            {"level": 5},
            {"format": None},
            {"max_bytes": "big"},
            {"max_bytes": -1},
            {"backup_count": True},
        ],
    )
    def test_logging_config(self, kwargs):
        with pytest.raises(ConfigError):
            LoggingConfig(**kwargs)


class TestMergeOverrides:
    def test_none_values_are_ignored(self):
        base = ScanConfig(max_depth=4, workers=2)
        merged = merge_overrides(base, max_depth=None, workers=3)
        assert merged.max_depth == 4
        assert merged.workers == 3
        assert base.workers == 2

    def test_overrides_are_validated(self):
        with pytest.raises(ConfigError):
            merge_overrides(ReportConfig(), unit="kb")
