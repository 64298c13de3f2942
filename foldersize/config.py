"""Configuration for foldersize.

Values are resolved with the following precedence (highest to lowest):
1. CLI arguments
2. Config file (TOML, passed with --config)
3. Default values

Example config file::

    [scan]
    max_depth = 2
    root_summary = "files-only"
    sort_children = true
    workers = 4

    [report]
    output_dir = "~/reports"
    unit = "gb"
    formats = ["html", "csv"]

    [logging]
    level = "debug"
    file = "~/.foldersize/foldersize.log"
"""

from __future__ import annotations

import dataclasses
import logging
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from foldersize.errors import ConfigError
from foldersize.models import RootSummaryMode, SizeUnit

logger = logging.getLogger(__name__)


@dataclass
class ScanConfig:
    """Settings passed to scanner.scan()."""

    max_depth: int = 1
    root_summary: str = RootSummaryMode.OMIT.value
    follow_symlinks: bool = False
    sort_children: bool = False
    workers: int = 1
    # Time budget in seconds (None = no limit)
    timeout: float | None = None

    def __post_init__(self) -> None:
        """Validate configuration."""
        if isinstance(self.max_depth, bool) or not isinstance(self.max_depth, int):
            raise ConfigError(f"max_depth must be an integer, got {self.max_depth!r}")
        if self.max_depth < 1:
            raise ConfigError(f"max_depth must be >= 1, got {self.max_depth}")
        valid_modes = {m.value for m in RootSummaryMode}
        if self.root_summary not in valid_modes:
            raise ConfigError(
                f"root_summary must be one of {sorted(valid_modes)}, "
                f"got {self.root_summary!r}"
            )
        if isinstance(self.workers, bool) or not isinstance(self.workers, int):
            raise ConfigError(f"workers must be an integer, got {self.workers!r}")
        if self.workers < 1:
            raise ConfigError(f"workers must be >= 1, got {self.workers}")
        if self.timeout is not None and (
            isinstance(self.timeout, bool) or not isinstance(self.timeout, (int, float))
        ):
            raise ConfigError(f"timeout must be a number of seconds, got {self.timeout!r}")
        if self.timeout is not None and self.timeout <= 0:
            raise ConfigError(f"timeout must be positive, got {self.timeout}")

    @property
    def mode(self) -> RootSummaryMode:
        return RootSummaryMode(self.root_summary)


@dataclass
class ReportConfig:
    """Settings for report output."""

    output_dir: Path = Path("reports")
    unit: str = SizeUnit.MB.value
    formats: tuple[str, ...] = ("html", "csv")
    # Rows in the console summary (0 = none)
    top: int = 10

    def __post_init__(self) -> None:
        """Validate configuration."""
        self.output_dir = Path(self.output_dir).expanduser()
        self.unit = str(self.unit).casefold()
        valid_units = {u.value for u in SizeUnit}
        if self.unit not in valid_units:
            raise ConfigError(
                f"unit must be one of {sorted(valid_units)}, got {self.unit!r}"
            )
        self.formats = tuple(str(f).casefold() for f in self.formats)
        if not self.formats:
            raise ConfigError("formats must name at least one of html, csv")
        bad = [f for f in self.formats if f not in ("html", "csv")]
        if bad:
            raise ConfigError(f"unsupported report format(s): {', '.join(bad)}")
        if isinstance(self.top, bool) or not isinstance(self.top, int):
            raise ConfigError(f"top must be an integer, got {self.top!r}")
        if self.top < 0:
            raise ConfigError(f"top must be >= 0, got {self.top}")

    @property
    def size_unit(self) -> SizeUnit:
        return SizeUnit(self.unit)


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    # Log level: debug, info, warning, error
    level: str = "warning"

    # Log file path (None = stderr only)
    file: Path | None = None

    # Log format: text or json
    format: str = "text"

    # Also log to stderr when file is set
    include_stderr: bool = False

    # Rotation threshold in bytes (default 10MB)
    max_bytes: int = 10_485_760

    # Number of rotated files to keep
    backup_count: int = 5

    def __post_init__(self) -> None:
        """Validate configuration."""
        for name in ("level", "format"):
            if not isinstance(getattr(self, name), str):
                raise ConfigError(f"{name} must be a string, got {getattr(self, name)!r}")
        for name in ("max_bytes", "backup_count"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ConfigError(f"{name} must be an integer >= 0, got {value!r}")
        valid_levels = {"debug", "info", "warning", "error"}
        if self.level.lower() not in valid_levels:
            raise ConfigError(f"level must be one of {valid_levels}, got {self.level}")
        valid_formats = {"text", "json"}
        if self.format.lower() not in valid_formats:
            raise ConfigError(
                f"format must be one of {valid_formats}, got {self.format}"
            )
        if self.file is not None:
            self.file = Path(self.file).expanduser()


@dataclass
class AppConfig:
    """Top-level configuration."""

    scan: ScanConfig = field(default_factory=ScanConfig)
    report: ReportConfig = field(default_factory=ReportConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


_SECTIONS = {
    "scan": ScanConfig,
    "report": ReportConfig,
    "logging": LoggingConfig,
}


def _build_section(name: str, values: Any) -> Any:
    cls = _SECTIONS[name]
    if not isinstance(values, dict):
        raise ConfigError(f"[{name}] must be a table")
    known = {f.name for f in dataclasses.fields(cls)}
    unknown = sorted(set(values) - known)
    if unknown:
        raise ConfigError(f"Unknown key(s) in [{name}]: {', '.join(unknown)}")
    if "formats" in values:
        values = {**values, "formats": tuple(values["formats"])}
    try:
        return cls(**values)
    except TypeError as e:
        raise ConfigError(f"Invalid [{name}] section: {e}") from e


def load_config(path: Path | None = None) -> AppConfig:
    """Load configuration from a TOML file.

    Args:
        path: Config file path. None returns the defaults.

    Returns:
        Parsed and validated AppConfig.

    Raises:
        ConfigError: If the file cannot be read, is not valid TOML, or
            contains invalid values.
    """
    if path is None:
        return AppConfig()

    path = Path(path).expanduser()
    try:
        with path.open("rb") as f:
            data = tomllib.load(f)
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e

    unknown = sorted(set(data) - set(_SECTIONS))
    if unknown:
        raise ConfigError(f"Unknown section(s) in {path}: {', '.join(unknown)}")

    sections = {name: _build_section(name, data.get(name, {})) for name in _SECTIONS}
    logger.debug("Loaded config from %s", path)
    return AppConfig(**sections)


def merge_overrides(base: Any, **overrides: Any) -> Any:
    """Return a copy of a config section with non-None overrides applied.

    Validation runs again via __post_init__, so invalid overrides raise
    ConfigError.

    Example:
        scan_config = merge_overrides(config.scan, max_depth=depth, workers=None)
    """
    changes = {key: value for key, value in overrides.items() if value is not None}
    return dataclasses.replace(base, **changes)
