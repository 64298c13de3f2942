"""Report rendering for scan results.

Turns a ScanResult into a self-contained HTML page with a sortable table
and a ``;``-delimited CSV file, both named ``FolderSizeReport_<stamp>``.
"""

from __future__ import annotations

import csv
import io
import logging
import shutil
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

import jinja2

from .errors import RenderError
from .models import ScanResult, SizeUnit
from .utils import format_bytes, format_size, report_basename

logger = logging.getLogger(__name__)

PACKAGE_DIR = Path(__file__).parent
TEMPLATES_DIR = PACKAGE_DIR / "templates"
LOGO_SOURCE = PACKAGE_DIR / "assets" / "logo.svg"
LOGO_NAME = LOGO_SOURCE.name

CSV_DELIMITER = ";"
SUPPORTED_FORMATS = ("html", "csv")


@dataclass
class ReportPaths:
    """Files written by write_report()."""

    html: Optional[Path] = None
    csv: Optional[Path] = None
    logo: Optional[Path] = None

    def written(self) -> list[Path]:
        return [p for p in (self.html, self.csv) if p is not None]


def _environment() -> jinja2.Environment:
    env = jinja2.Environment(
        loader=jinja2.FileSystemLoader(str(TEMPLATES_DIR)),
        autoescape=jinja2.select_autoescape(["html", "j2"]),
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["human"] = format_bytes
    return env


def render_csv(result: ScanResult, unit: SizeUnit = SizeUnit.MB) -> str:
    """Render records as CSV text.

    Args:
        result: Scan result to render.
        unit: Unit for the converted size column.

    Returns:
        CSV text with a header row, one row per record in scan order.
    """
    buf = io.StringIO()
    writer = csv.writer(buf, delimiter=CSV_DELIMITER, lineterminator="\n")
    writer.writerow(["Name", "Path", "Depth", f"Size ({unit.label})", "Size (bytes)"])
    for record in result.records:
        writer.writerow(
            [
                record.name,
                record.path,
                record.depth,
                format_size(record.size_bytes, unit),
                record.size_bytes,
            ]
        )
    return buf.getvalue()


def render_html(
    result: ScanResult,
    unit: SizeUnit = SizeUnit.MB,
    generated_at: Optional[datetime] = None,
    volume: Optional[Dict[str, Any]] = None,
) -> str:
    """Render records as a standalone HTML page.

    Args:
        result: Scan result to render.
        unit: Unit for the size column.
        generated_at: Timestamp shown in the header (defaults to now).
        volume: Optional filesystem usage from drives.volume_usage().

    Returns:
        HTML document text.
    """
    generated_at = generated_at or datetime.now()
    rows = [
        {
            "name": r.name,
            "path": r.path,
            "depth": r.depth,
            "size": format_size(r.size_bytes, unit),
            "size_bytes": r.size_bytes,
        }
        for r in result.records
    ]
    template = _environment().get_template("report.html.j2")
    return template.render(
        result=result,
        rows=rows,
        unit=unit.label,
        total=format_size(result.total_bytes, unit),
        generated_at=generated_at.strftime("%Y-%m-%d %H:%M:%S"),
        volume=volume,
        logo=LOGO_NAME,
    )


def ensure_logo(output_dir: Path) -> Path:
    """Copy the packaged logo next to the HTML report unless it is already there."""
    target = Path(output_dir) / LOGO_NAME
    if target.exists():
        return target
    try:
        shutil.copyfile(LOGO_SOURCE, target)
    except OSError as e:
        raise RenderError(f"Cannot copy logo to {target}: {e}") from e
    logger.debug("Copied logo to %s", target)
    return target


def _write_text(path: Path, content: str) -> None:
    try:
        path.write_text(content, encoding="utf-8")
    except OSError as e:
        raise RenderError(f"Cannot write {path}: {e}") from e
    logger.info("Wrote %s", path)


def write_report(
    result: ScanResult,
    output_dir: Path,
    unit: SizeUnit = SizeUnit.MB,
    formats: Iterable[str] = SUPPORTED_FORMATS,
    now: Optional[datetime] = None,
    volume: Optional[Dict[str, Any]] = None,
) -> ReportPaths:
    """Write the requested report files into output_dir.

    Args:
        result: Scan result to render. It is not modified.
        output_dir: Directory for the reports, created when missing.
        unit: Unit for size columns.
        formats: Any of "html" and "csv".
        now: Timestamp used in the file names and HTML header.
        volume: Optional filesystem usage for the HTML header.

    Returns:
        Paths of the written files.

    Raises:
        RenderError: If the directory or a file cannot be written, or a
            format is unknown.
    """
    formats = [f.casefold() for f in formats]
    unknown = sorted(set(formats) - set(SUPPORTED_FORMATS))
    if unknown:
        raise RenderError(f"Unsupported report format(s): {', '.join(unknown)}")

    now = now or datetime.now()
    output_dir = Path(output_dir)
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise RenderError(f"Cannot create output directory {output_dir}: {e}") from e

    base = report_basename(now)
    paths = ReportPaths()
    if "html" in formats:
        paths.html = output_dir / f"{base}.html"
        _write_text(paths.html, render_html(result, unit, now, volume))
        paths.logo = ensure_logo(output_dir)
    if "csv" in formats:
        paths.csv = output_dir / f"{base}.csv"
        _write_text(paths.csv, render_csv(result, unit))
    return paths
