"""Command-line entry point for foldersize."""

from __future__ import annotations

import logging
from pathlib import Path

import click

from foldersize import __version__
from foldersize.config import load_config, merge_overrides
from foldersize.drives import volume_usage
from foldersize.errors import ConfigError, RenderError, ValidationError
from foldersize.logconfig import configure_logging
from foldersize.models import RootSummaryMode, ScanResult, SizeUnit
from foldersize.report import write_report
from foldersize.scanner import scan
from foldersize.utils import format_bytes, format_size

logger = logging.getLogger(__name__)


def _render_text_table(result: ScanResult, unit: SizeUnit, limit: int) -> str:
    """Render the largest folders as an aligned text table."""
    rows = result.largest(limit)
    if not rows:
        return ""
    size_header = f"Size ({unit.label})"
    width = max(len(size_header), *(len(format_size(r.size_bytes, unit)) for r in rows))
    lines = [f"{size_header:>{width}}  Depth  Path", "-" * (width + 2 + 5 + 2 + 4)]
    for r in rows:
        lines.append(f"{format_size(r.size_bytes, unit):>{width}}  {r.depth:>5}  {r.path}")
    return "\n".join(lines)


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.argument("root", type=click.Path(path_type=Path))
@click.option(
    "--depth",
    "-d",
    type=click.IntRange(min=1),
    default=None,
    help="Deepest folder level to report (root children are level 1, default: 1).",
)
@click.option(
    "--output",
    "-o",
    "output_dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory for the report files (default: ./reports).",
)
@click.option(
    "--unit",
    "-u",
    type=click.Choice([u.value for u in SizeUnit], case_sensitive=False),
    default=None,
    help="Size unit in reports (default: mb).",
)
@click.option(
    "--root-summary",
    type=click.Choice([m.value for m in RootSummaryMode]),
    default=None,
    help="Row for the root itself: omit, its direct files, or its full size.",
)
@click.option(
    "--sort/--no-sort",
    "sort_children",
    default=None,
    help="Sort sibling folders by name instead of filesystem order.",
)
@click.option(
    "--workers",
    "-j",
    type=click.IntRange(min=1),
    default=None,
    help="Measure top-level folders in parallel with N threads.",
)
@click.option(
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Stop after SECONDS and report what was measured so far.",
)
@click.option(
    "--follow-symlinks/--no-follow-symlinks",
    default=None,
    help="Follow symbolic links (each folder is still visited once).",
)
@click.option(
    "--format",
    "-f",
    "formats",
    type=click.Choice(["html", "csv"], case_sensitive=False),
    multiple=True,
    help="Report format, repeatable (default: html and csv).",
)
@click.option(
    "--top",
    "-n",
    type=click.IntRange(min=0),
    default=None,
    help="Largest folders to print (default: 10, 0 to disable).",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="TOML config file.",
)
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default=None,
    help="Log level (default: warning).",
)
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write logs to this file (rotated).",
)
@click.option(
    "--log-format",
    type=click.Choice(["text", "json"], case_sensitive=False),
    default=None,
    help="Log format (default: text).",
)
@click.version_option(__version__, prog_name="foldersize")
def main(
    root: Path,
    depth: int | None,
    output_dir: Path | None,
    unit: str | None,
    root_summary: str | None,
    sort_children: bool | None,
    workers: int | None,
    timeout: float | None,
    follow_symlinks: bool | None,
    formats: tuple[str, ...],
    top: int | None,
    config_path: Path | None,
    log_level: str | None,
    log_file: Path | None,
    log_format: str | None,
) -> None:
    """Measure folder sizes under ROOT and write HTML and CSV reports."""
    try:
        config = load_config(config_path)
        scan_config = merge_overrides(
            config.scan,
            max_depth=depth,
            root_summary=root_summary,
            sort_children=sort_children,
            workers=workers,
            timeout=timeout,
            follow_symlinks=follow_symlinks,
        )
        report_config = merge_overrides(
            config.report,
            output_dir=output_dir,
            unit=unit,
            formats=formats or None,
            top=top,
        )
        logging_config = merge_overrides(
            config.logging, level=log_level, file=log_file, format=log_format
        )
    except ConfigError as e:
        raise click.ClickException(str(e)) from e

    configure_logging(logging_config)

    try:
        result = scan(
            root,
            scan_config.max_depth,
            scan_config.mode,
            follow_symlinks=scan_config.follow_symlinks,
            sort_children=scan_config.sort_children,
            workers=scan_config.workers,
            deadline=scan_config.timeout,
        )
    except ValidationError as e:
        raise click.UsageError(str(e)) from e

    size_unit = report_config.size_unit
    click.echo(
        f"Scanned {result.entry_point} (depth {result.max_depth}): "
        f"{len(result)} folders, {result.files} files, "
        f"{format_bytes(result.total_bytes)} in {result.elapsed_sec:.2f}s"
    )
    table = _render_text_table(result, size_unit, report_config.top)
    if table:
        click.echo(table)
    if result.skipped:
        click.echo(
            f"Skipped {len(result.skipped)} unreadable folder(s); see log for details.",
            err=True,
        )
    if result.unreadable_files:
        click.echo(
            f"Counted {len(result.unreadable_files)} unreadable file(s) as 0 bytes.",
            err=True,
        )
    if result.incomplete:
        click.echo("Scan stopped early, results are incomplete.", err=True)

    volume = volume_usage(result.entry_point) if "html" in report_config.formats else None
    try:
        paths = write_report(
            result,
            report_config.output_dir,
            unit=size_unit,
            formats=report_config.formats,
            volume=volume,
        )
    except RenderError as e:
        logger.error("Report generation failed: %s", e)
        raise click.ClickException(str(e)) from e

    for path in paths.written():
        click.echo(f"Report written: {path}")
