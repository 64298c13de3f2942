from __future__ import annotations
from datetime import datetime
from typing import Optional

from .models import SizeUnit

REPORT_PREFIX = "FolderSizeReport"
STAMP_FORMAT = "%Y%m%d%H%M%S"


def format_bytes(num: int) -> str:
    if num < 0:
        return str(num)
    units = ["B", "KB", "MB", "GB", "TB", "PB"]
    x = float(num)
    for u in units:
        if x < 1024.0 or u == units[-1]:
            return f"{x:.2f} {u}" if u != "B" else f"{int(x)} {u}"
        x /= 1024.0
    return f"{x:.2f} PB"


def to_unit(num: int, unit: SizeUnit) -> float:
    return round(num / unit.divisor, 2)


def format_size(num: int, unit: SizeUnit) -> str:
    # fixed two decimals, no thousands separator so the value stays parseable
    return f"{to_unit(num, unit):.2f}"


def report_basename(now: Optional[datetime] = None) -> str:
    now = now or datetime.now()
    return f"{REPORT_PREFIX}_{now.strftime(STAMP_FORMAT)}"
