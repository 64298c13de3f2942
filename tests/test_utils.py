"""Unit tests for formatting helpers."""

from datetime import datetime

import pytest

from foldersize.models import SizeUnit
from foldersize.utils import format_bytes, format_size, report_basename, to_unit


@pytest.mark.parametrize(
    "num,expected",
    [
        (0, "0 B"),
        (1023, "1023 B"),
        (1024, "1.00 KB"),
        (1_572_864, "1.50 MB"),
        (5 * 1024**3, "5.00 GB"),
        (-1, "-1"),
    ],
)
def test_format_bytes(num, expected):
    assert format_bytes(num) == expected


def test_to_unit_rounds_to_two_decimals():
    assert to_unit(10_485_760, SizeUnit.MB) == 10.0
    assert to_unit(1_000_000, SizeUnit.MB) == 0.95
    assert to_unit(1_610_612_736, SizeUnit.GB) == 1.5


def test_format_size_keeps_trailing_zeros():
    assert format_size(5_242_880, SizeUnit.MB) == "5.00"
    assert format_size(0, SizeUnit.GB) == "0.00"


def test_size_unit_divisors():
    assert SizeUnit.MB.divisor == 1_048_576
    assert SizeUnit.GB.divisor == 1_073_741_824
    assert SizeUnit("gb").label == "GB"


def test_report_basename():
    assert report_basename(datetime(2023, 12, 31, 23, 59, 1)) == "FolderSizeReport_20231231235901"
