from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Tuple

ROOT_FILES_NAME = "RootFolderFiles"


class RootSummaryMode(Enum):
    """What to emit for the entry point itself."""

    OMIT = "omit"
    FILES_ONLY = "files-only"
    FULL_RECURSIVE = "full-recursive"


class SizeUnit(Enum):
    MB = "mb"
    GB = "gb"

    @property
    def divisor(self) -> int:
        return 1024 ** 2 if self is SizeUnit.MB else 1024 ** 3

    @property
    def label(self) -> str:
        return self.name


@dataclass(frozen=True)
class FolderRecord:
    name: str
    path: str
    size_bytes: int
    depth: int


@dataclass(frozen=True)
class ScanIssue:
    path: str
    kind: str      # "enumeration" | "file-size"
    message: str


@dataclass
class ScanResult:
    entry_point: str
    max_depth: int
    root_summary_mode: RootSummaryMode
    records: Tuple[FolderRecord, ...] = ()
    issues: List[ScanIssue] = field(default_factory=list)
    total_bytes: int = 0
    files: int = 0
    dirs: int = 0
    bytes_scanned: int = 0
    elapsed_sec: float = 0.0
    incomplete: bool = False

    def __len__(self) -> int:
        return len(self.records)

    @property
    def skipped(self) -> List[ScanIssue]:
        return [i for i in self.issues if i.kind == "enumeration"]

    @property
    def unreadable_files(self) -> List[ScanIssue]:
        return [i for i in self.issues if i.kind == "file-size"]

    def largest(self, limit: int) -> List[FolderRecord]:
        rows = sorted(self.records, key=lambda r: r.size_bytes, reverse=True)
        return rows[:limit] if limit > 0 else []
