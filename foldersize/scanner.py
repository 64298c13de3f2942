from __future__ import annotations
import logging
import os
import stat as statmod
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Set, Tuple, Union

from .errors import FileSizeError, SubtreeEnumerationError, ValidationError
from .models import (
    ROOT_FILES_NAME,
    FolderRecord,
    RootSummaryMode,
    ScanIssue,
    ScanResult,
)

logger = logging.getLogger(__name__)

PROGRESS_INTERVAL = 0.10

ProgressCb = Callable[[str, int, int, int], None]  # (current_path, files, dirs, bytes_scanned)
PathLike = Union[str, "os.PathLike[str]"]


class CancelFlag:
    """Callable stop flag. With a timeout it also trips once the time budget is spent."""

    def __init__(self, timeout: Optional[float] = None):
        self._cancel = False
        self._stop_at = time.monotonic() + timeout if timeout else None

    def cancel(self):
        self._cancel = True

    def __call__(self):
        if not self._cancel and self._stop_at is not None and time.monotonic() >= self._stop_at:
            self._cancel = True
        return self._cancel


@dataclass
class _Tree:
    """Measurement buffer for one branch of the walk."""

    own: Dict[str, int] = field(default_factory=dict)            # dir -> bytes of files directly inside
    children: Dict[str, List[str]] = field(default_factory=dict)  # dir -> subdirs, enumeration order
    order: List[str] = field(default_factory=list)               # dirs in visit order, parents first
    issues: List[ScanIssue] = field(default_factory=list)
    totals: Dict[str, int] = field(default_factory=dict)
    stopped: bool = False

    def merge(self, other: "_Tree"):
        self.own.update(other.own)
        self.children.update(other.children)
        self.order.extend(other.order)
        self.issues.extend(other.issues)
        self.stopped = self.stopped or other.stopped

    def aggregate(self):
        # children are always visited after their parent
        for d in reversed(self.order):
            self.totals[d] = self.own[d] + sum(self.totals.get(c, 0) for c in self.children[d])


class _Walker:
    def __init__(self,
                 follow_symlinks: bool,
                 sort_children: bool,
                 should_stop: Callable[[], bool],
                 progress: Optional[ProgressCb],
                 log: logging.Logger):
        self.follow_symlinks = follow_symlinks
        self.sort_children = sort_children
        self.should_stop = should_stop
        self.progress = progress
        self.log = log
        self.files = 0
        self.dirs = 0
        self.bytes_scanned = 0
        self._seen: Set[Tuple[int, int]] = set()
        self._lock = threading.Lock()
        self._last_emit = 0.0

    def list_dir(self, path: str) -> List[os.DirEntry]:
        try:
            with os.scandir(path) as it:
                entries = list(it)
        except OSError as e:
            raise SubtreeEnumerationError(path, e) from e
        if self.sort_children:
            entries.sort(key=lambda e: e.name.casefold())
        return entries

    def stat(self, entry: os.DirEntry) -> Optional[os.stat_result]:
        try:
            if not self.follow_symlinks and entry.is_symlink():
                return None
            return entry.stat(follow_symlinks=self.follow_symlinks)
        except OSError as e:
            raise FileSizeError(entry.path, e) from e

    def first_visit(self, st: os.stat_result) -> bool:
        if not self.follow_symlinks:
            return True
        key = (st.st_dev, st.st_ino)
        with self._lock:
            if key in self._seen:
                return False
            self._seen.add(key)
            return True

    def _count(self, current: str, files: int, size: int):
        with self._lock:
            self.dirs += 1
            self.files += files
            self.bytes_scanned += size
            if not self.progress:
                return
            now = time.monotonic()
            if now - self._last_emit < PROGRESS_INTERVAL:
                return
            self._last_emit = now
            snapshot = (current, self.files, self.dirs, self.bytes_scanned)
        self.progress(*snapshot)

    def _issue(self, tree: _Tree, kind: str, err: Union[SubtreeEnumerationError, FileSizeError]):
        if kind == "enumeration":
            self.log.warning("Skipping subtree %s: %s", err.path, err.cause)
        else:
            self.log.warning("Counting %s as 0 bytes: %s", err.path, err.cause)
        tree.issues.append(ScanIssue(path=err.path, kind=kind, message=str(err)))

    def visit(self, current: str, tree: _Tree) -> Optional[List[str]]:
        """Measure one directory's own files. Returns its subdirectories, or None if unreadable."""
        try:
            entries = self.list_dir(current)
        except SubtreeEnumerationError as e:
            self._issue(tree, "enumeration", e)
            return None

        own = 0
        files = 0
        subdirs: List[str] = []
        for entry in entries:
            try:
                st = self.stat(entry)
            except FileSizeError as e:
                self._issue(tree, "file-size", e)
                files += 1
                continue
            if st is None:
                continue
            if statmod.S_ISDIR(st.st_mode):
                if self.first_visit(st):
                    subdirs.append(entry.path)
            else:
                files += 1
                own += int(st.st_size)

        tree.own[current] = own
        tree.children[current] = subdirs
        tree.order.append(current)
        self._count(current, files, own)
        return subdirs

    def measure(self, top: str, tree: Optional[_Tree] = None) -> _Tree:
        tree = tree if tree is not None else _Tree()
        stack = [top]
        while stack:
            if self.should_stop():
                tree.stopped = True
                break
            subdirs = self.visit(stack.pop(), tree)
            if subdirs:
                stack.extend(reversed(subdirs))
        return tree

    def measure_parallel(self, root: str, workers: int) -> _Tree:
        tree = _Tree()
        if self.should_stop():
            tree.stopped = True
            return tree
        subdirs = self.visit(root, tree)
        if not subdirs:
            return tree
        with ThreadPoolExecutor(max_workers=workers) as pool:
            # map() yields in submission order, which keeps the merge deterministic
            for branch in pool.map(self.measure, subdirs):
                tree.merge(branch)
        return tree


def _validate(entry_point: PathLike,
              max_depth: int,
              root_summary_mode: Union[RootSummaryMode, str],
              workers: int,
              deadline: Optional[float]) -> Tuple[str, RootSummaryMode]:
    if isinstance(max_depth, bool) or not isinstance(max_depth, int) or max_depth < 1:
        raise ValidationError(f"max_depth must be an integer >= 1, got {max_depth!r}")
    if isinstance(workers, bool) or not isinstance(workers, int) or workers < 1:
        raise ValidationError(f"workers must be an integer >= 1, got {workers!r}")
    if deadline is not None and deadline <= 0:
        raise ValidationError(f"deadline must be positive, got {deadline!r}")
    try:
        mode = RootSummaryMode(root_summary_mode)
    except ValueError:
        choices = ", ".join(m.value for m in RootSummaryMode)
        raise ValidationError(f"root_summary_mode must be one of {choices}, got {root_summary_mode!r}") from None
    root = os.path.abspath(os.fspath(entry_point))
    if not os.path.isdir(root):
        raise ValidationError(f"entry point is not an existing directory: {root}")
    return root, mode


def _root_record(root: str, mode: RootSummaryMode, tree: _Tree) -> Optional[FolderRecord]:
    if mode is RootSummaryMode.FILES_ONLY:
        return FolderRecord(name=ROOT_FILES_NAME, path=root, size_bytes=tree.own[root], depth=0)
    if mode is RootSummaryMode.FULL_RECURSIVE:
        return FolderRecord(name=os.path.basename(root) or root, path=root,
                            size_bytes=tree.totals[root], depth=0)
    return None


def _emit(tree: _Tree, root: str, max_depth: int) -> List[FolderRecord]:
    out: List[FolderRecord] = []
    stack = [(c, 1) for c in reversed(tree.children.get(root, []))]
    while stack:
        path, depth = stack.pop()
        if path not in tree.own:
            # unreadable, or never reached before a stop
            continue
        out.append(FolderRecord(name=os.path.basename(path), path=path,
                                size_bytes=tree.totals[path], depth=depth))
        if depth < max_depth:
            stack.extend((c, depth + 1) for c in reversed(tree.children[path]))
    return out


def scan(entry_point: PathLike,
         max_depth: int,
         root_summary_mode: Union[RootSummaryMode, str] = RootSummaryMode.OMIT,
         *,
         follow_symlinks: bool = False,
         sort_children: bool = False,
         workers: int = 1,
         deadline: Optional[float] = None,
         cancel_flag: Optional[Callable[[], bool]] = None,
         progress: Optional[ProgressCb] = None,
         log: Optional[logging.Logger] = None) -> ScanResult:
    """Measure every folder under ``entry_point`` and emit one record per folder up to ``max_depth``.

    The entry point is depth 0 and its subdirectories are depth 1. Sizes are
    always fully recursive, only emission is bounded by ``max_depth``.
    Records come out in pre-order, siblings in enumeration order (or by name
    with ``sort_children``). Unreadable directories are skipped with a
    warning, unreadable files count as 0 bytes. Raises ValidationError for
    bad arguments before touching the tree.
    """
    root, mode = _validate(entry_point, max_depth, root_summary_mode, workers, deadline)
    log = log or logger
    t0 = time.time()

    timer = CancelFlag(deadline)

    def should_stop() -> bool:
        return timer() or bool(cancel_flag and cancel_flag())

    walker = _Walker(follow_symlinks, sort_children, should_stop, progress, log)
    if follow_symlinks:
        try:
            walker.first_visit(os.stat(root))
        except OSError as e:
            log.debug("Cannot stat %s before scanning: %s", root, e)
    log.info("Scanning %s (max depth %d, %s)", root, max_depth, mode.value)

    if workers > 1:
        tree = walker.measure_parallel(root, workers)
    else:
        tree = walker.measure(root)
    tree.aggregate()

    records: List[FolderRecord] = []
    if root in tree.own:
        head = _root_record(root, mode, tree)
        if head is not None:
            records.append(head)
        records.extend(_emit(tree, root, max_depth))

    if tree.stopped:
        log.warning("Scan of %s stopped early, results are incomplete", root)

    result = ScanResult(
        entry_point=root,
        max_depth=max_depth,
        root_summary_mode=mode,
        records=tuple(records),
        issues=tree.issues,
        total_bytes=tree.totals.get(root, 0),
        files=walker.files,
        dirs=walker.dirs,
        bytes_scanned=walker.bytes_scanned,
        elapsed_sec=time.time() - t0,
        incomplete=tree.stopped,
    )
    log.info("Scanned %d folders, %d files, %d bytes in %.2fs (%d issues)",
             result.dirs, result.files, result.bytes_scanned, result.elapsed_sec, len(result.issues))
    return result
