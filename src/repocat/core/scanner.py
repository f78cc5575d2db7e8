# src/repocat/core/scanner.py
import os
import stat
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

from repocat.config import BINARY_SNIFF_BYTES, DEFAULT_WORKERS
from repocat.core.ignore import Selector
from repocat.errors import Cancelled
from repocat.models import BinaryPolicy, FileEntry, SkippedFile

ReadOutcome = Tuple[Optional[FileEntry], Optional[SkippedFile]]


def count_lines(text: str) -> int:
    """Counts newline-terminated lines plus a trailing unterminated one."""
    if not text:
        return 0
    return text.count("\n") + (0 if text.endswith("\n") else 1)


def is_binary_data(data: bytes) -> bool:
    """A NUL byte in the leading chunk marks the data as binary."""
    return b"\0" in data[:BINARY_SNIFF_BYTES]


def has_valid_name(rel_path: str) -> bool:
    """False when os.walk had to surrogate-escape bytes that are not UTF-8."""
    try:
        rel_path.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


def printable_name(rel_path: str) -> str:
    """Renders undecodable name bytes as \\xNN escapes."""
    return rel_path.encode("utf-8", "surrogateescape").decode("utf-8", "backslashreplace")


def is_regular_or_dangling(path: Path) -> bool:
    """
    True for regular files (following symlinks) and for broken symlinks,
    which are reported later. Fifos, sockets and devices are never read.
    """
    try:
        st = os.stat(path)
    except OSError:
        return path.is_symlink()
    return stat.S_ISREG(st.st_mode)


class ProjectScanner:
    def __init__(
        self,
        root_dir: Path,
        selector: Selector,
        binary_policy: BinaryPolicy = BinaryPolicy.SKIP,
        workers: int = DEFAULT_WORKERS,
        cancel_event: Optional[threading.Event] = None,
        timeout: Optional[float] = None,
    ):
        self.root_dir = root_dir
        self.selector = selector
        self.binary_policy = binary_policy
        self.workers = max(1, workers)
        self.cancel_event = cancel_event
        self.deadline = time.monotonic() + timeout if timeout is not None else None

    def check_cancelled(self, rel_path: Optional[str] = None) -> None:
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise Cancelled("cancelled", rel_path)
        if self.deadline is not None and time.monotonic() >= self.deadline:
            raise Cancelled("timed out", rel_path)

    def walk(self) -> Iterator[Tuple[Path, str]]:
        """
        Walks the directory tree in sorted order and yields (absolute path,
        relative posix path) for every selected file. Directory symlinks that
        point inside the root are not followed, since the real directory is
        walked under its own path. Outside targets are followed once per real
        directory, which also breaks symlink cycles.
        """
        root_real = os.path.realpath(self.root_dir)
        visited = {root_real}

        for root, dirs, files in os.walk(self.root_dir, followlinks=True):
            root_path = Path(root)
            rel_root = root_path.relative_to(self.root_dir)
            self.check_cancelled(rel_root.as_posix())

            # Sorting in place fixes the order os.walk descends in
            dirs.sort()
            for d in list(dirs):
                dir_rel_path = (rel_root / d).as_posix()
                if self.selector.is_dir_pruned(dir_rel_path):
                    dirs.remove(d)
                    continue
                real = os.path.realpath(root_path / d)
                if os.path.islink(root_path / d):
                    if os.path.commonpath([root_real, real]) == root_real or real in visited:
                        dirs.remove(d)
                        continue
                visited.add(real)

            for f in sorted(files):
                file_abs_path = root_path / f
                rel_path = (rel_root / f).as_posix()

                if not is_regular_or_dangling(file_abs_path):
                    continue

                if self.selector.is_selected(rel_path):
                    yield file_abs_path, rel_path

    def read_file(self, file_abs_path: Path, rel_path: str) -> ReadOutcome:
        """Reads one candidate; read failures become SkippedFile records."""
        self.check_cancelled(rel_path)

        # The marker must be UTF-8, so the path cannot be emitted as-is
        if not has_valid_name(rel_path):
            return None, SkippedFile(printable_name(rel_path), "file name is not valid UTF-8")

        if file_abs_path.is_symlink() and not file_abs_path.exists():
            return None, SkippedFile(rel_path, "broken symlink")

        try:
            data = file_abs_path.read_bytes()
        except OSError as e:
            return None, SkippedFile(rel_path, f"read error: {e.strerror or e}")

        reason = None
        content = ""
        if is_binary_data(data):
            reason = "binary"
        else:
            try:
                content = data.decode("utf-8")
            except UnicodeDecodeError:
                reason = "not valid UTF-8"

        if reason is None:
            return FileEntry(
                path=file_abs_path,
                rel_path=rel_path,
                content=content,
                line_count=count_lines(content),
                size=len(data),
            ), None

        skipped = SkippedFile(rel_path, reason)
        if self.binary_policy is BinaryPolicy.FLAG:
            flagged = FileEntry(
                path=file_abs_path,
                rel_path=rel_path,
                content="",
                line_count=0,
                is_binary=True,
                size=len(data),
            )
            return flagged, skipped
        return None, skipped

    def scan(self) -> Tuple[List[FileEntry], List[SkippedFile]]:
        """
        Collects candidates from the walk, then reads them on a bounded
        thread pool. Results come back in traversal order.
        """
        candidates = list(self.walk())
        entries: List[FileEntry] = []
        skipped: List[SkippedFile] = []

        with ThreadPoolExecutor(max_workers=self.workers) as pool:
            try:
                for entry, skip in pool.map(lambda c: self.read_file(*c), candidates):
                    if entry is not None:
                        entries.append(entry)
                    if skip is not None:
                        skipped.append(skip)
            except Cancelled:
                pool.shutdown(wait=True, cancel_futures=True)
                raise

        return entries, skipped
