# src/repocat/models.py
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional, TextIO, Tuple


class BinaryPolicy(str, Enum):
    """What to do with files that are not UTF-8 text."""
    SKIP = "skip"
    FLAG = "flag"


@dataclass(frozen=True)
class SelectionRule:
    """Include/exclude glob sets. Exclude always wins over include."""
    include: Tuple[str, ...] = ()
    exclude: Tuple[str, ...] = ()


@dataclass(frozen=True)
class FileEntry:
    """Immutable data class holding one file read at scan time."""
    path: Path
    rel_path: str
    content: str
    line_count: int
    is_binary: bool = False
    size: int = 0


@dataclass(frozen=True)
class SkippedFile:
    rel_path: str
    reason: str


@dataclass(frozen=True)
class OutputTarget:
    """Where the rendered document goes: a file path, a stream, or both."""
    path: Optional[Path] = None
    stream: Optional[TextIO] = None

    def __post_init__(self):
        if self.path is None and self.stream is None:
            raise ValueError("OutputTarget needs a path or a stream")


@dataclass(frozen=True)
class AggregationResult:
    entries: Tuple[FileEntry, ...]
    skipped: Tuple[SkippedFile, ...]
    total_lines: int
    document: str
    output_path: Optional[Path] = field(default=None)

    @property
    def text_entries(self) -> Tuple[FileEntry, ...]:
        return tuple(e for e in self.entries if not e.is_binary)

    @property
    def is_empty(self) -> bool:
        """True when no block (text or binary placeholder) was emitted."""
        return not self.entries
