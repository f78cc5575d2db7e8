# src/repocat/errors.py
from pathlib import Path
from typing import Optional, Union


class RepocatError(Exception):
    """Base class for every error that ends a repocat run."""


class InvalidRootError(RepocatError):
    def __init__(self, root: Union[str, Path], reason: str = "is not an existing directory"):
        self.root = root
        super().__init__(f"Invalid root directory '{root}': {reason}")


class GlobSyntaxError(RepocatError):
    def __init__(self, pattern: str, reason: str = "malformed pattern"):
        self.pattern = pattern
        super().__init__(f"Invalid glob pattern {pattern!r}: {reason}")


class PatternFileError(RepocatError):
    def __init__(self, path: Union[str, Path], reason: str):
        self.path = path
        super().__init__(f"Cannot read pattern file '{path}': {reason}")


class OutputWriteError(RepocatError):
    def __init__(self, path: Union[str, Path], reason: str):
        self.path = path
        super().__init__(f"Cannot write output '{path}': {reason}")


class Cancelled(RepocatError):
    def __init__(self, reason: str = "cancelled", path: Optional[str] = None):
        self.path = path
        message = f"Aggregation {reason}"
        if path:
            message += f" while processing '{path}'"
        super().__init__(message)
