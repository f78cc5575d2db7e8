# src/repocat/core/ignore.py
from pathlib import Path
from typing import Iterable, List, Optional, Set

import pathspec

from repocat.config import DEFAULT_IGNORE_PATTERNS
from repocat.errors import GlobSyntaxError, PatternFileError
from repocat.models import SelectionRule


def validate_pattern(pattern: str) -> str:
    """
    Checks a single include/exclude glob and returns it in the form pathspec
    should compile. Raises GlobSyntaxError naming the pattern otherwise.
    """
    if not pattern or not pattern.strip():
        raise GlobSyntaxError(pattern, "pattern is empty")
    if pattern.startswith("!"):
        raise GlobSyntaxError(pattern, "negated patterns are not supported, use --include/--exclude")

    trailing = len(pattern) - len(pattern.rstrip("\\"))
    if trailing % 2 == 1:
        raise GlobSyntaxError(pattern, "dangling escape character at end of pattern")

    # A leading '#' is a comment in gitignore syntax; here it is a literal name
    if pattern.startswith("#"):
        pattern = "\\" + pattern

    try:
        pathspec.PathSpec.from_lines("gitwildmatch", [pattern])
    except ValueError as e:
        raise GlobSyntaxError(pattern, str(e)) from e
    return pattern


def compile_patterns(patterns: Iterable[str]) -> Optional[pathspec.PathSpec]:
    """Validates every pattern and compiles them into one PathSpec (None if empty)."""
    lines = [validate_pattern(p) for p in patterns]
    if not lines:
        return None
    return pathspec.PathSpec.from_lines("gitwildmatch", lines)


def load_pattern_file(pattern_file: Path) -> List[str]:
    """
    Reads gitignore-style exclude patterns from a file.
    Blank lines and '#' comments are dropped; a leading '!' is rejected.
    """
    if not pattern_file.is_file():
        raise PatternFileError(pattern_file, "file does not exist")
    try:
        with open(pattern_file, "r", encoding="utf-8") as f:
            lines = f.read().splitlines()
    except (OSError, UnicodeDecodeError) as e:
        raise PatternFileError(pattern_file, str(e)) from e

    patterns = []
    for line in lines:
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        patterns.append(stripped)
    return patterns


class Selector:
    """
    Two-stage path filter: a path passes when it matches an include pattern
    (or there are none) and matches no exclude pattern.
    """

    def __init__(
        self,
        rule: SelectionRule,
        use_default_ignores: bool = True,
        extra_excludes: Optional[Iterable[str]] = None,
        excluded_paths: Optional[Set[str]] = None,
    ):
        self.include_spec = compile_patterns(rule.include)
        self.exclude_spec = compile_patterns(list(rule.exclude) + list(extra_excludes or []))
        self.default_spec = (
            pathspec.PathSpec.from_lines("gitwildmatch", DEFAULT_IGNORE_PATTERNS)
            if use_default_ignores
            else None
        )
        # Exact relative paths that are never candidates (e.g. the output file)
        self.excluded_paths = set(excluded_paths or ())

    def is_dir_pruned(self, rel_dir: str) -> bool:
        """Only default ignores prune whole directories during the walk."""
        if self.default_spec is None:
            return False
        return self.default_spec.match_file(rel_dir.rstrip("/") + "/")

    def is_included(self, rel_path: str) -> bool:
        if self.include_spec is None:
            return True
        return self.include_spec.match_file(rel_path)

    def is_excluded(self, rel_path: str) -> bool:
        if rel_path in self.excluded_paths:
            return True
        if self.default_spec is not None and self.default_spec.match_file(rel_path):
            return True
        if self.exclude_spec is not None and self.exclude_spec.match_file(rel_path):
            return True
        return False

    def is_selected(self, rel_path: str) -> bool:
        return self.is_included(rel_path) and not self.is_excluded(rel_path)
