# src/repocat/core/aggregator.py
import os
import threading
from pathlib import Path
from typing import Iterable, Optional, Union

from repocat.config import DEFAULT_WORKERS
from repocat.core.ignore import Selector, load_pattern_file
from repocat.core.scanner import ProjectScanner
from repocat.core.tree import generate_project_tree
from repocat.core.writer import render_document, write_output
from repocat.errors import InvalidRootError
from repocat.models import AggregationResult, BinaryPolicy, OutputTarget, SelectionRule


def resolve_root(root: Union[str, Path]) -> Path:
    """Returns the absolute root directory or raises InvalidRootError."""
    root_path = Path(root)
    if not root_path.exists():
        raise InvalidRootError(root, "does not exist")
    if not root_path.is_dir():
        raise InvalidRootError(root, "is not a directory")
    if not os.access(root_path, os.R_OK | os.X_OK):
        raise InvalidRootError(root, "is not readable")
    return root_path.resolve()


def aggregate(
    root: Union[str, Path],
    include: Iterable[str] = (),
    exclude: Iterable[str] = (),
    output: Optional[OutputTarget] = None,
    *,
    binary_policy: BinaryPolicy = BinaryPolicy.SKIP,
    use_default_ignores: bool = True,
    exclude_files: Iterable[Union[str, Path]] = (),
    workers: int = DEFAULT_WORKERS,
    timeout: Optional[float] = None,
    cancel_event: Optional[threading.Event] = None,
    with_tree: bool = False,
) -> AggregationResult:
    """
    Concatenates every selected file under root into one document and writes
    it to output.

    Files matching an exclude pattern are dropped even when an include
    pattern also matches. Unreadable and non-text files are reported in
    ``AggregationResult.skipped`` instead of aborting the run. Zero matches
    is a valid result whose document is just the ``[0 lines]`` summary.

    Raises InvalidRootError, GlobSyntaxError, PatternFileError,
    OutputWriteError or Cancelled. Nothing is written unless the whole
    document was built.
    """
    root_dir = resolve_root(root)
    rule = SelectionRule(include=tuple(include), exclude=tuple(exclude))

    extra_excludes = []
    for pattern_file in exclude_files:
        extra_excludes.extend(load_pattern_file(Path(pattern_file)))

    excluded_paths = set()
    output_path = None
    if output is not None and output.path is not None:
        output_path = Path(output.path).resolve()
        try:
            excluded_paths.add(output_path.relative_to(root_dir).as_posix())
        except ValueError:
            pass  # output lives outside the tree

    selector = Selector(
        rule,
        use_default_ignores=use_default_ignores,
        extra_excludes=extra_excludes,
        excluded_paths=excluded_paths,
    )
    scanner = ProjectScanner(
        root_dir,
        selector,
        binary_policy=binary_policy,
        workers=workers,
        cancel_event=cancel_event,
        timeout=timeout,
    )
    entries, skipped = scanner.scan()

    total_lines = sum(e.line_count for e in entries if not e.is_binary)
    tree = None
    if with_tree and entries:
        tree = generate_project_tree([e.rel_path for e in entries], root_dir.name or "project")
    document = render_document(entries, total_lines, tree)

    if output is not None:
        scanner.check_cancelled()
        target = OutputTarget(path=output_path, stream=output.stream)
        write_output(target, document)

    return AggregationResult(
        entries=tuple(entries),
        skipped=tuple(skipped),
        total_lines=total_lines,
        document=document,
        output_path=output_path,
    )
