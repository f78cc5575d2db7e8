# src/repocat/core/writer.py
import os
import stat
import tempfile
from pathlib import Path
from typing import Iterable, Optional

from repocat.config import BINARY_PLACEHOLDER, FILE_MARKER, SUMMARY_TEMPLATE, TEMP_PREFIX
from repocat.errors import OutputWriteError
from repocat.models import FileEntry, OutputTarget


def render_block(entry: FileEntry) -> str:
    marker = FILE_MARKER.format(path=entry.rel_path)
    if entry.is_binary:
        return f"{marker}\n{BINARY_PLACEHOLDER.format(size=entry.size)}\n"

    content = entry.content
    if content and not content.endswith("\n"):
        content += "\n"
    return f"{marker}\n{content}"


def render_summary(total_lines: int) -> str:
    return SUMMARY_TEMPLATE.format(lines=total_lines) + "\n"


def render_document(entries: Iterable[FileEntry], total_lines: int, tree: Optional[str] = None) -> str:
    """
    Builds the whole output document: optional tree header, one labeled block
    per entry (blank line between blocks), and the trailing line count.
    """
    parts = []
    if tree:
        parts.append(tree + "\n")
    blocks = [render_block(e) for e in entries]
    if blocks:
        parts.append("\n".join(blocks) + "\n")
    parts.append(render_summary(total_lines))
    return "".join(parts)


def write_atomic(output_file: Path, text: str) -> None:
    """
    Writes text to a scratch file beside output_file, then moves it into
    place with os.replace so readers never see a partial document.
    """
    if output_file.is_dir():
        raise OutputWriteError(output_file, "destination is a directory")

    parent = output_file.parent
    try:
        parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise OutputWriteError(output_file, f"cannot create directory '{parent}': {e.strerror or e}") from e

    try:
        fd, tmp_name = tempfile.mkstemp(prefix=TEMP_PREFIX, suffix=".tmp", dir=parent)
    except OSError as e:
        raise OutputWriteError(output_file, e.strerror or str(e)) from e

    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        # mkstemp creates 0600; give the document the mode a plain open() would
        os.chmod(tmp_name, output_mode(output_file))
        os.replace(tmp_name, output_file)
    except (OSError, UnicodeEncodeError) as e:
        _discard(tmp_name)
        reason = e.strerror if isinstance(e, OSError) and e.strerror else str(e)
        raise OutputWriteError(output_file, reason) from e
    except BaseException:
        _discard(tmp_name)
        raise


def output_mode(output_file: Path) -> int:
    """Keeps an existing file's permissions, otherwise 0666 minus the umask."""
    try:
        return stat.S_IMODE(os.stat(output_file).st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def _discard(tmp_name: str) -> None:
    if os.path.exists(tmp_name):
        os.unlink(tmp_name)


def write_output(target: OutputTarget, document: str) -> None:
    if target.path is not None:
        write_atomic(target.path, document)
    if target.stream is not None:
        try:
            target.stream.write(document)
            target.stream.flush()
        except OSError as e:
            raise OutputWriteError(getattr(target.stream, "name", "<stream>"), e.strerror or str(e)) from e
