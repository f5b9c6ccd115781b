"""Atomic persistence for generated declaration files."""

from __future__ import annotations

import difflib
import os
import stat
import tempfile
from pathlib import Path


def write_atomic(path: Path, content: str) -> None:
    """Replace `path` with `content` without ever exposing a partial file.

    The text goes to a temporary sibling first and is moved over the target
    with `os.replace`, so on failure the previous file is left untouched.
    The replaced file keeps its permission bits; a new file gets the mode
    the process umask allows.
    """
    if not content:
        raise ValueError(f"Refusing to write an empty declaration to {path}")
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp")
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        os.chmod(tmp_path, _target_mode(path))
        os.replace(tmp_path, path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise


def _target_mode(path: Path) -> int:
    try:
        return stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def read_existing(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return ""


def render_diff(original: str, updated: str, *, name: str) -> str:
    diff = difflib.unified_diff(
        original.splitlines(keepends=True),
        updated.splitlines(keepends=True),
        fromfile=f"{name} (current)",
        tofile=f"{name} (generated)",
    )
    return "".join(diff)


__all__ = ["read_existing", "render_diff", "write_atomic"]
