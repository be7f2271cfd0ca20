"""Diff and backup helpers used before writing files interactively."""

from __future__ import annotations

import difflib
import shutil
from datetime import datetime, timezone
from pathlib import Path


def generate_unified_diff(file_path: str, old_content: str, new_content: str) -> str:
    """Return a unified diff between *old_content* and *new_content*."""
    lines = difflib.unified_diff(
        old_content.splitlines(keepends=True),
        new_content.splitlines(keepends=True),
        fromfile=f"a/{file_path}",
        tofile=f"b/{file_path}",
    )
    return "".join(line if line.endswith("\n") else line + "\n" for line in lines)


def read_file_or_empty(file_path: str) -> str:
    """Return the file content, or an empty string if it cannot be read."""
    try:
        return Path(file_path).read_text(encoding="utf-8", errors="replace")
    except OSError:
        return ""


def backup_file(file_path: str) -> str | None:
    """Copy *file_path* to a timestamped ``.bak`` sibling.

    Returns the backup path, or ``None`` when there is nothing to back up.
    """
    source = Path(file_path)
    if not source.is_file():
        return None
    stamp = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S%f")
    backup = source.with_name(f"{source.name}.{stamp}.bak")
    shutil.copy2(source, backup)
    return str(backup)
