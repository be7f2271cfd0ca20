"""Role-call log query helpers.

Standalone read-only functions so callers do not need a logger instance.
"""

from __future__ import annotations

import json
from pathlib import Path

from contracts.audit import RoleCallLogEntry


def query_by_role(log_path: str | Path, role_name: str, limit: int = 100) -> list[RoleCallLogEntry]:
    """Return recent entries for a given role."""
    matches = [e for e in read_all(log_path) if e.role_name == role_name]
    return matches[-limit:]


def tail(log_path: str | Path, n: int = 20) -> list[RoleCallLogEntry]:
    """Return the last N entries from the log."""
    return read_all(log_path)[-n:]


def read_all(log_path: str | Path) -> list[RoleCallLogEntry]:
    p = Path(log_path)
    if not p.exists():
        return []
    entries: list[RoleCallLogEntry] = []
    with p.open("r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            entries.append(RoleCallLogEntry(**json.loads(line)))
    return entries
