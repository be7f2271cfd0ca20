"""Append-only JSONL role-call logger."""

from __future__ import annotations

import threading
from pathlib import Path

from contracts.audit import RoleCallLogEntry, RoleCallLogger
from rolechain.audit.query import read_all
from rolechain.logging import get_logger

log = get_logger(__name__)


class JsonlRoleCallLogger(RoleCallLogger):
    """Thread-safe, append-only JSONL role-call logger.

    Write failures are logged and swallowed; a broken log file never stops
    a chain.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def log(self, entry: RoleCallLogEntry) -> None:
        line = entry.model_dump_json() + "\n"
        try:
            with self._lock:
                self._path.parent.mkdir(parents=True, exist_ok=True)
                with self._path.open("a", encoding="utf-8") as f:
                    f.write(line)
        except OSError as exc:
            log.warning("Failed to write role call log", path=str(self._path), error=str(exc))

    def query_by_role(self, role_name: str, limit: int = 100) -> list[RoleCallLogEntry]:
        matches = [e for e in read_all(self._path) if e.role_name == role_name]
        return matches[-limit:]

    def tail(self, n: int = 20) -> list[RoleCallLogEntry]:
        return read_all(self._path)[-n:]


def append_role_call_log(path: str | Path, entry: RoleCallLogEntry) -> None:
    """Append *entry* to the JSONL log at *path*."""
    JsonlRoleCallLogger(path).log(entry)
