"""Role-call audit contracts.

Append-only JSONL — one record per role invocation.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field


class RoleCallLogEntry(BaseModel):
    """A single role-call audit record."""

    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    role_name: str
    input: dict[str, Any] = {}
    output: str = ""
    error: str | None = None


class RoleCallLogger(ABC):
    """Interface for the append-only role-call logger."""

    @abstractmethod
    def log(self, entry: RoleCallLogEntry) -> None:
        """Append an entry to the log."""
        ...

    @abstractmethod
    def query_by_role(self, role_name: str, limit: int = 100) -> list[RoleCallLogEntry]:
        """Return recent entries for a given role."""
        ...

    @abstractmethod
    def tail(self, n: int = 20) -> list[RoleCallLogEntry]:
        """Return the last N entries."""
        ...
