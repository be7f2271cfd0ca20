"""Interactive session transcript contracts."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field

from contracts.tools import ToolCall


class Step(BaseModel):
    llm_output: str = ""
    tool_call: ToolCall | None = None
    approved: bool = False
    result: Any = None


class Transcript(BaseModel):
    role: str
    started_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    steps: list[Step] = []
