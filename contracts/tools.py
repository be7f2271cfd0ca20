"""Tool contracts.

Every tool implements BaseTool.  The executor validates a ToolCall against
the tool's ToolSchema, runs the tool with retry/timeout, and reports a
ToolOutput.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# ── Schema models ────────────────────────────────────────────────────

# Declared argument type -> JSON Schema type name.
JSON_TYPES: dict[str, str] = {
    "string": "string",
    "str": "string",
    "int": "integer",
    "integer": "integer",
    "bool": "boolean",
    "boolean": "boolean",
    "float": "number",
    "number": "number",
    "object": "object",
    "map": "object",
    "array": "array",
    "list": "array",
}


class ToolArgument(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    type: str = "string"
    required: bool = True
    description: str = ""


class ToolSchema(BaseModel):
    """Declarative schema for a tool.  Immutable once registered."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""
    arguments: tuple[ToolArgument, ...] = ()

    def input_schema(self) -> dict[str, Any]:
        """Return the arguments as a JSON Schema object."""
        properties: dict[str, Any] = {}
        for arg in self.arguments:
            prop: dict[str, Any] = {"description": arg.description}
            json_type = JSON_TYPES.get(arg.type.lower())
            if json_type:
                prop["type"] = json_type
            properties[arg.name] = prop
        return {
            "type": "object",
            "properties": properties,
            "required": [a.name for a in self.arguments if a.required],
        }


# ── Call / result models ─────────────────────────────────────────────


class ToolCall(BaseModel):
    """A tool invocation as extracted from model output (name/keys unnormalized)."""

    name: str
    arguments: dict[str, Any] = Field(default_factory=dict)
    context: dict[str, Any] | None = None


class ToolOutput(BaseModel):
    tool_name: str
    result: Any = None
    error: str | None = None
    error_type: str | None = None
    success: bool = True
    attempts: int = 0


# ── Abstract base class ─────────────────────────────────────────────


class BaseTool(ABC):
    """Abstract base class that every tool must implement."""

    @abstractmethod
    def definition(self) -> ToolSchema:
        """Return the tool's schema."""
        ...

    @abstractmethod
    async def run(self, args: dict[str, Any]) -> ToolOutput:
        """Execute the tool.  Called by the executor after validation."""
        ...
