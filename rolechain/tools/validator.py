"""Tool call validation against registered schemas.

Validation never raises: it returns a ``ToolError`` describing the first
problem, or ``None``.  Callers decide whether to retry, skip or surface it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from jsonschema import Draft7Validator

from contracts.tools import JSON_TYPES, ToolArgument, ToolCall
from rolechain.errors import (
    InvalidArgumentError,
    MissingArgumentError,
    ToolError,
    ToolNotFoundError,
)
from rolechain.tools.normalize import normalize_arguments, normalize_name

if TYPE_CHECKING:
    from rolechain.tools.registry import ToolRegistry

# Draft 7 treats 2.0 as an integer and never treats a bool as a number.
_TYPE_CHECKER = Draft7Validator.TYPE_CHECKER

_MISSING = object()


def _find(arguments: dict[str, Any], normalized: dict[str, Any], arg: ToolArgument) -> Any:
    if arg.name in arguments:
        return arguments[arg.name]
    return normalized.get(normalize_name(arg.name), _MISSING)


def check_type(value: Any, declared: str) -> bool:
    """Loosely check *value* against a declared argument type.

    Unknown type names always pass.
    """
    json_type = JSON_TYPES.get(declared.lower())
    if json_type is None:
        return True
    return _TYPE_CHECKER.is_type(value, json_type)


def validate_tool_call(registry: ToolRegistry, call: ToolCall) -> ToolError | None:
    """Check *call* against its schema.  Extra arguments are tolerated."""
    resolved = registry.resolve_name(call.name)
    if resolved is None:
        return ToolNotFoundError(call.name)
    schema = registry.get_schema(resolved)

    normalized = normalize_arguments(call.arguments)
    for arg in schema.arguments:
        value = _find(call.arguments, normalized, arg)
        if value is _MISSING:
            if arg.required:
                return MissingArgumentError(schema.name, arg.name)
            continue
        if value is None and not arg.required:
            continue
        if not check_type(value, arg.type):
            return InvalidArgumentError(schema.name, arg.name, arg.type)
    return None
