"""Tool registry, validation, execution and built-in tools."""

from rolechain.tools.executor import ToolExecutor
from rolechain.tools.normalize import lookup_argument, normalize_arguments, normalize_name
from rolechain.tools.registry import ToolRegistry, create_default_registry
from rolechain.tools.validator import validate_tool_call

__all__ = [
    "ToolExecutor",
    "ToolRegistry",
    "create_default_registry",
    "lookup_argument",
    "normalize_arguments",
    "normalize_name",
    "validate_tool_call",
]
