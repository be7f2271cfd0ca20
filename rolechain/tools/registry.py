"""Tool registry — register, look up, and export rolechain tools."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterable

from contracts.tools import BaseTool, ToolCall, ToolSchema
from rolechain.errors import ToolError, ToolNotFoundError
from rolechain.tools.normalize import normalize_name

if TYPE_CHECKING:
    from contracts.config import ConfigurableToolConfig


class ToolRegistry:
    """In-memory registry mapping tool schemas to implementations.

    Read-only once execution starts; not locked for concurrent mutation.
    """

    def __init__(self) -> None:
        self._schemas: dict[str, ToolSchema] = {}
        self._impls: dict[str, BaseTool] = {}

    def register(self, tool: BaseTool, schema: ToolSchema | None = None) -> None:
        """Register a tool under its schema name.  Overwrites if the name exists."""
        schema = schema or tool.definition()
        self._schemas[schema.name] = schema
        self._impls[schema.name] = tool

    def register_schema(self, schema: ToolSchema) -> None:
        """Register a schema without an implementation."""
        self._schemas[schema.name] = schema

    def resolve_name(self, name: str) -> str | None:
        """Return the registered name matching *name* exactly, else by normalized form."""
        if name in self._schemas:
            return name
        target = normalize_name(name)
        for registered in self._schemas:
            if normalize_name(registered) == target:
                return registered
        return None

    def get_schema(self, name: str) -> ToolSchema:
        """Return a schema by (tolerant) name, or raise ``ToolNotFoundError``."""
        resolved = self.resolve_name(name)
        if resolved is None:
            raise ToolNotFoundError(name)
        return self._schemas[resolved]

    def get_impl(self, name: str) -> BaseTool | None:
        resolved = self.resolve_name(name)
        if resolved is None:
            return None
        return self._impls.get(resolved)

    def lookup(self, name: str) -> tuple[ToolSchema, BaseTool | None]:
        schema = self.get_schema(name)
        return schema, self._impls.get(schema.name)

    def validate(self, call: ToolCall) -> ToolError | None:
        from rolechain.tools.validator import validate_tool_call

        return validate_tool_call(self, call)

    def list_tools(self) -> list[str]:
        """Return sorted list of registered tool names."""
        return sorted(self._schemas)

    def schemas(self) -> list[ToolSchema]:
        return [self._schemas[name] for name in sorted(self._schemas)]

    def get_openai_definitions(self) -> list[dict[str, Any]]:
        """Export all tools in OpenAI function-calling format."""
        defs: list[dict[str, Any]] = []
        for schema in self.schemas():
            defs.append(
                {
                    "type": "function",
                    "function": {
                        "name": schema.name,
                        "description": schema.description,
                        "parameters": schema.input_schema(),
                    },
                }
            )
        return defs


def create_default_registry(
    configurable_tools: Iterable[ConfigurableToolConfig] = (),
) -> ToolRegistry:
    """Create a registry pre-loaded with all built-in tools plus configured ones."""
    from rolechain.tools.apply_patch import ApplyPatchTool
    from rolechain.tools.configurable import ConfigurableTool
    from rolechain.tools.list_dir import ListDirTool
    from rolechain.tools.read_file import ReadFileTool
    from rolechain.tools.run_command import RunCommandTool
    from rolechain.tools.write_file import WriteFileTool

    registry = ToolRegistry()
    registry.register(WriteFileTool())
    registry.register(ReadFileTool())
    registry.register(ListDirTool())
    registry.register(RunCommandTool())
    registry.register(ApplyPatchTool())
    for tool_config in configurable_tools:
        registry.register(ConfigurableTool(tool_config))
    return registry
