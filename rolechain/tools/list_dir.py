"""Built-in list_dir tool — enumerate a directory, sub-directories marked with '/'."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from contracts.tools import BaseTool, ToolArgument, ToolOutput, ToolSchema
from rolechain.tools.normalize import lookup_argument


class ListDirTool(BaseTool):
    def definition(self) -> ToolSchema:
        return ToolSchema(
            name="list_dir",
            description="List the entries of a directory.",
            arguments=(
                ToolArgument(name="path", type="string", description="Directory to list."),
            ),
        )

    async def run(self, args: dict[str, Any]) -> ToolOutput:
        path = str(lookup_argument(args, "path"))
        directory = Path(path)

        if not directory.exists():
            return ToolOutput(tool_name="list_dir", error=f"path not found: {path}", success=False)
        if not directory.is_dir():
            return ToolOutput(tool_name="list_dir", error=f"not a directory: {path}", success=False)

        try:
            entries = sorted(
                f"{child.name}/" if child.is_dir() else child.name
                for child in directory.iterdir()
            )
        except OSError as exc:
            return ToolOutput(tool_name="list_dir", error=str(exc), success=False)

        return ToolOutput(tool_name="list_dir", result={"path": path, "entries": entries})
