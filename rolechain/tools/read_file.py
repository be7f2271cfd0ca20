"""Built-in read_file tool — return a file's contents as text."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from contracts.tools import BaseTool, ToolArgument, ToolOutput, ToolSchema
from rolechain.tools.normalize import lookup_argument


class ReadFileTool(BaseTool):
    """Read a file's content."""

    def definition(self) -> ToolSchema:
        return ToolSchema(
            name="read_file",
            description="Read the contents of a file.",
            arguments=(
                ToolArgument(name="file_path", type="string", description="Path of the file to read."),
            ),
        )

    async def run(self, args: dict[str, Any]) -> ToolOutput:
        file_path = str(lookup_argument(args, "file_path"))

        try:
            content = Path(file_path).read_bytes().decode(errors="replace")
        except OSError as exc:
            return ToolOutput(
                tool_name="read_file",
                error=f"failed to read file {file_path}: {exc}",
                success=False,
            )

        return ToolOutput(
            tool_name="read_file",
            result={"file_path": file_path, "content": content},
        )
