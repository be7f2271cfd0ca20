"""Built-in write_file tool — create parent directories, then write the file."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from contracts.tools import BaseTool, ToolArgument, ToolOutput, ToolSchema
from rolechain.tools.normalize import lookup_argument


class WriteFileTool(BaseTool):
    """Write (or overwrite) a file with the given content."""

    def definition(self) -> ToolSchema:
        return ToolSchema(
            name="write_file",
            description="Write content to a file, creating parent directories as needed.",
            arguments=(
                ToolArgument(name="file_path", type="string", description="Path of the file to write."),
                ToolArgument(name="content", type="string", description="Content to write."),
            ),
        )

    async def run(self, args: dict[str, Any]) -> ToolOutput:
        file_path = str(lookup_argument(args, "file_path"))
        content = str(lookup_argument(args, "content", ""))
        target = Path(file_path)
        data = content.encode()

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            return ToolOutput(
                tool_name="write_file",
                error=f"failed to create parent directory {target.parent}: {exc}",
                success=False,
            )

        try:
            target.write_bytes(data)
        except OSError as exc:
            return ToolOutput(
                tool_name="write_file",
                error=f"failed to write file {file_path}: {exc}",
                success=False,
            )

        return ToolOutput(
            tool_name="write_file",
            result={"file_path": file_path, "bytes_written": len(data), "content": content},
        )
