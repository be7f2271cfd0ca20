"""Built-in apply_patch tool — apply a unified diff with the ``patch`` utility."""

from __future__ import annotations

import asyncio
import os
import tempfile
from typing import Any

from contracts.tools import BaseTool, ToolArgument, ToolOutput, ToolSchema
from rolechain.tools.normalize import lookup_argument

PATCH_BINARY = "patch"


class ApplyPatchTool(BaseTool):
    def definition(self) -> ToolSchema:
        return ToolSchema(
            name="apply_patch",
            description="Apply a unified diff patch to a file.",
            arguments=(
                ToolArgument(name="file_path", type="string", description="Path of the file to patch."),
                ToolArgument(name="patch_content", type="string", description="Unified diff to apply."),
            ),
        )

    async def run(self, args: dict[str, Any]) -> ToolOutput:
        file_path = str(lookup_argument(args, "file_path"))
        patch_content = str(lookup_argument(args, "patch_content", ""))

        fd, patch_path = tempfile.mkstemp(prefix="patch-", suffix=".patch")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(patch_content)

            try:
                process = await asyncio.create_subprocess_exec(
                    PATCH_BINARY,
                    file_path,
                    patch_path,
                    stdout=asyncio.subprocess.PIPE,
                    stderr=asyncio.subprocess.STDOUT,
                )
            except OSError as exc:
                return ToolOutput(
                    tool_name="apply_patch",
                    error=f"failed to start {PATCH_BINARY}: {exc}",
                    success=False,
                )
            try:
                stdout, _ = await process.communicate()
            except asyncio.CancelledError:
                process.kill()
                await process.wait()
                raise
        finally:
            os.unlink(patch_path)

        output = stdout.decode(errors="replace")
        if process.returncode != 0:
            return ToolOutput(
                tool_name="apply_patch",
                result={"file_path": file_path, "output": output},
                error=f"failed to apply patch to {file_path}: {output}",
                success=False,
            )
        return ToolOutput(
            tool_name="apply_patch",
            result={"file_path": file_path, "output": output},
        )
