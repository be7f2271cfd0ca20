"""Built-in run_command tool — run a shell command, capturing stdout+stderr."""

from __future__ import annotations

import asyncio
from typing import Any

from contracts.tools import BaseTool, ToolArgument, ToolOutput, ToolSchema
from rolechain.logging import get_logger
from rolechain.tools.normalize import lookup_argument

log = get_logger(__name__)


async def run_shell(tool_name: str, command: str) -> ToolOutput:
    """Run *command* through the shell and report its combined output."""
    log.info("Executing shell command", tool=tool_name, command=command)
    process = await asyncio.create_subprocess_shell(
        command,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.STDOUT,
    )
    try:
        stdout, _ = await process.communicate()
    except asyncio.CancelledError:
        process.kill()
        await process.wait()
        raise

    output = stdout.decode(errors="replace")
    result = {"command": command, "output": output, "exit_code": process.returncode}
    if process.returncode != 0:
        return ToolOutput(
            tool_name=tool_name,
            result=result,
            error=f"command exited with status {process.returncode}: {output}",
            success=False,
        )
    return ToolOutput(tool_name=tool_name, result=result)


class RunCommandTool(BaseTool):
    def definition(self) -> ToolSchema:
        return ToolSchema(
            name="run_command",
            description="Execute a shell command and return its combined output.",
            arguments=(
                ToolArgument(name="command", type="string", description="Shell command to execute."),
            ),
        )

    async def run(self, args: dict[str, Any]) -> ToolOutput:
        return await run_shell("run_command", str(lookup_argument(args, "command")))
