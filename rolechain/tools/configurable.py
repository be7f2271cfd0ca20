"""User-declared tools whose execution is a shell-command template.

Each declared argument is substituted into the ``{{.name}}`` placeholders of
the command template, shell-quoted, and the result runs like run_command.
Templates should still come from trusted configuration only.
"""

from __future__ import annotations

import shlex
from typing import Any

from contracts.config import ConfigurableToolConfig
from contracts.tools import BaseTool, ToolOutput, ToolSchema
from rolechain.errors import MissingArgumentError, TemplateError
from rolechain.templating import format_value, render
from rolechain.tools.normalize import has_argument, lookup_argument
from rolechain.tools.run_command import run_shell


class ConfigurableTool(BaseTool):
    def __init__(self, config: ConfigurableToolConfig) -> None:
        self._config = config

    def definition(self) -> ToolSchema:
        return ToolSchema(
            name=self._config.name,
            description=self._config.description,
            arguments=tuple(self._config.arguments),
        )

    def build_command(self, args: dict[str, Any]) -> str:
        """Render the command template, raising if a declared argument is missing."""
        values: dict[str, str] = {}
        for arg in self._config.arguments:
            if not has_argument(args, arg.name):
                raise MissingArgumentError(self._config.name, arg.name)
            values[arg.name] = shlex.quote(format_value(lookup_argument(args, arg.name)))
        return render(self._config.command_template, values)

    async def run(self, args: dict[str, Any]) -> ToolOutput:
        try:
            command = self.build_command(args)
        except (MissingArgumentError, TemplateError) as exc:
            return ToolOutput(tool_name=self._config.name, error=str(exc), success=False)
        return await run_shell(self._config.name, command)
