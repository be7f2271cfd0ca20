"""Interactive session — present each extracted tool call for human review.

Per call: Presented -> Approved | Edited | Rejected | Replanned.  Edits do
not count toward ``max_iterations``; every other choice does.
"""

from __future__ import annotations

import json
import subprocess
from pathlib import Path
from typing import Any, Mapping

from contracts.roles import Role
from contracts.tools import ToolCall
from contracts.transcript import Step, Transcript
from contracts.ui import UI
from rolechain.errors import RoleNotFoundError, UIError
from rolechain.extraction.json_scan import loads_embedded
from rolechain.extraction.strategies import tool_call_from_mapping
from rolechain.invoker import RoleInvoker
from rolechain.logging import get_logger
from rolechain.templating import format_value, placeholders
from rolechain.tools.diff import backup_file, generate_unified_diff, read_file_or_empty
from rolechain.tools.executor import ToolExecutor
from rolechain.tools.normalize import lookup_argument

log = get_logger(__name__)

APPROVE = "Approve & execute"
EDIT = "Edit tool_call JSON"
REJECT = "Reject"
REPLAN = "Ask LLM to re-plan"
OPTIONS = [APPROVE, EDIT, REJECT, REPLAN]

DEFAULT_MAX_ITERATIONS = 10


class InteractiveSession:
    def __init__(
        self,
        ui: UI,
        roles: Mapping[str, Role],
        invoker: RoleInvoker,
        executor: ToolExecutor,
        *,
        dry_run: bool = False,
        yes: bool = False,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
        transcript_path: str | Path | None = None,
    ) -> None:
        self.ui = ui
        self._roles = roles
        self._invoker = invoker
        self._executor = executor
        self.dry_run = dry_run
        self.yes = yes
        self.max_iterations = max(1, max_iterations)
        self.transcript_path = Path(transcript_path) if transcript_path else None
        self.transcript: Transcript | None = None

    async def run(
        self, role_name: str | None = None, inputs: Mapping[str, Any] | None = None
    ) -> Transcript | None:
        """Run one session.  Returns the transcript, or None if aborted at start."""
        if not self.yes and not self.ui.confirm("Start session?"):
            self.ui.echo("Session aborted.")
            return None

        if role_name is None:
            role_name = self.ui.prompt_select(sorted(self._roles))
        role = self._roles.get(role_name)
        if role is None:
            raise RoleNotFoundError(role_name)

        self.transcript = Transcript(role=role_name)
        try:
            role_input = self._collect_inputs(role, inputs or {})
            result = await self._invoker.invoke(role, role_input)
            if result.tool_call is None:
                self._show_output(result.raw)
            else:
                await self._review(role, role_input, result.tool_call, result.raw)
        finally:
            self._write_transcript()
        return self.transcript

    # ── review loop ─────────────────────────────────────────────────

    async def _review(
        self, role: Role, inputs: dict[str, Any], call: ToolCall, llm_output: str
    ) -> None:
        assert self.transcript is not None
        used = 0
        while used < self.max_iterations:
            self.ui.pretty_print(call.model_dump(exclude_none=True))
            choice = APPROVE if self.yes else self.ui.prompt_select(OPTIONS)
            step = Step(llm_output=llm_output, tool_call=call)

            if choice == EDIT:
                self.transcript.steps.append(step)
                call = self._edit(call)
                continue

            used += 1
            if choice == APPROVE:
                proceed, value = await self._approve(call)
                step.approved = True
                step.result = value
                self.transcript.steps.append(step)
                if not proceed:
                    return
                inputs["tool_output"] = value
            elif choice == REPLAN:
                self.transcript.steps.append(step)
                self.ui.echo("Enter new instruction:")
                instruction = self._open_editor("")
                if instruction is None:
                    return
                inputs["instruction"] = instruction
            else:
                self.transcript.steps.append(step)
                self.ui.echo("Tool call rejected.")
                return

            result = await self._invoker.invoke(role, inputs)
            llm_output = result.raw
            if result.tool_call is None:
                self._show_output(result.raw)
                return
            call = result.tool_call

        log.info("Session reached max iterations", max_iterations=self.max_iterations)
        self.ui.echo(f"Stopped after {self.max_iterations} iterations.")

    async def _approve(self, call: ToolCall) -> tuple[bool, Any]:
        tool = self._executor.registry.resolve_name(call.name)

        if self.dry_run:
            self.ui.echo("DRY RUN: Tool call would be:")
            self.ui.pretty_print(call.model_dump(exclude_none=True))
            if tool == "write_file":
                file_path, content = self._write_args(call)
                if file_path is None:
                    return False, None
                diff = generate_unified_diff(file_path, read_file_or_empty(file_path), content)
                self.ui.echo("DRY RUN: Diff:")
                self.ui.echo(diff)
            elif tool == "run_command":
                self.ui.echo(f"DRY RUN: Command: {lookup_argument(call.arguments, 'command', '')}")
            return True, None

        if tool == "write_file":
            file_path, content = self._write_args(call)
            if file_path is None:
                return False, None
            self.ui.echo("Diff:")
            self.ui.echo(generate_unified_diff(file_path, read_file_or_empty(file_path), content))
            if not self._confirm("Apply this change?"):
                self.ui.echo("Change rejected.")
                return False, None
            try:
                backup = backup_file(file_path)
            except OSError as exc:
                self.ui.echo(f"Error creating backup: {exc}")
                return False, None
            if backup:
                self.ui.echo(f"Backup created at: {backup}")

        elif tool == "run_command":
            command = lookup_argument(call.arguments, "command")
            if not isinstance(command, str):
                self.ui.echo("Error: Missing or invalid 'command' argument for run_command tool.")
                return False, None
            self.ui.echo(f"Command to execute: {command}")
            if not self._confirm("Execute this command?"):
                self.ui.echo("Command rejected.")
                return False, None

        output = await self._executor.execute(call)
        if not output.success:
            self.ui.echo(f"Error: {output.error}")
            return False, {"error": output.error, "tool": call.name}
        self.ui.echo("Tool output:")
        self.ui.pager(format_value(output.result))
        return True, output.result

    # ── helpers ─────────────────────────────────────────────────────

    def _confirm(self, prompt: str) -> bool:
        return self.yes or self.ui.confirm(prompt)

    def _open_editor(self, content: str) -> str | None:
        try:
            return self.ui.open_editor(content)
        except (OSError, subprocess.CalledProcessError) as exc:
            log.warning("Editor failed", error=str(exc))
            self.ui.echo(f"Error opening editor: {exc}")
            return None

    def _write_args(self, call: ToolCall) -> tuple[str | None, str]:
        file_path = lookup_argument(call.arguments, "file_path")
        content = lookup_argument(call.arguments, "content")
        if not isinstance(file_path, str):
            self.ui.echo("Error: Missing or invalid 'file_path' argument for write_file tool.")
            return None, ""
        if not isinstance(content, str):
            self.ui.echo("Error: Missing or invalid 'content' argument for write_file tool.")
            return None, ""
        return file_path, content

    def _edit(self, call: ToolCall) -> ToolCall:
        text = json.dumps(call.model_dump(exclude_none=True), indent=2)
        edited = self._open_editor(text)
        if edited is None:
            return call
        parsed = tool_call_from_mapping(loads_embedded(edited))
        if parsed is None:
            self.ui.echo("Error: edited text is not a valid tool call; keeping the original.")
            return call
        return parsed

    def _collect_inputs(self, role: Role, given: Mapping[str, Any]) -> dict[str, Any]:
        inputs = dict(given)
        for name in placeholders(role.prompt):
            if name not in inputs:
                self.ui.echo(f"Enter value for input '{name}':")
                value = self._open_editor("")
                if value is None:
                    raise UIError(f"no value entered for input '{name}'")
                inputs[name] = value
        return inputs

    def _show_output(self, raw: str) -> None:
        self.ui.echo("Role output:")
        self.ui.pager(raw)

    def _write_transcript(self) -> None:
        if self.transcript_path is None or self.transcript is None:
            return
        try:
            self.transcript_path.parent.mkdir(parents=True, exist_ok=True)
            self.transcript_path.write_text(
                self.transcript.model_dump_json(indent=2), encoding="utf-8"
            )
        except OSError as exc:
            self.ui.echo(f"Error writing transcript: {exc}")
            return
        self.ui.echo(f"Transcript written to: {self.transcript_path}")
