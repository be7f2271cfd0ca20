"""Chain orchestrator — run role steps in order over a shared context.

Per iteration: render inputs, invoke the role, extract a tool call, execute
it, record the output, then decide whether to loop again.
"""

from __future__ import annotations

import json
from typing import Any, Mapping

from contracts.roles import Chain, ChainStep, Role
from contracts.tools import ToolCall, ToolOutput
from rolechain.errors import RoleError, RoleNotFoundError, TemplateError
from rolechain.extraction.json_scan import loads_embedded
from rolechain.invoker import RoleInvoker, RoleResult
from rolechain.logging import get_logger
from rolechain.loop_condition import evaluate_loop_condition
from rolechain.templating import is_template, render
from rolechain.tools.executor import ToolExecutor

log = get_logger(__name__)

# Reserved context / role-input keys.
TOOL_CALL_KEY = "tool_call"
LAST_TOOL_RESPONSE_KEY = "lastToolResponse"
LAST_TOOL_RESPONSE_JSON_KEY = "lastToolResponseJSON"

_VALIDATION_ERRORS = {"ToolNotFoundError", "MissingArgumentError", "InvalidArgumentError"}


def tool_response(call: ToolCall, output: ToolOutput) -> Any:
    """The value fed back to the next iteration for an executed tool call."""
    if output.success:
        return output.result
    if output.error_type in _VALIDATION_ERRORS:
        return {
            "error": "tool call validation failed",
            "tool": call.name,
            "validation_error": output.error,
        }
    return {
        "error": "tool execution failed",
        "tool": call.name,
        "exec_error": output.error,
    }


def file_write_call(text: str) -> ToolCall | None:
    """A bare ``{"file_path": ..., "content": ...}`` reply is a write_file call."""
    obj = loads_embedded(text)
    if not isinstance(obj, dict):
        return None
    file_path = obj.get("file_path")
    content = obj.get("content")
    if not isinstance(file_path, str) or not file_path or not isinstance(content, str):
        return None
    return ToolCall(name="write_file", arguments={"file_path": file_path, "content": content})


class ChainOrchestrator:
    """Executes chains.  One instance may run many chains, one at a time."""

    def __init__(
        self,
        roles: Mapping[str, Role],
        invoker: RoleInvoker,
        executor: ToolExecutor,
    ) -> None:
        self._roles = roles
        self._invoker = invoker
        self._executor = executor

    async def run(self, chain: Chain, initial_input: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Run *chain* and return the final context."""
        for step in chain.steps:
            if step.role not in self._roles:
                raise RoleNotFoundError(step.role)

        context: dict[str, Any] = dict(initial_input or {})
        last_response: Any = None
        bound = log.bind(chain=chain.name)

        for index, step in enumerate(chain.steps):
            role = self._roles[step.role]
            iterations = step.iterations()
            for iteration in range(1, iterations + 1):
                bound.debug(
                    "Running chain step",
                    step=index,
                    role=step.role,
                    iteration=iteration,
                    iterations=iterations,
                )
                role_input = self._render_input(chain, index, step, context)
                if last_response is not None:
                    role_input[LAST_TOOL_RESPONSE_KEY] = last_response
                    role_input[LAST_TOOL_RESPONSE_JSON_KEY] = json.dumps(last_response, default=str)

                try:
                    result = await self._invoker.invoke(role, role_input)
                except RoleError as exc:
                    raise RoleError(
                        f"Chain '{chain.name}' step {index} failed in role '{step.role}': {exc}"
                    ) from exc

                output = None
                call = result.tool_call or file_write_call(result.text)
                if call is not None:
                    context[TOOL_CALL_KEY] = {"name": call.name, "arguments": call.arguments}
                    output = await self._executor.execute(call)
                    last_response = tool_response(call, output)
                else:
                    context.pop(TOOL_CALL_KEY, None)

                if step.output_key:
                    context[step.output_key] = _step_output(result, output)

                if step.loop and step.loop_condition and self._condition_met(
                    chain, index, step, context
                ):
                    bound.info("Loop condition met", step=index, iteration=iteration)
                    break

        return context

    # ── internal ────────────────────────────────────────────────────

    def _render_input(
        self, chain: Chain, index: int, step: ChainStep, context: Mapping[str, Any]
    ) -> dict[str, Any]:
        rendered: dict[str, Any] = {}
        for key, value in step.input.items():
            if not is_template(value):
                rendered[key] = value
                continue
            try:
                rendered[key] = render(value, context)
            except TemplateError as exc:
                raise RoleError(
                    f"Chain '{chain.name}' step {index} (role '{step.role}'): "
                    f"failed to render input '{key}': {exc}"
                ) from exc
        return rendered

    def _condition_met(
        self, chain: Chain, index: int, step: ChainStep, context: Mapping[str, Any]
    ) -> bool:
        try:
            return evaluate_loop_condition(step.loop_condition or "", context)
        except TemplateError as exc:
            log.warning(
                "Loop condition failed to render",
                chain=chain.name,
                step=index,
                role=step.role,
                error=str(exc),
            )
            return False


def _step_output(result: RoleResult, output: ToolOutput | None) -> Any:
    if output is not None and output.success and isinstance(output.result, Mapping):
        if "content" in output.result:
            return output.result["content"]
    return result.text
