"""Integration tests: chain execution over a scripted model, real tools and registry."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock

import pytest

from contracts.roles import Chain, ChainStep, Role
from rolechain.chain import ChainOrchestrator
from rolechain.errors import RoleError, RoleNotFoundError
from rolechain.extraction import ToolCallExtractor
from rolechain.invoker import RoleInvoker
from rolechain.tools.executor import ToolExecutor
from rolechain.tools.registry import create_default_registry


# ── Helpers ─────────────────────────────────────────────────────────


def _tool_reply(name: str, **arguments: Any) -> str:
    payload = json.dumps({"tool_call": {"name": name, "arguments": arguments}})
    return f"Next step:\n```json\n{payload}\n```"


def _orchestrator(caller: AsyncMock, roles: dict[str, Role]) -> ChainOrchestrator:
    registry = create_default_registry()
    invoker = RoleInvoker(caller, extractor=ToolCallExtractor(registry))
    return ChainOrchestrator(roles, invoker, ToolExecutor(registry, timeout=10))


CODER = Role(name="coder", model="flash", prompt="Task: {{.task}}\nLast: {{.lastToolResponseJSON}}")
REVIEWER = Role(name="reviewer", model="flash", prompt="Review: {{.code}}")


# ── Loop behaviour ──────────────────────────────────────────────────


class TestChainLoop:
    @pytest.mark.asyncio
    async def test_loop_condition_stops_early(self, tmp_path: Path) -> None:
        target = tmp_path / "out.txt"
        caller = AsyncMock(
            side_effect=[
                _tool_reply("list_dir", path=str(tmp_path)),
                _tool_reply("list_dir", path=str(tmp_path)),
                _tool_reply("write_file", file_path=str(target), content="final content"),
            ]
        )
        chain = Chain(
            name="build",
            steps=[
                ChainStep(
                    role="coder",
                    input={"task": "{{.task}}"},
                    output_key="code",
                    loop=True,
                    loop_count=10,
                    loop_condition="{{.tool_call.name}} == 'write_file'",
                )
            ],
        )

        context = await _orchestrator(caller, {"coder": CODER}).run(chain, {"task": "write it"})

        assert caller.await_count == 3
        assert context["code"] == "final content"
        assert context["tool_call"]["name"] == "write_file"
        assert target.read_text() == "final content"

    @pytest.mark.asyncio
    async def test_last_tool_response_fed_to_next_iteration(self, tmp_path: Path) -> None:
        (tmp_path / "seen.txt").write_text("x")
        caller = AsyncMock(
            side_effect=[_tool_reply("list_dir", path=str(tmp_path)), "all done"]
        )
        chain = Chain(
            name="explore",
            steps=[ChainStep(role="coder", input={"task": "look"}, loop=True, loop_count=2)],
        )

        await _orchestrator(caller, {"coder": CODER}).run(chain)

        first_prompt = caller.await_args_list[0].args[1]
        second_prompt = caller.await_args_list[1].args[1]
        assert first_prompt == "Task: look\nLast: "
        assert "seen.txt" in second_prompt

    @pytest.mark.asyncio
    async def test_tool_failure_wrapped_for_next_iteration(self, tmp_path: Path) -> None:
        missing = tmp_path / "missing.txt"
        caller = AsyncMock(side_effect=[_tool_reply("read_file", file_path=str(missing)), "ok"])
        chain = Chain(
            name="read",
            steps=[ChainStep(role="coder", input={"task": "read"}, loop=True, loop_count=2)],
        )

        await _orchestrator(caller, {"coder": CODER}).run(chain)

        second_prompt = caller.await_args_list[1].args[1]
        last = json.loads(second_prompt.split("Last: ", 1)[1])
        assert last["error"] == "tool execution failed"
        assert last["tool"] == "read_file"
        assert "missing.txt" in last["exec_error"]

    @pytest.mark.asyncio
    async def test_condition_render_error_keeps_looping(self) -> None:
        caller = AsyncMock(return_value="just text")
        chain = Chain(
            name="chatty",
            steps=[
                ChainStep(
                    role="coder",
                    input={"task": "talk"},
                    loop=True,
                    loop_count=3,
                    loop_condition="{{.tool_call.name}} == 'write_file'",
                )
            ],
        )

        await _orchestrator(caller, {"coder": CODER}).run(chain)

        assert caller.await_count == 3

    @pytest.mark.asyncio
    async def test_literal_true_condition_runs_once(self) -> None:
        caller = AsyncMock(return_value="text")
        chain = Chain(
            name="once",
            steps=[ChainStep(role="coder", loop=True, loop_count=5, loop_condition="TRUE")],
        )
        await _orchestrator(caller, {"coder": CODER}).run(chain)
        assert caller.await_count == 1


# ── Context handling ────────────────────────────────────────────────


class TestChainContext:
    @pytest.mark.asyncio
    async def test_outputs_flow_between_steps(self, tmp_path: Path) -> None:
        caller = AsyncMock(
            side_effect=[
                'Here you go: {"answer": 42}',
                "Looks good",
            ]
        )
        chain = Chain(
            name="pipeline",
            steps=[
                ChainStep(role="coder", input={"task": "{{.task}}"}, output_key="code"),
                ChainStep(role="reviewer", input={"code": "{{.code}}"}, output_key="review"),
            ],
        )

        context = await _orchestrator(caller, {"coder": CODER, "reviewer": REVIEWER}).run(
            chain, {"task": "answer"}
        )

        assert context["code"] == '{"answer": 42}'
        assert context["review"] == "Looks good"
        assert caller.await_args_list[1].args[1] == 'Review: {"answer": 42}'
        assert "tool_call" not in context

    @pytest.mark.asyncio
    async def test_bare_file_object_is_written(self, tmp_path: Path) -> None:
        target = tmp_path / "notes" / "todo.txt"
        reply = json.dumps({"file_path": str(target), "content": "buy milk"})
        caller = AsyncMock(side_effect=[f"```json\n{reply}\n```", "done"])
        chain = Chain(
            name="notes",
            steps=[
                ChainStep(role="coder", input={"task": "note"}, output_key="code", loop=True, loop_count=2)
            ],
        )

        context = await _orchestrator(caller, {"coder": CODER}).run(chain)

        assert target.read_text() == "buy milk"
        second_prompt = caller.await_args_list[1].args[1]
        assert '"content": "buy milk"' in second_prompt
        assert "tool_call" not in context
        assert context["code"] == "done"

    @pytest.mark.asyncio
    async def test_file_object_without_path_is_plain_output(self) -> None:
        caller = AsyncMock(return_value=json.dumps({"file_path": "", "content": "x"}))
        chain = Chain(name="c", steps=[ChainStep(role="coder", input={"task": "t"}, output_key="code")])

        context = await _orchestrator(caller, {"coder": CODER}).run(chain)

        assert context["code"] == json.dumps({"file_path": "", "content": "x"})
        assert "tool_call" not in context

    @pytest.mark.asyncio
    async def test_tool_call_key_cleared_after_plain_text(self, tmp_path: Path) -> None:
        caller = AsyncMock(side_effect=[_tool_reply("list_dir", path=str(tmp_path)), "plain"])
        chain = Chain(
            name="two",
            steps=[ChainStep(role="coder", input={"task": "a"}), ChainStep(role="coder", input={"task": "b"})],
        )
        context = await _orchestrator(caller, {"coder": CODER}).run(chain)
        assert "tool_call" not in context

    @pytest.mark.asyncio
    async def test_initial_input_not_mutated(self) -> None:
        caller = AsyncMock(return_value="out")
        chain = Chain(name="c", steps=[ChainStep(role="coder", output_key="code")])
        initial = {"task": "x"}
        await _orchestrator(caller, {"coder": CODER}).run(chain, initial)
        assert initial == {"task": "x"}


# ── Errors ──────────────────────────────────────────────────────────


class TestChainErrors:
    @pytest.mark.asyncio
    async def test_unknown_role_aborts_before_invocation(self) -> None:
        caller = AsyncMock(return_value="unused")
        chain = Chain(
            name="bad",
            steps=[ChainStep(role="coder"), ChainStep(role="ghost")],
        )
        with pytest.raises(RoleNotFoundError, match="ghost"):
            await _orchestrator(caller, {"coder": CODER}).run(chain)
        caller.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_input_render_failure_names_step_and_role(self) -> None:
        caller = AsyncMock(return_value="unused")
        chain = Chain(
            name="bad",
            steps=[ChainStep(role="coder", input={"task": "{{.plan.first}}"})],
        )
        with pytest.raises(RoleError, match=r"step 0 \(role 'coder'\)"):
            await _orchestrator(caller, {"coder": CODER}).run(chain)
        caller.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_role_failure_aborts_chain(self) -> None:
        caller = AsyncMock(side_effect=RuntimeError("backend down"))
        chain = Chain(
            name="fragile",
            steps=[ChainStep(role="coder"), ChainStep(role="reviewer")],
        )
        with pytest.raises(RoleError, match="role 'coder'"):
            await _orchestrator(caller, {"coder": CODER, "reviewer": REVIEWER}).run(chain)
        assert caller.await_count == 1
