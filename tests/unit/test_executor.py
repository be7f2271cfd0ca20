"""Unit tests for the tool executor's validation, retry and timeout handling."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from contracts.tools import BaseTool, ToolArgument, ToolCall, ToolOutput, ToolSchema
from rolechain.errors import ToolExecutionError
from rolechain.tools.executor import ToolExecutor
from rolechain.tools.registry import ToolRegistry


# ── Helpers ─────────────────────────────────────────────────────────


class FlakyTool(BaseTool):
    """Fails for the first ``failures`` calls, then succeeds."""

    def __init__(self, failures: int, *, raise_error: bool = False) -> None:
        self.failures = failures
        self.raise_error = raise_error
        self.calls = 0

    def definition(self) -> ToolSchema:
        return ToolSchema(name="flaky", arguments=(ToolArgument(name="value", type="int"),))

    async def run(self, args: dict[str, Any]) -> ToolOutput:
        self.calls += 1
        if self.calls <= self.failures:
            if self.raise_error:
                raise RuntimeError("exploded")
            return ToolOutput(tool_name="flaky", error="not yet", success=False)
        return ToolOutput(tool_name="flaky", result={"value": args["value"], "call": self.calls})


class SlowTool(BaseTool):
    def __init__(self, delay: float) -> None:
        self.delay = delay
        self.started = 0
        self.finished = 0

    def definition(self) -> ToolSchema:
        return ToolSchema(name="slow")

    async def run(self, args: dict[str, Any]) -> ToolOutput:
        self.started += 1
        await asyncio.sleep(self.delay)
        self.finished += 1
        return ToolOutput(tool_name="slow", result="done")


def _executor(tool: BaseTool, **kwargs: Any) -> tuple[ToolExecutor, list[tuple[str, dict]]]:
    reg = ToolRegistry()
    reg.register(tool)
    events: list[tuple[str, dict]] = []
    executor = ToolExecutor(reg, metrics_hook=lambda e, f: events.append((e, f)), **kwargs)
    return executor, events


# ── Tests ───────────────────────────────────────────────────────────


class TestToolExecutor:
    @pytest.mark.asyncio
    async def test_success_first_try(self) -> None:
        tool = FlakyTool(failures=0)
        executor, events = _executor(tool)
        out = await executor.execute(ToolCall(name="flaky", arguments={"value": 1}))
        assert out.success
        assert out.attempts == 1
        assert out.result == {"value": 1, "call": 1}
        assert [e for e, _ in events] == ["tool_call_start", "tool_call_attempt", "tool_call_success"]

    @pytest.mark.asyncio
    async def test_retry_then_succeed(self) -> None:
        tool = FlakyTool(failures=1)
        executor, events = _executor(tool, retry_count=3)
        out = await executor.execute(ToolCall(name="flaky", arguments={"value": 7}))
        assert out.success
        assert out.attempts == 2
        assert out.result == {"value": 7, "call": 2}
        assert tool.calls == 2
        assert ("tool_call_failure", {"tool": "flaky", "attempt": 1, "error": "Tool 'flaky' failed: not yet"}) in events

    @pytest.mark.asyncio
    async def test_raised_exception_is_retried(self) -> None:
        tool = FlakyTool(failures=1, raise_error=True)
        executor, _ = _executor(tool, retry_count=2)
        out = await executor.execute(ToolCall(name="flaky", arguments={"value": 1}))
        assert out.success
        assert tool.calls == 2

    @pytest.mark.asyncio
    async def test_exhausted_retries_return_last_error(self) -> None:
        tool = FlakyTool(failures=5)
        executor, events = _executor(tool, retry_count=3)
        out = await executor.execute(ToolCall(name="flaky", arguments={"value": 1}))
        assert not out.success
        assert out.attempts == 3
        assert out.error_type == ToolExecutionError.__name__
        assert tool.calls == 3
        assert events[-1][0] == "tool_call_final_failure"

    @pytest.mark.asyncio
    async def test_retry_count_minimum_one(self) -> None:
        tool = FlakyTool(failures=0)
        executor, _ = _executor(tool, retry_count=0)
        assert executor.retry_count == 1
        out = await executor.execute(ToolCall(name="flaky", arguments={"value": 1}))
        assert out.success

    @pytest.mark.asyncio
    async def test_timeout_after_exactly_retry_count_attempts(self) -> None:
        tool = SlowTool(delay=0.2)
        executor, events = _executor(tool, retry_count=3, timeout=0.05)

        out = await asyncio.wait_for(executor.execute(ToolCall(name="slow")), timeout=2.0)

        assert not out.success
        assert out.error_type == "ToolTimeoutError"
        assert out.attempts == 3
        assert tool.started == 3
        assert sum(1 for e, _ in events if e == "tool_call_timeout") == 3
        # Abandoned attempts are not killed and still finish later.
        await asyncio.sleep(0.3)
        assert tool.finished == 3

    @pytest.mark.asyncio
    async def test_cancel_on_timeout_stops_attempts(self) -> None:
        tool = SlowTool(delay=0.2)
        executor, _ = _executor(tool, retry_count=2, timeout=0.05, cancel_on_timeout=True)
        out = await executor.execute(ToolCall(name="slow"))
        assert not out.success
        await asyncio.sleep(0.3)
        assert tool.finished == 0

    @pytest.mark.asyncio
    async def test_zero_timeout_is_unbounded(self) -> None:
        tool = SlowTool(delay=0.05)
        executor, _ = _executor(tool, timeout=0)
        out = await executor.execute(ToolCall(name="slow"))
        assert out.success
        assert out.result == "done"

    @pytest.mark.asyncio
    async def test_validation_failure_skips_execution(self) -> None:
        tool = FlakyTool(failures=0)
        executor, events = _executor(tool)
        out = await executor.execute(ToolCall(name="flaky", arguments={}))
        assert not out.success
        assert out.error_type == "MissingArgumentError"
        assert out.attempts == 0
        assert tool.calls == 0
        assert events[-1][0] == "tool_call_validation_failed"

    @pytest.mark.asyncio
    async def test_normalized_name_dispatch(self) -> None:
        tool = FlakyTool(failures=0)
        executor, _ = _executor(tool)
        out = await executor.execute(ToolCall(name="Flaky", arguments={"value": 3}))
        assert out.success
        assert out.tool_name == "flaky"

    @pytest.mark.asyncio
    async def test_missing_implementation(self) -> None:
        reg = ToolRegistry()
        reg.register_schema(ToolSchema(name="ghost"))
        out = await ToolExecutor(reg).execute(ToolCall(name="ghost"))
        assert not out.success
        assert out.error_type == "ImplementationNotFoundError"
