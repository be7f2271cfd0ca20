"""Unit tests for the role invoker."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from contracts.roles import Role
from rolechain.audit.logger import JsonlRoleCallLogger
from rolechain.errors import ModelCallError, TemplateError
from rolechain.extraction import ToolCallExtractor
from rolechain.invoker import RoleInvoker
from rolechain.tools.registry import create_default_registry

FIXED_NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

ROLE = Role(name="coder", model="flash", prompt="Task: {{.task}}")


class TestRoleInvoker:
    @pytest.mark.asyncio
    async def test_renders_prompt_and_returns_text(self) -> None:
        caller = AsyncMock(return_value="Plain answer")
        result = await RoleInvoker(caller).invoke(ROLE, {"task": "sum numbers"})

        caller.assert_awaited_once_with(ROLE, "Task: sum numbers")
        assert result.raw == "Plain answer"
        assert result.text == "Plain answer"
        assert result.tool_call is None
        assert result.role == "coder"

    @pytest.mark.asyncio
    async def test_extracts_tool_call_and_sanitizes_text(self) -> None:
        raw = '```json\n{"tool_call": {"name": "list_dir", "arguments": {"path": "."}}}\n```'
        caller = AsyncMock(return_value=raw)
        invoker = RoleInvoker(caller, extractor=ToolCallExtractor(create_default_registry()))

        result = await invoker.invoke(ROLE, {"task": "look around"})

        assert result.tool_call is not None
        assert result.tool_call.name == "list_dir"
        assert result.extraction.strategy == "json_code_block"
        assert result.text == '{"tool_call": {"name": "list_dir", "arguments": {"path": "."}}}'

    @pytest.mark.asyncio
    async def test_prompt_render_failure_is_hard_error(self) -> None:
        caller = AsyncMock(return_value="unused")
        role = Role(name="broken", model="m", prompt="{{.task")
        with pytest.raises(TemplateError, match="broken"):
            await RoleInvoker(caller).invoke(role, {"task": "x"})
        caller.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_logs_successful_call(self, tmp_path: Path) -> None:
        audit = JsonlRoleCallLogger(tmp_path / "roles.jsonl")
        invoker = RoleInvoker(AsyncMock(return_value="hi"), audit=audit, clock=lambda: FIXED_NOW)

        await invoker.invoke(ROLE, {"task": "greet"})

        (entry,) = audit.tail()
        assert entry.role_name == "coder"
        assert entry.input == {"task": "greet"}
        assert entry.output == "hi"
        assert entry.error is None
        assert entry.timestamp == FIXED_NOW

    @pytest.mark.asyncio
    async def test_model_failure_is_logged_and_raised(self, tmp_path: Path) -> None:
        audit = JsonlRoleCallLogger(tmp_path / "roles.jsonl")
        caller = AsyncMock(side_effect=RuntimeError("backend down"))
        invoker = RoleInvoker(caller, audit=audit)

        with pytest.raises(ModelCallError, match="backend down"):
            await invoker.invoke(ROLE, {"task": "x"})

        (entry,) = audit.tail()
        assert entry.error == "backend down"
        assert entry.output == ""

    @pytest.mark.asyncio
    async def test_model_call_error_passes_through(self) -> None:
        error = ModelCallError("quota exceeded", status_code=429)
        invoker = RoleInvoker(AsyncMock(side_effect=error))
        with pytest.raises(ModelCallError) as info:
            await invoker.invoke(ROLE, {"task": "x"})
        assert info.value is error
