"""Tool executor — validate, dispatch, and run tool calls with retry/timeout.

Each attempt runs on its own asyncio task and is raced against the attempt
timeout.  A timed-out task is abandoned, not killed, unless
``cancel_on_timeout`` is set: side effects of an abandoned attempt may still
complete after ``execute`` returns.
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable

from tenacity import AsyncRetrying, RetryCallState, retry_if_exception_type, stop_after_attempt

from contracts.tools import BaseTool, ToolCall, ToolOutput
from rolechain.errors import (
    ImplementationNotFoundError,
    ToolError,
    ToolExecutionError,
    ToolTimeoutError,
)
from rolechain.logging import get_logger
from rolechain.tools.registry import ToolRegistry

log = get_logger(__name__)

MetricsHook = Callable[[str, dict[str, Any]], None]


class ToolExecutor:
    """Runs ToolCalls against a ToolRegistry."""

    def __init__(
        self,
        registry: ToolRegistry,
        *,
        retry_count: int = 1,
        timeout: float = 0.0,
        metrics_hook: MetricsHook | None = None,
        cancel_on_timeout: bool = False,
    ) -> None:
        self._registry = registry
        self.retry_count = max(1, retry_count)
        self.timeout = timeout
        self._metrics_hook = metrics_hook
        self._cancel_on_timeout = cancel_on_timeout
        self._abandoned: set[asyncio.Task[ToolOutput]] = set()

    @property
    def registry(self) -> ToolRegistry:
        return self._registry

    async def execute(self, call: ToolCall) -> ToolOutput:
        """Execute *call*.  Tool-level failures are reported, never raised."""
        bound = log.bind(tool=call.name)
        self._emit("tool_call_start", tool=call.name, args=call.arguments)

        error = self._registry.validate(call)
        if error is not None:
            bound.warning("Tool call validation failed", error=str(error))
            self._emit("tool_call_validation_failed", tool=call.name, error=str(error))
            return _failure(call.name, error, attempts=0)

        schema, impl = self._registry.lookup(call.name)
        if impl is None:
            error = ImplementationNotFoundError(schema.name)
            bound.error("Tool implementation not found")
            self._emit("tool_call_impl_not_found", tool=schema.name)
            return _failure(schema.name, error, attempts=0)

        retrying = AsyncRetrying(
            reraise=True,
            stop=stop_after_attempt(self.retry_count),
            retry=retry_if_exception_type(ToolError),
            before=lambda state: self._emit(
                "tool_call_attempt", tool=schema.name, attempt=state.attempt_number
            ),
            after=lambda state: self._attempt_failed(schema.name, state),
        )
        try:
            async for attempt in retrying:
                with attempt:
                    number = attempt.retry_state.attempt_number
                    output = await self._attempt(impl, schema.name, call)
        except ToolError as exc:
            bound.error("Tool failed after all attempts", retries=self.retry_count, error=str(exc))
            self._emit(
                "tool_call_final_failure",
                tool=schema.name,
                retries=self.retry_count,
                error=str(exc),
            )
            return _failure(schema.name, exc, attempts=self.retry_count)

        bound.info("Tool succeeded", attempt=number)
        self._emit("tool_call_success", tool=schema.name, attempt=number)
        return output.model_copy(update={"tool_name": schema.name, "attempts": number})

    # ── internal ────────────────────────────────────────────────────

    async def _attempt(self, impl: BaseTool, tool_name: str, call: ToolCall) -> ToolOutput:
        """Run one attempt raced against the timeout.  Raises ToolError on failure."""
        task = asyncio.ensure_future(impl.run(call.arguments))
        done, _ = await asyncio.wait({task}, timeout=self.timeout or None)
        if task not in done:
            self._abandon(task)
            raise ToolTimeoutError(tool_name, self.timeout)

        exc = task.exception()
        if isinstance(exc, ToolError):
            raise exc
        if exc is not None:
            raise ToolExecutionError(tool_name, str(exc) or type(exc).__name__) from exc
        output = task.result()
        if not output.success:
            raise ToolExecutionError(tool_name, output.error or "tool reported failure")
        return output

    def _attempt_failed(self, tool_name: str, state: RetryCallState) -> None:
        assert state.outcome is not None
        error = state.outcome.exception()
        bound = log.bind(tool=tool_name)
        if isinstance(error, ToolTimeoutError):
            bound.error("Tool attempt timed out", attempt=state.attempt_number, timeout=self.timeout)
            self._emit(
                "tool_call_timeout",
                tool=tool_name,
                attempt=state.attempt_number,
                timeout=self.timeout,
            )
            return
        bound.warning("Tool attempt failed", attempt=state.attempt_number, error=str(error))
        self._emit(
            "tool_call_failure", tool=tool_name, attempt=state.attempt_number, error=str(error)
        )

    def _abandon(self, task: asyncio.Task[ToolOutput]) -> None:
        if self._cancel_on_timeout:
            task.cancel()
            return
        # Keep a reference so the task is not collected mid-flight, and
        # retrieve its outcome so asyncio does not warn about it.
        self._abandoned.add(task)
        task.add_done_callback(self._reap)

    def _reap(self, task: asyncio.Task[ToolOutput]) -> None:
        self._abandoned.discard(task)
        if not task.cancelled():
            task.exception()

    def _emit(self, event: str, **fields: Any) -> None:
        if self._metrics_hook is not None:
            self._metrics_hook(event, fields)


def _failure(tool_name: str, error: ToolError, *, attempts: int) -> ToolOutput:
    return ToolOutput(
        tool_name=tool_name,
        error=str(error),
        error_type=type(error).__name__,
        success=False,
        attempts=attempts,
    )
