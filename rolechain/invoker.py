"""Role invoker — render a role prompt, call the model, extract a tool call."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Mapping

from contracts.audit import RoleCallLogEntry, RoleCallLogger
from contracts.roles import Role
from contracts.tools import ToolCall
from rolechain.errors import ModelCallError, RoleError, TemplateError
from rolechain.extraction import Extraction, ToolCallExtractor, extract_first_json
from rolechain.logging import get_logger
from rolechain.templating import render

log = get_logger(__name__)

ModelCaller = Callable[[Role, str], Awaitable[str]]
Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class RoleResult:
    role: str
    raw: str
    text: str
    extraction: Extraction = field(default_factory=Extraction)

    @property
    def tool_call(self) -> ToolCall | None:
        return self.extraction.tool_call


class RoleInvoker:
    """Invokes roles through an injected model caller.

    Every invocation appends one RoleCallLogEntry when an audit logger is
    configured, including failed model calls.
    """

    def __init__(
        self,
        model_caller: ModelCaller,
        *,
        extractor: ToolCallExtractor | None = None,
        audit: RoleCallLogger | None = None,
        clock: Clock = _utcnow,
    ) -> None:
        self._model_caller = model_caller
        self._extractor = extractor or ToolCallExtractor()
        self._audit = audit
        self._clock = clock

    @property
    def extractor(self) -> ToolCallExtractor:
        return self._extractor

    async def invoke(self, role: Role, inputs: Mapping[str, Any]) -> RoleResult:
        try:
            prompt = render(role.prompt, inputs)
        except TemplateError as exc:
            raise TemplateError(f"Failed to render prompt for role '{role.name}': {exc}") from exc

        bound = log.bind(role=role.name, model=role.model)
        bound.info("Invoking role")
        try:
            raw = await self._model_caller(role, prompt)
        except Exception as exc:
            self._record(role, inputs, "", str(exc))
            bound.error("Role invocation failed", error=str(exc))
            if isinstance(exc, RoleError):
                raise
            raise ModelCallError(f"Role '{role.name}' failed: {exc}") from exc

        self._record(role, inputs, raw, None)
        extraction = self._extractor.extract(raw)
        return RoleResult(
            role=role.name,
            raw=raw,
            text=extract_first_json(raw),
            extraction=extraction,
        )

    def _record(
        self, role: Role, inputs: Mapping[str, Any], output: str, error: str | None
    ) -> None:
        if self._audit is None:
            return
        self._audit.log(
            RoleCallLogEntry(
                timestamp=self._clock(),
                role_name=role.name,
                input=json.loads(json.dumps(dict(inputs), default=str)),
                output=output,
                error=error,
            )
        )
