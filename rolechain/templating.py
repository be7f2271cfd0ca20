"""Minimal ``{{.path}}`` template rendering for prompts, chain inputs and conditions.

Supported actions are field paths only: ``{{.task}}``, ``{{ .tool_call.name }}``
and ``{{.}}`` (the whole context).  A missing final key renders as an empty
string; walking through a missing or non-mapping value is a TemplateError, as
is an unclosed or unsupported action.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel

from rolechain.errors import TemplateError

_OPEN = "{{"
_CLOSE = "}}"
_FIELD = re.compile(r"^[A-Za-z0-9_\-]+$")


def is_template(value: Any) -> bool:
    return isinstance(value, str) and _OPEN in value


def _parse_path(expr: str) -> list[str]:
    expr = expr.strip()
    if expr == ".":
        return []
    parts = expr.removeprefix(".").split(".")
    if not all(_FIELD.match(part) for part in parts):
        raise TemplateError(f"unsupported template action: {{{{{expr}}}}}")
    return parts


def _resolve(data: Any, parts: list[str], expr: str) -> Any:
    current = data
    for i, part in enumerate(parts):
        if current is None and i > 0:
            raise TemplateError(f"nil value evaluating {parts[i - 1]}.{part} in {expr!r}")
        if isinstance(current, BaseModel):
            current = current.model_dump()
        if isinstance(current, Mapping):
            current = current.get(part)
        else:
            raise TemplateError(
                f"can't evaluate field {part} in type {type(current).__name__} in {expr!r}"
            )
    return current


def format_value(value: Any) -> str:
    """Render a context value as template output text."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, BaseModel):
        return value.model_dump_json()
    if isinstance(value, (Mapping, list, tuple)):
        return json.dumps(value, default=str)
    return str(value)


def _actions(template: str) -> list[tuple[int, int, str]]:
    """Return (start, end, expression) spans for every action in *template*."""
    spans: list[tuple[int, int, str]] = []
    pos = 0
    while True:
        start = template.find(_OPEN, pos)
        if start == -1:
            return spans
        end = template.find(_CLOSE, start + len(_OPEN))
        if end == -1:
            raise TemplateError(f"unclosed action at offset {start}")
        spans.append((start, end + len(_CLOSE), template[start + len(_OPEN):end]))
        pos = end + len(_CLOSE)


def render(template: str, data: Mapping[str, Any]) -> str:
    """Render *template* against *data*."""
    out: list[str] = []
    pos = 0
    for start, end, expr in _actions(template):
        out.append(template[pos:start])
        out.append(format_value(_resolve(data, _parse_path(expr), expr)))
        pos = end
    out.append(template[pos:])
    return "".join(out)


def placeholders(template: str) -> list[str]:
    """Return the top-level field names referenced by *template*, in order."""
    names: list[str] = []
    for _, _, expr in _actions(template):
        parts = _parse_path(expr)
        if parts and parts[0] not in names:
            names.append(parts[0])
    return names
