"""Loop-condition evaluation for chain steps.

A condition is rendered as a template and then read as one of:
``true`` / ``false`` (case-insensitive), ``left == 'right'`` or
``left != 'right'``.  Anything else is false.
"""

from __future__ import annotations

import re
from typing import Any, Mapping

from rolechain.templating import render

_COMPARISON = re.compile(r"^(.*?)(==|!=)(.*)$", re.DOTALL)


def _unquote(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "'\"":
        return value[1:-1]
    return value


def interpret(rendered: str) -> bool:
    """Interpret an already-rendered condition string."""
    text = rendered.strip()
    lowered = text.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    match = _COMPARISON.match(text)
    if match is None:
        return False
    left, op, right = match.groups()
    equal = left.strip() == _unquote(right)
    return equal if op == "==" else not equal


def evaluate_loop_condition(expr: str, context: Mapping[str, Any]) -> bool:
    """Render *expr* against *context* and interpret it.  Raises TemplateError."""
    return interpret(render(expr, context))
