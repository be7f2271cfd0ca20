"""Visitor over decoded JSON values.

Strings that themselves decode to a JSON object or array are descended into,
so a tool call escaped inside another envelope is still reachable.
"""

from __future__ import annotations

import json
from typing import Any, Iterator

MAX_DEPTH = 32


def loads_embedded(text: str) -> Any:
    """Decode *text* if it looks like a JSON object/array, else return None."""
    stripped = text.strip()
    if not stripped or stripped[0] not in "{[":
        return None
    try:
        return json.loads(stripped)
    except ValueError:
        return None


class JsonVisitor:
    """Dispatches on the JSON value kind: object, array, string or scalar."""

    def visit(self, value: Any, depth: int = 0) -> None:
        if depth > MAX_DEPTH:
            return
        if isinstance(value, dict):
            self.visit_object(value, depth)
        elif isinstance(value, list):
            self.visit_array(value, depth)
        elif isinstance(value, str):
            self.visit_string(value, depth)
        else:
            self.visit_scalar(value, depth)

    def visit_object(self, value: dict[str, Any], depth: int) -> None:
        for child in value.values():
            self.visit(child, depth + 1)

    def visit_array(self, value: list[Any], depth: int) -> None:
        for child in value:
            self.visit(child, depth + 1)

    def visit_string(self, value: str, depth: int) -> None:
        pass

    def visit_scalar(self, value: Any, depth: int) -> None:
        pass


class ObjectCollector(JsonVisitor):
    """Collects every object in pre-order, including ones embedded in strings."""

    def __init__(self) -> None:
        self.objects: list[dict[str, Any]] = []

    def visit_object(self, value: dict[str, Any], depth: int) -> None:
        self.objects.append(value)
        super().visit_object(value, depth)

    def visit_string(self, value: str, depth: int) -> None:
        embedded = loads_embedded(value)
        if embedded is not None:
            self.visit(embedded, depth + 1)


def iter_objects(value: Any) -> Iterator[dict[str, Any]]:
    collector = ObjectCollector()
    collector.visit(value)
    return iter(collector.objects)
