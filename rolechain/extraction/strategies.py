"""Named tool-call extraction strategies.

Each strategy is a pure function of the raw text yielding candidate
ToolCalls in preference order; the extractor validates them.
"""

from __future__ import annotations

import json
import re
from typing import Any, Iterator, Protocol

import yaml

from contracts.tools import ToolCall
from rolechain.extraction.json_scan import iter_objects, loads_embedded

_JSON_FENCE = re.compile(r"```json\s*(\{.*?\})\s*```", re.DOTALL)
_ANY_FENCE = re.compile(r"```[A-Za-z]*\s*(\{.*?\})\s*```", re.DOTALL)
_YAML_FENCE = re.compile(r"```ya?ml\s*\n(.*?)```", re.DOTALL)


def tool_call_from_mapping(obj: Any) -> ToolCall | None:
    """Build a ToolCall from a ``{"tool_call": {...}}`` envelope or a bare call object."""
    if not isinstance(obj, dict):
        return None
    inner = obj.get("tool_call", obj)
    if not isinstance(inner, dict):
        return None

    name = inner.get("name") or inner.get("tool_name")
    if not isinstance(name, str) or not name.strip():
        return None

    arguments = inner.get("arguments")
    if arguments is None:
        arguments = inner.get("parameters")
    if isinstance(arguments, str):
        arguments = loads_embedded(arguments)
    if not isinstance(arguments, dict):
        arguments = {}

    context = inner.get("context")
    return ToolCall(
        name=name,
        arguments=arguments,
        context=context if isinstance(context, dict) else None,
    )


def parse_tool_call_json(text: str) -> ToolCall | None:
    try:
        return tool_call_from_mapping(json.loads(text))
    except ValueError:
        return None


class ExtractionStrategy(Protocol):
    name: str

    def candidates(self, text: str) -> Iterator[ToolCall]: ...


# ── Strategies ───────────────────────────────────────────────────────


class JsonScanStrategy:
    """Parse the whole text as JSON and scan every nested object and string."""

    name = "json_scan"

    def candidates(self, text: str) -> Iterator[ToolCall]:
        try:
            document = json.loads(text)
        except ValueError:
            return
        for obj in iter_objects(document):
            call = tool_call_from_mapping(obj)
            if call is not None:
                yield call


class JsonCodeBlockStrategy:
    """Parse the first fenced ```json block."""

    name = "json_code_block"

    def candidates(self, text: str) -> Iterator[ToolCall]:
        match = _JSON_FENCE.search(text) or _ANY_FENCE.search(text)
        if match is None:
            return
        call = parse_tool_call_json(match.group(1))
        if call is not None:
            yield call


class InlineJsonStrategy:
    """Parse the span from the first '{' to the last '}'."""

    name = "inline_json"

    def candidates(self, text: str) -> Iterator[ToolCall]:
        start = text.find("{")
        end = text.rfind("}")
        if start == -1 or end <= start:
            return
        call = parse_tool_call_json(text[start:end + 1])
        if call is not None:
            yield call


class YamlBlockStrategy:
    """Parse the first fenced ```yaml block."""

    name = "yaml_block"

    def candidates(self, text: str) -> Iterator[ToolCall]:
        match = _YAML_FENCE.search(text)
        if match is None:
            return
        try:
            document = yaml.safe_load(match.group(1))
        except yaml.YAMLError:
            return
        call = tool_call_from_mapping(document)
        if call is not None:
            yield call


def default_strategies() -> list[ExtractionStrategy]:
    return [JsonScanStrategy(), JsonCodeBlockStrategy(), InlineJsonStrategy(), YamlBlockStrategy()]


# ── Sanitizer ────────────────────────────────────────────────────────


def extract_first_json(text: str) -> str:
    """Strip a leading markdown fence and return the first '{' .. last '}' span.

    Returns the (fence-stripped) text unchanged when no object span exists.
    """
    s = text.strip()
    for fence in ("```json", "```"):
        if s.startswith(fence):
            s = s[len(fence):].strip()
    start = s.find("{")
    end = s.rfind("}")
    if start != -1 and end > start:
        return s[start:end + 1]
    return s
