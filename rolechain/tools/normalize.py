"""Name/key normalization for tolerant tool-call matching.

``FilePath``, ``filePath``, ``file-path`` and ``file_path`` all normalize to
``file_path``.  Normalizing twice yields the same result as normalizing once.
"""

from __future__ import annotations

import re
from typing import Any

_ACRONYM_BOUNDARY = re.compile(r"([A-Z]+)([A-Z][a-z])")
_CAMEL_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")
_SEPARATORS = re.compile(r"[^0-9A-Za-z]+")


def normalize_name(value: str) -> str:
    """Return the canonical lowercase, underscore-separated form of *value*."""
    text = str(value or "").strip()
    text = _ACRONYM_BOUNDARY.sub(r"\1_\2", text)
    text = _CAMEL_BOUNDARY.sub(r"\1_\2", text)
    text = _SEPARATORS.sub("_", text)
    return text.strip("_").lower()


def normalize_arguments(arguments: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of *arguments* keyed by normalized names.

    On collision the first key in iteration order wins.
    """
    out: dict[str, Any] = {}
    for key, value in arguments.items():
        out.setdefault(normalize_name(key), value)
    return out


_MISSING = object()


def lookup_argument(arguments: dict[str, Any], name: str, default: Any = None) -> Any:
    """Read *name* from *arguments* by raw key first, then by normalized key."""
    value = arguments.get(name, _MISSING)
    if value is not _MISSING:
        return value
    target = normalize_name(name)
    for key, value in arguments.items():
        if normalize_name(key) == target:
            return value
    return default


def has_argument(arguments: dict[str, Any], name: str) -> bool:
    return lookup_argument(arguments, name, _MISSING) is not _MISSING
