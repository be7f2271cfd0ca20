"""Tool-call extraction from free-form model output."""

from rolechain.extraction.extractor import Extraction, ToolCallExtractor
from rolechain.extraction.strategies import (
    InlineJsonStrategy,
    JsonCodeBlockStrategy,
    JsonScanStrategy,
    YamlBlockStrategy,
    default_strategies,
    extract_first_json,
)

__all__ = [
    "Extraction",
    "InlineJsonStrategy",
    "JsonCodeBlockStrategy",
    "JsonScanStrategy",
    "ToolCallExtractor",
    "YamlBlockStrategy",
    "default_strategies",
    "extract_first_json",
]
