"""Tool-call extractor — run strategies in priority order, first valid candidate wins."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Sequence

from contracts.tools import ToolCall
from rolechain.errors import ExtractionMiss
from rolechain.extraction.strategies import ExtractionStrategy, default_strategies
from rolechain.logging import get_logger
from rolechain.tools.normalize import normalize_arguments, normalize_name

if TYPE_CHECKING:
    from rolechain.tools.registry import ToolRegistry

log = get_logger(__name__)


@dataclass
class Extraction:
    """Outcome of one extraction: a ToolCall and the strategy that found it, or a miss."""

    tool_call: ToolCall | None = None
    strategy: str = ""
    error: ExtractionMiss | None = None

    @property
    def found(self) -> bool:
        return self.tool_call is not None


class ToolCallExtractor:
    """Finds a tool call in raw model output.

    With a registry, a candidate must also pass schema validation (on its
    normalized name and keys); the returned ToolCall keeps the name and keys
    exactly as extracted.  Without one, the first candidate with a name wins.
    """

    def __init__(
        self,
        registry: ToolRegistry | None = None,
        strategies: Sequence[ExtractionStrategy] | None = None,
    ) -> None:
        self._registry = registry
        self._strategies = list(strategies) if strategies is not None else default_strategies()

    @property
    def strategy_names(self) -> list[str]:
        return [s.name for s in self._strategies]

    def extract(self, text: str) -> Extraction:
        for strategy in self._strategies:
            try:
                candidates = list(strategy.candidates(text))
            except NotImplementedError:
                log.debug("Extraction strategy not implemented", strategy=strategy.name)
                continue
            for call in candidates:
                if self._accepts(call, strategy.name):
                    log.debug("Extracted tool call", strategy=strategy.name, tool=call.name)
                    return Extraction(tool_call=call, strategy=strategy.name)

        log.debug("No tool call found in model output")
        return Extraction(error=ExtractionMiss())

    def _accepts(self, call: ToolCall, strategy: str) -> bool:
        if self._registry is None:
            return bool(call.name.strip())
        normalized = ToolCall(
            name=normalize_name(call.name),
            arguments=normalize_arguments(call.arguments),
        )
        error = self._registry.validate(normalized)
        if error is not None:
            log.debug(
                "Candidate tool call failed validation",
                strategy=strategy,
                tool=call.name,
                error=str(error),
            )
            return False
        return True
