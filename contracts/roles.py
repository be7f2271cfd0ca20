"""Role and chain contracts."""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

# Upper bound for a step that loops on a condition without a count.
MAX_LOOP_ITERATIONS = 100


class Role(BaseModel):
    """A named prompt template bound to a provider/model."""

    model_config = ConfigDict(frozen=True)

    name: str = ""
    provider: str | None = None
    model: str
    prompt: str


class ChainStep(BaseModel):
    role: str = Field(validation_alias=AliasChoices("role", "name"))
    input: dict[str, Any] = {}
    output_key: str | None = None
    loop: bool = False
    loop_count: int = 0
    loop_condition: str | None = None

    def iterations(self) -> int:
        """Number of times this step may run.

        A looping step with neither a count nor a condition runs once; one
        with only a condition is capped at MAX_LOOP_ITERATIONS.
        """
        if not self.loop:
            return 1
        if self.loop_count > 0:
            return self.loop_count
        if self.loop_condition:
            return MAX_LOOP_ITERATIONS
        return 1


class Chain(BaseModel):
    name: str = ""
    steps: list[ChainStep] = []
