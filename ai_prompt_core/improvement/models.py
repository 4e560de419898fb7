"""Models for improvement suggestions and results.

Suggestions arrive from the model as camelCase JSON (``promptChanges``,
``sourceHints``, ``stepType``); aliases map them onto snake_case fields.
"""

from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class _SuggestionModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class PromptChange(_SuggestionModel):
    """One literal edit to apply to compiled prompt text."""

    action: Literal["add", "modify", "remove"]
    original: str | None = None
    replacement: str = ""
    reason: str = ""


class SourceHint(_SuggestionModel):
    """Suggested permanent builder-level change. Reported, never applied."""

    step_type: str = Field(alias="stepType")
    action: Literal["add", "modify", "remove", "adjust_nudge"]
    suggestion: str
    reason: str = ""


class ImprovementSuggestion(_SuggestionModel):
    analysis: str = ""
    prompt_changes: tuple[PromptChange, ...] = Field(default=(), alias="promptChanges")
    source_hints: tuple[SourceHint, ...] = Field(default=(), alias="sourceHints")
    confidence: float = 0.0  # 0-1 as reported by the model


class FailingTest(BaseModel):
    """What the improvement request tells the model about one failing test."""

    model_config = ConfigDict(frozen=True)

    input: str
    output: str
    assertion: str
    reason: str | None = None
    description: str | None = None


class ImprovementStatus(StrEnum):
    IMPROVED = "improved"
    PLATEAU = "plateau"
    MAX_ITERATIONS = "max_iterations"


class ImprovementResult(BaseModel):
    """Terminal state of one (prompt, variant) improvement loop."""

    model_config = ConfigDict(frozen=True)

    prompt_id: str
    variant_name: str
    status: ImprovementStatus
    iterations: int
    initial_failures: int
    final_failures: int
    source_hints: tuple[SourceHint, ...] = ()
    final_text: str = ""


__all__ = [
    "FailingTest",
    "ImprovementResult",
    "ImprovementStatus",
    "ImprovementSuggestion",
    "PromptChange",
    "SourceHint",
]
