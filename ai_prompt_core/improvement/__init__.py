"""Iterative, test-driven improvement of compiled prompt text."""

from .edits import apply_prompt_changes, parse_suggestion, request_improvement
from .improver import ImprovementReport, Improver, collect_failing_tests
from .models import (
    FailingTest,
    ImprovementResult,
    ImprovementStatus,
    ImprovementSuggestion,
    PromptChange,
    SourceHint,
)

__all__ = [
    "FailingTest",
    "ImprovementReport",
    "ImprovementResult",
    "ImprovementStatus",
    "ImprovementSuggestion",
    "Improver",
    "PromptChange",
    "SourceHint",
    "apply_prompt_changes",
    "collect_failing_tests",
    "parse_suggestion",
    "request_improvement",
]
