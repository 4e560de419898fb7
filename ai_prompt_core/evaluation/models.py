"""Result models for prompt evaluation."""

from collections.abc import Sequence

from pydantic import BaseModel, ConfigDict, Field

from ai_prompt_core.prompt_compiler.types import DEFAULT_VARIANT


def success_rate(passed: int, total: int) -> float:
    """Percentage of passing tests; 100 when there are no tests."""
    return passed / total * 100 if total else 100.0


class TestResult(BaseModel):
    """Outcome of running one test against one compiled variant."""

    __test__ = False  # not a pytest test class

    model_config = ConfigDict(frozen=True)

    input: str
    output: str
    passed: bool
    description: str | None = None
    reason: str | None = None


class VariantEvaluation(BaseModel):
    """All test results for one (prompt, variant) pair."""

    model_config = ConfigDict(frozen=True)

    prompt_id: str
    variant_name: str
    results: tuple[TestResult, ...] = ()

    @property
    def passed(self) -> int:
        return sum(1 for r in self.results if r.passed)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.passed)

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def success_rate(self) -> float:
        return success_rate(self.passed, self.total)

    @property
    def failing_inputs(self) -> frozenset[str]:
        """Inputs of the failing tests; used for plateau detection."""
        return frozenset(r.input for r in self.results if not r.passed)

    @property
    def label(self) -> str:
        """``id`` for the default variant, ``id [variant]`` otherwise."""
        return self.prompt_id if self.variant_name == DEFAULT_VARIANT else f"{self.prompt_id} [{self.variant_name}]"


class PromptEvaluation(BaseModel):
    """A prompt's variant evaluations with an overall rate."""

    model_config = ConfigDict(frozen=True)

    prompt_id: str
    variants: tuple[VariantEvaluation, ...] = ()

    @property
    def overall_success_rate(self) -> float:
        return success_rate(sum(v.passed for v in self.variants), sum(v.total for v in self.variants))


class JudgeVerdict(BaseModel):
    """Structured judge response."""

    passed: bool
    reason: str = ""


class EvaluationSummary(BaseModel):
    """Totals across many variant evaluations."""

    model_config = ConfigDict(frozen=True)

    total_passed: int
    total_tests: int
    overall_success_rate: float
    best: VariantEvaluation | None = None
    worst: VariantEvaluation | None = None
    evaluations: tuple[VariantEvaluation, ...] = Field(default=(), repr=False)


def summarize_evaluations(evaluations: Sequence[VariantEvaluation]) -> EvaluationSummary:
    """Aggregate totals; best/worst are reported only when rates differ."""
    total_passed = sum(e.passed for e in evaluations)
    total_tests = sum(e.total for e in evaluations)
    best = worst = None
    if len(evaluations) > 1:
        ranked = sorted(evaluations, key=lambda e: e.success_rate, reverse=True)
        if ranked[0].success_rate != ranked[-1].success_rate:
            best, worst = ranked[0], ranked[-1]
    return EvaluationSummary(
        total_passed=total_passed,
        total_tests=total_tests,
        overall_success_rate=success_rate(total_passed, total_tests),
        best=best,
        worst=worst,
        evaluations=tuple(evaluations),
    )


__all__ = [
    "EvaluationSummary",
    "JudgeVerdict",
    "PromptEvaluation",
    "TestResult",
    "VariantEvaluation",
    "success_rate",
    "summarize_evaluations",
]
