"""Evaluation of compiled prompts against their regression tests."""

from .evaluator import EvaluationReport, Evaluator, assertion_text
from .judge import interpret_verdict, judge_assertion
from .models import (
    EvaluationSummary,
    JudgeVerdict,
    PromptEvaluation,
    TestResult,
    VariantEvaluation,
    success_rate,
    summarize_evaluations,
)

__all__ = [
    "EvaluationReport",
    "EvaluationSummary",
    "Evaluator",
    "JudgeVerdict",
    "PromptEvaluation",
    "TestResult",
    "VariantEvaluation",
    "assertion_text",
    "interpret_verdict",
    "judge_assertion",
    "success_rate",
    "summarize_evaluations",
]
