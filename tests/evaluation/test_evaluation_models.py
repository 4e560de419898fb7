"""Tests for evaluation result models and summaries."""

from ai_prompt_core.evaluation import PromptEvaluation, TestResult, VariantEvaluation, summarize_evaluations


def _evaluation(variant: str, outcomes: list[bool], prompt_id: str = "p") -> VariantEvaluation:
    results = tuple(TestResult(input=f"in{i}", output="out", passed=ok) for i, ok in enumerate(outcomes))
    return VariantEvaluation(prompt_id=prompt_id, variant_name=variant, results=results)


class TestVariantEvaluation:
    def test_counts(self):
        evaluation = _evaluation("short", [True, False, True, True])
        assert (evaluation.passed, evaluation.failed, evaluation.total) == (3, 1, 4)
        assert evaluation.success_rate == 75.0
        assert evaluation.failing_inputs == frozenset({"in1"})

    def test_zero_tests(self):
        evaluation = _evaluation("default", [])
        assert (evaluation.passed, evaluation.failed, evaluation.total) == (0, 0, 0)
        assert evaluation.success_rate == 100.0

    def test_label(self):
        assert _evaluation("default", []).label == "p"
        assert _evaluation("short", []).label == "p [short]"


def test_prompt_overall_rate():
    evaluation = PromptEvaluation(prompt_id="p", variants=(_evaluation("a", [True, True]), _evaluation("b", [False, True])))
    assert evaluation.overall_success_rate == 75.0
    assert PromptEvaluation(prompt_id="p").overall_success_rate == 100.0


class TestSummarize:
    def test_totals(self):
        summary = summarize_evaluations([_evaluation("a", [True, False]), _evaluation("b", [True, True])])
        assert summary.total_passed == 3
        assert summary.total_tests == 4
        assert summary.overall_success_rate == 75.0

    def test_best_and_worst(self):
        low, high = _evaluation("a", [False, False]), _evaluation("b", [True, False])
        summary = summarize_evaluations([low, high])
        assert summary.best == high
        assert summary.worst == low

    def test_equal_rates_have_no_best(self):
        summary = summarize_evaluations([_evaluation("a", [True]), _evaluation("b", [True])])
        assert summary.best is None
        assert summary.worst is None

    def test_single_evaluation_has_no_best(self):
        summary = summarize_evaluations([_evaluation("a", [True, False])])
        assert summary.best is None

    def test_empty(self):
        summary = summarize_evaluations([])
        assert (summary.total_passed, summary.total_tests, summary.overall_success_rate) == (0, 0, 100.0)
