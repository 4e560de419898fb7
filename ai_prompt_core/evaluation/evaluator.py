"""Evaluator: runs a prompt's tests against its compiled variants.

For each test the compiled text (as stored, before rendering) is the system
instruction and the test input is the user message. Predicate assertions run
locally; string assertions go to the judge when judge mode is on and are
otherwise reported as passing but not evaluated.
"""

import inspect
from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict

from ai_prompt_core.exceptions import PromptNotGeneratedError, SynthesizerConfigError, SynthesizerError
from ai_prompt_core.logging import get_pipeline_logger
from ai_prompt_core.prompt_compiler.cache import PromptCache
from ai_prompt_core.prompt_compiler.spec import Prompt
from ai_prompt_core.prompt_compiler.types import OperationFailure, PromptTest
from ai_prompt_core.synthesizer import Synthesizer

from .judge import judge_assertion
from .models import PromptEvaluation, TestResult, VariantEvaluation

logger = get_pipeline_logger(__name__)

SKIPPED_STRING_ASSERTION = "String assertion skipped (use --judge to evaluate)"
PREDICATE_RETURNED_FALSE = "Assertion function returned false"


def assertion_text(test: PromptTest) -> str:
    """Readable form of a test's assertion: the predicate's source, else its name."""
    if isinstance(test.assertion, str):
        return test.assertion
    try:
        return inspect.getsource(test.assertion).strip()
    except (OSError, TypeError):
        return getattr(test.assertion, "__qualname__", repr(test.assertion))


class EvaluationReport(BaseModel):
    """Outcome of evaluating many prompts."""

    model_config = ConfigDict(frozen=True)

    evaluations: tuple[VariantEvaluation, ...] = ()
    failures: tuple[OperationFailure, ...] = ()
    skipped: tuple[str, ...] = ()


class Evaluator:
    """Runs tests through a synthesizer against the texts in a cache."""

    def __init__(self, cache: PromptCache, synthesizer: Synthesizer, *, judge: bool = False) -> None:
        self.cache = cache
        self.synthesizer = synthesizer
        self.judge = judge

    async def run_test(self, system_prompt: str, test: PromptTest) -> TestResult:
        """Run one test; assertion errors become failing results, synthesizer errors propagate."""
        output = await self.synthesizer.complete(system_prompt, test.input, purpose="running a test input")

        reason: str | None = None
        if callable(test.assertion):
            try:
                passed = bool(test.assertion(output))
            except Exception as e:  # noqa: BLE001
                passed = False
                reason = f"Assertion threw: {e}"
            else:
                if not passed:
                    reason = PREDICATE_RETURNED_FALSE
        elif self.judge:
            verdict = await judge_assertion(self.synthesizer, test.input, output, test.assertion)
            passed, reason = verdict.passed, verdict.reason
        else:
            passed, reason = True, SKIPPED_STRING_ASSERTION

        return TestResult(input=test.input, output=output, passed=passed, description=test.description, reason=reason)

    async def evaluate_text(
        self, prompt_id: str, variant_name: str, system_prompt: str, tests: Iterable[PromptTest]
    ) -> VariantEvaluation:
        """Evaluate an explicit prompt text; the improver uses this for in-memory edits."""
        results = [await self.run_test(system_prompt, test) for test in tests]
        evaluation = VariantEvaluation(prompt_id=prompt_id, variant_name=variant_name, results=tuple(results))
        logger.info(f"Evaluated '{evaluation.label}': {evaluation.passed}/{evaluation.total} passed")
        return evaluation

    async def evaluate_variant(self, prompt: Prompt, variant_name: str) -> VariantEvaluation:
        """Evaluate one cached variant of ``prompt``.

        Raises:
            PromptNotGeneratedError: The variant has no compiled text in the cache.
        """
        text = self.cache.variant_text(prompt.id, variant_name)
        if text is None:
            raise PromptNotGeneratedError(f"Prompt '{prompt.id}' has no compiled variant '{variant_name}'. Run 'generate' first.")
        return await self.evaluate_text(prompt.id, variant_name, text, prompt.tests)

    async def evaluate(self, prompt: Prompt) -> list[VariantEvaluation]:
        """Evaluate every cached variant of a prompt that has tests.

        Returns an empty list when the prompt has no tests or no cache entry.
        """
        if not prompt.tests:
            return []
        entry = self.cache.get(prompt.id)
        if entry is None:
            logger.warning(f"Prompt '{prompt.id}' has not been generated; skipping evaluation")
            return []
        return [await self.evaluate_variant(prompt, variant_name) for variant_name in entry.variants]

    async def evaluate_prompt(self, prompt: Prompt) -> PromptEvaluation:
        return PromptEvaluation(prompt_id=prompt.id, variants=tuple(await self.evaluate(prompt)))

    async def evaluate_all(self, prompts: Iterable[Prompt]) -> EvaluationReport:
        """Evaluate every prompt with tests, isolating synthesizer failures per variant.

        Raises:
            PromptNotGeneratedError: The cache is empty.
            SynthesizerConfigError: Provider configuration is missing or invalid.
        """
        if not len(self.cache):
            raise PromptNotGeneratedError("No generated prompts found. Run 'generate' first.")

        evaluations: list[VariantEvaluation] = []
        failures: list[OperationFailure] = []
        skipped: list[str] = []
        for prompt in prompts:
            if not prompt.tests:
                continue
            entry = self.cache.get(prompt.id)
            if entry is None:
                logger.warning(f"Prompt '{prompt.id}' has not been generated; skipping evaluation")
                skipped.append(prompt.id)
                continue
            for variant_name in entry.variants:
                try:
                    evaluations.append(await self.evaluate_variant(prompt, variant_name))
                except SynthesizerConfigError:
                    raise
                except SynthesizerError as e:
                    logger.error(f"Evaluation of '{prompt.id}' [{variant_name}] failed: {e.title}")
                    failures.append(OperationFailure(prompt_id=prompt.id, variant_name=variant_name, operation="evaluate", message=str(e)))
        return EvaluationReport(evaluations=tuple(evaluations), failures=tuple(failures), skipped=tuple(skipped))


__all__ = ["PREDICATE_RETURNED_FALSE", "SKIPPED_STRING_ASSERTION", "EvaluationReport", "Evaluator", "assertion_text"]
