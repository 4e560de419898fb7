"""Improver: test-driven, plateau-detecting refinement of compiled prompt text.

Per (prompt, variant) with tests:

    evaluate -> 0 failures ------------------------------------> IMPROVED (iterations=0)
             -> failures: repeat up to max_iterations:
                  request suggestion -> no changes -------------> PLATEAU
                  apply edits, write text to cache (hash kept)
                  re-evaluate -> 0 failures --------------------> IMPROVED
                              -> same failing inputs as before -> PLATEAU
             -> cap reached ------------------------------------> MAX_ITERATIONS

Iterations within one loop are strictly sequential. Loops for different
variants share only the cache artifact, whose writes are serialized.
"""

from collections.abc import Iterable, Sequence

from pydantic import BaseModel, ConfigDict

from ai_prompt_core.evaluation import Evaluator, VariantEvaluation, assertion_text
from ai_prompt_core.exceptions import PromptNotGeneratedError, SynthesizerConfigError, SynthesizerError
from ai_prompt_core.logging import get_pipeline_logger
from ai_prompt_core.prompt_compiler.cache import PromptCache
from ai_prompt_core.prompt_compiler.spec import Prompt
from ai_prompt_core.prompt_compiler.types import OperationFailure, PromptTest
from ai_prompt_core.synthesizer import Synthesizer

from .edits import apply_prompt_changes, request_improvement
from .models import FailingTest, ImprovementResult, ImprovementStatus, SourceHint

logger = get_pipeline_logger(__name__)


class ImprovementReport(BaseModel):
    """Outcome of improving many prompts."""

    model_config = ConfigDict(frozen=True)

    results: tuple[ImprovementResult, ...] = ()
    failures: tuple[OperationFailure, ...] = ()
    skipped: tuple[str, ...] = ()


def collect_failing_tests(evaluation: VariantEvaluation, tests: Sequence[PromptTest]) -> list[FailingTest]:
    """Describe each failing result with the assertion of the test that produced it."""
    failing: list[FailingTest] = []
    for result in evaluation.results:
        if result.passed:
            continue
        test = next((t for t in tests if t.input == result.input), None)
        failing.append(
            FailingTest(
                input=result.input,
                output=result.output,
                assertion=assertion_text(test) if test else "unknown",
                reason=result.reason,
                description=result.description,
            )
        )
    return failing


class Improver:
    """Runs the refinement loop for prompts whose compiled text fails its tests."""

    def __init__(self, cache: PromptCache, synthesizer: Synthesizer, *, judge: bool = False, max_iterations: int = 3) -> None:
        if max_iterations < 1:
            raise ValueError(f"max_iterations must be at least 1, got {max_iterations}")
        self.cache = cache
        self.synthesizer = synthesizer
        self.max_iterations = max_iterations
        self.evaluator = Evaluator(cache, synthesizer, judge=judge)

    async def improve_variant(self, prompt: Prompt, variant_name: str) -> ImprovementResult:
        """Run the loop for one compiled variant.

        Raises:
            PromptNotGeneratedError: The variant has no compiled text.
            SynthesizerError: A synthesizer call failed; edits already written stay in the cache.
        """
        text = self.cache.variant_text(prompt.id, variant_name)
        if text is None:
            raise PromptNotGeneratedError(f"Prompt '{prompt.id}' has no compiled variant '{variant_name}'. Run 'generate' first.")

        tests = prompt.tests
        evaluation = await self.evaluator.evaluate_text(prompt.id, variant_name, text, tests)
        initial_failures = evaluation.failed
        label = evaluation.label

        def finish(status: ImprovementStatus, iterations: int, hints: list[SourceHint]) -> ImprovementResult:
            logger.info(f"Improvement of '{label}' finished: {status.value} after {iterations} iteration(s), {initial_failures} -> {evaluation.failed} failing")
            return ImprovementResult(
                prompt_id=prompt.id,
                variant_name=variant_name,
                status=status,
                iterations=iterations,
                initial_failures=initial_failures,
                final_failures=evaluation.failed,
                source_hints=tuple(hints),
                final_text=text,
            )

        hints: list[SourceHint] = []
        if initial_failures == 0:
            return finish(ImprovementStatus.IMPROVED, 0, hints)

        for iteration in range(1, self.max_iterations + 1):
            logger.debug(f"Improving '{label}', iteration {iteration}/{self.max_iterations}")
            previous_failing = evaluation.failing_inputs

            suggestion = await request_improvement(self.synthesizer, text, collect_failing_tests(evaluation, tests), label=label)
            hints.extend(suggestion.source_hints)
            if not suggestion.prompt_changes:
                return finish(ImprovementStatus.PLATEAU, iteration, hints)

            text = apply_prompt_changes(text, suggestion.prompt_changes)
            self.cache.replace_variant_text(prompt.id, variant_name, text)
            logger.debug(f"Applied {len(suggestion.prompt_changes)} change(s) to '{label}'")

            evaluation = await self.evaluator.evaluate_text(prompt.id, variant_name, text, tests)
            if evaluation.failed == 0:
                return finish(ImprovementStatus.IMPROVED, iteration, hints)
            if evaluation.failing_inputs == previous_failing:
                return finish(ImprovementStatus.PLATEAU, iteration, hints)

        return finish(ImprovementStatus.MAX_ITERATIONS, self.max_iterations, hints)

    async def improve(self, prompt: Prompt) -> list[ImprovementResult]:
        """Improve every cached variant of a prompt that has tests."""
        if not prompt.tests:
            return []
        entry = self.cache.get(prompt.id)
        if entry is None:
            logger.warning(f"Prompt '{prompt.id}' has not been generated; skipping improvement")
            return []
        return [await self.improve_variant(prompt, variant_name) for variant_name in list(entry.variants)]

    async def improve_all(self, prompts: Iterable[Prompt], *, prompt_ids: Sequence[str] = ()) -> ImprovementReport:
        """Improve every prompt with tests (optionally only ``prompt_ids``), isolating failures per variant.

        Raises:
            PromptNotGeneratedError: The cache is empty.
            SynthesizerConfigError: Provider configuration is missing or invalid.
        """
        if not len(self.cache):
            raise PromptNotGeneratedError("No generated prompts found. Run 'generate' first.")

        selected = [p for p in prompts if p.tests and (not prompt_ids or p.id in prompt_ids)]
        results: list[ImprovementResult] = []
        failures: list[OperationFailure] = []
        skipped: list[str] = []
        for prompt in selected:
            entry = self.cache.get(prompt.id)
            if entry is None:
                logger.warning(f"Prompt '{prompt.id}' has not been generated; skipping improvement")
                skipped.append(prompt.id)
                continue
            for variant_name in list(entry.variants):
                try:
                    results.append(await self.improve_variant(prompt, variant_name))
                except SynthesizerConfigError:
                    raise
                except SynthesizerError as e:
                    logger.error(f"Improvement of '{prompt.id}' [{variant_name}] failed: {e.title}")
                    failures.append(OperationFailure(prompt_id=prompt.id, variant_name=variant_name, operation="improve", message=str(e)))
        return ImprovementReport(results=tuple(results), failures=tuple(failures), skipped=tuple(skipped))


__all__ = ["ImprovementReport", "Improver", "collect_failing_tests"]
