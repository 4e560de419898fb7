"""Improvement requests and literal edit application.

Edits are best-effort text operations, not a diff algorithm: ``modify`` and
``remove`` act on the first literal occurrence of ``original`` and silently
do nothing when it is not found.
"""

from collections.abc import Iterable, Sequence

from ai_prompt_core.logging import get_pipeline_logger
from ai_prompt_core.synthesizer import IMPROVEMENT_INSTRUCTION, Synthesizer, parse_structured

from .models import FailingTest, ImprovementSuggestion, PromptChange

logger = get_pipeline_logger(__name__)

UNPARSABLE_ANALYSIS = "Model did not return valid JSON. Try using a more capable model."


def apply_prompt_changes(prompt: str, changes: Iterable[PromptChange]) -> str:
    """Apply ``changes`` in order and return the trimmed result."""
    result = prompt
    for change in changes:
        if change.action == "add":
            result = result.strip() + "\n\n" + change.replacement
        elif change.action == "modify":
            if change.original and change.original in result:
                result = result.replace(change.original, change.replacement, 1)
            else:
                logger.debug(f"Modify edit skipped, original text not found: {change.original!r:.60}")
        elif change.original:
            if change.original in result:
                result = result.replace(change.original, "", 1)
            else:
                logger.debug(f"Remove edit skipped, original text not found: {change.original!r:.60}")
    return result.strip()


def build_improvement_message(current_prompt: str, failing_tests: Sequence[FailingTest]) -> str:
    sections = []
    for i, test in enumerate(failing_tests, 1):
        heading = f"### Test {i}" + (f" ({test.description})" if test.description else "")
        sections.append(
            f"{heading}\nInput: {test.input}\nAssertion: {test.assertion}\n"
            f"Actual Output: {test.output}\nFailure Reason: {test.reason or 'Assertion not satisfied'}"
        )
    tests_description = "\n\n".join(sections)
    return (
        f"## Current System Prompt\n```\n{current_prompt}\n```\n\n"
        f"## Failing Tests\n{tests_description}\n\n"
        "Respond with ONLY a JSON object containing your analysis and suggested changes."
    )


def parse_suggestion(response: str) -> ImprovementSuggestion:
    """Parse a suggestion; anything unparsable becomes an empty suggestion."""
    suggestion = parse_structured(response, ImprovementSuggestion, bare_object=True)
    if suggestion is None:
        logger.warning("Improvement response was not valid JSON; treating it as no suggested changes")
        logger.debug(f"Raw improvement response: {response[:1000]}")
        return ImprovementSuggestion(analysis=UNPARSABLE_ANALYSIS)
    return suggestion


async def request_improvement(
    synthesizer: Synthesizer, current_prompt: str, failing_tests: Sequence[FailingTest], *, label: str = "prompt"
) -> ImprovementSuggestion:
    """Ask the synthesizer for edits that would make ``failing_tests`` pass."""
    response = await synthesizer.complete(
        IMPROVEMENT_INSTRUCTION,
        build_improvement_message(current_prompt, failing_tests),
        purpose=f"improving '{label}'",
    )
    return parse_suggestion(response)


__all__ = ["UNPARSABLE_ANALYSIS", "apply_prompt_changes", "build_improvement_message", "parse_suggestion", "request_improvement"]
