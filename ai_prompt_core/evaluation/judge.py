"""Judge: adjudicates free-text assertions with a second synthesizer call."""

from ai_prompt_core.logging import get_pipeline_logger
from ai_prompt_core.synthesizer import JUDGE_INSTRUCTION, Synthesizer, parse_structured

from .models import JudgeVerdict

logger = get_pipeline_logger(__name__)

_PASSED_TOKENS = ('"passed": true', '"passed":true', "passed: true")
_FAILED_TOKENS = ('"passed": false', '"passed":false', "passed: false")

_PREVIEW_CHARS = 100


def build_judge_message(input: str, output: str, assertion: str) -> str:  # noqa: A002
    return f"## Input given to AI\n{input}\n\n## AI's Output\n{output}\n\n## Assertion to check\n{assertion}"


def interpret_verdict(response: str) -> JudgeVerdict:
    """Turn a judge response into a verdict without ever raising.

    Structured JSON wins; otherwise a token scan for ``passed: true/false``;
    otherwise the test fails with a diagnostic reason.
    """
    verdict = parse_structured(response, JudgeVerdict)
    if verdict is not None:
        return verdict

    lowered = response.lower()
    passed = any(token in lowered for token in _PASSED_TOKENS)
    failed = any(token in lowered for token in _FAILED_TOKENS)
    if not passed and not failed:
        preview = response[:_PREVIEW_CHARS] + ("..." if len(response) > _PREVIEW_CHARS else "")
        logger.warning("Judge response was not valid JSON and contained no verdict")
        return JudgeVerdict(
            passed=False,
            reason=f'Judge model didn\'t return valid JSON. Consider using a more capable model. Response: "{preview}"',
        )
    logger.debug("Judge verdict inferred from a non-JSON response")
    return JudgeVerdict(passed=passed, reason="Inferred from non-JSON response")


async def judge_assertion(synthesizer: Synthesizer, input: str, output: str, assertion: str) -> JudgeVerdict:  # noqa: A002
    """Ask the judge whether ``output`` satisfies ``assertion``."""
    response = await synthesizer.complete(
        JUDGE_INSTRUCTION,
        build_judge_message(input, output, assertion),
        purpose="judging a test assertion",
    )
    return interpret_verdict(response)


__all__ = ["build_judge_message", "interpret_verdict", "judge_assertion"]
