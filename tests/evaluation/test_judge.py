"""Tests for judge verdict interpretation."""

import pytest

from ai_prompt_core.evaluation.judge import build_judge_message, interpret_verdict, judge_assertion
from ai_prompt_core.synthesizer import JUDGE_INSTRUCTION
from tests.support.fakes import FakeSynthesizer


class TestInterpretVerdict:
    def test_plain_json(self):
        verdict = interpret_verdict('{"passed": true, "reason": "mentions depth"}')
        assert verdict.passed
        assert verdict.reason == "mentions depth"

    def test_fenced_json(self):
        verdict = interpret_verdict('Evaluation:\n```json\n{"passed": false, "reason": "no depth"}\n```')
        assert not verdict.passed
        assert verdict.reason == "no depth"

    @pytest.mark.parametrize(
        ("response", "passed"),
        [
            ('The verdict is "passed": true because it mentions 8,200 m', True),
            ("passed: false - it never mentions the depth", False),
            ('{"passed":true, reason: unquoted}', True),
        ],
    )
    def test_token_scan(self, response: str, passed: bool):
        verdict = interpret_verdict(response)
        assert verdict.passed is passed
        assert verdict.reason == "Inferred from non-JSON response"

    def test_unintelligible_response_fails(self):
        verdict = interpret_verdict("I am not sure what you mean.")
        assert not verdict.passed
        assert verdict.reason.startswith("Judge model didn't return valid JSON.")
        assert '"I am not sure what you mean."' in verdict.reason

    def test_long_response_truncated_in_reason(self):
        verdict = interpret_verdict("x" * 250)
        assert ("x" * 100 + '..."') in verdict.reason
        assert "x" * 101 not in verdict.reason


def test_build_judge_message():
    assert build_judge_message("in", "out", "claim") == "## Input given to AI\nin\n\n## AI's Output\nout\n\n## Assertion to check\nclaim"


@pytest.mark.asyncio
async def test_judge_assertion_uses_judge_instruction():
    synth = FakeSynthesizer(['{"passed": true}'])
    verdict = await judge_assertion(synth, "in", "out", "claim")
    assert verdict.passed
    assert synth.calls[0].system_instruction == JUDGE_INSTRUCTION
    assert synth.calls[0].purpose == "judging a test assertion"
