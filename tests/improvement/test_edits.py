"""Tests for improvement edits and suggestion parsing."""

import json

import pytest

from ai_prompt_core.improvement import PromptChange, apply_prompt_changes, parse_suggestion, request_improvement
from ai_prompt_core.improvement.edits import UNPARSABLE_ANALYSIS, build_improvement_message
from ai_prompt_core.improvement.models import FailingTest
from ai_prompt_core.synthesizer import IMPROVEMENT_INSTRUCTION
from tests.support.fakes import FakeSynthesizer


# ---------------------------------------------------------------------------
# apply_prompt_changes
# ---------------------------------------------------------------------------


class TestApplyPromptChanges:
    def test_add_appends_paragraph(self):
        result = apply_prompt_changes("Be brief.\n", [PromptChange(action="add", replacement="Always cite numbers.")])
        assert result == "Be brief.\n\nAlways cite numbers."

    def test_modify_first_occurrence_only(self):
        result = apply_prompt_changes("Be brief. Be brief.", [PromptChange(action="modify", original="brief", replacement="exact")])
        assert result == "Be exact. Be brief."

    def test_modify_missing_original_is_noop(self):
        text = "Be brief."
        assert apply_prompt_changes(text, [PromptChange(action="modify", original="verbose", replacement="x")]) == text
        assert apply_prompt_changes(text, [PromptChange(action="modify", replacement="x")]) == text

    def test_remove(self):
        result = apply_prompt_changes("Intro. Drop this. End.", [PromptChange(action="remove", original=" Drop this.")])
        assert result == "Intro. End."

    def test_remove_missing_original_is_noop(self):
        assert apply_prompt_changes("Keep.", [PromptChange(action="remove", original="gone")]) == "Keep."

    def test_changes_apply_in_order_and_result_is_trimmed(self):
        changes = [
            PromptChange(action="modify", original="short", replacement="concise"),
            PromptChange(action="add", replacement="Use bullet points.  "),
            PromptChange(action="remove", original="concise "),
        ]
        assert apply_prompt_changes("  Write short summaries.", changes) == "Write summaries.\n\nUse bullet points."

    def test_markers_preserved(self):
        text = "Hi {{name}}.{{#formal}} Be formal.{{/formal}}"
        result = apply_prompt_changes(text, [PromptChange(action="modify", original="Hi", replacement="Hello")])
        assert result == "Hello {{name}}.{{#formal}} Be formal.{{/formal}}"


# ---------------------------------------------------------------------------
# parse_suggestion
# ---------------------------------------------------------------------------


class TestParseSuggestion:
    def test_camel_case_fields(self):
        response = json.dumps({
            "analysis": "misses figures",
            "promptChanges": [{"action": "add", "replacement": "Keep figures.", "reason": "r"}],
            "sourceHints": [{"stepType": "do", "action": "adjust_nudge", "suggestion": "raise to 5"}],
            "confidence": 0.7,
        })
        suggestion = parse_suggestion(response)
        assert suggestion.analysis == "misses figures"
        assert suggestion.prompt_changes[0].replacement == "Keep figures."
        assert suggestion.source_hints[0].step_type == "do"
        assert suggestion.source_hints[0].action == "adjust_nudge"
        assert suggestion.confidence == 0.7

    def test_fenced_with_prose(self):
        response = 'Here is my analysis.\n```json\n{"analysis": "a", "promptChanges": []}\n```'
        assert parse_suggestion(response).analysis == "a"

    def test_bare_object_in_prose(self):
        response = 'Sure: {"analysis": "b", "promptChanges": [{"action": "remove", "original": "x"}]} done'
        suggestion = parse_suggestion(response)
        assert suggestion.prompt_changes[0].action == "remove"

    @pytest.mark.parametrize("response", ["not json at all", '{"promptChanges": [{"action": "rewrite"}]}'])
    def test_unparsable_is_empty(self, response: str):
        suggestion = parse_suggestion(response)
        assert suggestion.prompt_changes == ()
        assert suggestion.source_hints == ()
        assert suggestion.analysis == UNPARSABLE_ANALYSIS


# ---------------------------------------------------------------------------
# Request message
# ---------------------------------------------------------------------------


def test_build_improvement_message():
    failing = [
        FailingTest(input="Q1", output="A1", assertion="must cite", reason="Assertion function returned false", description="cites"),
        FailingTest(input="Q2", output="A2", assertion="lambda out: 'x' in out"),
    ]
    message = build_improvement_message("CURRENT", failing)
    assert message.startswith("## Current System Prompt\n```\nCURRENT\n```\n\n## Failing Tests\n")
    assert "### Test 1 (cites)\nInput: Q1\nAssertion: must cite\nActual Output: A1\nFailure Reason: Assertion function returned false" in message
    assert "### Test 2\nInput: Q2" in message
    assert "Failure Reason: Assertion not satisfied" in message
    assert message.endswith("Respond with ONLY a JSON object containing your analysis and suggested changes.")


@pytest.mark.asyncio
async def test_request_improvement():
    synth = FakeSynthesizer(['{"analysis": "x", "promptChanges": [{"action": "add", "replacement": "y"}]}'])
    suggestion = await request_improvement(synth, "CURRENT", [FailingTest(input="i", output="o", assertion="a")], label="p [short]")
    assert suggestion.prompt_changes[0].replacement == "y"
    assert synth.calls[0].system_instruction == IMPROVEMENT_INSTRUCTION
    assert synth.calls[0].purpose == "improving 'p [short]'"
