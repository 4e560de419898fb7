"""Tests for prompt_compiler.registry and the built-in step formats."""

import pytest

from ai_prompt_core.exceptions import PromptDefinitionError
from ai_prompt_core.prompt_compiler.registry import StepRegistry, default_registry
from ai_prompt_core.prompt_compiler.steps import BASE_STEPS, define_step, format_nudge
from ai_prompt_core.prompt_compiler.types import ConstraintStep, DoStep, ExampleStep, OptionalStep, RawStep, Step


class TestRegistration:
    def test_default_registry_has_base_kinds(self):
        registry = default_registry()
        assert registry.names == ("raw", "persona", "input", "output", "context", "do", "dont", "constraint", "example")
        assert len(registry) == len(BASE_STEPS)

    def test_register_custom_kind(self):
        registry = StepRegistry()
        registry.register("tone", lambda style: Step(type="tone", style=style), lambda s: f"[Tone] {s.style}")
        assert "tone" in registry
        assert registry.format_step(registry.build("tone", "formal")) == "[Tone] formal"

    def test_duplicate_registration_rejected(self):
        registry = default_registry()
        with pytest.raises(PromptDefinitionError, match="already registered"):
            registry.register("raw", lambda value: RawStep(value=value), lambda s: s.value)

    def test_replace_allows_override(self):
        registry = default_registry()
        registry.register("raw", lambda value: RawStep(value=value), lambda s: s.value, replace=True)
        assert registry.format_step(RawStep(value="hi")) == "hi"

    @pytest.mark.parametrize("name", ["optional", "use", "variant", "test", "step"])
    def test_reserved_names_rejected(self, name):
        with pytest.raises(PromptDefinitionError, match="reserved"):
            StepRegistry().add(define_step(name, build=lambda: Step(type=name), format=lambda s: ""))

    def test_non_identifier_rejected(self):
        with pytest.raises(PromptDefinitionError, match="identifier"):
            StepRegistry().add(define_step("my-step", build=lambda: Step(type="my-step"), format=lambda s: ""))

    def test_build_unknown_kind(self):
        with pytest.raises(PromptDefinitionError, match="Unknown step 'tone'"):
            default_registry().build("tone", "formal")

    def test_build_type_mismatch(self):
        registry = StepRegistry([define_step("tone", build=lambda style: Step(type="mood", style=style), format=str)])
        with pytest.raises(PromptDefinitionError, match="type 'mood'"):
            registry.build("tone", "formal")

    def test_build_must_return_step(self):
        registry = StepRegistry([define_step("tone", build=lambda style: {"type": "tone"}, format=str)])
        with pytest.raises(PromptDefinitionError, match="must return a Step"):
            registry.build("tone", "formal")


class TestFormatting:
    def test_raw(self):
        text = default_registry().format_step(RawStep(value="First Test"))
        assert text == '[Raw Text] (Include this text verbatim in the system prompt.)\nValue: "First Test"'

    def test_neutral_nudge_omitted(self):
        registry = default_registry()
        assert "Nudge" not in registry.format_step(DoStep(instruction="x"))
        assert "Nudge" not in registry.format_step(DoStep(instruction="x", nudge=3))

    def test_nudge_line(self):
        text = default_registry().format_step(ConstraintStep(rule="under 3 paragraphs", nudge=5))
        assert text.endswith('Value: "under 3 paragraphs"\nNudge: 5')

    def test_format_nudge(self):
        assert format_nudge(None) == ""
        assert format_nudge(3) == ""
        assert format_nudge(1) == "\nNudge: 1"

    def test_example(self):
        text = default_registry().format_step(ExampleStep(input="2+2", output="4"))
        assert text.endswith('Input: "2+2"\nExpected output: "4"')

    def test_optional_block_wraps_children(self):
        block = OptionalStep(name="extra", steps=(RawStep(value="A"), RawStep(value="B")))
        text = default_registry().format_step(block)
        assert text.startswith('[Optional Block Start: "extra"] (The following instructions are OPTIONAL. ')
        assert "{{#extra}}...{{/extra}}" in text
        assert text.endswith('Value: "B"\n\n[Optional Block End: "extra"]')
        assert text.count("[Raw Text]") == 2

    def test_nested_optional_blocks(self):
        inner = OptionalStep(name="more", steps=(RawStep(value="More"),))
        outer = OptionalStep(name="extra", steps=(RawStep(value="Extra"), inner))
        text = default_registry().format_step(outer)
        assert text.index('Start: "extra"') < text.index('Start: "more"') < text.index('End: "more"') < text.index('End: "extra"')

    def test_unknown_kind(self):
        assert default_registry().format_step(Step(type="tone")) == "[Unknown Step: tone]"

    def test_format_steps_joins_with_blank_line(self):
        registry = StepRegistry([define_step("t", build=lambda v: Step(type="t", v=v), format=lambda s: s.v)])
        assert registry.format_steps([registry.build("t", "a"), registry.build("t", "b")]) == "a\n\nb"
