"""Tests for prompt_compiler.render (template processing and option checks)."""

import pytest

from ai_prompt_core.prompt_compiler import GeneratedPrompt, PromptCache, prompt
from ai_prompt_core.prompt_compiler.render import extract_variables, process_template, render, select_variant_text, validate_options


# ---------------------------------------------------------------------------
# process_template
# ---------------------------------------------------------------------------


def test_optional_block_kept_when_enabled() -> None:
    assert process_template("Intro\n{{#extra}}Extra info{{/extra}}\nEnd", {"extra": True}) == "Intro\nExtra info\nEnd"


def test_optional_block_dropped_with_its_newline() -> None:
    assert process_template("Intro\n{{#extra}}Extra info{{/extra}}\nEnd", {}) == "Intro\nEnd"
    assert process_template("Intro\n{{#extra}}Extra info{{/extra}}\nEnd", {"extra": False}) == "Intro\nEnd"


def test_multiline_block() -> None:
    text = "A\n{{#json}}\nRespond in JSON.\nNo prose.\n{{/json}}\nB"
    assert process_template(text, {"json": True}) == "A\n\nRespond in JSON.\nNo prose.\n\nB"
    assert process_template(text, {}) == "A\nB"


def test_nested_blocks() -> None:
    text = "{{#outer}}O {{#inner}}I{{/inner}}{{/outer}}"
    assert process_template(text, {"outer": True, "inner": True}) == "O I"
    assert process_template(text, {"outer": True}) == "O"
    assert process_template(text, {"inner": True}) == ""


def test_variables_substituted() -> None:
    assert process_template("Hello {{name}}, welcome to {{place}}.", {"name": "Ana", "place": "Lisbon"}) == "Hello Ana, welcome to Lisbon."


def test_unset_variable_left_as_placeholder() -> None:
    assert process_template("Hi {{name}}") == "Hi {{name}}"


def test_non_string_value_not_substituted() -> None:
    assert process_template("Hi {{name}}", {"name": True}) == "Hi {{name}}"


def test_variables_inside_kept_block() -> None:
    assert process_template("{{#greet}}Hi {{name}}{{/greet}}", {"greet": True, "name": "Bo"}) == "Hi Bo"


def test_excess_blank_lines_collapsed() -> None:
    assert process_template("A\n\n\n\nB") == "A\n\nB"


def test_result_is_trimmed() -> None:
    assert process_template("\n\n  Text  \n\n") == "Text"


def test_unmatched_markers_left_literal() -> None:
    assert process_template("{{#open}}never closed", {"open": True}) == "{{#open}}never closed"
    assert process_template("{{/close}} stray", {}) == "{{/close}} stray"


def test_mismatched_names_not_treated_as_block() -> None:
    assert process_template("{{#a}}x{{/b}}", {"a": True}) == "{{#a}}x{{/b}}"


# ---------------------------------------------------------------------------
# render / select_variant_text
# ---------------------------------------------------------------------------


@pytest.fixture
def two_variant_cache() -> PromptCache:
    entry = GeneratedPrompt(variants={"default": "Base {{name}}", "short": "Short{{#json}} as JSON{{/json}}"}, hash="h")
    return PromptCache({"p": entry})


def test_render_selected_variant(two_variant_cache: PromptCache) -> None:
    assert render(two_variant_cache, "p", "short", {"json": True}) == "Short as JSON"


def test_render_falls_back_to_default(two_variant_cache: PromptCache) -> None:
    assert render(two_variant_cache, "p", "detailed", {"name": "X"}) == "Base X"


def test_render_missing_prompt_is_empty(two_variant_cache: PromptCache) -> None:
    assert render(two_variant_cache, "nope") == ""


def test_select_without_default_is_empty() -> None:
    cache = PromptCache({"p": GeneratedPrompt(variants={"short": "S"}, hash="h")})
    assert select_variant_text(cache, "p", "long") == ""
    assert select_variant_text(cache, "p", "short") == "S"


# ---------------------------------------------------------------------------
# extract_variables / validate_options
# ---------------------------------------------------------------------------


def test_extract_variables_ignores_block_markers() -> None:
    assert extract_variables(["Hi {{name}} {{#x}}{{place}}{{/x}}", "{{name}} {{day}}"]) == ["name", "place", "day"]


@pytest.fixture
def greeter():
    return prompt(
        "greeter",
        lambda b: b.persona("greeter for {{name}}").optional("formal", lambda o: o.do("be formal")).variant("short", lambda v: v.raw("brief")),
    )


@pytest.fixture
def greeter_cache() -> PromptCache:
    return PromptCache({"greeter": GeneratedPrompt(variants={"default": "Greet {{name}}{{#formal}} formally{{/formal}}."}, hash="h")})


def test_validate_options_ok(greeter, greeter_cache: PromptCache) -> None:
    result = validate_options(greeter, greeter_cache, {"name": "Ana", "formal": True})
    assert result.ok
    assert result.errors() == []


def test_validate_options_reports_problems(greeter, greeter_cache: PromptCache) -> None:
    result = validate_options(greeter, greeter_cache, {"name": 3, "formal": "yes", "colour": "red"}, variant="long")
    assert result.unknown_keys == ("colour",)
    assert result.non_bool_flags == ("formal",)
    assert result.non_string_variables == ("name",)
    assert result.unknown_variant == "long"
    assert not result.ok
    assert len(result.errors()) == 4


def test_validate_options_missing_variable_is_not_an_error(greeter, greeter_cache: PromptCache) -> None:
    result = validate_options(greeter, greeter_cache, {}, variant="short")
    assert result.missing_variables == ("name",)
    assert result.ok
