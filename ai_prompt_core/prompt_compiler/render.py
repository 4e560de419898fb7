"""Runtime rendering of compiled prompt text.

Compiled text carries two kinds of markers:
    {{#name}}...{{/name}}  optional block, kept only when ``options[name]`` is truthy
    {{name}}               variable, replaced when ``options[name]`` is a string

Rendering is pure and never raises: unmatched or malformed markers are left
in the output as literal text.
"""

import re
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

from .cache import PromptCache
from .types import DEFAULT_VARIANT

if TYPE_CHECKING:
    from .spec import Prompt

OptionValue = str | bool

_OPTIONAL_BLOCK = re.compile(r"\{\{#(\w+)\}\}(.*?)\{\{/\1\}\}(\n?)", re.DOTALL)
_VARIABLE = re.compile(r"\{\{(?![#/])(\w+)\}\}")
_EXCESS_NEWLINES = re.compile(r"\n{3,}")


def _resolve_optionals(text: str, options: Mapping[str, object]) -> str:
    def replace(match: re.Match[str]) -> str:
        name, content, trailing_newline = match.groups()
        if options.get(name):
            return _resolve_optionals(content, options) + trailing_newline
        return ""

    return _OPTIONAL_BLOCK.sub(replace, text)


def _substitute_variables(text: str, options: Mapping[str, object]) -> str:
    def replace(match: re.Match[str]) -> str:
        value = options.get(match.group(1))
        return value if isinstance(value, str) else match.group(0)

    return _VARIABLE.sub(replace, text)


def process_template(text: str, options: Mapping[str, object] | None = None) -> str:
    """Resolve optional blocks, substitute variables, normalize blank lines.

    Example:
        >>> process_template("Intro\\n{{#extra}}Extra info{{/extra}}\\nEnd", {"extra": True})
        'Intro\\nExtra info\\nEnd'
        >>> process_template("Hi {{name}}")
        'Hi {{name}}'
    """
    options = options or {}
    text = _resolve_optionals(text, options)
    text = _substitute_variables(text, options)
    return _EXCESS_NEWLINES.sub("\n\n", text).strip()


def select_variant_text(cache: PromptCache, prompt_id: str, variant: str = DEFAULT_VARIANT) -> str:
    """Stored text of ``variant``, falling back to the default variant, else empty."""
    entry = cache.get(prompt_id)
    if entry is None:
        return ""
    if variant in entry.variants:
        return entry.variants[variant]
    return entry.variants.get(DEFAULT_VARIANT, "")


def render(
    cache: PromptCache,
    prompt_id: str,
    variant: str = DEFAULT_VARIANT,
    options: Mapping[str, OptionValue] | None = None,
) -> str:
    """Render the compiled text of ``prompt_id`` for ``variant`` with ``options``.

    Returns an empty string when the prompt has no usable cache entry.
    """
    return process_template(select_variant_text(cache, prompt_id, variant), options)


def extract_variables(texts: Iterable[str]) -> list[str]:
    """Distinct ``{{var}}`` names in ``texts``, in order of first appearance."""
    names: list[str] = []
    for text in texts:
        for name in _VARIABLE.findall(text):
            if name not in names:
                names.append(name)
    return names


class OptionsValidation(BaseModel):
    """Result of checking render options against a prompt's declared names."""

    model_config = ConfigDict(frozen=True)

    unknown_keys: tuple[str, ...] = ()
    non_bool_flags: tuple[str, ...] = ()
    non_string_variables: tuple[str, ...] = ()
    missing_variables: tuple[str, ...] = ()
    unknown_variant: str | None = None

    @property
    def ok(self) -> bool:
        """No problems; missing variables only leave placeholders and do not count."""
        return not (self.unknown_keys or self.non_bool_flags or self.non_string_variables or self.unknown_variant)

    def errors(self) -> list[str]:
        """Human-readable problem descriptions."""
        messages = [f"Unknown option '{key}'" for key in self.unknown_keys]
        messages += [f"Optional block flag '{key}' must be a bool" for key in self.non_bool_flags]
        messages += [f"Variable '{key}' must be a string" for key in self.non_string_variables]
        if self.unknown_variant is not None:
            messages.append(f"Unknown variant '{self.unknown_variant}'")
        return messages


def validate_options(
    prompt: "Prompt",
    cache: PromptCache,
    options: Mapping[str, object],
    variant: str = DEFAULT_VARIANT,
) -> OptionsValidation:
    """Check render options against the prompt's optional blocks and compiled variables.

    Optional-block names come from the specification; variable names come
    from the compiled text of every cached variant.
    """
    entry = cache.get(prompt.id)
    texts = list(entry.variants.values()) if entry else []
    flags = set(prompt.optional_names)
    variables = extract_variables(texts)

    unknown = tuple(key for key in options if key not in flags and key not in variables)
    non_bool = tuple(key for key in options if key in flags and not isinstance(options[key], bool))
    non_string = tuple(key for key in options if key in variables and key not in flags and not isinstance(options[key], str))
    missing = tuple(name for name in variables if name not in options)
    known_variants = {DEFAULT_VARIANT, *prompt.variant_names}
    unknown_variant = variant if variant not in known_variants else None

    return OptionsValidation(
        unknown_keys=unknown,
        non_bool_flags=non_bool,
        non_string_variables=non_string,
        missing_variables=missing,
        unknown_variant=unknown_variant,
    )


__all__ = [
    "OptionValue",
    "OptionsValidation",
    "extract_variables",
    "process_template",
    "render",
    "select_variant_text",
    "validate_options",
]
