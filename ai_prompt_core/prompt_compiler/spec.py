"""Fluent builder for prompt specifications.

A ``PromptBuilder`` exposes one method per kind registered in its
``StepRegistry`` plus the structural methods ``use``, ``optional``,
``variant`` and ``test``. Every method returns the builder for chaining:

    >>> summarizer = prompt(
    ...     "summarizer",
    ...     lambda p: p.persona("expert summarizer")
    ...     .do("preserve key facts", nudge=4)
    ...     .optional("json", lambda o: o.output("valid JSON object"))
    ...     .variant("short", lambda v: v.constraint("1-2 sentences"))
    ...     .test("Q3 earnings were $5.2B.", lambda out: "$5.2B" in out),
    ... )
    >>> summarizer.variant_names
    ('short',)
"""

import re
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Any, Literal

from ai_prompt_core.exceptions import PromptDefinitionError
from ai_prompt_core.logging import get_pipeline_logger

from .registry import StepRegistry
from .steps import BASE_STEPS, StepDefinition
from .types import DEFAULT_VARIANT, Assertion, OptionalStep, PromptState, PromptTest, Step, Variant

if TYPE_CHECKING:
    from .cache import PromptCache

logger = get_pipeline_logger(__name__)

Scope = Literal["prompt", "optional", "variant"]

_BLOCK_NAME = re.compile(r"\w+")


def _optional_names(steps: Iterable[Step]) -> list[str]:
    """Names of the optional blocks directly in ``steps`` (not nested)."""
    return [step.name for step in steps if isinstance(step, OptionalStep)]


def collect_optional_names(steps: Iterable[Step]) -> tuple[str, ...]:
    """Every optional-block name in ``steps``, depth first, without duplicates."""
    names: list[str] = []
    for step in steps:
        if isinstance(step, OptionalStep):
            if step.name not in names:
                names.append(step.name)
            names.extend(name for name in collect_optional_names(step.steps) if name not in names)
    return tuple(names)


class PromptBuilder:
    """Accumulates the steps, variants and tests of one scope.

    The top-level scope accepts everything. Optional-block scopes accept
    steps and nested optional blocks; variant scopes accept flat steps only.
    """

    def __init__(self, registry: StepRegistry, *, scope: Scope = "prompt", enclosing: frozenset[str] = frozenset()) -> None:
        self._registry = registry
        self._scope = scope
        self._enclosing = enclosing
        self._steps: list[Step] = []
        self._block_names: set[str] = set()
        self._variants: dict[str, Variant] = {}
        self._tests: list[PromptTest] = []

    def __getattr__(self, name: str) -> Callable[..., "PromptBuilder"]:
        if name.startswith("_"):
            raise AttributeError(name)
        if name not in self._registry:
            raise AttributeError(
                f"'{type(self).__name__}' has no step '{name}'. Registered steps: {', '.join(self._registry.names)}"
            )

        def add_step(*args: Any, **kwargs: Any) -> "PromptBuilder":
            return self.step(name, *args, **kwargs)

        add_step.__name__ = name
        return add_step

    def __dir__(self) -> Iterable[str]:
        return [*super().__dir__(), *self._registry.names]

    def step(self, name: str, *args: Any, **kwargs: Any) -> "PromptBuilder":
        """Append a step of kind ``name``; the generic form of the per-kind methods."""
        self._steps.append(self._registry.build(name, *args, **kwargs))
        return self

    def use(self, source: "Prompt | PromptState") -> "PromptBuilder":
        """Splice another prompt's base steps into this scope by value.

        Variants and tests of ``source`` are not carried over.
        """
        state = source.state if isinstance(source, Prompt) else source
        if not isinstance(state, PromptState):
            raise PromptDefinitionError(f"use() expects a Prompt or PromptState, got {type(source).__name__}")
        for name in _optional_names(state.steps):
            self._claim_block_name(name)
        for name in collect_optional_names(state.steps):
            self._reject_enclosing_name(name)
        self._steps.extend(state.steps)
        return self

    def optional(self, name: str, fn: Callable[["PromptBuilder"], Any]) -> "PromptBuilder":
        """Wrap the steps ``fn`` adds into a block that can be toggled at render time."""
        if self._scope == "variant":
            raise PromptDefinitionError(f"Optional block '{name}' cannot be declared inside a variant")
        self._claim_block_name(name)
        inner = PromptBuilder(self._registry, scope="optional", enclosing=self._enclosing | {name})
        fn(inner)
        self._steps.append(OptionalStep(name=name, steps=tuple(inner._steps)))
        return self

    def variant(self, name: str, fn: Callable[["PromptBuilder"], Any]) -> "PromptBuilder":
        """Declare a named alternative: steps appended to the base steps for its own compiled text.

        Re-declaring a name replaces the earlier steps but keeps its position.
        """
        self._require_top_level("variant")
        if not isinstance(name, str) or not name.strip():
            raise PromptDefinitionError("Variant name must be a non-empty string")
        if name == DEFAULT_VARIANT:
            raise PromptDefinitionError(f"Variant name '{DEFAULT_VARIANT}' is reserved for the base steps")
        inner = PromptBuilder(self._registry, scope="variant")
        fn(inner)
        if name in self._variants:
            logger.warning(f"Variant '{name}' declared more than once; the last declaration wins")
        self._variants[name] = Variant(name=name, steps=tuple(inner._steps))
        return self

    def test(self, input: str, assertion: Assertion, description: str | None = None) -> "PromptBuilder":  # noqa: A002
        """Attach a regression test run against every compiled variant.

        ``assertion`` is either a predicate over the model output or free text
        checked by the judge.
        """
        self._require_top_level("test")
        if not (callable(assertion) or isinstance(assertion, str)):
            raise PromptDefinitionError(f"Test assertion must be a callable or a string, got {type(assertion).__name__}")
        self._tests.append(PromptTest(input=input, assertion=assertion, description=description))
        return self

    def _claim_block_name(self, name: str) -> None:
        if not isinstance(name, str) or not _BLOCK_NAME.fullmatch(name):
            raise PromptDefinitionError(
                f"Optional block name {name!r} must contain only letters, digits and underscores"
            )
        self._reject_enclosing_name(name)
        if name in self._block_names:
            raise PromptDefinitionError(f"Optional block '{name}' is already declared in this scope")
        self._block_names.add(name)

    def _reject_enclosing_name(self, name: str) -> None:
        # A block sharing a name with one that contains it breaks marker pairing.
        if name in self._enclosing:
            raise PromptDefinitionError(f"Optional block '{name}' cannot be nested inside a block of the same name")

    def _require_top_level(self, method: str) -> None:
        if self._scope != "prompt":
            raise PromptDefinitionError(f"{method}() is only allowed at the top level of a prompt, not inside {self._scope} blocks")

    def to_state(self) -> PromptState:
        """Freeze what has been accumulated so far."""
        return PromptState(steps=tuple(self._steps), variants=tuple(self._variants.values()), tests=tuple(self._tests))


class Prompt:
    """A built prompt specification bound to its id and step vocabulary."""

    def __init__(self, id: str, state: PromptState, registry: StepRegistry) -> None:  # noqa: A002
        self.id = id
        self.state = state
        self.registry = registry

    @property
    def variant_names(self) -> tuple[str, ...]:
        return self.state.variant_names

    @property
    def tests(self) -> tuple[PromptTest, ...]:
        return self.state.tests

    @property
    def optional_names(self) -> tuple[str, ...]:
        """Every optional-block name in the base and variant steps."""
        names = list(collect_optional_names(self.state.steps))
        for variant in self.state.variants:
            names.extend(name for name in collect_optional_names(variant.steps) if name not in names)
        return tuple(names)

    def format_steps(self, variant: str = DEFAULT_VARIANT) -> str:
        """The step descriptions sent to the synthesizer when compiling ``variant``."""
        return self.registry.format_steps(self.state.variant_steps(variant))

    def render(self, cache: "PromptCache", variant: str = DEFAULT_VARIANT, **options: str | bool) -> str:
        """Render this prompt's compiled text from ``cache``; see ``render.render``."""
        from .render import render

        return render(cache, self.id, variant, options)

    def __repr__(self) -> str:
        return f"Prompt(id={self.id!r}, steps={len(self.state.steps)}, variants={list(self.variant_names)})"


class Builder:
    """Creates prompts with a fixed step vocabulary."""

    def __init__(self, registry: StepRegistry) -> None:
        self.registry = registry

    def prompt(self, id: str, fn: Callable[[PromptBuilder], Any]) -> Prompt:  # noqa: A002
        """Build a prompt by letting ``fn`` chain calls on a fresh builder."""
        if not isinstance(id, str) or not id.strip():
            raise PromptDefinitionError("Prompt id must be a non-empty string")
        builder = PromptBuilder(self.registry)
        fn(builder)
        return Prompt(id, builder.to_state(), self.registry)


def create_builder(custom_steps: Iterable[StepDefinition] = (), *, omit_base_steps: bool = False) -> Builder:
    """Create a builder with custom step kinds.

    Custom definitions are added after the base ones and replace a base kind
    of the same name. With ``omit_base_steps`` only the custom kinds exist.
    """
    registry = StepRegistry(() if omit_base_steps else BASE_STEPS)
    for definition in custom_steps:
        registry.add(definition, replace=True)
    return Builder(registry)


_default_builder = create_builder()


def prompt(id: str, fn: Callable[[PromptBuilder], Any]) -> Prompt:  # noqa: A002
    """Build a prompt with the base step vocabulary."""
    return _default_builder.prompt(id, fn)


__all__ = ["Builder", "Prompt", "PromptBuilder", "collect_optional_names", "create_builder", "prompt"]
