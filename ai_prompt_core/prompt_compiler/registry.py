"""Step registry: the open vocabulary of step kinds a builder understands.

Each registry maps a step-type name to its StepDefinition. Builders look
methods up here, and the compiler formats steps through the same registry,
so custom kinds get both a builder method and a model-facing description.
"""

from collections.abc import Callable, Iterable, Iterator
from typing import Any

from pydantic import ValidationError

from ai_prompt_core.exceptions import PromptDefinitionError

from .steps import BASE_STEPS, StepDefinition
from .types import OptionalStep, Step

# Builder methods that are not step kinds and cannot be registered.
RESERVED_NAMES: frozenset[str] = frozenset({"optional", "step", "test", "to_state", "use", "variant"})


def _format_optional(step: OptionalStep, format_child: Callable[[Step], str]) -> str:
    inner = "\n\n".join(format_child(child) for child in step.steps)
    return (
        f'[Optional Block Start: "{step.name}"] (The following instructions are OPTIONAL. '
        f"Wrap the generated content for these in {{{{#{step.name}}}}}...{{{{/{step.name}}}}} markers "
        f"so it can be toggled at runtime.)\n\n{inner}\n\n"
        f'[Optional Block End: "{step.name}"]'
    )


class StepRegistry:
    """Mapping of step-type name to StepDefinition.

    Example:
        >>> registry = StepRegistry(BASE_STEPS)
        >>> registry.register("tone", lambda style: Step(type="tone", style=style), lambda s: f"[Tone] {s.style}")
        >>> registry.format_step(registry.build("tone", "formal"))
        '[Tone] formal'
    """

    def __init__(self, definitions: Iterable[StepDefinition] = ()) -> None:
        self._definitions: dict[str, StepDefinition] = {}
        for definition in definitions:
            self.add(definition)

    def add(self, definition: StepDefinition, *, replace: bool = False) -> StepDefinition:
        """Add a definition.

        Raises:
            PromptDefinitionError: Reserved name, or name already registered and ``replace`` is False.
        """
        name = definition.name
        if not name.isidentifier():
            raise PromptDefinitionError(f"Step name '{name}' must be a valid Python identifier")
        if name in RESERVED_NAMES:
            raise PromptDefinitionError(f"Step name '{name}' is reserved for a builder method")
        if name in self._definitions and not replace:
            raise PromptDefinitionError(f"Step '{name}' is already registered")
        self._definitions[name] = definition
        return definition

    def register(
        self,
        name: str,
        build: Callable[..., Step],
        format: Callable[[Any], str],  # noqa: A002
        *,
        replace: bool = False,
    ) -> StepDefinition:
        """Register a step kind from its constructor and formatter."""
        return self.add(StepDefinition(name=name, build=build, format=format), replace=replace)

    def get(self, name: str) -> StepDefinition | None:
        """Definition for ``name``, or None."""
        return self._definitions.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._definitions

    def __iter__(self) -> Iterator[StepDefinition]:
        return iter(self._definitions.values())

    def __len__(self) -> int:
        return len(self._definitions)

    @property
    def names(self) -> tuple[str, ...]:
        """Registered step names in registration order."""
        return tuple(self._definitions)

    def build(self, name: str, *args: Any, **kwargs: Any) -> Step:
        """Construct a step of kind ``name``.

        Raises:
            PromptDefinitionError: Unknown kind, invalid arguments, or a build
                function whose Step type does not match ``name``.
        """
        definition = self._definitions.get(name)
        if definition is None:
            raise PromptDefinitionError(f"Unknown step '{name}'. Registered steps: {', '.join(self.names) or '(none)'}")
        try:
            step = definition.build(*args, **kwargs)
        except (TypeError, ValidationError) as e:
            raise PromptDefinitionError(f"Invalid arguments for step '{name}': {e}") from e
        if not isinstance(step, Step):
            raise PromptDefinitionError(f"Step '{name}' build must return a Step, got {type(step).__name__}")
        if step.type != name:
            raise PromptDefinitionError(f"Step '{name}' build returned a step of type '{step.type}'")
        return step

    def format_step(self, step: Step) -> str:
        """Describe one step for the synthesizer. Unknown kinds get a placeholder line."""
        if isinstance(step, OptionalStep):
            return _format_optional(step, self.format_step)
        definition = self._definitions.get(step.type)
        if definition is None:
            return f"[Unknown Step: {step.type}]"
        return definition.format(step)

    def format_steps(self, steps: Iterable[Step]) -> str:
        """Describe a step list, one blank line between steps."""
        return "\n\n".join(self.format_step(step) for step in steps)


def default_registry() -> StepRegistry:
    """A fresh registry holding the nine base step kinds."""
    return StepRegistry(BASE_STEPS)


__all__ = ["RESERVED_NAMES", "StepRegistry", "default_registry"]
