"""Types for prompt specifications.

All step and state types are frozen Pydantic models so a PromptState handed to
the compiler cannot change underneath it, and so its content serializes
deterministically for hashing. Tests carry arbitrary predicates and are
excluded from serialization.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, SerializeAsAny

Nudge = Literal[1, 2, 3, 4, 5]
"""Instruction strength, 1 = gentlest, 5 = strongest. 3 is the neutral default."""

DEFAULT_VARIANT = "default"


class Step(BaseModel):
    """One declarative content unit, tagged by ``type``.

    Custom step kinds either subclass Step with a ``Literal`` type or build
    plain ``Step(type="tone", style="formal")`` instances; extra fields are kept.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    type: str


class RawStep(Step):
    """Text included verbatim."""

    type: Literal["raw"] = "raw"
    value: str


class PersonaStep(Step):
    """Identity the model should assume."""

    type: Literal["persona"] = "persona"
    role: str


class InputStep(Step):
    """What the model will receive."""

    type: Literal["input"] = "input"
    description: str


class OutputStep(Step):
    """What the model should produce."""

    type: Literal["output"] = "output"
    description: str


class ContextStep(Step):
    """Background information, not an instruction."""

    type: Literal["context"] = "context"
    information: str


class DoStep(Step):
    """Positive instruction."""

    type: Literal["do"] = "do"
    instruction: str
    nudge: Nudge | None = None


class DontStep(Step):
    """Negative instruction."""

    type: Literal["dont"] = "dont"
    instruction: str
    nudge: Nudge | None = None


class ConstraintStep(Step):
    """Rule or limitation."""

    type: Literal["constraint"] = "constraint"
    rule: str
    nudge: Nudge | None = None


class ExampleStep(Step):
    """Input/output demonstration."""

    type: Literal["example"] = "example"
    input: str
    output: str


class OptionalStep(Step):
    """Named group of steps that can be toggled at render time. Nests freely."""

    type: Literal["optional"] = "optional"
    name: str
    steps: tuple[SerializeAsAny[Step], ...] = ()


class Variant(BaseModel):
    """Named alternative: steps appended to the base steps for one compiled text."""

    model_config = ConfigDict(frozen=True)

    name: str
    steps: tuple[SerializeAsAny[Step], ...] = ()


Assertion = Callable[[str], bool] | str
"""Predicate run against the live output, or free text checked by the judge."""


@dataclass(frozen=True)
class PromptTest:
    """Regression test attached to a prompt; applies to every compiled variant."""

    input: str
    assertion: Assertion
    description: str | None = None

    @property
    def is_predicate(self) -> bool:
        """Whether the assertion runs locally rather than through the judge."""
        return callable(self.assertion)


class PromptState(BaseModel):
    """Everything a prompt specification declares.

    ``tests`` is excluded from serialization, so ``model_dump()`` yields
    exactly the content that participates in the hash.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    steps: tuple[SerializeAsAny[Step], ...] = ()
    variants: tuple[Variant, ...] = ()
    tests: tuple[PromptTest, ...] = Field(default=(), exclude=True)

    @property
    def variant_names(self) -> tuple[str, ...]:
        """Declared variant names in declaration order."""
        return tuple(variant.name for variant in self.variants)

    def variant_steps(self, name: str) -> tuple[Step, ...]:
        """Base steps followed by the named variant's steps.

        ``"default"`` (or any undeclared name) yields the base steps alone.
        """
        for variant in self.variants:
            if variant.name == name:
                return (*self.steps, *variant.steps)
        return self.steps


class OperationFailure(BaseModel):
    """A synthesizer failure isolated to one prompt or variant during a run."""

    model_config = ConfigDict(frozen=True)

    prompt_id: str
    variant_name: str | None = None
    operation: str
    message: str

    def describe(self) -> str:
        target = f"{self.prompt_id} [{self.variant_name}]" if self.variant_name else self.prompt_id
        return f"{self.operation} failed for {target}: {self.message}"


__all__ = [
    "DEFAULT_VARIANT",
    "Assertion",
    "ConstraintStep",
    "ContextStep",
    "DoStep",
    "DontStep",
    "ExampleStep",
    "InputStep",
    "Nudge",
    "OperationFailure",
    "OptionalStep",
    "OutputStep",
    "PersonaStep",
    "PromptState",
    "PromptTest",
    "RawStep",
    "Step",
    "Variant",
]
