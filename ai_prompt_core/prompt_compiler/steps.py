"""Step definitions: how each step kind is built and how it is described to the model."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from .types import (
    ConstraintStep,
    ContextStep,
    DoStep,
    DontStep,
    ExampleStep,
    InputStep,
    Nudge,
    OutputStep,
    PersonaStep,
    RawStep,
    Step,
)

NEUTRAL_NUDGE = 3


@dataclass(frozen=True)
class StepDefinition:
    """A step kind: its builder method name, constructor and formatter.

    ``build`` receives the builder method's arguments and returns a Step whose
    ``type`` equals ``name``. ``format`` must be pure; its output is sent to the
    synthesizer when compiling.
    """

    name: str
    build: Callable[..., Step]
    format: Callable[[Any], str]


def define_step(name: str, build: Callable[..., Step], format: Callable[[Any], str]) -> StepDefinition:  # noqa: A002
    """Create a step definition for a custom builder.

    Example:
        >>> tone = define_step(
        ...     "tone",
        ...     build=lambda style: Step(type="tone", style=style),
        ...     format=lambda step: f"[Tone] Write in a {step.style} tone",
        ... )
        >>> builder = create_builder([tone])
    """
    return StepDefinition(name=name, build=build, format=format)


def format_nudge(nudge: Nudge | None) -> str:
    """Nudge suffix line; omitted for the neutral level."""
    if not nudge or nudge == NEUTRAL_NUDGE:
        return ""
    return f"\nNudge: {nudge}"


raw = define_step(
    "raw",
    build=lambda value: RawStep(value=value),
    format=lambda step: f'[Raw Text] (Include this text verbatim in the system prompt.)\nValue: "{step.value}"',
)

persona = define_step(
    "persona",
    build=lambda role: PersonaStep(role=role),
    format=lambda step: (
        "[Persona] (Define the identity and role the AI should assume. "
        f"Frame this as 'You are...' at the start of the system prompt.)\nValue: \"{step.role}\""
    ),
)

input_ = define_step(
    "input",
    build=lambda description: InputStep(description=description),
    format=lambda step: (
        "[Input] (Describe what input the AI will receive from the user. "
        f'Help the AI understand the context of what it will be working with.)\nValue: "{step.description}"'
    ),
)

output = define_step(
    "output",
    build=lambda description: OutputStep(description=description),
    format=lambda step: (
        "[Output] (Specify what the AI should produce as output. "
        f'Be clear about the expected format and content.)\nValue: "{step.description}"'
    ),
)

context = define_step(
    "context",
    build=lambda information: ContextStep(information=information),
    format=lambda step: (
        "[Context] (Background information or context that helps the AI understand the situation. "
        f'This is not an instruction, just helpful information.)\nValue: "{step.information}"'
    ),
)

do = define_step(
    "do",
    build=lambda instruction, nudge=None: DoStep(instruction=instruction, nudge=nudge),
    format=lambda step: f'[Do] (A positive instruction the AI must follow.)\nValue: "{step.instruction}"{format_nudge(step.nudge)}',
)

dont = define_step(
    "dont",
    build=lambda instruction, nudge=None: DontStep(instruction=instruction, nudge=nudge),
    format=lambda step: (
        f'[Don\'t] (A negative instruction - something the AI must avoid.)\nValue: "{step.instruction}"{format_nudge(step.nudge)}'
    ),
)

constraint = define_step(
    "constraint",
    build=lambda rule, nudge=None: ConstraintStep(rule=rule, nudge=nudge),
    format=lambda step: f'[Constraint] (A rule or limitation the AI must respect.)\nValue: "{step.rule}"{format_nudge(step.nudge)}',
)

example = define_step(
    "example",
    build=lambda input_text, output_text: ExampleStep(input=input_text, output=output_text),
    format=lambda step: (
        "[Example] (An input/output example showing the AI how to respond. "
        f'Use these to demonstrate the expected behavior.)\nInput: "{step.input}"\nExpected output: "{step.output}"'
    ),
)

BASE_STEPS: tuple[StepDefinition, ...] = (raw, persona, input_, output, context, do, dont, constraint, example)


__all__ = ["BASE_STEPS", "StepDefinition", "define_step", "format_nudge"]
