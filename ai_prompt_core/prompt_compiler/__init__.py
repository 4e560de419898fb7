"""Prompt compiler for declarative, builder-defined prompt specifications.

Prompts are declared in code with a fluent builder, compiled once into
natural-language text by a synthesizer, cached by content hash, and rendered
at request time with optional blocks, variables and variants.
"""

from .cache import GeneratedPrompt, PromptCache
from .discover import DiscoveredPrompt, discover_prompts
from .generate import GenerateReport, GenerateStatus, PromptGenerateResult, generate_all, generate_prompt
from .hashing import hash_state
from .registry import StepRegistry, default_registry
from .render import OptionsValidation, extract_variables, process_template, render, validate_options
from .spec import Builder, Prompt, PromptBuilder, create_builder, prompt
from .steps import BASE_STEPS, StepDefinition, define_step
from .types import (
    DEFAULT_VARIANT,
    Assertion,
    Nudge,
    OperationFailure,
    OptionalStep,
    PromptState,
    PromptTest,
    Step,
    Variant,
)

__all__ = [
    "BASE_STEPS",
    "DEFAULT_VARIANT",
    "Assertion",
    "Builder",
    "DiscoveredPrompt",
    "GenerateReport",
    "GenerateStatus",
    "GeneratedPrompt",
    "Nudge",
    "OperationFailure",
    "OptionalStep",
    "OptionsValidation",
    "Prompt",
    "PromptBuilder",
    "PromptCache",
    "PromptGenerateResult",
    "PromptState",
    "PromptTest",
    "Step",
    "StepDefinition",
    "StepRegistry",
    "Variant",
    "create_builder",
    "default_registry",
    "define_step",
    "discover_prompts",
    "extract_variables",
    "generate_all",
    "generate_prompt",
    "hash_state",
    "process_template",
    "prompt",
    "render",
    "validate_options",
]
