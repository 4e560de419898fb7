"""AI Prompt Core - declarative prompt specifications compiled, tested and improved with LLMs.

@public

Prompts are declared in code as ordered steps (persona, instructions,
examples, optional blocks, variants, tests). A synthesizer model compiles each
specification into natural-language text that is cached by content hash,
rendered at request time, evaluated against the attached tests and
iteratively rewritten until they pass.

Quick Start:
    >>> from ai_prompt_core import PromptCache, prompt
    >>>
    >>> greeter = prompt(
    ...     "greeter",
    ...     lambda p: p.persona("friendly assistant helping {{name}}")
    ...     .optional("introduction", lambda o: o.do("start with a warm greeting"))
    ...     .test("Hi, I'm Ana", lambda out: "Ana" in out),
    ... )
    >>> # after `ai-prompt generate`:
    >>> cache = PromptCache.load("prompts.gen.json")
    >>> greeter.render(cache, name="Ana", introduction=True)

Environment Variables:
    - AI_PROMPT_*: see ``ai_prompt_core.settings``
    - OPENAI_API_KEY / OPENROUTER_API_KEY: provider credentials
    - LMNR_PROJECT_API_KEY: Laminar (LMNR) API key for tracing
"""

from .evaluation import Evaluator, PromptEvaluation, TestResult, VariantEvaluation, summarize_evaluations
from .exceptions import (
    PromptCoreError,
    PromptDefinitionError,
    PromptNotGeneratedError,
    SynthesizerConfigError,
    SynthesizerError,
)
from .improvement import ImprovementResult, ImprovementStatus, Improver, apply_prompt_changes
from .logging import LoggingConfig, get_pipeline_logger, setup_logging
from .prompt_compiler import (
    Builder,
    GeneratedPrompt,
    Prompt,
    PromptCache,
    PromptState,
    Step,
    create_builder,
    define_step,
    discover_prompts,
    generate_all,
    generate_prompt,
    hash_state,
    prompt,
    render,
    validate_options,
)
from .settings import Settings, settings
from .synthesizer import OpenAISynthesizer, Synthesizer, SynthesizerConfig

__version__ = "0.1.0"

__all__ = [
    # Config/Settings
    "Settings",
    "settings",
    # Logging
    "LoggingConfig",
    "get_pipeline_logger",
    "setup_logging",
    # Errors
    "PromptCoreError",
    "PromptDefinitionError",
    "PromptNotGeneratedError",
    "SynthesizerConfigError",
    "SynthesizerError",
    # Specification
    "Builder",
    "Prompt",
    "PromptState",
    "Step",
    "create_builder",
    "define_step",
    "prompt",
    # Compilation and rendering
    "GeneratedPrompt",
    "PromptCache",
    "discover_prompts",
    "generate_all",
    "generate_prompt",
    "hash_state",
    "render",
    "validate_options",
    # Synthesizer
    "OpenAISynthesizer",
    "Synthesizer",
    "SynthesizerConfig",
    # Evaluation and improvement
    "Evaluator",
    "ImprovementResult",
    "ImprovementStatus",
    "Improver",
    "PromptEvaluation",
    "TestResult",
    "VariantEvaluation",
    "apply_prompt_changes",
    "summarize_evaluations",
]
