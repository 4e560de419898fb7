"""Compilation of prompt specifications into cached text.

Each prompt is hashed; an entry whose stored hash matches is reused without
any synthesizer call. Otherwise every variant (or the implicit default) is
compiled by its own synthesizer call and the prompt's entry is overwritten.
"""

from collections.abc import Iterable
from enum import StrEnum

from pydantic import BaseModel, ConfigDict

from ai_prompt_core.exceptions import SynthesizerConfigError, SynthesizerError
from ai_prompt_core.logging import get_pipeline_logger
from ai_prompt_core.synthesizer import COMPILE_INSTRUCTION, Synthesizer

from .cache import GeneratedPrompt, PromptCache
from .hashing import hash_state
from .spec import Prompt
from .types import DEFAULT_VARIANT, OperationFailure

logger = get_pipeline_logger(__name__)

COMPILE_REQUEST_PREFIX = "Generate a prompt from these steps:\n\n"


class GenerateStatus(StrEnum):
    CACHED = "cached"
    COMPILED = "compiled"
    FAILED = "failed"


class PromptGenerateResult(BaseModel):
    """Outcome for one prompt."""

    model_config = ConfigDict(frozen=True)

    prompt_id: str
    status: GenerateStatus
    variant_names: tuple[str, ...] = ()
    hash: str = ""


class GenerateReport(BaseModel):
    """Outcome of a generate run over many prompts."""

    model_config = ConfigDict(frozen=True)

    results: tuple[PromptGenerateResult, ...] = ()
    failures: tuple[OperationFailure, ...] = ()

    @property
    def compiled(self) -> list[str]:
        return [r.prompt_id for r in self.results if r.status == GenerateStatus.COMPILED]

    @property
    def cached(self) -> list[str]:
        return [r.prompt_id for r in self.results if r.status == GenerateStatus.CACHED]

    @property
    def ok(self) -> bool:
        return not self.failures


def compile_variant_names(prompt: Prompt) -> tuple[str, ...]:
    """Variants to compile: the declared ones, or the implicit default."""
    return prompt.variant_names or (DEFAULT_VARIANT,)


async def compile_variant(prompt: Prompt, variant: str, synthesizer: Synthesizer) -> str:
    """Compile one variant (base steps plus the variant's steps) into prompt text."""
    user_message = COMPILE_REQUEST_PREFIX + prompt.format_steps(variant)
    label = prompt.id if variant == DEFAULT_VARIANT else f"{prompt.id} [{variant}]"
    return await synthesizer.complete(COMPILE_INSTRUCTION, user_message, purpose=f"compiling prompt '{label}'")


async def generate_prompt(
    prompt: Prompt,
    cache: PromptCache,
    synthesizer: Synthesizer,
    *,
    no_cache: bool = False,
) -> PromptGenerateResult:
    """Compile ``prompt`` unless its cache entry is current, then persist the entry.

    Raises:
        SynthesizerError: A variant failed to compile; the cache entry is left untouched.
    """
    state_hash = hash_state(prompt.state)
    existing = cache.get(prompt.id)
    if not no_cache and existing is not None and existing.hash == state_hash:
        logger.debug(f"Prompt '{prompt.id}' is up to date (hash {state_hash})")
        return PromptGenerateResult(
            prompt_id=prompt.id, status=GenerateStatus.CACHED, variant_names=tuple(existing.variants), hash=state_hash
        )

    variant_names = compile_variant_names(prompt)
    logger.info(f"Compiling prompt '{prompt.id}' ({len(variant_names)} variant(s))")
    variants: dict[str, str] = {}
    for variant in variant_names:
        variants[variant] = await compile_variant(prompt, variant, synthesizer)

    cache.store(prompt.id, GeneratedPrompt(variants=variants, hash=state_hash))
    return PromptGenerateResult(prompt_id=prompt.id, status=GenerateStatus.COMPILED, variant_names=variant_names, hash=state_hash)


async def generate_all(
    prompts: Iterable[Prompt],
    cache: PromptCache,
    synthesizer: Synthesizer,
    *,
    no_cache: bool = False,
) -> GenerateReport:
    """Generate every prompt, isolating synthesizer failures per prompt.

    Configuration errors (missing credential, invalid endpoint) abort the run.
    """
    results: list[PromptGenerateResult] = []
    failures: list[OperationFailure] = []
    for prompt in prompts:
        try:
            results.append(await generate_prompt(prompt, cache, synthesizer, no_cache=no_cache))
        except SynthesizerConfigError:
            raise
        except SynthesizerError as e:
            logger.error(f"Failed to compile prompt '{prompt.id}': {e.title}")
            failures.append(OperationFailure(prompt_id=prompt.id, operation="generate", message=str(e)))
            results.append(PromptGenerateResult(prompt_id=prompt.id, status=GenerateStatus.FAILED))
    return GenerateReport(results=tuple(results), failures=tuple(failures))


__all__ = [
    "COMPILE_REQUEST_PREFIX",
    "GenerateReport",
    "GenerateStatus",
    "PromptGenerateResult",
    "compile_variant",
    "compile_variant_names",
    "generate_all",
    "generate_prompt",
]
