"""Synthesizer protocol consumed by the compiler, evaluator and improver."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class Synthesizer(Protocol):
    """Single request/response text-generation capability.

    Implementations: OpenAISynthesizer (any OpenAI-compatible endpoint).
    Tests use a scripted fake.
    """

    async def complete(self, system_instruction: str, user_message: str, *, purpose: str | None = None) -> str:
        """Send one system instruction and one user message, return the model's text.

        ``purpose`` labels the call for tracing and error messages.
        Raises a SynthesizerError subclass on failure; never retries.
        """
        ...


__all__ = ["Synthesizer"]
