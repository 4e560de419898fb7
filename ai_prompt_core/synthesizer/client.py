"""OpenAI-compatible synthesizer client.

One attempt per call, no retries. Provider errors are classified into the
SynthesizerError hierarchy so callers can report them and decide what to do.
"""

import time
from typing import Any

import openai
from lmnr import Laminar
from openai import AsyncOpenAI
from openai.types.chat import ChatCompletionMessageParam

from ai_prompt_core.exceptions import (
    AuthenticationFailedError,
    EmptyResponseError,
    MalformedResponseError,
    ModelNotFoundError,
    NetworkError,
    RateLimitedError,
    ServerError,
    SynthesizerError,
)
from ai_prompt_core.logging import get_pipeline_logger

from .config import SynthesizerConfig

logger = get_pipeline_logger(__name__)

# Sent when the endpoint needs no credential; the SDK refuses an empty key.
_NO_CREDENTIAL = "no-credential"

_MAX_DETAIL_CHARS = 300


def _status_detail(error: openai.APIStatusError) -> str:
    """Short 'status - body' string for an HTTP error."""
    body = str(error.message or "")
    if len(body) > _MAX_DETAIL_CHARS:
        body = body[:_MAX_DETAIL_CHARS] + "..."
    return f"{error.status_code} - {body}"


def classify_error(error: Exception, *, operation: str, model: str) -> SynthesizerError:
    """Map an openai SDK exception onto the SynthesizerError hierarchy."""
    if isinstance(error, SynthesizerError):
        return error
    if isinstance(error, openai.APIConnectionError):
        return NetworkError(str(error), operation=operation, model=model)
    if isinstance(error, (openai.AuthenticationError, openai.PermissionDeniedError)):
        return AuthenticationFailedError(_status_detail(error), operation=operation, model=model)
    if isinstance(error, openai.NotFoundError):
        return ModelNotFoundError(_status_detail(error), operation=operation, model=model)
    if isinstance(error, openai.RateLimitError):
        return RateLimitedError(_status_detail(error), operation=operation, model=model)
    if isinstance(error, openai.InternalServerError):
        return ServerError(_status_detail(error), operation=operation, model=model)
    if isinstance(error, openai.APIStatusError):
        if error.status_code >= 500:
            return ServerError(_status_detail(error), operation=operation, model=model)
        return SynthesizerError(_status_detail(error), operation=operation, model=model)
    if isinstance(error, (openai.APIResponseValidationError, ValueError)):
        return MalformedResponseError(str(error), operation=operation, model=model)
    return SynthesizerError(f"{type(error).__name__}: {error}", operation=operation, model=model)


def _extract_content(response: Any, *, operation: str, model: str) -> str:
    """Pull the first choice's text out of a chat completion.

    Raises:
        MalformedResponseError: The envelope has no choices/message.
        EmptyResponseError: The message content is empty.
    """
    choices = getattr(response, "choices", None)
    if not choices:
        raise MalformedResponseError("Response has no choices.", operation=operation, model=model)
    message = getattr(choices[0], "message", None)
    if message is None:
        raise MalformedResponseError("First choice has no message.", operation=operation, model=model)
    content = message.content or ""
    # Strip thinking tags if present
    if "</think>" in content:
        content = content.split("</think>")[-1]
    content = content.strip()
    if not content:
        raise EmptyResponseError(operation=operation, model=model)
    return content


class OpenAISynthesizer:
    """Synthesizer backed by any OpenAI chat-completions compatible endpoint.

    Credentials and endpoint are resolved on every call so a missing
    environment variable surfaces exactly when a live call is attempted.
    """

    def __init__(self, config: SynthesizerConfig) -> None:
        self.config = config

    async def complete(self, system_instruction: str, user_message: str, *, purpose: str | None = None) -> str:
        """Send one system + user message pair and return the response text."""
        operation = purpose or "calling the model"
        model = self.config.model
        base_url = self.config.resolve_base_url()
        api_key = self.config.resolve_api_key()

        messages: list[ChatCompletionMessageParam] = [
            {"role": "system", "content": system_instruction},
            {"role": "user", "content": user_message},
        ]

        start_time = time.time()
        try:
            async with AsyncOpenAI(api_key=api_key or _NO_CREDENTIAL, base_url=base_url, max_retries=0) as client:
                with Laminar.start_as_current_span(purpose or model, span_type="LLM", input=messages):
                    response = await client.chat.completions.create(model=model, messages=messages, stream=False)
                    content = _extract_content(response, operation=operation, model=model)
                    Laminar.set_span_output(content)
        except SynthesizerError as e:
            logger.warning(f"Synthesizer call failed ({type(e).__name__}) while {operation}")
            raise
        except Exception as e:
            classified = classify_error(e, operation=operation, model=model)
            logger.warning(f"Synthesizer call failed ({type(classified).__name__}) while {operation}")
            raise classified from e

        logger.debug(f"Synthesizer call for '{operation}' took {time.time() - start_time:.2f}s ({len(content)} chars)")
        return content


__all__ = ["OpenAISynthesizer", "classify_error"]
