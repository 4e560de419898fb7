"""Structured-response parsing for judge and improvement calls."""

import re
from typing import TypeVar

from pydantic import BaseModel, ValidationError

T = TypeVar("T", bound=BaseModel)

_JSON_FENCE = re.compile(r"```json\s*(.*?)\s*```", re.DOTALL)
_ANY_FENCE = re.compile(r"```\s*(.*?)\s*```", re.DOTALL)
_BARE_OBJECT = re.compile(r"(\{.*\})", re.DOTALL)


def extract_json_text(response: str, *, bare_object: bool = False) -> str:
    """Pull the JSON payload out of a model response.

    Tries a ```json fence, then any fence, then (with ``bare_object``) the
    outermost ``{...}`` span, and falls back to the whole response.
    """
    patterns = [_JSON_FENCE, _ANY_FENCE]
    if bare_object:
        patterns.append(_BARE_OBJECT)
    for pattern in patterns:
        match = pattern.search(response)
        if match and match.group(1):
            return match.group(1).strip()
    return response.strip()


def parse_structured(response: str, response_format: type[T], *, bare_object: bool = False) -> T | None:
    """Validate the JSON payload of ``response`` as ``response_format``; None when it does not fit."""
    try:
        return response_format.model_validate_json(extract_json_text(response, bare_object=bare_object))
    except ValidationError:
        return None


__all__ = ["extract_json_text", "parse_structured"]
