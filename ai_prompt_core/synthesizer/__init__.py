"""Text-generation service used to compile, run, judge and improve prompts.

Exports:
    Synthesizer: Protocol every implementation satisfies
    OpenAISynthesizer: OpenAI-compatible implementation (openai, openrouter, local)
    SynthesizerConfig: Provider, model, credential and endpoint settings
"""

from .client import OpenAISynthesizer, classify_error
from .config import Provider, SynthesizerConfig, validate_endpoint
from .instructions import COMPILE_INSTRUCTION, IMPROVEMENT_INSTRUCTION, JUDGE_INSTRUCTION
from .protocol import Synthesizer
from .responses import extract_json_text, parse_structured

__all__ = [
    "COMPILE_INSTRUCTION",
    "IMPROVEMENT_INSTRUCTION",
    "JUDGE_INSTRUCTION",
    "OpenAISynthesizer",
    "Provider",
    "Synthesizer",
    "SynthesizerConfig",
    "classify_error",
    "extract_json_text",
    "parse_structured",
    "validate_endpoint",
]
