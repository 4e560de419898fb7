"""Common test fixtures."""

from pathlib import Path

import pytest

from ai_prompt_core.prompt_compiler import GeneratedPrompt, PromptCache, hash_state, prompt
from tests.support.fakes import FakeSynthesizer


@pytest.fixture
def cache_path(tmp_path: Path) -> Path:
    return tmp_path / "prompts.gen.json"


@pytest.fixture
def cache(cache_path: Path) -> PromptCache:
    """Empty file-backed cache in a temporary directory."""
    return PromptCache.load(cache_path)


@pytest.fixture
def fake_synthesizer() -> FakeSynthesizer:
    return FakeSynthesizer()


@pytest.fixture
def summarizer():
    """Prompt with an optional block, two variants and mixed tests."""
    return prompt(
        "summarizer",
        lambda p: p.persona("expert summarizer")
        .input("text to summarize")
        .do("preserve key facts and figures", nudge=4)
        .optional("json", lambda o: o.output("valid JSON object"))
        .variant("short", lambda v: v.constraint("keep the summary to 1-2 sentences"))
        .variant("detailed", lambda v: v.do("explain the context"))
        .test("Revenue was $5.2 billion.", lambda out: "$5.2 billion" in out, "keeps figures")
        .test("The fish lives at 8,200 meters.", "must mention the depth"),
    )


@pytest.fixture
def generated_summarizer(cache: PromptCache, summarizer) -> PromptCache:
    """Cache holding compiled text for both summarizer variants."""
    cache.store(
        "summarizer",
        GeneratedPrompt(
            variants={"short": "You are an expert summarizer. Be brief.", "detailed": "You are an expert summarizer. Explain context."},
            hash=hash_state(summarizer.state),
        ),
    )
    return cache
