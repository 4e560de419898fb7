"""Tests for prompt_compiler.generate (compiling specifications into the cache)."""

import asyncio

import pytest

from ai_prompt_core.exceptions import MissingCredentialError, RateLimitedError
from ai_prompt_core.prompt_compiler import GeneratedPrompt, PromptCache, hash_state, prompt
from ai_prompt_core.prompt_compiler.generate import (
    COMPILE_REQUEST_PREFIX,
    GenerateStatus,
    compile_variant_names,
    generate_all,
    generate_prompt,
)
from ai_prompt_core.synthesizer import COMPILE_INSTRUCTION
from tests.support.fakes import FakeSynthesizer


@pytest.fixture
def plain():
    return prompt("plain", lambda p: p.persona("helper").do("answer briefly"))


class TestGeneratePrompt:
    @pytest.mark.asyncio
    async def test_compiles_default_variant(self, plain, cache: PromptCache):
        synth = FakeSynthesizer(["You are a helper."])
        result = await generate_prompt(plain, cache, synth)

        assert result.status == GenerateStatus.COMPILED
        assert result.variant_names == ("default",)
        assert cache.get("plain") == GeneratedPrompt(variants={"default": "You are a helper."}, hash=hash_state(plain.state))
        call = synth.calls[0]
        assert call.system_instruction == COMPILE_INSTRUCTION
        assert call.user_message == COMPILE_REQUEST_PREFIX + plain.format_steps()
        assert call.purpose == "compiling prompt 'plain'"

    @pytest.mark.asyncio
    async def test_one_call_per_variant(self, summarizer, cache: PromptCache):
        synth = FakeSynthesizer(["SHORT", "DETAILED"])
        result = await generate_prompt(summarizer, cache, synth)

        assert result.variant_names == ("short", "detailed")
        assert cache.get("summarizer").variants == {"short": "SHORT", "detailed": "DETAILED"}
        assert len(synth.calls) == 2
        assert "keep the summary to 1-2 sentences" in synth.calls[0].user_message
        assert "explain the context" not in synth.calls[0].user_message
        assert "explain the context" in synth.calls[1].user_message
        assert synth.calls[1].purpose == "compiling prompt 'summarizer [detailed]'"

    @pytest.mark.asyncio
    async def test_cache_hit_makes_no_calls(self, summarizer, generated_summarizer: PromptCache):
        synth = FakeSynthesizer()
        result = await generate_prompt(summarizer, generated_summarizer, synth)
        assert result.status == GenerateStatus.CACHED
        assert synth.calls == []

    @pytest.mark.asyncio
    async def test_no_cache_forces_recompile(self, summarizer, generated_summarizer: PromptCache):
        synth = FakeSynthesizer(["S2", "D2"])
        result = await generate_prompt(summarizer, generated_summarizer, synth, no_cache=True)
        assert result.status == GenerateStatus.COMPILED
        assert generated_summarizer.variant_text("summarizer", "short") == "S2"

    @pytest.mark.asyncio
    async def test_changed_spec_recompiles_and_drops_old_variants(self, cache: PromptCache):
        before = prompt("p", lambda b: b.raw("x").variant("a", lambda v: v.raw("A")))
        after = prompt("p", lambda b: b.raw("x").variant("b", lambda v: v.raw("B")))
        await generate_prompt(before, cache, FakeSynthesizer(["A text"]))
        await generate_prompt(after, cache, FakeSynthesizer(["B text"]))
        entry = cache.get("p")
        assert entry.variants == {"b": "B text"}
        assert entry.hash == hash_state(after.state)

    @pytest.mark.asyncio
    async def test_failure_leaves_entry_untouched(self, summarizer, cache: PromptCache):
        cache.store("summarizer", GeneratedPrompt(variants={"short": "old"}, hash="stale"))
        synth = FakeSynthesizer(["S", RateLimitedError(operation="compiling")])
        with pytest.raises(RateLimitedError):
            await generate_prompt(summarizer, cache, synth)
        assert cache.get("summarizer") == GeneratedPrompt(variants={"short": "old"}, hash="stale")


class TestGenerateAll:
    @pytest.mark.asyncio
    async def test_isolates_failures(self, plain, summarizer, cache: PromptCache):
        def handler(system: str, user: str) -> str | Exception:
            if "expert summarizer" in user:
                return RateLimitedError("slow down", operation="compiling prompt 'summarizer'")
            return "compiled"

        report = await generate_all([summarizer, plain], cache, FakeSynthesizer(handler=handler))

        assert report.compiled == ["plain"]
        assert not report.ok
        assert report.failures[0].prompt_id == "summarizer"
        assert report.failures[0].operation == "generate"
        assert "Rate limit exceeded" in report.failures[0].message
        assert "summarizer" not in cache
        assert cache.variant_text("plain", "default") == "compiled"

    @pytest.mark.asyncio
    async def test_config_error_aborts(self, plain, summarizer, cache: PromptCache):
        synth = FakeSynthesizer([MissingCredentialError()])
        with pytest.raises(MissingCredentialError):
            await generate_all([plain, summarizer], cache, synth)
        assert len(synth.calls) == 1

    @pytest.mark.asyncio
    async def test_reports_cached(self, summarizer, generated_summarizer: PromptCache):
        report = await generate_all([summarizer], generated_summarizer, FakeSynthesizer())
        assert report.cached == ["summarizer"]
        assert report.ok


def test_compile_variant_names(plain, summarizer):
    assert compile_variant_names(plain) == ("default",)
    assert compile_variant_names(summarizer) == ("short", "detailed")


def test_generated_text_is_stored_verbatim():
    cache = PromptCache()
    p = prompt("keep", lambda b: b.raw("x"))
    text = "  Keep {{name}} {{#extra}}and this{{/extra}}  \n"
    asyncio.run(generate_prompt(p, cache, FakeSynthesizer([text])))
    assert cache.variant_text("keep", "default") == text
