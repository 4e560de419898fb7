#!/usr/bin/env python3
"""Showcase of ai_prompt_core.prompt_compiler features.

Demonstrates the builder and runtime side of the prompt compiler:
  - prompt(): fluent specification with base steps and nudges
  - use(): splicing shared steps into several prompts
  - optional(): blocks toggled at render time
  - variant(): alternative compiled texts from one specification
  - create_builder() / define_step(): custom step kinds
  - hash_state(): content hash that decides when to recompile
  - PromptCache + render(): runtime rendering from compiled text

No LLM connection required: the cache below is filled by hand with the kind
of text ``ai-prompt generate`` would produce.

Usage:
  python examples/showcase_prompt_compiler.py
"""

from ai_prompt_core import GeneratedPrompt, PromptCache, Step, create_builder, define_step, hash_state, prompt

# =============================================================================
# 1. Shared steps and a prompt that uses them
# =============================================================================

house_style = prompt("house_style", lambda p: p.do("use British spelling").dont("use exclamation marks", nudge=5))

support = prompt(
    "support",
    lambda p: p.persona("support agent for {{product}}")
    .use(house_style)
    .optional("escalation", lambda o: o.do("offer to escalate to a human when the user is frustrated"))
    .variant("chat", lambda v: v.constraint("answer in at most three sentences"))
    .variant("email", lambda v: v.do("open with a greeting and close with a signature")),
)

# =============================================================================
# 2. Custom step kinds
# =============================================================================

tone = define_step(
    "tone",
    build=lambda style: Step(type="tone", style=style),
    format=lambda step: f'[Tone] (The voice the AI should write in.)\nValue: "{step.style}"',
)

branded = create_builder([tone]).prompt("branded", lambda p: p.persona("copywriter").tone("warm and witty"))


def main() -> None:
    print("=== What the synthesizer sees for support [email] ===")
    print(support.format_steps("email"))
    print()

    print("=== Content hashes ===")
    for p in (support, branded):
        print(f"{p.id}: {hash_state(p.state)}")
    print()

    cache = PromptCache({
        "support": GeneratedPrompt(
            variants={
                "chat": "You are a support agent for {{product}}. Use British spelling.{{#escalation}}\nOffer a human hand-off when needed.{{/escalation}}\nKeep answers short.",
                "email": "You are a support agent for {{product}}. Open with a greeting and sign off politely.",
            },
            hash=hash_state(support.state),
        )
    })

    print("=== Rendered support [chat] with escalation ===")
    print(support.render(cache, "chat", product="Acme Cloud", escalation=True))
    print()
    print("=== Rendered support [chat] without escalation ===")
    print(support.render(cache, "chat", product="Acme Cloud"))


if __name__ == "__main__":
    main()
