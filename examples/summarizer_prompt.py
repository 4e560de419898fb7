"""Example prompt definitions picked up by ``ai-prompt`` discovery.

Run from this directory:
  ai-prompt list
  ai-prompt generate
  ai-prompt eval --judge
  ai-prompt render summarizer --variant short --enable json
"""

from ai_prompt_core import prompt

writing_rules = prompt(
    "writing_rules",
    lambda p: p.do("use clear, plain language").constraint("never exceed three paragraphs", nudge=4),
)

summarizer = prompt(
    "summarizer",
    lambda p: p.persona("expert summarizer for {{audience}}")
    .input("a passage of text to summarize")
    .use(writing_rules)
    .do("preserve key facts, figures and names", nudge=5)
    .dont("add opinions or information not in the text")
    .optional("json", lambda o: o.output('a JSON object with a single "summary" field'))
    .variant("short", lambda v: v.constraint("keep the summary to 1-2 sentences", nudge=5))
    .variant("detailed", lambda v: v.do("explain the context and significance of the main points"))
    .test(
        "Apple reported Q3 revenue of $81.8 billion, up 1.4% year over year, driven by services growth.",
        lambda out: "$81.8 billion" in out or "81.8" in out,
        "keeps the revenue figure",
    )
    .test(
        "The deep-sea anglerfish lives at depths of up to 8,200 meters and lures prey with a glowing lure.",
        "mentions the depth at which the anglerfish lives",
        "keeps the depth",
    ),
)
