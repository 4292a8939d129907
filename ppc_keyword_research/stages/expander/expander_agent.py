"""Keyword Expander agent.

Expands the seed keywords through the batch suggestion tool and the per-seed
SERP tools, then returns every unique keyword with its metrics.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from ...config import settings
from ...models import PipelineConfig, RawKeyword
from ...runtime import StageAgent
from .tools import (
    collect_seed_suggestions,
    expand_keywords,
    get_search_volume,
    labs_keyword_suggestions,
    labs_related_keywords,
)


class KeywordExpansionOutput(BaseModel):
    """Structured output produced by the Expander."""

    all_keywords: list[RawKeyword] = Field(
        description="Every unique keyword found, with its metrics and source."
    )
    summary: str = Field(description="One paragraph summarising the expansion.")


EXPANDER_INSTRUCTION = """\
You are a keyword research specialist. Your job is to expand seed keywords into
a comprehensive list of paid-search candidates.

## Required tool calls
1. `expand_keywords`: Google Ads keyword suggestions. Call it ONCE with ALL
   seeds together (at most 20 seeds).
2. `labs_keyword_suggestions`: SERP-derived suggestions. Call it once PER SEED.
3. `labs_related_keywords`: "searches related to" queries. Call it once PER SEED.

`collect_seed_suggestions` runs steps 2 and 3 for every seed in one call; you
may use it instead of the individual per-seed calls. Seeds listed under
`degraded` returned no data.

Optionally call `get_search_volume` to enrich keywords that came back without
volume or CPC data.

Use the country code given in the request for every call. If a tool returns an
`error`, you may retry with different arguments or move on.

## Findings
After the calls, deduplicate (case-insensitive) and list ALL unique keywords
with keyword, volume, cpc, competition (0-1), difficulty (0-100), intent
(transactional, commercial, informational or navigational) and source:
- `google` for expand_keywords / get_search_volume results
- `labs` for labs_keyword_suggestions results
- `related` for labs_related_keywords results
Favour long-tail keywords with clear buyer intent, but do not drop any
keyword that the tools returned.
"""

EXPANDER_FORMATTER_INSTRUCTION = """\
Convert the keyword research findings from the conversation (saved as
`expander_findings`) into `KeywordExpansionOutput`.

Rules:
- Copy numbers exactly as reported by the tools; use 0 where a metric is missing.
- `competition` is a 0-1 index, `difficulty` an integer 0-100.
- `intent` is one of transactional, commercial, informational, navigational.
- Keep every unique keyword; do not invent keywords that no tool returned.
- `summary` is one paragraph: how many keywords, strongest themes, notable
  buyer-intent clusters.
"""

expander_agent = StageAgent(
    name="expander",
    description="Expands seed keywords into a deduplicated list of candidates with metrics.",
    instruction=EXPANDER_INSTRUCTION,
    formatter_instruction=EXPANDER_FORMATTER_INSTRUCTION,
    tools=(
        expand_keywords,
        labs_keyword_suggestions,
        labs_related_keywords,
        get_search_volume,
        collect_seed_suggestions,
    ),
    output_schema=KeywordExpansionOutput,
    output_key="keyword_expansion",
    max_turns=settings.expander_max_turns,
)


def expander_prompt(config: PipelineConfig) -> str:
    seeds = ", ".join(config.seed_keywords)
    return (
        f"Expand these seed keywords for the {config.target_country} market: {seeds}\n\n"
        f'Use the country code "{config.target_country}" for all API calls.\n'
        "Find long-tail variations, related terms, and buyer-intent keywords."
    )
