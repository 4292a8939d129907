"""Competitor Analyst agent.

Finds keyword gaps: terms competitors rank for organically but do not bid on,
plus low-competition, high-intent terms several competitors share.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from ...config import settings
from ...models import KeywordGap, PipelineConfig
from ...runtime import StageAgent
from .tools import (
    find_organic_only_gaps,
    get_competitor_keywords,
    get_competitor_paid_keywords,
    get_domain_intersection,
)


class CompetitorAnalysisOutput(BaseModel):
    """Structured output produced by the Competitor Analyst."""

    gaps: list[KeywordGap] = Field(
        description="Keyword gaps, best opportunity first (high volume, low competition, buyer intent)."
    )
    summary: str = Field(description="One paragraph summarising the competitive landscape.")


COMPETITOR_INSTRUCTION = """\
You are a competitive intelligence specialist. Your job is to find keyword gaps
in the competitors' paid-search coverage.

## Steps
1. For EACH competitor domain, get its ORGANIC rankings with
   `get_competitor_keywords` and its PAID keywords with
   `get_competitor_paid_keywords`. `find_organic_only_gaps` fetches both for
   every domain at once and returns the organic keywords missing from the paid
   list; domains listed under `degraded` returned no data for that fetch.
2. Compare organic vs paid for each domain:
   - keywords they rank for organically but DON'T bid on → `organic-only`
   - keywords where they rank poorly (position > 10) but intent is
     transactional or commercial → `low-competition-high-intent`
   - keywords with low competition nobody in the set targets → `untapped`
3. Call `get_domain_intersection` on the first two competitor domains
   (find_unique false) to find keywords where several competitors rank but
   competition is still moderate. Skip this step when only one domain is given.
   Intersection rows carry domain1_rank / domain1_etv and domain2_rank /
   domain2_etv; report a shared keyword against the domain that ranks better
   (the lower non-zero rank).

Use the country code given in the request for every call. If a tool returns an
`error`, you may retry or continue with the data you have.

## Findings
List every gap with keyword, volume, cpc, competition (0-1), difficulty,
intent, competitor_domain, competitor_rank (organic position, 1 or higher),
competitor_etv and exactly one gap_type. Order gaps by opportunity: high
volume, low competition, buyer intent.
"""

COMPETITOR_FORMATTER_INSTRUCTION = """\
Convert the competitor gap findings from the conversation (saved as
`competitor_analyst_findings`) into `CompetitorAnalysisOutput`.

Rules:
- `gap_type` must be exactly one of: organic-only, low-competition-high-intent, untapped.
- `competitor_rank` is the competitor's organic position and is never 0: use
  rank_group, or domain1_rank / domain2_rank for intersection rows, taking the
  best (lowest) known non-zero position. If no position is known, use 100.
- Copy the other numbers exactly as reported; use 0 for a missing metric.
- Keep the opportunity ordering from the findings.
- `summary` is one paragraph on where the competitors leave paid search open.
"""

competitor_agent = StageAgent(
    name="competitor_analyst",
    description="Finds organic-only and low-competition keyword gaps across competitor domains.",
    instruction=COMPETITOR_INSTRUCTION,
    formatter_instruction=COMPETITOR_FORMATTER_INSTRUCTION,
    tools=(
        get_competitor_keywords,
        get_competitor_paid_keywords,
        get_domain_intersection,
        find_organic_only_gaps,
    ),
    output_schema=CompetitorAnalysisOutput,
    output_key="competitor_analysis",
    max_turns=settings.competitor_max_turns,
)


def competitor_prompt(config: PipelineConfig) -> str:
    domains = ", ".join(config.competitors)
    return (
        f"Analyze these competitor domains in the {config.target_country} market: {domains}\n\n"
        f'Use the country code "{config.target_country}" for all API calls.\n'
        "Find keyword gaps, especially keywords they rank for organically but "
        "aren't bidding on in paid search.\n"
        "Focus on keywords with buyer intent (transactional, commercial) and low competition."
    )
