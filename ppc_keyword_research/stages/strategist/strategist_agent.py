"""PPC Strategist agent.

Receives the scored keywords and competitor gaps as text (they are not
tool-accessible) and writes the strategic report: top picks, budget, market
opportunity and next steps.
"""

from __future__ import annotations

from ...config import settings
from ...models import KeywordGap, PipelineConfig, ScoredKeyword, StrategistReport
from ...runtime import StageAgent
from .tools import get_ad_traffic_projection

STRATEGIST_INSTRUCTION = f"""\
You are a senior PPC strategist specialising in B2B SaaS.

You receive a scored keyword table and a competitor gap table in the request.
Your job is to:
1. Identify the top {settings.strategist_pick_count} keywords that are the best
   opportunities (fewer only when fewer keywords were supplied).
2. For EACH pick, write one sentence explaining WHY it is a good target, citing
   its numbers, e.g. "Low competition 0.12, transactional intent, 4.20 CPC,
   320 searches/mo: finance teams looking for a tool now."
3. Estimate a recommended monthly Google Ads budget from the picks' CPCs and
   volumes. You may call `get_ad_traffic_projection` (bid in cents) to ground
   the estimate in projected clicks and cost.
4. Assess the overall market opportunity in one paragraph.
5. Give {settings.min_next_steps}-{settings.max_next_steps} concrete next steps.

Focus on the "sweet spot": long-tail keywords with
- low competition (< 0.25)
- buyer intent (transactional or commercial)
- CPC inside the affordable range given in the request
- volume above 100 searches a month

If product context is given, tailor the narrative to its buyers; never change
the numbers because of it.
"""

STRATEGIST_FORMATTER_INSTRUCTION = f"""\
Convert the strategy from the conversation (saved as `strategist_findings`)
into `StrategistReport`.

Rules:
- `top_keywords`: exactly {settings.strategist_pick_count} picks, or every supplied
  keyword when fewer were supplied. Copy volume, cpc, competition, intent and
  tier from the keyword table; `reason` is one sentence citing those numbers.
- `recommended_budget`: a monthly amount with a one-line rationale.
- `market_opportunity`: one paragraph.
- `next_steps`: {settings.min_next_steps} to {settings.max_next_steps} concrete actions.
"""

strategist_agent = StageAgent(
    name="strategist",
    description="Turns scored keywords and gaps into top picks, a budget and next steps.",
    instruction=STRATEGIST_INSTRUCTION,
    formatter_instruction=STRATEGIST_FORMATTER_INSTRUCTION,
    tools=(get_ad_traffic_projection,),
    output_schema=StrategistReport,
    output_key="strategist_report",
    max_turns=settings.strategist_max_turns,
)


def format_keyword_table(keywords: list[ScoredKeyword]) -> str:
    lines = ["# | keyword | volume | cpc | competition | intent | tier | score"]
    for i, kw in enumerate(keywords, start=1):
        lines.append(
            f'{i} | "{kw.keyword}" | {kw.volume} | {kw.cpc:.2f} | {kw.competition:.2f} '
            f"| {kw.intent} | {kw.tier} | {kw.score:.2f}"
        )
    return "\n".join(lines)


def format_gap_table(gaps: list[KeywordGap]) -> str:
    lines = ["# | keyword | volume | gap type | competitor | rank"]
    for i, gap in enumerate(gaps, start=1):
        lines.append(
            f'{i} | "{gap.keyword}" | {gap.volume} | {gap.gap_type} '
            f"| {gap.competitor_domain} | {gap.competitor_rank}"
        )
    return "\n".join(lines)


def format_product(config: PipelineConfig) -> str:
    product = config.product
    if product is None:
        return ""
    lines = [f"PRODUCT: {product.name}" + (f": {product.description}" if product.description else "")]
    if product.target:
        lines.append(f"TARGET BUYER: {product.target}")
    if product.integrations:
        lines.append(f"INTEGRATIONS: {product.integrations}")
    return "\n".join(lines)


def strategist_prompt(
    config: PipelineConfig, keywords: list[ScoredKeyword], gaps: list[KeywordGap]
) -> str:
    top_keywords = keywords[: settings.strategist_keyword_rows]
    top_gaps = gaps[: settings.strategist_gap_rows]
    sections = [
        f"Here are the scored keyword results for the {config.target_country} market.",
        f"Affordable CPC range: {config.cpc_range.min:.2f}-{config.cpc_range.max:.2f}",
        f"TOP {len(top_keywords)} KEYWORDS BY SCORE:\n{format_keyword_table(top_keywords)}",
        f"COMPETITOR GAPS:\n{format_gap_table(top_gaps)}",
    ]
    product = format_product(config)
    if product:
        sections.append(product)
    sections.append(
        f'Use country code "{config.target_country}" for any traffic projections.\n'
        "Produce a strategic PPC report with top keyword picks and budget recommendations."
    )
    return "\n\n".join(sections)
