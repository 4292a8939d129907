"""Ad traffic projection tool for the Strategist."""

from __future__ import annotations

from typing import Any

from google.adk.tools.tool_context import ToolContext

from ...data_access import (
    AdapterResult,
    TrafficProjection,
    call_api,
    cap_input,
    parse_records,
)
from ...models import PipelineConfig
from ...tooling import pipeline_config, tool_payload

PROJECTION_INPUT_CAP = 1000
PROJECTION_OUTPUT_CAP = 50


async def fetch_ad_traffic_projection(
    config: PipelineConfig, keywords: list[str], country_code: str, bid_cents: int
) -> AdapterResult[TrafficProjection]:
    endpoint = "/api/keywords/ad-traffic"
    results = await call_api(
        config,
        endpoint,
        {
            "keywords": cap_input(keywords, PROJECTION_INPUT_CAP, endpoint),
            "countryCode": country_code,
            "options": {"bid": max(1, int(bid_cents)), "match": "exact"},
        },
    )
    return parse_records(TrafficProjection, results, endpoint, PROJECTION_OUTPUT_CAP)


async def get_ad_traffic_projection(
    keywords: list[str], country_code: str, bid_cents: int, tool_context: ToolContext
) -> dict[str, Any]:
    """Project impressions, clicks and cost for keywords at a given max bid.

    Args:
        keywords: Keywords to project (max 1000; extra are dropped).
        country_code: Target country code.
        bid_cents: Max CPC bid in USD cents (e.g. 500 = $5.00).

    Returns:
        A dict with 'count' and up to 50 'projections'.
    """
    config = pipeline_config(tool_context)
    return await tool_payload(
        fetch_ad_traffic_projection(config, keywords, country_code, bid_cents),
        key="projections",
    )
