"""Keyword expansion tools backed by the data-access backend.

Typed adapters (``fetch_*``) plus the ADK-compatible tool functions the
Expander agent calls:
  - expand_keywords: paid-search suggestions for a batch of seeds
  - labs_keyword_suggestions: SERP-derived suggestions for one seed
  - labs_related_keywords: "searches related to" queries for one seed
  - get_search_volume: metrics for an explicit keyword list
  - collect_seed_suggestions: both labs calls for every seed, concurrently
"""

from __future__ import annotations

from typing import Any

from google.adk.tools.tool_context import ToolContext

from ...data_access import (
    AdapterResult,
    KeywordMetrics,
    call_api,
    cap_input,
    clamp_limit,
    parse_records,
    records_of,
)
from ...fan_out import degraded_labels, fan_out
from ...models import PipelineConfig
from ...tooling import pipeline_config, tool_payload

SUGGESTIONS_INPUT_CAP = 20
SEARCH_VOLUME_INPUT_CAP = 1000
SUGGESTIONS_OUTPUT_CAP = 50
LABS_SUGGESTIONS_OUTPUT_CAP = 50
LABS_RELATED_OUTPUT_CAP = 40
SEARCH_VOLUME_OUTPUT_CAP = 100


async def fetch_keyword_suggestions(
    config: PipelineConfig, keywords: list[str], country_code: str
) -> AdapterResult[KeywordMetrics]:
    endpoint = "/api/keywords/suggestions"
    results = await call_api(
        config,
        endpoint,
        {
            "keywords": cap_input(keywords, SUGGESTIONS_INPUT_CAP, endpoint),
            "countryCode": country_code,
            "options": {"sortBy": "search_volume"},
        },
    )
    return parse_records(KeywordMetrics, results, endpoint, SUGGESTIONS_OUTPUT_CAP)


async def fetch_labs_suggestions(
    config: PipelineConfig, keyword: str, country_code: str, limit: int = 500
) -> AdapterResult[KeywordMetrics]:
    endpoint = "/api/keywords/labs/suggestions"
    results = await call_api(
        config,
        endpoint,
        {
            "keyword": keyword,
            "countryCode": country_code,
            "options": {"limit": clamp_limit(limit)},
        },
    )
    return parse_records(KeywordMetrics, results, endpoint, LABS_SUGGESTIONS_OUTPUT_CAP)


async def fetch_labs_related(
    config: PipelineConfig,
    keyword: str,
    country_code: str,
    depth: int = 2,
    limit: int = 200,
) -> AdapterResult[KeywordMetrics]:
    endpoint = "/api/keywords/labs/related"
    results = await call_api(
        config,
        endpoint,
        {
            "keyword": keyword,
            "countryCode": country_code,
            "options": {"depth": max(0, min(4, int(depth))), "limit": clamp_limit(limit)},
        },
    )
    return parse_records(KeywordMetrics, results, endpoint, LABS_RELATED_OUTPUT_CAP)


async def fetch_search_volume(
    config: PipelineConfig, keywords: list[str], country_code: str
) -> AdapterResult[KeywordMetrics]:
    endpoint = "/api/keywords/search-volume"
    results = await call_api(
        config,
        endpoint,
        {
            "keywords": cap_input(keywords, SEARCH_VOLUME_INPUT_CAP, endpoint),
            "countryCode": country_code,
            "options": {"sortBy": "search_volume"},
        },
    )
    return parse_records(KeywordMetrics, results, endpoint, SEARCH_VOLUME_OUTPUT_CAP)


async def expand_keywords(
    keywords: list[str], country_code: str, tool_context: ToolContext
) -> dict[str, Any]:
    """Expand seed keywords with Google Ads keyword suggestions.

    Args:
        keywords: Seed keywords to expand together (max 20; extra are dropped).
        country_code: Target country code (GB, US, DE, AU, CA, FR).

    Returns:
        A dict with 'count' (upstream total) and 'keywords' (up to 50
        suggestions with volume, cpc, competition and intent).
    """
    config = pipeline_config(tool_context)
    return await tool_payload(fetch_keyword_suggestions(config, keywords, country_code))


async def labs_keyword_suggestions(
    keyword: str, country_code: str, tool_context: ToolContext, limit: int = 500
) -> dict[str, Any]:
    """Get SERP-derived long-tail suggestions containing one seed phrase.

    Args:
        keyword: Single seed keyword.
        country_code: Target country code.
        limit: Records to retrieve upstream (1-1000, default 500).

    Returns:
        A dict with 'count' and up to 50 'keywords' with volume and difficulty.
    """
    config = pipeline_config(tool_context)
    return await tool_payload(fetch_labs_suggestions(config, keyword, country_code, limit))


async def labs_related_keywords(
    keyword: str,
    country_code: str,
    tool_context: ToolContext,
    depth: int = 2,
    limit: int = 200,
) -> dict[str, Any]:
    """Get laterally related queries ("searches related to") for one seed.

    Args:
        keyword: Seed keyword.
        country_code: Target country code.
        depth: How many related-search hops to follow (0-4, default 2).
        limit: Records to retrieve upstream (1-1000, default 200).

    Returns:
        A dict with 'count' and up to 40 'keywords'.
    """
    config = pipeline_config(tool_context)
    return await tool_payload(
        fetch_labs_related(config, keyword, country_code, depth, limit)
    )


async def get_search_volume(
    keywords: list[str], country_code: str, tool_context: ToolContext
) -> dict[str, Any]:
    """Get volume, CPC and competition for keywords found without metrics.

    Args:
        keywords: Keywords to enrich (max 1000; extra are dropped).
        country_code: Target country code.

    Returns:
        A dict with 'count' and up to 100 'keywords'.
    """
    config = pipeline_config(tool_context)
    return await tool_payload(fetch_search_volume(config, keywords, country_code))


async def gather_seed_suggestions(
    config: PipelineConfig, seeds: list[str], country_code: str
) -> dict[str, Any]:
    """Run labs suggestions and labs related for every seed concurrently.

    A seed whose call fails contributes an empty list and is reported in
    'degraded'.
    """
    seeds = list(dict.fromkeys(seeds[:SUGGESTIONS_INPUT_CAP]))
    units: dict[str, Any] = {}
    for seed in seeds:
        units[f"suggestions:{seed}"] = (
            lambda s=seed: records_of(fetch_labs_suggestions(config, s, country_code))
        )
        units[f"related:{seed}"] = (
            lambda s=seed: records_of(fetch_labs_related(config, s, country_code))
        )

    outcomes = {outcome.label: outcome for outcome in await fan_out(units)}
    by_seed = {
        seed: {
            "suggestions": [
                kw.model_dump(mode="json") for kw in outcomes[f"suggestions:{seed}"].values
            ],
            "related": [
                kw.model_dump(mode="json") for kw in outcomes[f"related:{seed}"].values
            ],
        }
        for seed in seeds
    }
    return {"seeds": by_seed, "degraded": degraded_labels(list(outcomes.values()))}


async def collect_seed_suggestions(
    keywords: list[str], country_code: str, tool_context: ToolContext
) -> dict[str, Any]:
    """Fetch SERP suggestions and related queries for all seeds in one call.

    Args:
        keywords: Seed keywords (max 20).
        country_code: Target country code.

    Returns:
        A dict with 'seeds' (per seed: 'suggestions' and 'related' keyword
        lists) and 'degraded', the calls that failed and came back empty.
    """
    config = pipeline_config(tool_context)
    return await gather_seed_suggestions(config, keywords, country_code)
