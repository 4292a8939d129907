"""Competitor keyword tools backed by the data-access backend.

Provides ADK-compatible tool functions:
  - get_competitor_keywords: organic rankings for a domain
  - get_competitor_paid_keywords: keywords a domain bids on
  - get_domain_intersection: shared keywords, or keywords unique to domain1
  - find_organic_only_gaps: organic minus paid for every domain, concurrently
"""

from __future__ import annotations

import logging
from typing import Any

from google.adk.tools.tool_context import ToolContext

from ...data_access import (
    AdapterResult,
    IntersectionKeyword,
    KeywordMetrics,
    RankedKeyword,
    all_records_of,
    call_api,
    clamp_limit,
    parse_records,
)
from ...fan_out import degraded_labels, fan_out
from ...merge import normalize_keyword
from ...models import PipelineConfig, normalize_domain
from ...tooling import pipeline_config, tool_payload

logger = logging.getLogger(__name__)

ORGANIC_OUTPUT_CAP = 50
PAID_OUTPUT_CAP = 50
INTERSECTION_OUTPUT_CAP = 50
ORGANIC_ONLY_OUTPUT_CAP = 50


async def fetch_competitor_keywords(
    config: PipelineConfig, domain: str, country_code: str, limit: int = 1000
) -> AdapterResult[RankedKeyword]:
    endpoint = "/api/keywords/labs/ranked"
    results = await call_api(
        config,
        endpoint,
        {
            "target": normalize_domain(domain),
            "countryCode": country_code,
            "options": {"itemTypes": ["organic"], "limit": clamp_limit(limit)},
        },
    )
    return parse_records(RankedKeyword, results, endpoint, ORGANIC_OUTPUT_CAP)


async def fetch_paid_keywords(
    config: PipelineConfig, domain: str, country_code: str
) -> AdapterResult[KeywordMetrics]:
    endpoint = "/api/keywords/for-site"
    results = await call_api(
        config,
        endpoint,
        {
            "target": normalize_domain(domain),
            "countryCode": country_code,
            "options": {"sortBy": "search_volume"},
        },
    )
    return parse_records(KeywordMetrics, results, endpoint, PAID_OUTPUT_CAP)


async def fetch_domain_intersection(
    config: PipelineConfig,
    domain1: str,
    domain2: str,
    country_code: str,
    find_unique: bool = False,
) -> AdapterResult[IntersectionKeyword]:
    endpoint = "/api/keywords/labs/intersection"
    results = await call_api(
        config,
        endpoint,
        {
            "target1": normalize_domain(domain1),
            "target2": normalize_domain(domain2),
            "countryCode": country_code,
            "options": {
                "intersections": not find_unique,
                "itemTypes": ["organic"],
                "limit": 1000,
            },
        },
    )
    return parse_records(IntersectionKeyword, results, endpoint, INTERSECTION_OUTPUT_CAP)


def organic_only(
    organic: list[RankedKeyword], paid: list[KeywordMetrics]
) -> list[RankedKeyword]:
    """Organic rankings whose keyword does not appear among the paid keywords."""
    bought = {normalize_keyword(kw.keyword) for kw in paid}
    return [kw for kw in organic if normalize_keyword(kw.keyword) not in bought]


async def get_competitor_keywords(
    domain: str, country_code: str, tool_context: ToolContext, limit: int = 1000
) -> dict[str, Any]:
    """Get keywords a competitor domain ranks for organically in Google.

    Args:
        domain: Competitor domain (e.g. bill.com).
        country_code: Target country code.
        limit: Records to retrieve upstream (1-1000, default 1000).

    Returns:
        A dict with 'domain', 'count' and up to 50 'keywords', each with
        rank_group (position), etv (estimated traffic value) and metrics.
    """
    config = pipeline_config(tool_context)
    return await tool_payload(
        fetch_competitor_keywords(config, domain, country_code, limit), domain=domain
    )


async def get_competitor_paid_keywords(
    domain: str, country_code: str, tool_context: ToolContext
) -> dict[str, Any]:
    """Get keywords a competitor is actively bidding on in Google Ads.

    Args:
        domain: Competitor domain.
        country_code: Target country code.

    Returns:
        A dict with 'domain', 'type' ('paid'), 'count' and up to 50 'keywords'.
    """
    config = pipeline_config(tool_context)
    return await tool_payload(
        fetch_paid_keywords(config, domain, country_code), domain=domain, type="paid"
    )


async def get_domain_intersection(
    domain1: str,
    domain2: str,
    country_code: str,
    find_unique: bool,
    tool_context: ToolContext,
) -> dict[str, Any]:
    """Compare two domains' organic keywords.

    Args:
        domain1: First domain.
        domain2: Second domain.
        country_code: Target country code.
        find_unique: True for keywords unique to domain1, False for shared ones.

    Returns:
        A dict with 'domain1', 'domain2', 'type' ('unique-to-domain1' or
        'shared'), 'count' and up to 50 'keywords', each with metrics plus
        domain1_rank, domain1_url, domain1_etv and the same for domain2
        (rank 0 when that domain does not rank).
    """
    config = pipeline_config(tool_context)
    return await tool_payload(
        fetch_domain_intersection(config, domain1, domain2, country_code, find_unique),
        domain1=domain1,
        domain2=domain2,
        type="unique-to-domain1" if find_unique else "shared",
    )


async def gather_organic_only_gaps(
    config: PipelineConfig, domains: list[str], country_code: str
) -> dict[str, Any]:
    """Fetch organic and paid keywords for every domain concurrently.

    The difference is taken over every record the backend returned; only
    the resulting organic-only list is capped. A failed fetch degrades to an
    empty list for that domain and is reported in 'degraded'.
    """
    domains = list(dict.fromkeys(normalize_domain(d) for d in domains if d.strip()))
    units: dict[str, Any] = {}
    for domain in domains:
        units[f"organic:{domain}"] = lambda d=domain: all_records_of(
            fetch_competitor_keywords(config, d, country_code)
        )
        units[f"paid:{domain}"] = lambda d=domain: all_records_of(
            fetch_paid_keywords(config, d, country_code)
        )

    outcomes = {outcome.label: outcome for outcome in await fan_out(units)}
    by_domain = {}
    for domain in domains:
        organic = outcomes[f"organic:{domain}"].values
        paid = outcomes[f"paid:{domain}"].values
        gaps = organic_only(organic, paid)
        logger.info(
            "%s: %d organic, %d paid, %d organic-only", domain, len(organic), len(paid), len(gaps)
        )
        by_domain[domain] = {
            "organic_count": len(organic),
            "paid_count": len(paid),
            "organic_only": [
                kw.model_dump(mode="json") for kw in gaps[:ORGANIC_ONLY_OUTPUT_CAP]
            ],
        }
    return {"domains": by_domain, "degraded": degraded_labels(list(outcomes.values()))}


async def find_organic_only_gaps(
    domains: list[str], country_code: str, tool_context: ToolContext
) -> dict[str, Any]:
    """Find keywords each competitor ranks for organically but does not bid on.

    Args:
        domains: Competitor domains.
        country_code: Target country code.

    Returns:
        A dict with 'domains' (per domain: organic_count, paid_count and the
        'organic_only' keywords) and 'degraded', the fetches that failed.
    """
    config = pipeline_config(tool_context)
    return await gather_organic_only_gaps(config, domains, country_code)
