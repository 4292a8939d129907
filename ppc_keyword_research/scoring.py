"""Keyword scoring: volume x intent x (1/competition) x CPC affordability.

``score_keyword`` is a pure function. Out-of-range inputs (zero volume, zero
CPC, competition outside 0-1) are clamped, never rejected.
"""

from __future__ import annotations

import math
from collections.abc import Iterable

from .models import (
    BUYER_INTENTS,
    CpcRange,
    MergedKeyword,
    RawKeyword,
    ScoreBreakdown,
    ScoredKeyword,
)

INTENT_WEIGHTS: dict[str, float] = {
    "transactional": 1.0,
    "commercial": 0.75,
    "informational": 0.3,
    "navigational": 0.15,
}
DEFAULT_INTENT_WEIGHT = INTENT_WEIGHTS["informational"]

SCORE_WEIGHTS: dict[str, float] = {
    "volume": 0.25,
    "intent": 0.30,
    "competition": 0.25,
    "cpc_affordability": 0.20,
}

MIN_COMPETITION = 0.01
SWEET_SPOT_MAX_COMPETITION = 0.25


def _clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def round_score(value: float) -> float:
    """Round to 2 decimals with halves going up (``round`` would go to even)."""
    return math.floor(value * 100 + 0.5) / 100


def volume_score(volume: int) -> float:
    # +25 points per order of magnitude.
    return _clamp(math.log10(max(volume, 1)) * 25)


def intent_score(intent: str) -> float:
    return _clamp(INTENT_WEIGHTS.get(intent, DEFAULT_INTENT_WEIGHT) * 100)


def clamp_competition(competition: float) -> float:
    return _clamp(competition, 0.0, 1.0)


def competition_score(competition: float) -> float:
    comp = max(MIN_COMPETITION, clamp_competition(competition))
    return _clamp((1 / comp) * 10)


def cpc_affordability_score(cpc: float, cpc_range: CpcRange) -> float:
    """100 inside the range; tapers to a floor of 20 below it and 10 above it.

    Below the range the score is ``cpc / min * 80``, so it approaches 80 (not
    100) as the CPC nears ``min``.
    """
    if cpc_range.contains(cpc):
        return 100.0
    if cpc < cpc_range.min:
        return _clamp(max(20.0, (cpc / cpc_range.min) * 80))
    overshoot = (cpc - cpc_range.max) / cpc_range.max
    return _clamp(max(10.0, 100 - overshoot * 60))


def classify_tier(
    keyword: RawKeyword,
    cpc_range: CpcRange,
    breakdown: ScoreBreakdown,
) -> str:
    """Assign the first matching tier: sweet-spot, high-value, monitor, low-priority."""
    if (
        clamp_competition(keyword.competition) < SWEET_SPOT_MAX_COMPETITION
        and keyword.intent in BUYER_INTENTS
        and cpc_range.contains(keyword.cpc)
    ):
        return "sweet-spot"
    if breakdown.intent_score >= 70 and breakdown.competition_score >= 40:
        return "high-value"
    if breakdown.volume_score >= 50 or breakdown.intent_score >= 50:
        return "monitor"
    return "low-priority"


def score_keyword(keyword: RawKeyword, cpc_range: CpcRange) -> ScoredKeyword:
    """Score one keyword and assign its opportunity tier."""
    vol = volume_score(keyword.volume)
    intent = intent_score(keyword.intent)
    comp = competition_score(keyword.competition)
    cpc = cpc_affordability_score(keyword.cpc, cpc_range)

    composite = (
        vol * SCORE_WEIGHTS["volume"]
        + intent * SCORE_WEIGHTS["intent"]
        + comp * SCORE_WEIGHTS["competition"]
        + cpc * SCORE_WEIGHTS["cpc_affordability"]
    )

    breakdown = ScoreBreakdown(
        volume_score=round_score(vol),
        intent_score=round_score(intent),
        competition_score=round_score(comp),
        cpc_affordability_score=round_score(cpc),
    )
    # Tier thresholds compare the unrounded sub-scores.
    unrounded = ScoreBreakdown(
        volume_score=vol,
        intent_score=intent,
        competition_score=comp,
        cpc_affordability_score=cpc,
    )

    if isinstance(keyword, MergedKeyword) and keyword.sources:
        sources = keyword.sources
    else:
        sources = (keyword.source,) if keyword.source else ()

    return ScoredKeyword(
        keyword=keyword.keyword,
        volume=keyword.volume,
        cpc=keyword.cpc,
        competition=keyword.competition,
        difficulty=keyword.difficulty,
        intent=keyword.intent,
        source=keyword.source,
        sources=sources,
        score=round_score(_clamp(composite)),
        score_breakdown=breakdown,
        tier=classify_tier(keyword, cpc_range, unrounded),
    )


def rank_keywords(
    keywords: Iterable[RawKeyword], cpc_range: CpcRange
) -> list[ScoredKeyword]:
    """Score every keyword and sort by score, highest first.

    The sort is stable: equal scores keep their input order.
    """
    scored = [score_keyword(keyword, cpc_range) for keyword in keywords]
    return sorted(scored, key=lambda kw: kw.score, reverse=True)
