"""Tests for keyword scoring and tier classification."""

import pytest

from ppc_keyword_research.models import CpcRange, MergedKeyword, RawKeyword
from ppc_keyword_research.scoring import (
    competition_score,
    cpc_affordability_score,
    intent_score,
    rank_keywords,
    round_score,
    score_keyword,
    volume_score,
)

CPC_RANGE = CpcRange(min=3, max=8)


def _kw(keyword="kw", volume=100, cpc=4.0, competition=0.5, intent="commercial", source="google"):
    return RawKeyword(
        keyword=keyword,
        volume=volume,
        cpc=cpc,
        competition=competition,
        intent=intent,
        source=source,
    )


def test_sweet_spot_scenario():
    scored = score_keyword(
        _kw("invoice matching software", volume=300, cpc=4.50, competition=0.10, intent="transactional"),
        CPC_RANGE,
    )
    assert scored.tier == "sweet-spot"
    assert scored.score_breakdown.cpc_affordability_score == 100
    assert scored.score_breakdown.intent_score == 100
    assert scored.score_breakdown.competition_score == 100
    assert scored.score_breakdown.volume_score == pytest.approx(61.93, abs=0.01)
    assert scored.score == pytest.approx(90.48, abs=0.01)


def test_low_priority_scenario():
    scored = score_keyword(
        _kw(volume=5, cpc=0.50, competition=0.95, intent="navigational"), CPC_RANGE
    )
    assert scored.tier == "low-priority"
    assert scored.score_breakdown.competition_score == pytest.approx(10.53, abs=0.01)
    assert scored.score_breakdown.cpc_affordability_score == 20


def test_sweet_spot_wins_over_high_value():
    # Also meets high-value: intent 100 >= 70 and competition 50 >= 40.
    scored = score_keyword(_kw(competition=0.2, intent="transactional", cpc=5), CPC_RANGE)
    assert scored.tier == "sweet-spot"


def test_high_value_when_cpc_outside_range():
    scored = score_keyword(_kw(competition=0.2, intent="commercial", cpc=12), CPC_RANGE)
    assert scored.tier == "high-value"


def test_monitor_for_high_volume_informational():
    scored = score_keyword(_kw(volume=10_000, competition=0.9, intent="informational"), CPC_RANGE)
    assert scored.tier == "monitor"


def test_volume_score_bounds():
    assert volume_score(0) == 0
    assert volume_score(1) == 0
    assert volume_score(10_000) == 100
    assert volume_score(10_000_000) == 100


def test_intent_score_unknown_intent_falls_back_to_informational():
    assert intent_score("transactional") == 100
    assert intent_score("navigational") == 15
    assert intent_score("something-else") == intent_score("informational") == 30


def test_competition_is_clamped():
    assert competition_score(0) == 100
    assert competition_score(-1) == 100
    assert competition_score(1.5) == competition_score(1.0) == 10


def test_cpc_affordability_tapers_outside_range():
    assert cpc_affordability_score(3, CPC_RANGE) == 100
    assert cpc_affordability_score(8, CPC_RANGE) == 100
    assert cpc_affordability_score(1.5, CPC_RANGE) == pytest.approx(40)
    assert cpc_affordability_score(0, CPC_RANGE) == 20
    assert cpc_affordability_score(16, CPC_RANGE) == pytest.approx(40)
    assert cpc_affordability_score(500, CPC_RANGE) == 10


def test_cpc_just_below_range_stays_under_80():
    assert cpc_affordability_score(2.99, CPC_RANGE) < 80
    assert cpc_affordability_score(2.99, CPC_RANGE) == pytest.approx(2.99 / 3 * 80)


def test_round_score_rounds_halves_up():
    assert round_score(0.125) == 0.13
    assert round_score(41.004) == 41.0
    assert round_score(100) == 100


def test_scores_are_bounded_and_deterministic():
    samples = [
        _kw(volume=v, cpc=c, competition=comp, intent=i)
        for v in (0, 50, 10**7)
        for c in (0, 5, 1000)
        for comp in (-0.5, 0, 0.3, 2)
        for i in ("transactional", "navigational", "unknown")
    ]
    for sample in samples:
        first = score_keyword(sample, CPC_RANGE)
        assert 0 <= first.score <= 100
        for value in first.score_breakdown.model_dump().values():
            assert 0 <= value <= 100
        assert score_keyword(sample, CPC_RANGE) == first


def test_rank_keywords_sorts_descending_and_is_stable():
    keywords = [
        _kw("low", volume=5, competition=0.95, intent="navigational", cpc=0.5),
        _kw("tie a", volume=200, competition=0.3),
        _kw("best", volume=300, cpc=4.5, competition=0.1, intent="transactional"),
        _kw("tie b", volume=200, competition=0.3),
    ]
    ranked = rank_keywords(keywords, CPC_RANGE)
    assert [kw.keyword for kw in ranked] == ["best", "tie a", "tie b", "low"]


def test_score_keyword_keeps_provenance():
    merged = MergedKeyword(keyword="ap automation", volume=500, source="gap:bill.com", sources=("google", "gap:bill.com"))
    scored = score_keyword(merged, CPC_RANGE)
    assert scored.source == "gap:bill.com"
    assert scored.sources == ("google", "gap:bill.com")

    plain = score_keyword(_kw(source="labs"), CPC_RANGE)
    assert plain.sources == ("labs",)
