"""Keyword research pipeline orchestration.

Stages run strictly in sequence, each depending on the previous one's
validated output:

  1. expander            → KeywordExpansionOutput
  2. competitor_analyst  → CompetitorAnalysisOutput
  3. merge + score       → ScoredKeyword list, highest score first
  4. strategist          → StrategistReport (top keywords and gaps as text)

Any stage error propagates to the caller unchanged; there is no partial result.
"""

from __future__ import annotations

import asyncio
import datetime
import logging
import time
from collections.abc import Callable, Mapping
from enum import Enum
from typing import Any

from pydantic import BaseModel, ValidationError

from .config import settings
from .errors import SchemaValidationError
from .merge import merge_keywords
from .models import (
    TIERS,
    KeywordGap,
    PipelineConfig,
    PipelineMetadata,
    PipelineResult,
    PipelineSummary,
    ScoredKeyword,
    StrategistReport,
    load_config,
)
from .runtime import AdkAgentRuntime, AgentRuntime, StageAgent
from .scoring import rank_keywords
from .stages.competitors.competitor_agent import (
    CompetitorAnalysisOutput,
    competitor_agent,
    competitor_prompt,
)
from .stages.expander.expander_agent import (
    KeywordExpansionOutput,
    expander_agent,
    expander_prompt,
)
from .stages.strategist.strategist_agent import strategist_agent, strategist_prompt

logger = logging.getLogger(__name__)


class PipelineStatus(str, Enum):
    QUEUED = "queued"
    EXPANDING = "expanding"
    ANALYZING = "analyzing"
    SCORING = "scoring"
    REPORTING = "reporting"
    COMPLETED = "completed"
    FAILED = "failed"


ProgressCallback = Callable[[PipelineStatus, str], None]


async def run_stage(
    runtime: AgentRuntime, agent: StageAgent, prompt: str, config: PipelineConfig
) -> Any:
    """Run one agent and validate its final output against the stage schema.

    Raises:
        SchemaValidationError: if the output is missing or does not match.
        TurnBudgetExhaustedError: propagated from the runtime.
    """
    try:
        raw = await runtime.run(agent, prompt, config)
    except ValidationError as e:
        raise SchemaValidationError(agent.name, str(e)) from e

    if raw is None:
        raise SchemaValidationError(agent.name, "agent produced no final output")
    if isinstance(raw, agent.output_schema):
        return raw
    try:
        if isinstance(raw, (str, bytes)):
            return agent.output_schema.model_validate_json(raw)
        if isinstance(raw, BaseModel):
            raw = raw.model_dump()
        return agent.output_schema.model_validate(raw)
    except ValidationError as e:
        raise SchemaValidationError(agent.name, str(e)) from e


def check_report(report: StrategistReport, scored: list[ScoredKeyword]) -> None:
    """Enforce the Strategist's pick and next-step counts."""
    expected = min(settings.strategist_pick_count, len(scored))
    if len(report.top_keywords) != expected:
        raise SchemaValidationError(
            strategist_agent.name,
            f"expected {expected} top keywords, got {len(report.top_keywords)}",
        )
    steps = len(report.next_steps)
    if not settings.min_next_steps <= steps <= settings.max_next_steps:
        raise SchemaValidationError(
            strategist_agent.name,
            f"expected {settings.min_next_steps}-{settings.max_next_steps} next steps, got {steps}",
        )


def score_candidates(
    expansion: KeywordExpansionOutput, gaps: list[KeywordGap], config: PipelineConfig
) -> list[ScoredKeyword]:
    """Merge expansion keywords with gap keywords, then score and rank them."""
    merged = merge_keywords(expansion.all_keywords, [gap.as_raw_keyword() for gap in gaps])
    return rank_keywords(merged, config.cpc_range)


def summarize(
    scored: list[ScoredKeyword], gaps: list[KeywordGap], report: StrategistReport
) -> PipelineSummary:
    tier_counts = {tier: 0 for tier in TIERS}
    for kw in scored:
        tier_counts[kw.tier] += 1
    avg_cpc = sum(kw.cpc for kw in scored) / len(scored) if scored else 0.0
    return PipelineSummary(
        total_keywords_found=len(scored),
        sweet_spot_count=tier_counts["sweet-spot"],
        high_value_count=tier_counts["high-value"],
        tier_counts=tier_counts,
        avg_cpc=round(avg_cpc, 2),
        top_keyword=scored[0].keyword if scored else "—",
        competitor_gaps=len(gaps),
        market_opportunity=report.market_opportunity,
    )


async def run_pipeline(
    config: PipelineConfig | Mapping[str, Any],
    runtime: AgentRuntime | None = None,
    on_progress: ProgressCallback | None = None,
) -> PipelineResult:
    """Run the full keyword research pipeline.

    Args:
        config: A ``PipelineConfig`` or a mapping validated into one.
        runtime: Agent runtime; defaults to ``AdkAgentRuntime``.
        on_progress: Optional callback receiving each status change and a
            one-line detail.

    Raises:
        ConfigurationError: before any stage runs, for invalid input.
        SchemaValidationError, TurnBudgetExhaustedError: from a failed stage.
    """
    config = load_config(config)
    runtime = runtime or AdkAgentRuntime()
    started = time.monotonic()

    def progress(status: PipelineStatus, detail: str) -> None:
        logger.info("[%s] %s", status.value, detail)
        if on_progress is not None:
            on_progress(status, detail)

    try:
        progress(
            PipelineStatus.EXPANDING,
            f"Stage 1/4: expanding {len(config.seed_keywords)} seed keywords "
            f"for {config.target_country}",
        )
        expansion: KeywordExpansionOutput = await run_stage(
            runtime, expander_agent, expander_prompt(config), config
        )
        logger.info("Found %d keywords. %s", len(expansion.all_keywords), expansion.summary)

        progress(
            PipelineStatus.ANALYZING,
            f"Stage 2/4: analyzing {len(config.competitors)} competitor domains",
        )
        analysis: CompetitorAnalysisOutput = await run_stage(
            runtime, competitor_agent, competitor_prompt(config), config
        )
        gaps = list(analysis.gaps)
        logger.info("Found %d competitor gaps. %s", len(gaps), analysis.summary)

        progress(PipelineStatus.SCORING, "Stage 3/4: merging and scoring keywords")
        scored = score_candidates(expansion, gaps, config)
        logger.info(
            "Scored %d unique keywords (%d sweet-spot, %d high-value)",
            len(scored),
            sum(1 for kw in scored if kw.tier == "sweet-spot"),
            sum(1 for kw in scored if kw.tier == "high-value"),
        )

        progress(PipelineStatus.REPORTING, "Stage 4/4: generating strategic report")
        report: StrategistReport = await run_stage(
            runtime, strategist_agent, strategist_prompt(config, scored, gaps), config
        )
        check_report(report, scored)
    except Exception as e:
        progress(PipelineStatus.FAILED, f"{type(e).__name__}: {e}")
        raise

    result = PipelineResult(
        keywords=scored,
        gaps=gaps,
        summary=summarize(scored, gaps, report),
        metadata=PipelineMetadata(
            country=config.target_country,
            seed_keywords=list(config.seed_keywords),
            competitors=list(config.competitors),
            timestamp=datetime.datetime.now(datetime.timezone.utc).isoformat(),
            duration_ms=int((time.monotonic() - started) * 1000),
        ),
        report=report,
    )
    progress(
        PipelineStatus.COMPLETED,
        f"{result.summary.total_keywords_found} keywords, "
        f"{result.summary.sweet_spot_count} sweet-spot, "
        f"{result.summary.competitor_gaps} gaps in {result.metadata.duration_ms / 1000:.1f}s",
    )
    return result


def run_pipeline_sync(
    config: PipelineConfig | Mapping[str, Any],
    runtime: AgentRuntime | None = None,
    on_progress: ProgressCallback | None = None,
) -> PipelineResult:
    """Blocking wrapper around ``run_pipeline`` for scripts and the CLI."""
    return asyncio.run(run_pipeline(config, runtime, on_progress))
