"""PPC keyword research: seed expansion, competitor gaps, scoring and strategy."""

from .errors import (
    ConfigurationError,
    KeywordPipelineError,
    SchemaValidationError,
    TransportError,
    TurnBudgetExhaustedError,
)
from .merge import merge_keywords
from .models import (
    CpcRange,
    KeywordGap,
    MergedKeyword,
    PipelineConfig,
    PipelineResult,
    ProductContext,
    RawKeyword,
    ScoredKeyword,
    StrategistReport,
    config_from_env,
    load_config,
)
from .pipeline import PipelineStatus, run_pipeline, run_pipeline_sync
from .runtime import AdkAgentRuntime, AgentRuntime, StageAgent
from .scoring import rank_keywords, score_keyword

__all__ = [
    "AdkAgentRuntime",
    "AgentRuntime",
    "ConfigurationError",
    "CpcRange",
    "KeywordGap",
    "KeywordPipelineError",
    "MergedKeyword",
    "PipelineConfig",
    "PipelineResult",
    "PipelineStatus",
    "ProductContext",
    "RawKeyword",
    "SchemaValidationError",
    "ScoredKeyword",
    "StageAgent",
    "StrategistReport",
    "TransportError",
    "TurnBudgetExhaustedError",
    "config_from_env",
    "load_config",
    "merge_keywords",
    "rank_keywords",
    "run_pipeline",
    "run_pipeline_sync",
    "score_keyword",
]
