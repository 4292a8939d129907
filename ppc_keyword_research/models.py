"""Data model for the keyword research pipeline.

All records are frozen pydantic models: once a stage produces a record, later
stages read it but never mutate it.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from typing import Any, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SecretStr,
    ValidationError,
    field_validator,
    model_validator,
)

from .config import SUPPORTED_MARKETS, backend_env
from .errors import ConfigurationError

logger = logging.getLogger(__name__)

BUYER_INTENTS = frozenset({"transactional", "commercial"})

Tier = Literal["sweet-spot", "high-value", "monitor", "low-priority"]
TIERS: tuple[str, ...] = ("sweet-spot", "high-value", "monitor", "low-priority")

GapType = Literal["organic-only", "low-competition-high-intent", "untapped"]


def _round_number(value: Any) -> Any:
    if isinstance(value, float):
        return int(round(value))
    return value


class RawKeyword(BaseModel):
    """One keyword's metrics as reported by a single data source."""

    model_config = ConfigDict(frozen=True)

    keyword: str = Field(min_length=1, description="The search query text.")
    volume: int = Field(default=0, ge=0, description="Monthly search volume.")
    cpc: float = Field(default=0.0, ge=0, description="Cost per click.")
    competition: float = Field(
        default=0.0, description="Paid-search competition index, 0-1."
    )
    difficulty: int = Field(default=0, description="Keyword difficulty, 0-100.")
    intent: str = Field(
        default="informational",
        description="One of transactional, commercial, informational, navigational.",
    )
    source: str = Field(
        default="",
        description="Which tool or method produced this keyword (e.g. google, labs).",
    )

    @field_validator("keyword", mode="before")
    @classmethod
    def _strip_keyword(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @field_validator("intent", mode="before")
    @classmethod
    def _normalize_intent(cls, value: Any) -> Any:
        if value is None:
            return "informational"
        if isinstance(value, str):
            return value.strip().lower() or "informational"
        return value

    @field_validator("volume", "difficulty", mode="before")
    @classmethod
    def _whole_numbers(cls, value: Any) -> Any:
        return _round_number(value)


class KeywordGap(RawKeyword):
    """A keyword a competitor ranks for that represents an open opportunity."""

    competitor_domain: str = Field(min_length=1)
    competitor_rank: int = Field(ge=1, description="Competitor's organic position.")
    competitor_etv: float = Field(
        default=0.0, ge=0, description="Estimated traffic value for the competitor."
    )
    gap_type: GapType

    @field_validator("competitor_rank", mode="before")
    @classmethod
    def _whole_rank(cls, value: Any) -> Any:
        return _round_number(value)

    def as_raw_keyword(self) -> RawKeyword:
        """Project the gap onto the plain keyword shape, tagged with its origin."""
        return RawKeyword(
            keyword=self.keyword,
            volume=self.volume,
            cpc=self.cpc,
            competition=self.competition,
            difficulty=self.difficulty,
            intent=self.intent,
            source=f"gap:{self.competitor_domain}",
        )


class MergedKeyword(RawKeyword):
    """A deduplicated keyword plus every provenance label that reported it."""

    sources: tuple[str, ...] = ()


class ScoreBreakdown(BaseModel):
    model_config = ConfigDict(frozen=True)

    volume_score: float = Field(ge=0, le=100)
    intent_score: float = Field(ge=0, le=100)
    competition_score: float = Field(ge=0, le=100)
    cpc_affordability_score: float = Field(ge=0, le=100)


class ScoredKeyword(MergedKeyword):
    score: float = Field(ge=0, le=100)
    score_breakdown: ScoreBreakdown
    tier: Tier


class CpcRange(BaseModel):
    """The CPC band (inclusive) a campaign can comfortably afford."""

    model_config = ConfigDict(frozen=True)

    min: float = Field(gt=0)
    max: float = Field(gt=0)

    @model_validator(mode="after")
    def _ordered(self) -> CpcRange:
        if self.min > self.max:
            raise ValueError(f"min ({self.min}) must not exceed max ({self.max})")
        return self

    def contains(self, cpc: float) -> bool:
        return self.min <= cpc <= self.max


class ProductContext(BaseModel):
    """Product being advertised; only biases the Strategist's narrative."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    description: str = ""
    target: str | None = None
    integrations: str | None = None


class BackendCredentials(BaseModel):
    model_config = ConfigDict(frozen=True)

    login: str = Field(min_length=1)
    password: SecretStr


_SCHEME_RE = re.compile(r"^[a-z][a-z0-9+.-]*://")


def normalize_domain(domain: str) -> str:
    domain = _SCHEME_RE.sub("", domain.strip().lower())
    if domain.startswith("www."):
        domain = domain[4:]
    return domain.split("/", 1)[0]


class PipelineConfig(BaseModel):
    """Input for one pipeline run; read-only once constructed."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    seed_keywords: list[str] = Field(min_length=1)
    target_country: str
    competitors: list[str] = Field(min_length=1)
    product: ProductContext | None = None
    cpc_range: CpcRange
    api_base_url: str
    credentials: BackendCredentials | None = None

    @field_validator("seed_keywords")
    @classmethod
    def _clean_seeds(cls, value: list[str]) -> list[str]:
        seeds = [seed.strip() for seed in value]
        if any(not seed for seed in seeds):
            raise ValueError("seed keywords must not be blank")
        return seeds

    @field_validator("target_country")
    @classmethod
    def _country_code(cls, value: str) -> str:
        code = value.strip().upper()
        if not re.fullmatch(r"[A-Z]{2}", code):
            raise ValueError(f"expected a two-letter country code, got {value!r}")
        if code not in SUPPORTED_MARKETS:
            logger.warning("Country %s is not in the known market table.", code)
        return code

    @field_validator("competitors")
    @classmethod
    def _clean_domains(cls, value: list[str]) -> list[str]:
        domains = [normalize_domain(domain) for domain in value]
        if any(not domain for domain in domains):
            raise ValueError("competitor domains must not be blank")
        return domains

    @field_validator("api_base_url")
    @classmethod
    def _base_url(cls, value: str) -> str:
        url = value.strip().rstrip("/")
        if not url.startswith(("http://", "https://")):
            raise ValueError(f"expected an http(s) URL, got {value!r}")
        return url


def load_config(data: PipelineConfig | Mapping[str, Any]) -> PipelineConfig:
    """Validate caller input into a ``PipelineConfig``.

    Raises:
        ConfigurationError: listing every invalid field as ``path: message``.
    """
    if isinstance(data, PipelineConfig):
        return data
    try:
        return PipelineConfig.model_validate(dict(data))
    except ValidationError as exc:
        fields = {
            ".".join(str(part) for part in err["loc"]) or "config": err["msg"]
            for err in exc.errors()
        }
        details = "; ".join(f"{name}: {msg}" for name, msg in fields.items())
        raise ConfigurationError(f"Invalid pipeline config: {details}", fields) from exc


def config_from_env(**overrides: Any) -> PipelineConfig:
    """Build a config whose backend settings default to the environment."""
    env = backend_env()
    data: dict[str, Any] = {"api_base_url": env["api_base_url"]}
    if env["login"] and env["password"]:
        data["credentials"] = {"login": env["login"], "password": env["password"]}
    data.update({key: value for key, value in overrides.items() if value is not None})
    return load_config(data)


class TopKeywordPick(BaseModel):
    model_config = ConfigDict(frozen=True)

    keyword: str
    volume: int = 0
    cpc: float = 0.0
    competition: float = 0.0
    intent: str = ""
    tier: str = ""
    reason: str = Field(
        description="One sentence citing the keyword's numbers (volume, CPC, competition, intent)."
    )

    @field_validator("volume", mode="before")
    @classmethod
    def _whole_volume(cls, value: Any) -> Any:
        return _round_number(value)


class StrategistReport(BaseModel):
    """Structured output of the PPC Strategist stage."""

    model_config = ConfigDict(frozen=True)

    top_keywords: list[TopKeywordPick] = Field(
        description="The 20 best keyword picks, best first."
    )
    recommended_budget: str = Field(
        description="Recommended monthly Google Ads budget with a short rationale."
    )
    market_opportunity: str = Field(
        description="One paragraph assessing the overall market opportunity."
    )
    next_steps: list[str] = Field(description="3-5 concrete next steps.")


class PipelineSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_keywords_found: int
    sweet_spot_count: int
    high_value_count: int
    tier_counts: dict[str, int]
    avg_cpc: float
    top_keyword: str
    competitor_gaps: int
    market_opportunity: str


class PipelineMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    country: str
    seed_keywords: list[str]
    competitors: list[str]
    timestamp: str
    duration_ms: int


class PipelineResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    keywords: list[ScoredKeyword]
    gaps: list[KeywordGap]
    summary: PipelineSummary
    metadata: PipelineMetadata
    report: StrategistReport
