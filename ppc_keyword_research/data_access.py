"""HTTP client for the keyword data-access backend.

The backend wraps the third-party keyword and SEO APIs. Every endpoint takes a
JSON body like ``{keywords|keyword|target|target1/target2, countryCode,
options}`` and answers ``{results: [...]}``; failures answer ``{error: str}``
with a non-2xx status.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Sequence
from dataclasses import dataclass, field
from typing import Any, ClassVar, Generic, TypeVar

import httpx
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    ValidationInfo,
    field_validator,
)
from pydantic.alias_generators import to_camel

from .errors import TransportError
from .models import PipelineConfig

logger = logging.getLogger(__name__)

# No per-request deadline; the caller bounds the whole run.
_TIMEOUT = httpx.Timeout(None)
_STATUS_TIMEOUT = 10.0


class BackendRecord(BaseModel):
    """Base for records returned by the backend (camelCase on the wire)."""

    RECORD_VERSION: ClassVar[int] = 1

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    @field_validator("*", mode="before")
    @classmethod
    def _nulls_to_defaults(cls, value: Any, info: ValidationInfo) -> Any:
        # The backend sends null for metrics it has no data for.
        field_info = cls.model_fields[info.field_name]
        if value is None and not field_info.is_required():
            return field_info.get_default(call_default_factory=True)
        return value


class KeywordMetrics(BackendRecord):
    keyword: str
    volume: int = 0
    cpc: float = 0.0
    cpc_low: float = 0.0
    cpc_high: float = 0.0
    competition: float = 0.0
    competition_level: str = ""
    difficulty: int = 0
    intent: str = "informational"
    trend: list[float] = Field(default_factory=list)

    @field_validator("volume", "difficulty", mode="before")
    @classmethod
    def _whole(cls, value: Any) -> Any:
        return int(round(value)) if isinstance(value, float) else value


class RankedKeyword(KeywordMetrics):
    rank_group: int = 0
    rank_absolute: int = 0
    url: str = ""
    title: str = ""
    etv: float = 0.0
    type: str = "organic"


class IntersectionKeyword(KeywordMetrics):
    domain1_rank: int = 0
    domain1_url: str = ""
    domain1_etv: float = 0.0
    domain2_rank: int = 0
    domain2_url: str = ""
    domain2_etv: float = 0.0


class TrafficProjection(BackendRecord):
    keyword: str
    impressions: float = 0.0
    clicks: float = 0.0
    ctr: float = 0.0
    average_cpc: float = 0.0
    cost: float = 0.0


R = TypeVar("R", bound=BackendRecord)


@dataclass(frozen=True)
class AdapterResult(Generic[R]):
    """Parsed backend records.

    ``records`` is the truncated slice handed back to the model;
    ``all_records`` keeps every parsed record for local set operations.
    ``count`` is the upstream total.
    """

    count: int
    records: list[R] = field(default_factory=list)
    all_records: list[R] = field(default_factory=list)

    def to_payload(self, key: str = "keywords", **labels: Any) -> dict[str, Any]:
        return {
            **labels,
            "count": self.count,
            key: [record.model_dump(mode="json") for record in self.records],
        }


def _headers(config: PipelineConfig) -> dict[str, str]:
    headers = {"Content-Type": "application/json"}
    if config.credentials is not None:
        headers["x-dfs-login"] = config.credentials.login
        headers["x-dfs-password"] = config.credentials.password.get_secret_value()
    return headers


async def call_api(
    config: PipelineConfig, endpoint: str, body: dict[str, Any]
) -> list[Any]:
    """POST ``body`` to ``endpoint`` and return the ``results`` list.

    Raises:
        TransportError: on connection failure, non-2xx status or a malformed body.
    """
    url = f"{config.api_base_url}{endpoint}"
    try:
        async with httpx.AsyncClient(timeout=_TIMEOUT) as client:
            r = await client.post(url, json=body, headers=_headers(config))
    except httpx.HTTPError as e:
        raise TransportError(f"Request to {endpoint} failed: {e}", endpoint) from e

    try:
        data = r.json()
    except ValueError:
        data = None

    if r.is_error:
        message = data.get("error") if isinstance(data, dict) else None
        raise TransportError(
            message or f"API error ({r.status_code})", endpoint, r.status_code
        )
    if not isinstance(data, dict) or not isinstance(data.get("results"), list):
        raise TransportError(
            f"Unexpected response from {endpoint}: missing 'results' list",
            endpoint,
            r.status_code,
        )
    return data["results"]


def parse_records(
    record_type: type[R], results: Sequence[Any], endpoint: str, limit: int
) -> AdapterResult[R]:
    """Validate backend results into ``record_type``; hand back the first ``limit``."""
    try:
        records = TypeAdapter(list[record_type]).validate_python(list(results))
    except ValidationError as e:
        raise TransportError(
            f"Unexpected {record_type.__name__} shape from {endpoint}: {e}", endpoint
        ) from e
    if len(results) > limit:
        logger.debug("%s: %d records, returning %d", endpoint, len(results), limit)
    return AdapterResult(count=len(results), records=records[:limit], all_records=records)


def check_backend_status(base_url: str) -> dict[str, Any]:
    """Probe the backend's status endpoint.

    Returns:
        The status payload, e.g. ``{"ok": True, "credentialsConfigured": True,
        "supportedMarkets": [...]}``.
    """
    endpoint = "/api/keywords/status"
    try:
        r = httpx.get(f"{base_url.rstrip('/')}{endpoint}", timeout=_STATUS_TIMEOUT)
        r.raise_for_status()
        return r.json()
    except httpx.HTTPStatusError as e:
        raise TransportError(
            f"Backend status check failed ({e.response.status_code})",
            endpoint,
            e.response.status_code,
        ) from e
    except (httpx.HTTPError, ValueError) as e:
        raise TransportError(f"Cannot reach backend at {base_url}: {e}", endpoint) from e


MAX_LIMIT = 1000


def clamp_limit(limit: int) -> int:
    """Clamp a caller-supplied record limit into ``[1, MAX_LIMIT]``."""
    return max(1, min(MAX_LIMIT, int(limit)))


def cap_input(items: Sequence[str], cap: int, endpoint: str) -> list[str]:
    """Keep the first ``cap`` items in call order."""
    if len(items) > cap:
        logger.debug("%s: %d input keywords, sending first %d", endpoint, len(items), cap)
    return list(items[:cap])


async def records_of(call: Awaitable[AdapterResult[R]]) -> list[R]:
    return (await call).records


async def all_records_of(call: Awaitable[AdapterResult[R]]) -> list[R]:
    return (await call).all_records
