"""Tests for the backend HTTP client and record parsing."""

import asyncio
import json

import httpx
import pytest

from ppc_keyword_research import data_access
from ppc_keyword_research.data_access import (
    IntersectionKeyword,
    KeywordMetrics,
    RankedKeyword,
    call_api,
    check_backend_status,
    clamp_limit,
    parse_records,
)
from ppc_keyword_research.errors import TransportError


class _FakeResponse:
    def __init__(self, payload):
        self._payload = payload

    def raise_for_status(self):
        return None

    def json(self):
        return self._payload


def _mock_backend(monkeypatch, handler):
    real_client = httpx.AsyncClient

    def fake_client(*args, **kwargs):
        kwargs["transport"] = httpx.MockTransport(handler)
        return real_client(*args, **kwargs)

    monkeypatch.setattr(data_access.httpx, "AsyncClient", fake_client)


def test_call_api_posts_json_with_credentials(monkeypatch, config):
    captured = {}

    def handler(request):
        captured["url"] = str(request.url)
        captured["headers"] = request.headers
        captured["body"] = json.loads(request.content)
        return httpx.Response(200, json={"results": [{"keyword": "ap automation"}]})

    _mock_backend(monkeypatch, handler)

    results = asyncio.run(
        call_api(config, "/api/keywords/suggestions", {"keywords": ["ap"], "countryCode": "GB"})
    )

    assert results == [{"keyword": "ap automation"}]
    assert captured["url"] == "http://backend.test/api/keywords/suggestions"
    assert captured["body"] == {"keywords": ["ap"], "countryCode": "GB"}
    assert captured["headers"]["x-dfs-login"] == "user@example.com"
    assert captured["headers"]["x-dfs-password"] == "s3cret"


def test_call_api_without_credentials_sends_no_auth_headers(monkeypatch, config):
    captured = {}

    def handler(request):
        captured["headers"] = request.headers
        return httpx.Response(200, json={"results": []})

    _mock_backend(monkeypatch, handler)
    anonymous = config.model_copy(update={"credentials": None})

    asyncio.run(call_api(anonymous, "/api/keywords/suggestions", {}))

    assert "x-dfs-login" not in captured["headers"]
    assert "x-dfs-password" not in captured["headers"]


def test_call_api_surfaces_upstream_error_message(monkeypatch, config):
    _mock_backend(
        monkeypatch, lambda request: httpx.Response(401, json={"error": "Invalid credentials"})
    )

    with pytest.raises(TransportError) as excinfo:
        asyncio.run(call_api(config, "/api/keywords/for-site", {}))

    assert str(excinfo.value) == "Invalid credentials"
    assert excinfo.value.status_code == 401
    assert excinfo.value.endpoint == "/api/keywords/for-site"


def test_call_api_falls_back_to_status_message(monkeypatch, config):
    _mock_backend(monkeypatch, lambda request: httpx.Response(502, text="Bad gateway"))

    with pytest.raises(TransportError, match=r"API error \(502\)"):
        asyncio.run(call_api(config, "/api/keywords/labs/ranked", {}))


def test_call_api_rejects_body_without_results(monkeypatch, config):
    _mock_backend(monkeypatch, lambda request: httpx.Response(200, json={"data": []}))

    with pytest.raises(TransportError, match="missing 'results'"):
        asyncio.run(call_api(config, "/api/keywords/labs/ranked", {}))


def test_call_api_wraps_connection_failures(monkeypatch, config):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    _mock_backend(monkeypatch, handler)

    with pytest.raises(TransportError, match="connection refused"):
        asyncio.run(call_api(config, "/api/keywords/suggestions", {}))


def test_parse_records_truncates_and_keeps_upstream_count():
    results = [{"keyword": f"kw {i}", "volume": i} for i in range(120)]

    parsed = parse_records(KeywordMetrics, results, "/api/keywords/search-volume", 100)

    assert parsed.count == 120
    assert len(parsed.records) == 100
    assert len(parsed.all_records) == 120
    assert parsed.records[0].keyword == "kw 0"


def test_parse_records_maps_camel_case_and_null_metrics():
    results = [
        {
            "keyword": "invoice ocr",
            "volume": None,
            "cpc": 4.2,
            "competition": None,
            "competitionLevel": "LOW",
            "intent": None,
            "rankGroup": 7,
            "etv": 12.5,
        }
    ]

    record = parse_records(RankedKeyword, results, "/api/keywords/labs/ranked", 50).records[0]

    assert record.volume == 0
    assert record.competition == 0.0
    assert record.competition_level == "LOW"
    assert record.intent == "informational"
    assert record.rank_group == 7
    assert record.etv == 12.5


def test_parse_records_keeps_intersection_ranks():
    results = [{"keyword": "ap automation", "domain1Rank": 3, "domain1Etv": 12.5, "domain2Rank": 7}]

    payload = parse_records(
        IntersectionKeyword, results, "/api/keywords/labs/intersection", 50
    ).to_payload("keywords")

    row = payload["keywords"][0]
    assert row["domain1_rank"] == 3
    assert row["domain1_etv"] == 12.5
    assert row["domain2_rank"] == 7
    assert row["domain2_url"] == ""
    assert row["domain2_etv"] == 0.0


def test_parse_records_rejects_wrong_shape():
    with pytest.raises(TransportError, match="KeywordMetrics"):
        parse_records(KeywordMetrics, [{"volume": 10}], "/api/keywords/suggestions", 50)


def test_to_payload_shapes_records_for_the_model():
    parsed = parse_records(KeywordMetrics, [{"keyword": "ap", "volume": 3}], "/x", 50)

    payload = parsed.to_payload("keywords", domain="bill.com")

    assert payload["domain"] == "bill.com"
    assert payload["count"] == 1
    assert payload["keywords"][0]["keyword"] == "ap"
    assert payload["keywords"][0]["volume"] == 3


def test_clamp_limit():
    assert clamp_limit(0) == 1
    assert clamp_limit(500) == 500
    assert clamp_limit(5000) == 1000


def test_check_backend_status(monkeypatch):
    captured = {}

    def fake_get(url, timeout=None):
        captured["url"] = url
        return _FakeResponse({"ok": True, "credentialsConfigured": True})

    monkeypatch.setattr(data_access.httpx, "get", fake_get)

    status = check_backend_status("http://backend.test/")

    assert status["ok"] is True
    assert captured["url"] == "http://backend.test/api/keywords/status"


def test_check_backend_status_unreachable(monkeypatch):
    def fake_get(url, timeout=None):
        raise httpx.ConnectError("refused")

    monkeypatch.setattr(data_access.httpx, "get", fake_get)

    with pytest.raises(TransportError, match="Cannot reach backend"):
        check_backend_status("http://backend.test")
