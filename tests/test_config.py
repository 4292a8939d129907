"""Tests for pipeline configuration loading."""

import logging

import pytest

from ppc_keyword_research import config as config_module
from ppc_keyword_research.errors import ConfigurationError
from ppc_keyword_research.models import config_from_env, load_config


def _data(**overrides):
    data = {
        "seed_keywords": ["  ap automation ", "invoice ocr"],
        "target_country": "gb",
        "competitors": ["https://www.Bill.com/pricing", "tipalti.com"],
        "cpc_range": {"min": 3, "max": 8},
        "api_base_url": "http://localhost:3001/",
    }
    data.update(overrides)
    return data


def test_load_config_normalizes_inputs():
    config = load_config(_data())

    assert config.seed_keywords == ["ap automation", "invoice ocr"]
    assert config.target_country == "GB"
    assert config.competitors == ["bill.com", "tipalti.com"]
    assert config.api_base_url == "http://localhost:3001"
    assert config.credentials is None
    assert config.product is None


def test_load_config_lists_every_invalid_field():
    with pytest.raises(ConfigurationError) as excinfo:
        load_config(_data(target_country="Great Britain", api_base_url="ftp://x", cpc_range={"min": 0, "max": 8}))

    fields = excinfo.value.fields
    assert "target_country" in fields
    assert "api_base_url" in fields
    assert "cpc_range.min" in fields
    assert "target_country" in str(excinfo.value)


@pytest.mark.parametrize("bad", [{"seed_keywords": ["ok", "  "]}, {"competitors": []}, {"unexpected": 1}])
def test_load_config_rejects_bad_input(bad):
    with pytest.raises(ConfigurationError):
        load_config(_data(**bad))


def test_config_is_read_only():
    config = load_config(_data())
    with pytest.raises(Exception):
        config.target_country = "US"


def test_unknown_market_is_accepted_with_warning(caplog):
    with caplog.at_level(logging.WARNING):
        config = load_config(_data(target_country="nz"))

    assert config.target_country == "NZ"
    assert "NZ" in caplog.text


def test_config_from_env_reads_backend_settings(monkeypatch):
    monkeypatch.setattr(config_module, "load_dotenv", lambda: None)
    monkeypatch.setenv("API_BASE_URL", "https://keywords.example.com/")
    monkeypatch.setenv("DATAFORSEO_LOGIN", "user@example.com")
    monkeypatch.setenv("DATAFORSEO_PASSWORD", "s3cret")

    data = _data()
    del data["api_base_url"]
    config = config_from_env(**data)

    assert config.api_base_url == "https://keywords.example.com"
    assert config.credentials.login == "user@example.com"
    assert config.credentials.password.get_secret_value() == "s3cret"
    assert "s3cret" not in repr(config)


def test_config_from_env_overrides_win(monkeypatch):
    monkeypatch.setattr(config_module, "load_dotenv", lambda: None)
    monkeypatch.delenv("API_BASE_URL", raising=False)
    monkeypatch.delenv("DATAFORSEO_LOGIN", raising=False)
    monkeypatch.delenv("DATAFORSEO_PASSWORD", raising=False)

    config = config_from_env(**_data(api_base_url=None))
    assert config.api_base_url == config_module.DEFAULT_API_BASE_URL
    assert config.credentials is None

    config = config_from_env(**_data(api_base_url="http://other:9000"))
    assert config.api_base_url == "http://other:9000"
