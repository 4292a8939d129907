"""Tests for the ppc-keywords command line."""

import json

from typer.testing import CliRunner

from ppc_keyword_research import cli
from ppc_keyword_research import config as config_module
from ppc_keyword_research.errors import TransportError
from ppc_keyword_research.pipeline import run_pipeline_sync

runner = CliRunner()


class _EmptyRuntime:
    async def run(self, agent, prompt, context):
        return {
            "expander": {"all_keywords": [], "summary": "none"},
            "competitor_analyst": {"gaps": [], "summary": "none"},
            "strategist": {
                "top_keywords": [],
                "recommended_budget": "0",
                "market_opportunity": "Thin market.",
                "next_steps": ["a", "b", "c"],
            },
        }[agent.name]


def _quiet_env(monkeypatch):
    monkeypatch.setattr(cli, "load_dotenv", lambda: None)
    monkeypatch.setattr(config_module, "load_dotenv", lambda: None)
    monkeypatch.setenv("GOOGLE_API_KEY", "test-key")
    monkeypatch.delenv("API_BASE_URL", raising=False)
    monkeypatch.delenv("DATAFORSEO_LOGIN", raising=False)
    monkeypatch.delenv("DATAFORSEO_PASSWORD", raising=False)


def test_run_writes_result_json(monkeypatch, tmp_path):
    _quiet_env(monkeypatch)
    captured = {}

    def fake_run(config, on_progress=None):
        captured["config"] = config
        return run_pipeline_sync(config, _EmptyRuntime(), on_progress)

    monkeypatch.setattr(cli, "check_backend_status", lambda base_url: {"ok": True})
    monkeypatch.setattr(cli, "run_pipeline_sync", fake_run)
    out_file = tmp_path / "result.json"

    result = runner.invoke(
        cli.app,
        [
            "run",
            "--seeds", "ap automation, invoice ocr",
            "--competitors", "bill.com",
            "--country", "us",
            "--cpc-min", "2",
            "--cpc-max", "6",
            "--product", "PayFlow",
            "--output", str(out_file),
        ],
    )

    assert result.exit_code == 0, result.output
    config = captured["config"]
    assert config.seed_keywords == ["ap automation", "invoice ocr"]
    assert config.target_country == "US"
    assert config.cpc_range.max == 6
    assert config.product.name == "PayFlow"
    assert config.api_base_url == config_module.DEFAULT_API_BASE_URL

    saved = json.loads(out_file.read_text(encoding="utf-8"))
    assert saved["metadata"]["country"] == "US"
    assert saved["summary"]["top_keyword"] == "—"


def test_run_exits_1_when_backend_unreachable(monkeypatch):
    _quiet_env(monkeypatch)

    def unreachable(base_url):
        raise TransportError(f"Cannot reach backend at {base_url}", "/api/keywords/status")

    monkeypatch.setattr(cli, "check_backend_status", unreachable)

    result = runner.invoke(cli.app, ["run"])

    assert result.exit_code == 1
    assert "Cannot reach backend" in result.output


def test_run_exits_1_on_invalid_config(monkeypatch):
    _quiet_env(monkeypatch)

    result = runner.invoke(cli.app, ["run", "--cpc-min", "9", "--cpc-max", "3"])

    assert result.exit_code == 1
    assert "cpc_range" in result.output


def test_run_requires_model_credentials(monkeypatch):
    _quiet_env(monkeypatch)
    monkeypatch.delenv("GOOGLE_API_KEY")
    monkeypatch.delenv("GOOGLE_GENAI_USE_VERTEXAI", raising=False)

    result = runner.invoke(cli.app, ["run"])

    assert result.exit_code == 1
