from __future__ import annotations

from types import SimpleNamespace

import pytest

from ppc_keyword_research.models import PipelineConfig, load_config
from ppc_keyword_research.tooling import STATE_CONFIG_KEY


@pytest.fixture
def config() -> PipelineConfig:
    return load_config(
        {
            "seed_keywords": ["accounts payable automation", "invoice matching software"],
            "target_country": "GB",
            "competitors": ["bill.com", "tipalti.com"],
            "cpc_range": {"min": 3, "max": 8},
            "api_base_url": "http://backend.test",
            "credentials": {"login": "user@example.com", "password": "s3cret"},
        }
    )


@pytest.fixture
def tool_context(config):
    """Stand-in for ADK's ToolContext: tools only read ``state``."""
    return SimpleNamespace(state={STATE_CONFIG_KEY: config.model_dump()})
