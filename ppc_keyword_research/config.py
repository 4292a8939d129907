import os
from dataclasses import dataclass

from dotenv import load_dotenv

DEFAULT_API_BASE_URL = "http://localhost:3001"

# Markets known to the backend's location table.
SUPPORTED_MARKETS = frozenset({"GB", "US", "DE", "AU", "CA", "FR"})


@dataclass
class PipelineSettings:
    """Models, turn budgets and prompt sizes for the research stages.

    Attributes:
        worker_model (str): Model for tool-calling research turns.
        critic_model (str): Model for structured-output formatting and strategy.
        expander_max_turns (int): LLM-call budget for the Expander stage.
        competitor_max_turns (int): LLM-call budget for the Competitor Analyst.
        strategist_max_turns (int): LLM-call budget for the Strategist.
    """

    worker_model: str = "gemini-3-flash-preview"
    critic_model: str = "gemini-3-flash-preview"
    expander_max_turns: int = 15
    competitor_max_turns: int = 20
    strategist_max_turns: int = 8
    strategist_keyword_rows: int = 30
    strategist_gap_rows: int = 20
    strategist_pick_count: int = 20
    min_next_steps: int = 3
    max_next_steps: int = 5


settings = PipelineSettings()


def backend_env() -> dict[str, str | None]:
    """Read backend location and credentials from the environment (and .env)."""
    load_dotenv()
    return {
        "api_base_url": os.environ.get("API_BASE_URL") or DEFAULT_API_BASE_URL,
        "login": os.environ.get("DATAFORSEO_LOGIN"),
        "password": os.environ.get("DATAFORSEO_PASSWORD"),
    }
