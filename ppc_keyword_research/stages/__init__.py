from .expander import expander_agent, KeywordExpansionOutput
from .competitors import competitor_agent, CompetitorAnalysisOutput
from .strategist import strategist_agent

__all__ = [
    "expander_agent",
    "KeywordExpansionOutput",
    "competitor_agent",
    "CompetitorAnalysisOutput",
    "strategist_agent",
]
