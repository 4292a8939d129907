from .competitor_agent import CompetitorAnalysisOutput, competitor_agent, competitor_prompt

__all__ = ["competitor_agent", "competitor_prompt", "CompetitorAnalysisOutput"]
