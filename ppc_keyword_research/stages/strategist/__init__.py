from .strategist_agent import strategist_agent, strategist_prompt

__all__ = ["strategist_agent", "strategist_prompt"]
