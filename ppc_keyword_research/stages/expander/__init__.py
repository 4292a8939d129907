from .expander_agent import KeywordExpansionOutput, expander_agent, expander_prompt

__all__ = ["expander_agent", "expander_prompt", "KeywordExpansionOutput"]
