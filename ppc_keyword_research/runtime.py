"""Agent runtime for the research stages.

A stage is described by a ``StageAgent`` (name, tools, output schema, turn
budget, instructions). Anything implementing ``AgentRuntime.run`` can execute
it; ``AdkAgentRuntime`` does so with Google ADK:

  <stage> (SequentialAgent)
  ├── <stage>_researcher (LlmAgent, tools)    → state "<stage>_findings"
  └── <stage>_formatter  (LlmAgent, output_schema) → state "<output_key>"

The researcher/formatter split keeps tool calling and structured output in
separate model calls; both count against the stage's turn budget.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol

from google.adk.agents import LlmAgent, SequentialAgent
from google.adk.agents.invocation_context import LlmCallsLimitExceededError
from google.adk.agents.run_config import RunConfig
from google.adk.models.base_llm import BaseLlm
from google.adk.runners import InMemoryRunner
from google.genai import types
from pydantic import BaseModel

from .config import settings
from .errors import TurnBudgetExhaustedError
from .models import PipelineConfig
from .tooling import STATE_CONFIG_KEY

logger = logging.getLogger(__name__)

_APP_NAME = "ppc_keyword_research"
_USER_ID = "pipeline"


@dataclass(frozen=True)
class StageAgent:
    """A role-scoped research agent: fixed tools, schema and turn budget."""

    name: str
    description: str
    instruction: str
    formatter_instruction: str
    tools: tuple[Callable[..., Any], ...]
    output_schema: type[BaseModel]
    output_key: str
    max_turns: int

    @property
    def findings_key(self) -> str:
        return f"{self.name}_findings"

    @property
    def tool_names(self) -> list[str]:
        return [tool.__name__ for tool in self.tools]


class AgentRuntime(Protocol):
    """Runs one stage agent to completion and returns its raw structured output.

    Implementations raise ``TurnBudgetExhaustedError`` when the agent does not
    finish within ``agent.max_turns`` and return ``None`` when it finished
    without a final output.
    """

    async def run(self, agent: StageAgent, prompt: str, context: PipelineConfig) -> Any:
        ...


class AdkAgentRuntime:
    """``AgentRuntime`` backed by Google ADK's in-memory runner."""

    def __init__(
        self,
        worker_model: str | BaseLlm | None = None,
        critic_model: str | BaseLlm | None = None,
        app_name: str = _APP_NAME,
    ) -> None:
        self.worker_model = worker_model or settings.worker_model
        self.critic_model = critic_model or settings.critic_model
        self.app_name = app_name

    def build(self, agent: StageAgent) -> SequentialAgent:
        researcher = LlmAgent(
            name=f"{agent.name}_researcher",
            model=self.worker_model,
            description=agent.description,
            instruction=agent.instruction,
            tools=list(agent.tools),
            output_key=agent.findings_key,
        )
        formatter = LlmAgent(
            name=f"{agent.name}_formatter",
            model=self.critic_model,
            description=f"Formats the {agent.name} findings as {agent.output_schema.__name__}.",
            instruction=agent.formatter_instruction,
            output_schema=agent.output_schema,
            output_key=agent.output_key,
        )
        return SequentialAgent(
            name=agent.name,
            description=agent.description,
            sub_agents=[researcher, formatter],
        )

    async def run(self, agent: StageAgent, prompt: str, context: PipelineConfig) -> Any:
        runner = InMemoryRunner(agent=self.build(agent), app_name=self.app_name)
        session = await runner.session_service.create_session(
            app_name=self.app_name,
            user_id=_USER_ID,
            state={STATE_CONFIG_KEY: context.model_dump()},
        )
        message = types.Content(role="user", parts=[types.Part(text=prompt)])
        run_config = RunConfig(max_llm_calls=agent.max_turns)

        try:
            async for event in runner.run_async(
                user_id=_USER_ID,
                session_id=session.id,
                new_message=message,
                run_config=run_config,
            ):
                if event.error_message:
                    logger.warning("%s: %s", event.author, event.error_message)
        except LlmCallsLimitExceededError as e:
            raise TurnBudgetExhaustedError(agent.name, agent.max_turns) from e

        finished = await runner.session_service.get_session(
            app_name=self.app_name, user_id=_USER_ID, session_id=session.id
        )
        if finished is None:
            return None
        return finished.state.get(agent.output_key)
