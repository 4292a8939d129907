"""Glue between the typed adapters and ADK function tools."""

from __future__ import annotations

import logging
from collections.abc import Awaitable
from typing import Any

from google.adk.tools.tool_context import ToolContext

from .data_access import AdapterResult
from .errors import ConfigurationError, TransportError
from .models import PipelineConfig

logger = logging.getLogger(__name__)

STATE_CONFIG_KEY = "pipeline_config"


def pipeline_config(tool_context: ToolContext) -> PipelineConfig:
    """Read the run's ``PipelineConfig`` from session state."""
    raw = tool_context.state.get(STATE_CONFIG_KEY)
    if raw is None:
        raise ConfigurationError(f"Session state has no '{STATE_CONFIG_KEY}'.")
    if isinstance(raw, PipelineConfig):
        return raw
    return PipelineConfig.model_validate(raw)


async def tool_payload(
    call: Awaitable[AdapterResult], key: str = "keywords", **labels: Any
) -> dict[str, Any]:
    """Await an adapter and shape its result for the model.

    Transport failures are returned as an ``error`` entry so the agent can
    see them and choose another call.
    """
    try:
        result = await call
    except TransportError as e:
        logger.warning("Tool call failed (%s): %s", e.endpoint, e.message)
        return {**labels, "error": e.message, "count": 0, key: []}
    return result.to_payload(key, **labels)
