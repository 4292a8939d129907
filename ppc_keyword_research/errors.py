"""Exceptions raised by the keyword research pipeline.

Every error inherits from ``KeywordPipelineError`` so callers (CLI, job
runner) can catch the whole family in one ``except`` clause and still show
the original message.
"""

from __future__ import annotations

from typing import Any


class KeywordPipelineError(Exception):
    """Base exception for all pipeline errors."""

    def __init__(self, message: str = "", details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details: dict[str, Any] = details or {}


class ConfigurationError(KeywordPipelineError):
    """Raised when a ``PipelineConfig`` is missing fields or holds invalid values."""

    def __init__(self, message: str, fields: dict[str, str] | None = None) -> None:
        super().__init__(message, {"fields": fields or {}})
        self.fields: dict[str, str] = fields or {}


class TransportError(KeywordPipelineError):
    """Raised when a call to the data-access backend fails.

    Carries the upstream ``error`` string as the message whenever the backend
    provided one.
    """

    def __init__(
        self,
        message: str,
        endpoint: str = "",
        status_code: int | None = None,
    ) -> None:
        super().__init__(message, {"endpoint": endpoint, "status_code": status_code})
        self.endpoint = endpoint
        self.status_code = status_code


class SchemaValidationError(KeywordPipelineError):
    """Raised when an agent's final structured output does not match its schema."""

    def __init__(self, stage: str, message: str) -> None:
        super().__init__(f"{stage}: {message}", {"stage": stage})
        self.stage = stage


class TurnBudgetExhaustedError(KeywordPipelineError):
    """Raised when an agent runs out of turns before producing its output."""

    def __init__(self, stage: str, max_turns: int) -> None:
        super().__init__(
            f"{stage}: no final output within {max_turns} turns",
            {"stage": stage, "max_turns": max_turns},
        )
        self.stage = stage
        self.max_turns = max_turns
