"""Resilient fan-out.

Runs independent units of work concurrently, but isolates failures per unit so
one transient transport error degrades that unit to an empty result instead
of failing the whole batch.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from .errors import TransportError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class FanOutOutcome(Generic[T]):
    """Result of one unit: its values, or an empty list plus the error."""

    label: str
    values: list[T] = field(default_factory=list)
    error: Exception | None = None

    @property
    def recovered(self) -> bool:
        return self.error is not None


async def _run_unit(
    label: str, unit: Callable[[], Awaitable[list[T]]]
) -> FanOutOutcome[T]:
    try:
        return FanOutOutcome(label=label, values=list(await unit()))
    except TransportError as e:
        logger.exception("Fan-out unit '%s' failed; continuing with no results.", label)
        return FanOutOutcome(label=label, error=e)


async def fan_out(
    units: Mapping[str, Callable[[], Awaitable[list[T]]]],
) -> list[FanOutOutcome[T]]:
    """Run every unit concurrently and collect one outcome per unit.

    Outcomes come back in the order of ``units``. Only ``TransportError`` is
    recovered; any other error cancels the batch and propagates inside an
    ``ExceptionGroup``.
    """
    if not units:
        return []

    async with asyncio.TaskGroup() as tg:
        tasks = [tg.create_task(_run_unit(label, unit)) for label, unit in units.items()]

    return [task.result() for task in tasks]


def degraded_labels(outcomes: list[FanOutOutcome[T]]) -> list[str]:
    return [outcome.label for outcome in outcomes if outcome.recovered]
