"""Tests for resilient fan-out."""

import asyncio

import pytest

from ppc_keyword_research.errors import TransportError
from ppc_keyword_research.fan_out import degraded_labels, fan_out


def _returning(values, delay=0.0):
    async def unit():
        await asyncio.sleep(delay)
        return values

    return unit


def _raising(exc):
    async def unit():
        raise exc

    return unit


def test_fan_out_keeps_unit_order():
    outcomes = asyncio.run(
        fan_out({"slow": _returning([1], delay=0.02), "fast": _returning([2, 3])})
    )
    assert [o.label for o in outcomes] == ["slow", "fast"]
    assert [o.values for o in outcomes] == [[1], [2, 3]]


def test_transport_error_degrades_only_that_unit():
    outcomes = asyncio.run(
        fan_out(
            {
                "bill.com": _returning(["a"]),
                "tipalti.com": _raising(TransportError("timeout", "/api/keywords/labs/ranked")),
            }
        )
    )
    assert outcomes[0].values == ["a"]
    assert not outcomes[0].recovered
    assert outcomes[1].values == []
    assert isinstance(outcomes[1].error, TransportError)
    assert degraded_labels(outcomes) == ["tipalti.com"]


def test_other_errors_propagate():
    with pytest.raises(ExceptionGroup) as excinfo:
        asyncio.run(fan_out({"ok": _returning([1]), "bug": _raising(ValueError("bad"))}))
    assert excinfo.group_contains(ValueError)


def test_empty_fan_out():
    assert asyncio.run(fan_out({})) == []
