from __future__ import annotations

import asyncio

import pytest

from pyfirealarm.ticker import StalenessTicker


def test_interval_must_be_positive() -> None:
    with pytest.raises(ValueError):
        StalenessTicker(lambda: None, interval=0)


@pytest.mark.asyncio
async def test_ticker_fires_and_stops() -> None:
    calls: list[int] = []
    ticker = StalenessTicker(lambda: calls.append(1), interval=0.01)

    ticker.start()
    ticker.start()  # idempotent
    await asyncio.sleep(0.08)
    await ticker.stop()
    fired = len(calls)
    await asyncio.sleep(0.03)

    assert fired >= 2
    assert len(calls) == fired
    assert ticker.is_running is False
    assert ticker.tick_count == fired


@pytest.mark.asyncio
async def test_ticker_survives_callback_errors() -> None:
    calls: list[int] = []

    def on_tick() -> None:
        calls.append(1)
        raise RuntimeError("boom")

    async with StalenessTicker(on_tick, interval=0.01) as ticker:
        await asyncio.sleep(0.05)
        assert ticker.is_running is True

    assert len(calls) >= 2
    assert ticker.is_running is False


@pytest.mark.asyncio
async def test_stop_without_start_is_noop() -> None:
    ticker = StalenessTicker(lambda: None)

    await ticker.stop()

    assert ticker.is_running is False
