"""Staleness ticker.

Fires a callback on a fixed interval so time-derived fields (seconds since
update, header clock) are re-rendered without new events.  The ticker
holds no state of its own beyond its task.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable
from typing import Any

from pyfirealarm._constants import TICK_INTERVAL_SECONDS

_logger = logging.getLogger(__name__)


class StalenessTicker:
    """Repeating asyncio task calling ``on_tick`` every ``interval`` seconds.

    Usage::

        async with StalenessTicker(dashboard.request_tick):
            ...

    ``start()`` and ``stop()`` are idempotent; ``stop()`` awaits the task so
    nothing is left running after teardown.
    """

    def __init__(self, on_tick: Callable[[], None], *, interval: float = TICK_INTERVAL_SECONDS) -> None:
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self._on_tick = on_tick
        self._interval = interval
        self._task: asyncio.Task[None] | None = None
        self.tick_count = 0

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def __aenter__(self) -> StalenessTicker:
        self.start()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.stop()

    def start(self) -> None:
        if self.is_running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run(), name="pyfirealarm-ticker")
        _logger.debug("Ticker started interval=%.3fs", self._interval)

    async def stop(self) -> None:
        task = self._task
        self._task = None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        _logger.debug("Ticker stopped after %d tick(s)", self.tick_count)

    async def _run(self) -> None:
        loop = asyncio.get_running_loop()
        next_at = loop.time() + self._interval
        while True:
            await asyncio.sleep(max(0.0, next_at - loop.time()))
            next_at += self._interval
            self.tick_count += 1
            try:
                self._on_tick()
            except Exception:
                _logger.warning("Tick callback failed", exc_info=True)
