"""Fire alarm dashboard: owned application state and task dispatch."""

from __future__ import annotations

import asyncio
import contextlib
import enum
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

import aiohttp

from pyfirealarm._sse import EventStreamClient
from pyfirealarm.config import DashboardConfig
from pyfirealarm.exceptions import MalformedPayloadError
from pyfirealarm.ingestion.normalize import truncate_for_log
from pyfirealarm.ingestion.reconcile import TelemetryReconciler
from pyfirealarm.models.device import Device
from pyfirealarm.models.view import DashboardView, HeaderView, RenderReason, RenderUpdate
from pyfirealarm.render import project, project_dashboard, project_header
from pyfirealarm.state.events import EventKind, IngestionEvent
from pyfirealarm.state.store import DeviceStore
from pyfirealarm.ticker import StalenessTicker

_logger = logging.getLogger(__name__)

RenderSink = Callable[[RenderUpdate], None]


def _utcnow() -> datetime:
    return datetime.now(UTC)


class _Action(enum.Enum):
    EVENT = "event"
    TICK = "tick"
    RESET = "reset"


@dataclass(frozen=True, slots=True)
class _Task:
    action: _Action
    name: str = ""
    data: Any = None


class FireAlarmDashboard:
    """Live monitoring state for a set of sensor units and their hub.

    All state changes go through one FIFO queue drained by a single worker
    task; each task (event merge, tick, reset) runs to completion before
    the next starts.  Every task that changes what is displayed emits one
    :class:`RenderUpdate` to the registered sinks.

    Usage::

        async with FireAlarmDashboard(config, on_render=print) as dashboard:
            dashboard.submit("unit_readings", '{"id": "A", "mq": 1.5}')
            ...
    """

    def __init__(
        self,
        config: DashboardConfig | None = None,
        *,
        clock: Callable[[], datetime] = _utcnow,
        on_render: RenderSink | None = None,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self._config = config or DashboardConfig(sse_enabled=False)
        self._clock = clock
        self._store = DeviceStore(clock=clock)
        self._reconciler = TelemetryReconciler(
            self._store,
            clock=clock,
            hub_cell_min_voltage=self._config.hub_cell_min_voltage,
            hub_cell_max_voltage=self._config.hub_cell_max_voltage,
        )
        self._sinks: list[RenderSink] = []
        if on_render is not None:
            self._sinks.append(on_render)
        self._queue: asyncio.Queue[_Task] = asyncio.Queue()
        self._worker: asyncio.Task[None] | None = None
        self._closed = False
        self._ticker = StalenessTicker(self.request_tick, interval=self._config.tick_interval)
        self._stream: EventStreamClient | None = None
        if self._config.sse_enabled:
            self._stream = EventStreamClient(
                self._config.events_url,
                on_event=self.submit,
                session=session,
                reconnect_delay=self._config.reconnect_delay,
            )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> FireAlarmDashboard:
        await self.start()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.stop()

    @property
    def is_running(self) -> bool:
        return self._worker is not None and not self._worker.done()

    async def start(self) -> None:
        if self.is_running:
            return
        self._closed = False
        self._worker = asyncio.get_running_loop().create_task(self._drain(), name="pyfirealarm-dispatch")
        self._ticker.start()
        if self._stream is not None:
            self._stream.start()
        _logger.debug("Dashboard started")

    async def stop(self) -> None:
        """Stop the transport and ticker, then finish queued tasks."""
        self._closed = True
        if self._stream is not None:
            await self._stream.stop()
        await self._ticker.stop()
        worker = self._worker
        self._worker = None
        if worker is not None:
            worker.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await worker
        # Tasks queued before teardown are still applied, in order.
        while not self._queue.empty():
            self._run(self._queue.get_nowait())
            self._queue.task_done()
        _logger.debug("Dashboard stopped")

    async def join(self) -> None:
        """Wait until every submitted task has been processed."""
        await self._queue.join()

    async def _drain(self) -> None:
        while True:
            task = await self._queue.get()
            try:
                self._run(task)
            finally:
                self._queue.task_done()

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def config(self) -> DashboardConfig:
        return self._config

    @property
    def store(self) -> DeviceStore:
        return self._store

    @property
    def reconciler(self) -> TelemetryReconciler:
        return self._reconciler

    @property
    def ticker(self) -> StalenessTicker:
        return self._ticker

    @property
    def active_device_count(self) -> int:
        return len(self._store)

    def on_render(self, sink: RenderSink) -> Callable[[], None]:
        """Register a render sink; returns a callable that unregisters it."""
        self._sinks.append(sink)

        def _remove() -> None:
            with contextlib.suppress(ValueError):
                self._sinks.remove(sink)

        return _remove

    # ------------------------------------------------------------------
    # Task submission (safe to call from transport callbacks)
    # ------------------------------------------------------------------

    def submit(self, name: str, data: Any = None) -> None:
        """Queue a transport event for in-order processing.

        Tasks submitted after :meth:`stop` are dropped; tasks submitted
        before :meth:`start` wait for the worker.
        """
        self._enqueue(_Task(_Action.EVENT, name=name, data=data))

    def request_tick(self) -> None:
        self._enqueue(_Task(_Action.TICK))

    def request_reset(self) -> None:
        self._enqueue(_Task(_Action.RESET))

    def _enqueue(self, task: _Task) -> None:
        if self._closed:
            _logger.debug("Dashboard stopped; dropping %s task %s", task.action.value, task.name)
            return
        self._queue.put_nowait(task)

    def _run(self, task: _Task) -> RenderUpdate | None:
        if task.action is _Action.TICK:
            return self.tick()
        if task.action is _Action.RESET:
            return self.reset_alerts()
        return self.process(task.name, task.data)

    # ------------------------------------------------------------------
    # Synchronous operations (one task each)
    # ------------------------------------------------------------------

    def process(self, name: str, data: Any = None) -> RenderUpdate | None:
        """Apply one transport event immediately.

        Malformed payloads are logged and dropped; ``None`` is returned for
        dropped events and for events that render nothing.
        """
        try:
            event = IngestionEvent.from_wire(name, data, observed_at=self._clock())
            if event is None:
                _logger.debug("Ignoring unsupported event %r", name)
                return None
            return self._apply(event)
        except MalformedPayloadError as exc:
            _logger.warning("Dropping malformed %s event: %s data=%r", name, exc, truncate_for_log(exc.data))
            return None

    def _apply(self, event: IngestionEvent) -> RenderUpdate | None:
        if event.kind is EventKind.UNIT_READINGS:
            known = len(self._store)
            device = self._reconciler.apply_unit_reading(event.payload)
            created = (device.id,) if len(self._store) > known else ()
            return self._emit(RenderReason.UNIT_READING, [device], created=created)

        if event.kind is EventKind.HUB_READINGS:
            self._reconciler.apply_hub_reading(event.payload)
            return self._emit(RenderReason.HUB_READING, [])

        if event.kind is EventKind.HEARTBEAT:
            self._reconciler.apply_heartbeat()
            return self._emit(RenderReason.HEARTBEAT, [])

        if event.kind is EventKind.CONNECTION_OPEN:
            _logger.info("SSE connected")
        elif event.kind is EventKind.CONNECTION_ERROR:
            _logger.warning("SSE disconnected")
        return None

    def tick(self) -> RenderUpdate:
        """Re-render every device against the current time. Never mutates state."""
        return self._emit(RenderReason.TICK, list(self._store.devices()))

    def reset_alerts(self) -> RenderUpdate:
        """Clear gas alerts on every device and re-render all of them."""
        devices = self._reconciler.reset_alerts()
        return self._emit(RenderReason.RESET, devices)

    def header(self) -> HeaderView:
        return project_header(
            device_count=len(self._store),
            hub=self._store.hub,
            last_alive=self._reconciler.last_alive,
            time_format=self._config.header_time_format,
        )

    def view(self, now: datetime | None = None) -> DashboardView:
        """Full snapshot of every known device plus the header."""
        return project_dashboard(
            self._store.devices(),
            self.header(),
            now or self._clock(),
            rapid_rise_threshold=self._config.rapid_rise_threshold,
            low_battery_voltage=self._config.low_battery_voltage,
        )

    def _emit(self, reason: RenderReason, devices: list[Device], *, created: tuple[str, ...] = ()) -> RenderUpdate:
        now = self._clock()
        update = RenderUpdate(
            reason=reason,
            devices=tuple(
                project(
                    device,
                    now,
                    rapid_rise_threshold=self._config.rapid_rise_threshold,
                    low_battery_voltage=self._config.low_battery_voltage,
                )
                for device in devices
            ),
            created=created,
            header=self.header(),
        )
        for sink in list(self._sinks):
            try:
                sink(update)
            except Exception:
                _logger.debug("Render sink failed", exc_info=True)
        return update
