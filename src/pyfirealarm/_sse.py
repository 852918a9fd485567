"""Internal Server-Sent-Events transport.

Reads ``text/event-stream`` frames from the hub's ``/events`` endpoint and
hands ``(event, data)`` pairs to a callback.  Connection lifecycle is
reported through the same callback as ``open`` / ``error`` events.
Reconnection lives here; the dashboard core never retries anything.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterable, Callable, Iterable, Iterator
from dataclasses import dataclass, field
from typing import Any

import aiohttp

from pyfirealarm._constants import EVENT_ERROR, EVENT_OPEN
from pyfirealarm.exceptions import FireAlarmTransportError

_DEFAULT_EVENT = "message"


@dataclass(frozen=True)
class SseFrame:
    """One dispatched Server-Sent-Events message."""

    event: str
    data: str
    id: str | None = None
    retry_ms: int | None = None


@dataclass
class SseParser:
    """Incremental ``text/event-stream`` line parser.

    Feed decoded lines (without trailing newline); a blank line dispatches
    the buffered frame.  Frames without any ``data`` field are dropped, as
    browsers do.
    """

    _event: str = ""
    _data: list[str] = field(default_factory=list)
    _id: str | None = None
    _retry_ms: int | None = None
    last_event_id: str | None = None

    def feed_line(self, line: str) -> SseFrame | None:
        line = line.rstrip("\r\n")
        if not line:
            return self._dispatch()
        if line.startswith(":"):
            return None

        name, sep, value = line.partition(":")
        if sep and value.startswith(" "):
            value = value[1:]

        if name == "event":
            self._event = value
        elif name == "data":
            self._data.append(value)
        elif name == "id":
            if "\0" not in value:
                self._id = value
        elif name == "retry":
            if value.isdigit():
                self._retry_ms = int(value)
        return None

    def _dispatch(self) -> SseFrame | None:
        event = self._event or _DEFAULT_EVENT
        data = self._data
        retry_ms = self._retry_ms
        if self._id is not None:
            self.last_event_id = self._id
        self._event = ""
        self._data = []
        self._id = None
        self._retry_ms = None
        if not data:
            return None
        return SseFrame(event=event, data="\n".join(data), id=self.last_event_id, retry_ms=retry_ms)


def parse_sse_lines(lines: Iterable[str]) -> Iterator[SseFrame]:
    """Parse a sequence of event-stream lines into frames."""
    parser = SseParser()
    for line in lines:
        frame = parser.feed_line(line)
        if frame is not None:
            yield frame


class EventStreamClient:
    """Long-lived SSE reader with fixed-delay reconnection.

    Usage::

        client = EventStreamClient(url, on_event=dashboard.submit)
        client.start()
        ...
        await client.stop()
    """

    def __init__(
        self,
        url: str,
        *,
        on_event: Callable[[str, Any], None],
        session: aiohttp.ClientSession | None = None,
        reconnect_delay: float = 3.0,
        logger: logging.Logger | None = None,
    ) -> None:
        self._url = url
        self._on_event = on_event
        self._external_session = session is not None
        self._http_session = session
        self._reconnect_delay = reconnect_delay
        self._logger = logger or logging.getLogger(__name__)
        self._parser = SseParser()
        self._task: asyncio.Task[None] | None = None
        self._connected = False

    @property
    def url(self) -> str:
        return self._url

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def reconnect_delay(self) -> float:
        return self._reconnect_delay

    def start(self) -> None:
        if self.is_running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run(), name="pyfirealarm-sse")

    async def stop(self) -> None:
        task = self._task
        self._task = None
        if task is not None:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        self._connected = False

    async def _run(self) -> None:
        while True:
            try:
                await self._connect_once()
                self._logger.debug("Event stream ended url=%s", self._url)
            except (aiohttp.ClientError, asyncio.TimeoutError, FireAlarmTransportError) as exc:
                self._logger.debug("Event stream failure url=%s: %s", self._url, exc)
            self._discard_pending()
            self._emit_disconnect()
            await asyncio.sleep(self._reconnect_delay)

    async def _connect_once(self) -> None:
        if self._http_session is None:
            self._http_session = aiohttp.ClientSession()
        headers = {"Accept": "text/event-stream", "Cache-Control": "no-cache"}
        if self._parser.last_event_id is not None:
            headers["Last-Event-ID"] = self._parser.last_event_id
        timeout = aiohttp.ClientTimeout(total=None, sock_connect=10, sock_read=None)

        async with self._http_session.get(self._url, headers=headers, timeout=timeout) as response:
            if response.status != 200:
                raise FireAlarmTransportError(
                    f"Event stream returned HTTP {response.status}",
                    status_code=response.status,
                    url=self._url,
                )
            content_type = response.headers.get("Content-Type", "")
            if "text/event-stream" not in content_type:
                raise FireAlarmTransportError(
                    f"Unexpected content type {content_type!r}",
                    status_code=response.status,
                    url=self._url,
                )
            self._connected = True
            self._on_event(EVENT_OPEN, None)
            await self._consume(response.content)

    async def _consume(self, stream: AsyncIterable[bytes]) -> None:
        """Feed raw stream lines through the parser and dispatch frames."""
        async for raw_line in stream:
            frame = self._parser.feed_line(raw_line.decode("utf-8", errors="replace"))
            if frame is None:
                continue
            if frame.retry_ms is not None:
                self._reconnect_delay = frame.retry_ms / 1000.0
            self._on_event(frame.event, frame.data)

    def _discard_pending(self) -> None:
        """Drop any half-received frame; only the last event id survives a reconnect."""
        self._parser = SseParser(last_event_id=self._parser.last_event_id)

    def _emit_disconnect(self) -> None:
        # One error signal per lost connection, like EventSource readyState checks.
        if self._connected:
            self._connected = False
            self._on_event(EVENT_ERROR, None)
