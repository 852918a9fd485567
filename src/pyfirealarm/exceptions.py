"""Custom exception hierarchy for pyfirealarm."""

from __future__ import annotations

from typing import Any


class FireAlarmError(Exception):
    """Base exception for all pyfirealarm errors."""


class FireAlarmConfigError(FireAlarmError):
    """Invalid or missing configuration."""


class MalformedPayloadError(FireAlarmError):
    """An event payload could not be parsed or validated.

    Raised by the ingestion layer and caught at the dispatch boundary,
    where the event is dropped with a warning.  ``data`` holds the payload
    exactly as received so it can be logged.
    """

    def __init__(self, message: str, *, event: str = "", data: Any = None) -> None:
        self.event = event
        self.data = data
        super().__init__(message)


class FireAlarmTransportError(FireAlarmError):
    """Event stream failure (network, non-200, unexpected content type)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        url: str = "",
    ) -> None:
        self.status_code = status_code
        self.url = url
        super().__init__(message)
