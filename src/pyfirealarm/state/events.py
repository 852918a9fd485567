"""Normalized ingestion events.

The transport hands the dashboard ``(event name, data)`` pairs.  They are
converted into these events before dispatch; only the reconciler is
allowed to merge them into state.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pyfirealarm._constants import (
    EVENT_ERROR,
    EVENT_HEARTBEAT,
    EVENT_HUB_READINGS,
    EVENT_OPEN,
    EVENT_UNIT_READINGS,
)
from pyfirealarm.ingestion.normalize import decode_payload


class EventKind(StrEnum):
    UNIT_READINGS = EVENT_UNIT_READINGS
    HUB_READINGS = EVENT_HUB_READINGS
    HEARTBEAT = EVENT_HEARTBEAT
    CONNECTION_OPEN = EVENT_OPEN
    CONNECTION_ERROR = EVENT_ERROR


# Kinds whose data must decode to a JSON object.
_PAYLOAD_KINDS = frozenset({EventKind.UNIT_READINGS, EventKind.HUB_READINGS})


class IngestionEvent(BaseModel):
    """A decoded event ready for reconciliation."""

    model_config = ConfigDict(frozen=True)

    kind: EventKind
    observed_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    payload: dict[str, Any] = Field(default_factory=dict, description="Decoded JSON object")
    raw: Any = Field(default=None, description="Data as received from the transport")

    @field_validator("observed_at")
    @classmethod
    def _ensure_tz_aware(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    @classmethod
    def from_wire(cls, name: str, data: Any = None, *, observed_at: datetime | None = None) -> IngestionEvent | None:
        """Build an event from a transport frame.

        Returns ``None`` for event names the dashboard does not consume.

        Raises
        ------
        MalformedPayloadError
            When a reading event carries data that is not a JSON object.
        """
        try:
            kind = EventKind(name)
        except ValueError:
            return None

        payload: dict[str, Any] = {}
        if kind in _PAYLOAD_KINDS:
            payload = decode_payload(name, data)

        extra: dict[str, Any] = {}
        if observed_at is not None:
            extra["observed_at"] = observed_at
        return cls(kind=kind, payload=payload, raw=data, **extra)
