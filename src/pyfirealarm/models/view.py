"""Render view-models.

These are what a presentation layer consumes: plain values and flags,
already formatted, with no markup.
"""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

__all__ = [
    "AlertView",
    "DashboardView",
    "DeviceView",
    "GasState",
    "HeaderView",
    "RenderReason",
    "RenderUpdate",
]


class GasState(StrEnum):
    CLEAR = "CLEAR"
    DETECTED = "DETECTED"


class RenderReason(StrEnum):
    UNIT_READING = "unit_reading"
    HUB_READING = "hub_reading"
    HEARTBEAT = "heartbeat"
    TICK = "tick"
    RESET = "reset"


class AlertView(BaseModel):
    """Alert classification of a single device."""

    model_config = ConfigDict(frozen=True)

    gas_state: GasState
    rapid_rise: bool
    card_alert: bool
    low_battery: bool


class DeviceView(BaseModel):
    """Everything a device card displays."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    zone: str
    gas_state: GasState
    gas_label: str
    """Display label; the rapid-rise label wins over detected/clear."""
    rapid_rise: bool
    card_alert: bool
    status_label: str
    gas_ppm: str
    temperature: str
    humidity: str
    battery_voltage: str
    low_battery: bool
    secondary_gas_detected: bool
    seconds_since_update: int
    last_update_text: str


class HeaderView(BaseModel):
    """Dashboard-wide indicators."""

    model_config = ConfigDict(frozen=True)

    active_devices: int
    total_devices: int
    device_count_text: str
    hub_battery_voltage: float | None = None
    hub_battery_percent: float | None = None
    hub_battery_text: str | None = None
    last_alive: datetime
    last_alive_text: str


class DashboardView(BaseModel):
    """Full pull-style snapshot: every known device plus the header."""

    model_config = ConfigDict(frozen=True)

    devices: dict[str, DeviceView] = Field(default_factory=dict)
    header: HeaderView


class RenderUpdate(BaseModel):
    """One render pass pushed to registered sinks.

    ``created`` lists ids seen for the first time in this pass; the
    presentation layer creates their display surface before applying
    ``devices``.
    """

    model_config = ConfigDict(frozen=True)

    reason: RenderReason
    devices: tuple[DeviceView, ...] = ()
    created: tuple[str, ...] = ()
    header: HeaderView
