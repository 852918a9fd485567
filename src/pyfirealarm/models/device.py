"""Reconciled state models: one :class:`Device` per sensor id, one hub."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

__all__ = [
    "Device",
    "HubStatus",
]


class Device(BaseModel):
    """Current snapshot of one sensor unit.

    Instances handed out by the store are copies; mutating them never
    affects stored state.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    id: str
    name: str
    zone: str
    gas_ppm: float = 0.0
    previous_gas_ppm: float = 0.0
    """``gas_ppm`` as it was before the most recent merge."""
    gas_detected: bool = False
    secondary_gas_detected: bool = False
    temperature_celsius: float = 0.0
    humidity_percent: float = 0.0
    battery_voltage: float = 0.0
    last_updated_at: datetime = Field(...)


class HubStatus(BaseModel):
    """Hub battery state (singleton)."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    battery_voltage: float
    battery_percent: float
    """Linear cell charge estimate, clamped to [0, 100]."""
    updated_at: datetime
