"""Event payload models for ``unit_readings`` and ``hub_readings``."""

from __future__ import annotations

from typing import Annotated

from pydantic import BeforeValidator, Field, model_validator

from pyfirealarm._constants import UNKNOWN_DEVICE_ID, default_device_name, default_zone
from pyfirealarm.ingestion.normalize import coerce_device_id, coerce_label
from pyfirealarm.models._base import FireAlarmBaseModel, WireFlag

__all__ = [
    "HubReading",
    "UnitReading",
]


class UnitReading(FireAlarmBaseModel):
    """One sensor unit telemetry frame.

    Every field except ``id`` is optional on the wire.  Numeric fields
    default to ``0``; ``zone`` and ``name`` are synthesized from the id
    when absent or empty.
    """

    device_id: Annotated[str, BeforeValidator(coerce_device_id)] = Field(UNKNOWN_DEVICE_ID, alias="id")
    gas_ppm: float = Field(0.0, alias="mq")
    """Gas concentration (ppm)."""
    secondary_gas_detected: WireFlag = Field(False, alias="mq_det")
    """Secondary (digital) detector output."""
    gas_detected: WireFlag = Field(False, alias="gasDetected")
    temperature_celsius: float = Field(0.0, alias="temperatureC")
    humidity_percent: float = Field(0.0, alias="hum")
    battery_voltage: float = Field(0.0, alias="batteryV")
    """Unit battery pack voltage."""
    zone: Annotated[str | None, BeforeValidator(coerce_label)] = None
    name: Annotated[str | None, BeforeValidator(coerce_label)] = None

    @model_validator(mode="after")
    def _default_labels(self) -> UnitReading:
        if not self.zone:
            object.__setattr__(self, "zone", default_zone(self.device_id))
        if not self.name:
            object.__setattr__(self, "name", default_device_name(self.device_id))
        return self


class HubReading(FireAlarmBaseModel):
    """Hub battery frame."""

    hub_battery_voltage: float = Field(...)
    """Hub cell voltage (V)."""
