"""Pydantic models for pyfirealarm."""

from pyfirealarm.models.device import Device, HubStatus
from pyfirealarm.models.readings import HubReading, UnitReading
from pyfirealarm.models.view import (
    AlertView,
    DashboardView,
    DeviceView,
    GasState,
    HeaderView,
    RenderReason,
    RenderUpdate,
)

__all__ = [
    "AlertView",
    "DashboardView",
    "Device",
    "DeviceView",
    "GasState",
    "HeaderView",
    "HubReading",
    "HubStatus",
    "RenderReason",
    "RenderUpdate",
    "UnitReading",
]
