"""Render projector.

Maps state to view-models.  Everything here is a pure function of its
arguments: no store access, no mutation, no clock reads.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from datetime import datetime

from pyfirealarm._constants import (
    LABEL_GAS_CLEAR,
    LABEL_GAS_DETECTED,
    LABEL_GAS_RISING,
    LABEL_STATUS_ALERT,
    LABEL_STATUS_NORMAL,
    LOW_BATTERY_VOLTAGE,
    RAPID_RISE_THRESHOLD,
)
from pyfirealarm.models.device import Device, HubStatus
from pyfirealarm.models.view import DashboardView, DeviceView, GasState, HeaderView
from pyfirealarm.state.policy import classify


def seconds_since(then: datetime, now: datetime) -> int:
    """Whole seconds from *then* to *now*, rounded half up, never negative."""
    elapsed = (now - then).total_seconds()
    return max(0, math.floor(elapsed + 0.5))


def project(
    device: Device,
    now: datetime,
    *,
    rapid_rise_threshold: float = RAPID_RISE_THRESHOLD,
    low_battery_voltage: float = LOW_BATTERY_VOLTAGE,
) -> DeviceView:
    alert = classify(
        device,
        rapid_rise_threshold=rapid_rise_threshold,
        low_battery_voltage=low_battery_voltage,
    )
    if alert.rapid_rise:
        gas_label = LABEL_GAS_RISING
    elif alert.gas_state is GasState.DETECTED:
        gas_label = LABEL_GAS_DETECTED
    else:
        gas_label = LABEL_GAS_CLEAR

    seconds = seconds_since(device.last_updated_at, now)
    return DeviceView(
        id=device.id,
        name=device.name,
        zone=device.zone,
        gas_state=alert.gas_state,
        gas_label=gas_label,
        rapid_rise=alert.rapid_rise,
        card_alert=alert.card_alert,
        status_label=LABEL_STATUS_ALERT if alert.card_alert else LABEL_STATUS_NORMAL,
        gas_ppm=f"{device.gas_ppm:.2f}",
        temperature=f"{device.temperature_celsius:.1f}",
        humidity=f"{device.humidity_percent:.1f}",
        battery_voltage=f"{device.battery_voltage:.2f}",
        low_battery=alert.low_battery,
        secondary_gas_detected=device.secondary_gas_detected,
        seconds_since_update=seconds,
        last_update_text=f"{seconds} seconds ago",
    )


def project_header(
    *,
    device_count: int,
    hub: HubStatus | None,
    last_alive: datetime,
    time_format: str = "%H:%M:%S",
) -> HeaderView:
    """Header indicators.

    Devices are never expired, so active and total counts are equal.
    """
    hub_text: str | None = None
    if hub is not None:
        hub_text = f"{hub.battery_percent:.1f}% ({hub.battery_voltage:.1f}V)"
    return HeaderView(
        active_devices=device_count,
        total_devices=device_count,
        device_count_text=f"{device_count}/{device_count}",
        hub_battery_voltage=hub.battery_voltage if hub is not None else None,
        hub_battery_percent=hub.battery_percent if hub is not None else None,
        hub_battery_text=hub_text,
        last_alive=last_alive,
        last_alive_text=last_alive.astimezone().strftime(time_format),
    )


def project_dashboard(
    devices: Iterable[Device],
    header: HeaderView,
    now: datetime,
    *,
    rapid_rise_threshold: float = RAPID_RISE_THRESHOLD,
    low_battery_voltage: float = LOW_BATTERY_VOLTAGE,
) -> DashboardView:
    views = {
        device.id: project(
            device,
            now,
            rapid_rise_threshold=rapid_rise_threshold,
            low_battery_voltage=low_battery_voltage,
        )
        for device in devices
    }
    return DashboardView(devices=views, header=header)
