"""Alert policy.

Pure functions from device state to alert classifications.  Nothing here
parses payloads or touches the store.
"""

from __future__ import annotations

from pyfirealarm._constants import (
    HUB_CELL_MAX_VOLTAGE,
    HUB_CELL_MIN_VOLTAGE,
    LOW_BATTERY_VOLTAGE,
    RAPID_RISE_THRESHOLD,
)
from pyfirealarm.models.device import Device
from pyfirealarm.models.view import AlertView, GasState


def gas_state(device: Device) -> GasState:
    return GasState.DETECTED if device.gas_detected else GasState.CLEAR


def is_rapid_rise(device: Device, *, threshold: float = RAPID_RISE_THRESHOLD) -> bool:
    """True when the last single-step gas delta exceeds *threshold*.

    This is a discrete delta between consecutive readings, not a
    time-normalized rate.  Falls count as well as rises.
    """
    return abs(device.gas_ppm - device.previous_gas_ppm) > threshold


def is_low_battery(device: Device, *, threshold: float = LOW_BATTERY_VOLTAGE) -> bool:
    return device.battery_voltage < threshold


def classify(
    device: Device,
    *,
    rapid_rise_threshold: float = RAPID_RISE_THRESHOLD,
    low_battery_voltage: float = LOW_BATTERY_VOLTAGE,
) -> AlertView:
    return AlertView(
        gas_state=gas_state(device),
        rapid_rise=is_rapid_rise(device, threshold=rapid_rise_threshold),
        card_alert=device.gas_detected,
        low_battery=is_low_battery(device, threshold=low_battery_voltage),
    )


def hub_battery_percent(
    voltage: float,
    *,
    min_voltage: float = HUB_CELL_MIN_VOLTAGE,
    max_voltage: float = HUB_CELL_MAX_VOLTAGE,
) -> float:
    """Linear cell charge estimate clamped to [0, 100].

    Unrelated to the sensor unit battery threshold, which is in pack volts.
    """
    percent = (voltage - min_voltage) / (max_voltage - min_voltage) * 100.0
    return min(100.0, max(0.0, percent))
