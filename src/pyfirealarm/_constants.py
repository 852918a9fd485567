"""Fixed thresholds and display labels shared across pyfirealarm."""

from __future__ import annotations

# Single-step gas delta (same units as gas_ppm) above which a rise alert fires.
RAPID_RISE_THRESHOLD: float = 3.0

# Sensor unit battery, native pack voltage. Strictly below -> low battery.
LOW_BATTERY_VOLTAGE: float = 11.0

# Hub battery is a single Li-ion cell; percentage is a linear map of this range.
HUB_CELL_MIN_VOLTAGE: float = 3.0
HUB_CELL_MAX_VOLTAGE: float = 4.2

TICK_INTERVAL_SECONDS: float = 1.0

UNKNOWN_DEVICE_ID = "unknown"

# Wire event names.
EVENT_UNIT_READINGS = "unit_readings"
EVENT_HUB_READINGS = "hub_readings"
EVENT_HEARTBEAT = "heartbeat"
EVENT_OPEN = "open"
EVENT_ERROR = "error"

LABEL_GAS_DETECTED = "GAS DETECTED!"
LABEL_GAS_CLEAR = "CLEAR"
LABEL_GAS_RISING = "SMOKE INCREASING!"
LABEL_STATUS_ALERT = "ALERT"
LABEL_STATUS_NORMAL = "NORMAL"


def default_device_name(device_id: str) -> str:
    return f"Sensor Unit {device_id}"


def default_zone(device_id: str) -> str:
    return f"Zone {device_id}"
