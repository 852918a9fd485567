"""Dashboard configuration for pyfirealarm."""

from __future__ import annotations

import dataclasses
import os
from collections.abc import Callable, Mapping
from typing import Any

from pyfirealarm._constants import (
    HUB_CELL_MAX_VOLTAGE,
    HUB_CELL_MIN_VOLTAGE,
    LOW_BATTERY_VOLTAGE,
    RAPID_RISE_THRESHOLD,
    TICK_INTERVAL_SECONDS,
)
from pyfirealarm.exceptions import FireAlarmConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


@dataclasses.dataclass(frozen=True)
class DashboardConfig:
    """Dashboard configuration.

    Parameters
    ----------
    events_url : str
        Server-Sent-Events endpoint delivering ``unit_readings``,
        ``hub_readings`` and ``heartbeat`` events.
    sse_enabled : bool
        Connect the SSE transport when the dashboard starts.  Disable to
        feed events manually through :meth:`FireAlarmDashboard.submit`.
    tick_interval : float
        Seconds between staleness ticks.
    rapid_rise_threshold : float
        Gas delta between two consecutive readings above which the
        rapid-rise alert fires.  The comparison is strict.
    low_battery_voltage : float
        Sensor unit battery voltage below which the low-battery flag is set.
    hub_cell_min_voltage : float
        Hub cell voltage mapped to 0 %.
    hub_cell_max_voltage : float
        Hub cell voltage mapped to 100 %.
    reconnect_delay : float
        Seconds the SSE transport waits before reconnecting.
    header_time_format : str
        ``strftime`` format of the header "last alive" text.
    """

    events_url: str = "http://localhost:8000/events"
    sse_enabled: bool = True
    tick_interval: float = TICK_INTERVAL_SECONDS
    rapid_rise_threshold: float = RAPID_RISE_THRESHOLD
    low_battery_voltage: float = LOW_BATTERY_VOLTAGE
    hub_cell_min_voltage: float = HUB_CELL_MIN_VOLTAGE
    hub_cell_max_voltage: float = HUB_CELL_MAX_VOLTAGE
    reconnect_delay: float = 3.0
    header_time_format: str = "%H:%M:%S"

    def __post_init__(self) -> None:
        if self.tick_interval <= 0:
            raise FireAlarmConfigError(f"tick_interval must be positive, got {self.tick_interval}")
        if self.hub_cell_max_voltage <= self.hub_cell_min_voltage:
            raise FireAlarmConfigError(
                "hub_cell_max_voltage must be greater than hub_cell_min_voltage "
                f"({self.hub_cell_max_voltage} <= {self.hub_cell_min_voltage})"
            )
        if self.reconnect_delay < 0:
            raise FireAlarmConfigError(f"reconnect_delay must not be negative, got {self.reconnect_delay}")

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None, **overrides: Any) -> DashboardConfig:
        """Create configuration from ``FIREALARM_*`` environment variables.

        Explicit keyword arguments override environment values.

        Raises
        ------
        FireAlarmConfigError
            When a numeric variable cannot be parsed.
        """
        source = os.environ if env is None else env

        _ENV_CONFIG_MAP: dict[str, tuple[str, Callable[[str], Any]]] = {
            "FIREALARM_EVENTS_URL": ("events_url", str),
            "FIREALARM_TICK_INTERVAL": ("tick_interval", float),
            "FIREALARM_RAPID_RISE_THRESHOLD": ("rapid_rise_threshold", float),
            "FIREALARM_LOW_BATTERY_VOLTAGE": ("low_battery_voltage", float),
            "FIREALARM_HUB_CELL_MIN_VOLTAGE": ("hub_cell_min_voltage", float),
            "FIREALARM_HUB_CELL_MAX_VOLTAGE": ("hub_cell_max_voltage", float),
            "FIREALARM_RECONNECT_DELAY": ("reconnect_delay", float),
            "FIREALARM_HEADER_TIME_FORMAT": ("header_time_format", str),
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, (field_name, parse) in _ENV_CONFIG_MAP.items():
            val = source.get(env_key)
            if val is None or field_name in overrides:
                continue
            try:
                config_kwargs[field_name] = parse(val)
            except ValueError as exc:
                raise FireAlarmConfigError(f"Invalid value for {env_key}: {val!r}") from exc

        if "sse_enabled" not in overrides:
            config_kwargs["sse_enabled"] = _env_bool(source.get("FIREALARM_SSE_ENABLED"), True)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
