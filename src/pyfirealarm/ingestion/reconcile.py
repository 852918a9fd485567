"""Telemetry reconciler.

Turns validated readings into store merges:

- parse the payload into a typed pydantic model
- capture the current ``gas_ppm`` as ``previous_gas_ppm``
- merge the reading and stamp ``last_updated_at``

Hub readings and heartbeats never touch device records.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from typing import Any

from pydantic import ValidationError

from pyfirealarm._constants import (
    EVENT_HUB_READINGS,
    EVENT_UNIT_READINGS,
    HUB_CELL_MAX_VOLTAGE,
    HUB_CELL_MIN_VOLTAGE,
)
from pyfirealarm.exceptions import MalformedPayloadError
from pyfirealarm.models.device import Device, HubStatus
from pyfirealarm.models.readings import HubReading, UnitReading
from pyfirealarm.state.policy import hub_battery_percent
from pyfirealarm.state.store import DeviceStore

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class TelemetryReconciler:
    """Applies readings to a :class:`DeviceStore`.

    Every method runs to completion without yielding; callers serialize
    access (see :class:`pyfirealarm.dashboard.FireAlarmDashboard`).
    """

    def __init__(
        self,
        store: DeviceStore,
        *,
        clock: Callable[[], datetime] = _utcnow,
        hub_cell_min_voltage: float = HUB_CELL_MIN_VOLTAGE,
        hub_cell_max_voltage: float = HUB_CELL_MAX_VOLTAGE,
    ) -> None:
        self._store = store
        self._clock = clock
        self._hub_cell_min_voltage = hub_cell_min_voltage
        self._hub_cell_max_voltage = hub_cell_max_voltage
        self._last_alive = clock()

    @property
    def store(self) -> DeviceStore:
        return self._store

    @property
    def last_alive(self) -> datetime:
        """Latest heartbeat time (construction time until the first one)."""
        return self._last_alive

    def apply_unit_reading(self, payload: Mapping[str, Any] | UnitReading) -> Device:
        """Merge one unit reading and return the resulting device snapshot.

        Raises
        ------
        MalformedPayloadError
            When the payload fails validation.  No state is touched.
        """
        reading = self._parse_unit(payload)
        now = self._clock()

        current = self._store.get(reading.device_id)
        previous_gas_ppm = current.gas_ppm if current is not None else reading.gas_ppm

        fields: dict[str, Any] = {
            "name": reading.name,
            "zone": reading.zone,
            "gas_ppm": reading.gas_ppm,
            "previous_gas_ppm": previous_gas_ppm,
            "gas_detected": reading.gas_detected,
            "secondary_gas_detected": reading.secondary_gas_detected,
            "temperature_celsius": reading.temperature_celsius,
            "humidity_percent": reading.humidity_percent,
            "battery_voltage": reading.battery_voltage,
            "last_updated_at": now,
        }
        device, created = self._store.upsert_with_status(reading.device_id, fields)
        if created:
            _logger.info("New sensor unit id=%s name=%s zone=%s", device.id, device.name, device.zone)
        _logger.debug(
            "Unit reading merged id=%s gas_ppm=%s previous=%s detected=%s",
            device.id,
            device.gas_ppm,
            device.previous_gas_ppm,
            device.gas_detected,
        )
        return device

    def apply_hub_reading(self, payload: Mapping[str, Any] | HubReading) -> HubStatus:
        """Replace the hub singleton from a hub battery reading.

        Raises
        ------
        MalformedPayloadError
            When the payload has no usable ``hub_battery_voltage``.
        """
        if isinstance(payload, HubReading):
            reading = payload
        else:
            try:
                reading = HubReading.model_validate(dict(payload))
            except ValidationError as exc:
                raise MalformedPayloadError(
                    f"Invalid {EVENT_HUB_READINGS} payload: {exc.error_count()} error(s)",
                    event=EVENT_HUB_READINGS,
                    data=payload,
                ) from exc

        voltage = reading.hub_battery_voltage
        status = HubStatus(
            battery_voltage=voltage,
            battery_percent=hub_battery_percent(
                voltage,
                min_voltage=self._hub_cell_min_voltage,
                max_voltage=self._hub_cell_max_voltage,
            ),
            updated_at=self._clock(),
        )
        self._store.set_hub(status)
        _logger.debug("Hub reading voltage=%s percent=%.1f", voltage, status.battery_percent)
        return status

    def apply_heartbeat(self) -> datetime:
        self._last_alive = self._clock()
        return self._last_alive

    def reset_alerts(self) -> list[Device]:
        """Clear ``gas_detected`` on every device and restamp it.

        ``previous_gas_ppm`` is left alone so the rise check keeps working
        on the next reading.
        """
        now = self._clock()
        reset = [
            self._store.upsert(device_id, {"gas_detected": False, "last_updated_at": now})
            for device_id in self._store.ids()
        ]
        _logger.info("Alerts reset on %d device(s)", len(reset))
        return reset

    @staticmethod
    def _parse_unit(payload: Mapping[str, Any] | UnitReading) -> UnitReading:
        if isinstance(payload, UnitReading):
            return payload
        try:
            return UnitReading.model_validate(dict(payload))
        except ValidationError as exc:
            raise MalformedPayloadError(
                f"Invalid {EVENT_UNIT_READINGS} payload: {exc.error_count()} error(s)",
                event=EVENT_UNIT_READINGS,
                data=payload,
            ) from exc
