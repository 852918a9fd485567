"""Deterministic in-memory device store.

This is the only component that holds device records.  Callers reach
them through :meth:`DeviceStore.get` / :meth:`DeviceStore.upsert` and
always receive copies.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from datetime import UTC, datetime
from typing import Any

from pyfirealarm._constants import default_device_name, default_zone
from pyfirealarm.models.device import Device, HubStatus


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _merge_patch(target: dict[str, Any], patch: Mapping[str, Any]) -> None:
    """Apply a partial update.

    Keys present in the patch overwrite; omitted keys keep their value.
    ``last_updated_at`` never moves backwards.
    """
    for key, value in patch.items():
        if key == "id":
            continue
        if key == "last_updated_at" and value < target[key]:
            continue
        target[key] = value


class DeviceStore:
    """Keyed store of :class:`Device` records plus the hub singleton.

    Records are created on first reference and never removed.  Iteration
    follows creation order so output is deterministic for a given event
    sequence.
    """

    def __init__(self, *, clock: Callable[[], datetime] = _utcnow) -> None:
        self._clock = clock
        self._devices: dict[str, Device] = {}
        self._hub: HubStatus | None = None

    def __len__(self) -> int:
        return len(self._devices)

    def __contains__(self, device_id: object) -> bool:
        return device_id in self._devices

    def _create(self, device_id: str, fields: Mapping[str, Any]) -> Device:
        base: dict[str, Any] = {
            "id": device_id,
            "name": default_device_name(device_id),
            "zone": default_zone(device_id),
            "last_updated_at": self._clock(),
        }
        base.update({k: v for k, v in fields.items() if k != "id"})
        # A new record has no history: no delta on first sighting.
        base.setdefault("previous_gas_ppm", base.get("gas_ppm", 0.0))
        return Device.model_validate(base)

    def get(self, device_id: str) -> Device | None:
        device = self._devices.get(device_id)
        return device.model_copy(deep=True) if device is not None else None

    def upsert_with_status(self, device_id: str, fields: Mapping[str, Any]) -> tuple[Device, bool]:
        """Create or merge a record; returns ``(copy, created)``."""
        existing = self._devices.get(device_id)
        if existing is None:
            device = self._create(device_id, fields)
            self._devices[device_id] = device
            return device.model_copy(deep=True), True

        merged = existing.model_dump()
        _merge_patch(merged, fields)
        device = Device.model_validate(merged)
        self._devices[device_id] = device
        return device.model_copy(deep=True), False

    def upsert(self, device_id: str, fields: Mapping[str, Any]) -> Device:
        """Create or merge a record and return a copy of the result."""
        device, _created = self.upsert_with_status(device_id, fields)
        return device

    def ids(self) -> list[str]:
        return list(self._devices)

    def devices(self) -> Iterator[Device]:
        """Copies of every record in creation order."""
        for device in list(self._devices.values()):
            yield device.model_copy(deep=True)

    @property
    def hub(self) -> HubStatus | None:
        return self._hub

    def set_hub(self, status: HubStatus) -> None:
        self._hub = status
