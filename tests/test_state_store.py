from __future__ import annotations

from datetime import timedelta

from pyfirealarm.models.device import HubStatus
from pyfirealarm.state.store import DeviceStore


def test_first_upsert_creates_with_defaults(clock) -> None:
    store = DeviceStore(clock=clock)

    device = store.upsert("7", {"gas_ppm": 12.5})

    assert device.id == "7"
    assert device.name == "Sensor Unit 7"
    assert device.zone == "Zone 7"
    assert device.gas_ppm == 12.5
    # No history yet: previous starts equal to the first reading.
    assert device.previous_gas_ppm == 12.5
    assert device.temperature_celsius == 0.0
    assert device.humidity_percent == 0.0
    assert device.battery_voltage == 0.0
    assert device.gas_detected is False
    assert device.last_updated_at == clock.now


def test_partial_update_keeps_omitted_fields(clock) -> None:
    store = DeviceStore(clock=clock)
    store.upsert("A", {"gas_ppm": 5.0, "temperature_celsius": 21.5, "name": "Kitchen"})

    device = store.upsert("A", {"gas_ppm": 6.0})

    assert device.gas_ppm == 6.0
    assert device.temperature_celsius == 21.5
    assert device.name == "Kitchen"


def test_get_returns_copies(clock) -> None:
    store = DeviceStore(clock=clock)
    store.upsert("A", {"gas_ppm": 1.0})

    copy = store.get("A")
    assert copy is not None
    copy.gas_ppm = 99.0

    stored = store.get("A")
    assert stored is not None
    assert stored.gas_ppm == 1.0
    assert store.get("missing") is None


def test_upsert_with_status_reports_creation_once(clock) -> None:
    store = DeviceStore(clock=clock)

    _, created_first = store.upsert_with_status("A", {})
    _, created_again = store.upsert_with_status("A", {})

    assert created_first is True
    assert created_again is False


def test_creation_order_and_count(clock) -> None:
    store = DeviceStore(clock=clock)
    for device_id in ["B", "A", "B", "C"]:
        store.upsert(device_id, {})

    assert store.ids() == ["B", "A", "C"]
    assert [d.id for d in store.devices()] == ["B", "A", "C"]
    assert len(store) == 3
    assert "A" in store
    assert "Z" not in store


def test_last_updated_at_never_moves_backwards(clock) -> None:
    store = DeviceStore(clock=clock)
    store.upsert("A", {"last_updated_at": clock.now})

    device = store.upsert("A", {"last_updated_at": clock.now - timedelta(seconds=30), "gas_ppm": 2.0})

    assert device.last_updated_at == clock.now
    assert device.gas_ppm == 2.0


def test_id_in_patch_is_ignored(clock) -> None:
    store = DeviceStore(clock=clock)
    store.upsert("A", {})

    device = store.upsert("A", {"id": "B"})

    assert device.id == "A"
    assert store.ids() == ["A"]


def test_hub_absent_until_set(clock) -> None:
    store = DeviceStore(clock=clock)
    assert store.hub is None

    status = HubStatus(battery_voltage=3.9, battery_percent=75.0, updated_at=clock.now)
    store.set_hub(status)

    assert store.hub == status
