from __future__ import annotations

import pytest

from pyfirealarm.exceptions import MalformedPayloadError
from pyfirealarm.ingestion.reconcile import TelemetryReconciler
from pyfirealarm.state.policy import classify
from pyfirealarm.state.store import DeviceStore


def _reconciler(clock) -> TelemetryReconciler:
    return TelemetryReconciler(DeviceStore(clock=clock), clock=clock)


def test_unit_reading_maps_wire_fields(clock) -> None:
    reconciler = _reconciler(clock)

    device = reconciler.apply_unit_reading(
        {
            "id": "kitchen-1",
            "mq": 42.125,
            "mq_det": 1,
            "gasDetected": True,
            "temperatureC": 23.4,
            "hum": 55,
            "batteryV": 12.1,
            "zone": "Kitchen",
            "name": "Hob sensor",
        }
    )

    assert device.id == "kitchen-1"
    assert device.gas_ppm == 42.125
    assert device.secondary_gas_detected is True
    assert device.gas_detected is True
    assert device.temperature_celsius == 23.4
    assert device.humidity_percent == 55.0
    assert device.battery_voltage == 12.1
    assert device.zone == "Kitchen"
    assert device.name == "Hob sensor"
    assert device.last_updated_at == clock.now


def test_missing_fields_use_defaults(clock) -> None:
    reconciler = _reconciler(clock)

    device = reconciler.apply_unit_reading({})

    assert device.id == "unknown"
    assert device.name == "Sensor Unit unknown"
    assert device.zone == "Zone unknown"
    assert device.gas_ppm == 0.0
    assert device.gas_detected is False
    assert device.battery_voltage == 0.0


def test_numeric_id_is_stringified(clock) -> None:
    reconciler = _reconciler(clock)

    first = reconciler.apply_unit_reading({"id": 3})
    second = reconciler.apply_unit_reading({"id": 3.0})

    assert first.id == second.id == "3"
    assert len(reconciler.store) == 1


def test_first_reading_never_rapid_rise(clock) -> None:
    reconciler = _reconciler(clock)

    device = reconciler.apply_unit_reading({"id": "A", "mq": 500})

    assert device.previous_gas_ppm == 500.0
    assert classify(device).rapid_rise is False


def test_rise_of_five_alerts(clock) -> None:
    reconciler = _reconciler(clock)
    reconciler.apply_unit_reading({"id": "A", "mq": 0})

    device = reconciler.apply_unit_reading({"id": "A", "mq": 5})

    assert device.previous_gas_ppm == 0.0
    assert classify(device).rapid_rise is True


def test_rise_of_exactly_three_does_not_alert(clock) -> None:
    reconciler = _reconciler(clock)
    reconciler.apply_unit_reading({"id": "A", "mq": 0})

    device = reconciler.apply_unit_reading({"id": "A", "mq": 3})

    assert classify(device).rapid_rise is False


def test_repeated_payload_clears_rise(clock) -> None:
    reconciler = _reconciler(clock)
    reconciler.apply_unit_reading({"id": "A", "mq": 0})
    payload = {"id": "A", "mq": 9}

    assert classify(reconciler.apply_unit_reading(payload)).rapid_rise is True
    repeated = reconciler.apply_unit_reading(payload)

    assert repeated.previous_gas_ppm == repeated.gas_ppm == 9.0
    assert classify(repeated).rapid_rise is False


def test_previous_tracks_exactly_one_step(clock) -> None:
    reconciler = _reconciler(clock)
    for value in [1, 2, 10]:
        device = reconciler.apply_unit_reading({"id": "A", "mq": value})

    assert device.previous_gas_ppm == 2.0
    assert device.gas_ppm == 10.0


def test_last_updated_at_moves_with_each_merge(clock) -> None:
    reconciler = _reconciler(clock)
    reconciler.apply_unit_reading({"id": "A"})
    later = clock.advance(4)

    device = reconciler.apply_unit_reading({"id": "A"})

    assert device.last_updated_at == later


def test_labels_resynthesized_when_absent(clock) -> None:
    reconciler = _reconciler(clock)
    reconciler.apply_unit_reading({"id": "A", "name": "Garage", "zone": "West"})

    device = reconciler.apply_unit_reading({"id": "A", "name": ""})

    assert device.name == "Sensor Unit A"
    assert device.zone == "Zone A"


def test_numeric_labels_are_stringified(clock) -> None:
    reconciler = _reconciler(clock)

    device = reconciler.apply_unit_reading({"id": "A", "mq": 1, "zone": 3, "name": 7})

    assert device.zone == "3"
    assert device.name == "7"


@pytest.mark.parametrize(
    "payload",
    [
        {"id": "A", "mq": "lots"},
        {"id": "A", "batteryV": float("inf")},
        {"id": "A", "temperatureC": [1, 2]},
    ],
)
def test_invalid_unit_payload_is_malformed_and_untouched(clock, payload) -> None:
    reconciler = _reconciler(clock)

    with pytest.raises(MalformedPayloadError) as err:
        reconciler.apply_unit_reading(payload)

    assert err.value.event == "unit_readings"
    assert len(reconciler.store) == 0


def test_numeric_strings_accepted(clock) -> None:
    reconciler = _reconciler(clock)

    device = reconciler.apply_unit_reading({"id": "A", "mq": "4.5", "hum": ""})

    assert device.gas_ppm == 4.5
    assert device.humidity_percent == 0.0


@pytest.mark.parametrize(
    ("voltage", "percent"),
    [(3.6, 50.0), (5.0, 100.0), (2.0, 0.0), (3.9, 75.0)],
)
def test_hub_reading_percent(clock, voltage: float, percent: float) -> None:
    reconciler = _reconciler(clock)

    status = reconciler.apply_hub_reading({"hub_battery_voltage": voltage})

    assert status.battery_voltage == voltage
    assert status.battery_percent == pytest.approx(percent)
    assert reconciler.store.hub == status
    assert len(reconciler.store) == 0


@pytest.mark.parametrize("payload", [{}, {"hub_battery_voltage": "flat"}, {"hub_battery_voltage": None}])
def test_hub_reading_requires_voltage(clock, payload) -> None:
    reconciler = _reconciler(clock)

    with pytest.raises(MalformedPayloadError):
        reconciler.apply_hub_reading(payload)

    assert reconciler.store.hub is None


def test_heartbeat_records_time_without_touching_devices(clock) -> None:
    reconciler = _reconciler(clock)
    device = reconciler.apply_unit_reading({"id": "A"})
    beat = clock.advance(10)

    assert reconciler.apply_heartbeat() == beat
    assert reconciler.last_alive == beat
    assert reconciler.store.get("A") == device


def test_reset_alerts_clears_detection_only(clock) -> None:
    reconciler = _reconciler(clock)
    reconciler.apply_unit_reading({"id": "A", "mq": 0, "gasDetected": True})
    reconciler.apply_unit_reading({"id": "A", "mq": 8, "gasDetected": True})
    reconciler.apply_unit_reading({"id": "B", "mq": 2, "gasDetected": True})
    reset_at = clock.advance(30)

    reset = reconciler.reset_alerts()

    assert [d.id for d in reset] == ["A", "B"]
    a = reconciler.store.get("A")
    b = reconciler.store.get("B")
    assert a is not None and b is not None
    assert a.gas_detected is False and b.gas_detected is False
    assert (a.gas_ppm, a.previous_gas_ppm) == (8.0, 0.0)
    assert (b.gas_ppm, b.previous_gas_ppm) == (2.0, 2.0)
    assert a.last_updated_at == reset_at
    # The rise is still derivable after a reset.
    assert classify(a).rapid_rise is True
