from __future__ import annotations

from datetime import UTC, datetime

import pytest

from pyfirealarm.models.device import Device
from pyfirealarm.models.view import GasState
from pyfirealarm.state.policy import classify, hub_battery_percent, is_low_battery, is_rapid_rise


def _device(**fields) -> Device:
    base = {
        "id": "A",
        "name": "Sensor Unit A",
        "zone": "Zone A",
        "last_updated_at": datetime(2026, 1, 1, tzinfo=UTC),
    }
    base.update(fields)
    return Device.model_validate(base)


@pytest.mark.parametrize(
    ("previous", "current", "expected"),
    [
        (0.0, 5.0, True),
        (0.0, 3.0, False),
        (10.0, 6.5, True),
        (10.0, 10.0, False),
    ],
)
def test_rapid_rise_uses_strict_absolute_delta(previous: float, current: float, expected: bool) -> None:
    device = _device(gas_ppm=current, previous_gas_ppm=previous)

    assert is_rapid_rise(device) is expected


def test_low_battery_threshold_is_strict() -> None:
    assert is_low_battery(_device(battery_voltage=10.9)) is True
    assert is_low_battery(_device(battery_voltage=11.0)) is False


def test_classify_detected_with_rapid_rise() -> None:
    alert = classify(_device(gas_detected=True, gas_ppm=20.0, previous_gas_ppm=1.0, battery_voltage=12.0))

    assert alert.gas_state is GasState.DETECTED
    assert alert.rapid_rise is True
    assert alert.card_alert is True
    assert alert.low_battery is False


def test_classify_card_alert_independent_of_rise() -> None:
    alert = classify(_device(gas_detected=False, gas_ppm=20.0, previous_gas_ppm=1.0))

    assert alert.gas_state is GasState.CLEAR
    assert alert.rapid_rise is True
    assert alert.card_alert is False


def test_classify_custom_thresholds() -> None:
    device = _device(gas_ppm=2.0, previous_gas_ppm=0.0, battery_voltage=11.5)

    alert = classify(device, rapid_rise_threshold=1.0, low_battery_voltage=12.0)

    assert alert.rapid_rise is True
    assert alert.low_battery is True


def test_hub_battery_percent_linear_and_clamped() -> None:
    assert hub_battery_percent(3.6) == pytest.approx(50.0)
    assert hub_battery_percent(4.2) == pytest.approx(100.0)
    assert hub_battery_percent(3.0) == pytest.approx(0.0)
    assert hub_battery_percent(5.0) == 100.0
    assert hub_battery_percent(2.0) == 0.0
