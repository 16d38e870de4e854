#!/usr/bin/env python3
"""Vallox Serial - Test the processing of telegrams (their effect upon the store)."""

import dataclasses
from datetime import datetime as dt

import pytest

from vallox import ValloxStore, process_telegram
from vallox_tx import Property as P, Telegram, Variable as V


class Notified(list):
    def __call__(self, prop: P) -> None:
        self.append(prop)


def _telegram(variable: int, value: int) -> Telegram:
    data = bytes((0x01, 0x11, 0x20, variable, value))
    return Telegram(dt.now(), data + bytes((sum(data) & 0xFF,)))


@pytest.fixture()
def store() -> ValloxStore:
    return ValloxStore()


@pytest.fixture()
def notified() -> Notified:
    return Notified()


def test_store_fields() -> None:
    names = {f.name for f in dataclasses.fields(ValloxStore)}

    assert names == {p.value for p in P} | {"suspended"}

    store = ValloxStore()
    assert store.get(P.FAN_SPEED) is None
    assert store.get(P.CO2_HIGH) is None
    assert store.get(P.TEMP_INSIDE) == 0
    assert store.as_dict()["suspended"] is False


@pytest.mark.parametrize(
    "variable, value, prop, expected",
    (
        (V.FAN_SPEED, 0x07, P.FAN_SPEED, 3),
        (V.FAN_SPEED_MAX, 0xFF, P.FAN_SPEED_MAX, 8),
        (V.FAN_SPEED_MIN, 0x01, P.FAN_SPEED_MIN, 1),
        (V.FAN_SPEED, 0x02, P.FAN_SPEED, None),  # an unknown speed
        (V.HUMIDITY, 0x99, P.HUMIDITY, (0x99 - 51) / 2.04),
        (V.HUMIDITY_SENSOR1, 51, P.HUMIDITY_SENSOR_1, 0),
        (V.CURRENT_INCOMING, 0x05, P.INCOMING_CURRENT, 5),
        (V.SERVICE_REMINDER, 0x04, P.SERVICE_REMINDER, 4),
        (V.HEATING_SET_POINT, 0xA0, P.HEATING_SETPOINT, 20),
        (V.HRC_BYPASS, 0xB8, P.HRC_BYPASS_THRESHOLD, 30),
        (V.DC_FAN_INPUT_ADJUSTMENT, 0x64, P.DC_FAN_INPUT_ADJUSTMENT, 100),
    ),
)
def test_direct_variables(
    store: ValloxStore,
    notified: Notified,
    variable: V,
    value: int,
    prop: P,
    expected: object,
) -> None:
    process_telegram(store, _telegram(variable, value), notified)

    if expected is None:
        assert store.get(prop) is None
    else:
        assert store.get(prop) == pytest.approx(expected)
    assert notified == [prop]

    process_telegram(store, _telegram(variable, value), notified)
    assert notified == [prop, prop]  # always notified, even if unchanged


def test_efficiencies(store: ValloxStore, notified: Notified) -> None:
    process_telegram(store, _telegram(V.TEMP_OUTSIDE, 0x64), notified)  # 0 C
    process_telegram(store, _telegram(V.TEMP_INSIDE, 0xF7), notified)  # 100 C
    process_telegram(store, _telegram(V.TEMP_INCOMING, 0xDA), notified)  # 50 C
    process_telegram(store, _telegram(V.TEMP_EXHAUST, 0xB8), notified)  # 30 C

    assert (store.temp_outside, store.temp_inside) == (0, 100)
    assert (store.temp_incoming, store.temp_exhaust) == (50, 30)

    assert store.in_efficiency == 50
    assert store.out_efficiency == 70
    assert store.average_efficiency == 60

    assert notified[-3:] == [P.TEMP_EXHAUST, P.OUT_EFFICIENCY, P.AVERAGE_EFFICIENCY]

    notified.clear()  # identical temperatures notify only the temperature
    process_telegram(store, _telegram(V.TEMP_INCOMING, 0xDA), notified)
    assert notified == [P.TEMP_INCOMING]


def test_efficiencies_clamped(store: ValloxStore, notified: Notified) -> None:
    process_telegram(store, _telegram(V.TEMP_INSIDE, 0xA0), notified)  # 20 C
    notified.clear()
    process_telegram(store, _telegram(V.TEMP_OUTSIDE, 0xA0), notified)  # 20 C

    assert store.in_efficiency == 100
    assert store.out_efficiency == 100
    assert store.average_efficiency == 100
    # out_efficiency was already 100
    assert notified == [P.TEMP_OUTSIDE, P.IN_EFFICIENCY, P.AVERAGE_EFFICIENCY]

    notified.clear()  # still clamped, so nothing changed
    process_telegram(store, _telegram(V.TEMP_OUTSIDE, 0xA4), notified)  # 21 C
    assert notified == [P.TEMP_OUTSIDE]


def test_efficiencies_truncated(store: ValloxStore, notified: Notified) -> None:
    process_telegram(store, _telegram(V.TEMP_INSIDE, 0xA0), notified)  # 20 C
    process_telegram(store, _telegram(V.TEMP_OUTSIDE, 0x64), notified)  # 0 C
    process_telegram(store, _telegram(V.TEMP_INCOMING, 0x8D), notified)  # 13 C
    process_telegram(store, _telegram(V.TEMP_EXHAUST, 0x7C), notified)  # 7 C

    assert store.in_efficiency == 65  # 13 / 20
    assert store.out_efficiency == 65  # 13 / 20
    assert store.average_efficiency == 65

    process_telegram(store, _telegram(V.TEMP_INCOMING, 0x8A), notified)  # 12 C
    assert store.in_efficiency == 60
    assert store.average_efficiency == 62  # int(62.5)


def test_co2(store: ValloxStore, notified: Notified) -> None:
    process_telegram(store, _telegram(V.CO2_HIGH, 0x32), notified)

    assert store.co2_high == 0x32
    assert store.co2 == 0  # not yet both halves
    assert notified == [P.CO2_HIGH]

    process_telegram(store, _telegram(V.CO2_LOW, 0x07), notified)

    assert store.co2_low == 0x07
    assert store.co2 == 0x3207
    assert notified == [P.CO2_HIGH, P.CO2_LOW, P.CO2]


def test_co2_setpoint(store: ValloxStore, notified: Notified) -> None:
    process_telegram(store, _telegram(V.CO2_SET_POINT_LOWER, 0x84), notified)
    process_telegram(store, _telegram(V.CO2_SET_POINT_UPPER, 0x03), notified)

    assert store.co2_setpoint == 0x0384
    assert notified == [P.CO2_SETPOINT_LOW, P.CO2_SETPOINT_HIGH, P.CO2_SETPOINT]


def test_suspend_resume(store: ValloxStore, notified: Notified) -> None:
    process_telegram(store, _telegram(V.SUSPEND, 0x00), notified)
    assert store.suspended is True

    process_telegram(store, _telegram(V.RESUME, 0x00), notified)
    assert store.suspended is False

    assert notified == []  # not a property


def test_select(store: ValloxStore, notified: Notified) -> None:
    process_telegram(store, _telegram(V.SELECT, 0b1000_1001), notified)

    assert store.select_status == 0x89
    assert store.power_state is True
    assert store.co2_adjust_state is False
    assert store.humidity_adjust_state is False
    assert store.heating_state is True
    assert store.filter_guard_indicator is False
    assert store.heating_indicator is False
    assert store.fault_indicator is False
    assert store.service_reminder_indicator is True

    assert notified[0] == P.SELECT_STATUS
    assert len(notified) == 9  # every field, even if unchanged


def test_io_ports(store: ValloxStore, notified: Notified) -> None:
    process_telegram(store, _telegram(V.IOPORT_MULTI_PURPOSE_1, 0x20), notified)

    assert store.io_port_multi_purpose_1 == 0x20
    assert store.post_heating_on is True
    assert notified == [P.IO_PORT_MULTI_PURPOSE_1, P.POST_HEATING_ON]

    process_telegram(store, _telegram(V.IOPORT_MULTI_PURPOSE_2, 0b0010_1010), notified)

    assert store.damper_motor_position is True  # bit 1
    assert store.fault_signal_relay_closed is False
    assert store.supply_fan_off is True  # bit 3
    assert store.pre_heating_on is False
    assert store.exhaust_fan_off is True  # bit 5
    assert store.fire_place_booster_closed is False


def test_program(store: ValloxStore, notified: Notified) -> None:
    process_telegram(store, _telegram(V.PROGRAM, 0b1010_0110), notified)

    assert store.program == 0xA6
    assert store.adjustment_interval_minutes == 6
    assert store.automatic_humidity_level_seeker_state is False
    assert store.boost_switch_mode is True
    assert store.radiator_type is False
    assert store.cascade_adjust is True
    assert notified[:2] == [P.PROGRAM, P.ADJUSTMENT_INTERVAL_MINUTES]

    process_telegram(store, _telegram(V.PROGRAM2, 0x01), notified)
    assert store.max_speed_limit_mode is True


@pytest.mark.parametrize("variable", (0x01, 0xFE, V.FLAGS_2, V.POLL))
def test_ignored_variables(
    store: ValloxStore, notified: Notified, variable: int
) -> None:
    process_telegram(store, _telegram(variable, 0x42), notified)

    assert store == ValloxStore()
    assert notified == []
