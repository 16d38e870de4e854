#!/usr/bin/env python3
"""Vallox Serial - Decode/process a telegram (apply its value to the store)."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, Final

from vallox_tx import Property as P, Telegram, Variable as V
from vallox_tx import exceptions as exc
from vallox_tx.helpers import (
    convert_fan_speed,
    convert_humidity,
    convert_temperature,
    is_bit_set,
    merge_hex_pair,
)

from .store import ValloxStore

#
# NOTE: All debug flags should be False for deployment to end-users
_DBG_FORCE_LOG_TELEGRAMS: Final[bool] = False  # useful for dev/test

_LOGGER = logging.getLogger(__name__)


__all__ = ["process_telegram", "update_efficiencies"]


NotifyT = Callable[[P], None]


def _unsigned(value: int) -> int:
    return value & 0xFF


# variables with a single value, converted from the byte, and always notified
_DIRECT_VARIABLES: Final[dict[V, tuple[P, Callable[[int], Any]]]] = {
    V.FAN_SPEED: (P.FAN_SPEED, convert_fan_speed),
    V.FAN_SPEED_MAX: (P.FAN_SPEED_MAX, convert_fan_speed),
    V.FAN_SPEED_MIN: (P.FAN_SPEED_MIN, convert_fan_speed),
    V.DC_FAN_INPUT_ADJUSTMENT: (P.DC_FAN_INPUT_ADJUSTMENT, _unsigned),
    V.DC_FAN_OUTPUT_ADJUSTMENT: (P.DC_FAN_OUTPUT_ADJUSTMENT, _unsigned),
    #
    V.HUMIDITY: (P.HUMIDITY, convert_humidity),
    V.BASIC_HUMIDITY_LEVEL: (P.BASIC_HUMIDITY_LEVEL, convert_humidity),
    V.HUMIDITY_SENSOR1: (P.HUMIDITY_SENSOR_1, convert_humidity),
    V.HUMIDITY_SENSOR2: (P.HUMIDITY_SENSOR_2, convert_humidity),
    #
    V.CURRENT_INCOMING: (P.INCOMING_CURRENT, _unsigned),
    V.LAST_ERROR_NUMBER: (P.LAST_ERROR_NUMBER, _unsigned),
    V.SERVICE_REMINDER: (P.SERVICE_REMINDER, _unsigned),
    #
    V.HEATING_SET_POINT: (P.HEATING_SETPOINT, convert_temperature),
    V.PRE_HEATING_SET_POINT: (P.PRE_HEATING_SETPOINT, convert_temperature),
    V.INPUT_FAN_STOP: (P.INPUT_FAN_STOP_THRESHOLD, convert_temperature),
    V.HRC_BYPASS: (P.HRC_BYPASS_THRESHOLD, convert_temperature),
    V.CELL_DEFROSTING: (P.CELL_DEFROSTING_THRESHOLD, convert_temperature),
}

# the temperatures from which the efficiencies are derived
_TEMPERATURE_VARIABLES: Final[dict[V, P]] = {
    V.TEMP_OUTSIDE: P.TEMP_OUTSIDE,
    V.TEMP_EXHAUST: P.TEMP_EXHAUST,
    V.TEMP_INSIDE: P.TEMP_INSIDE,
    V.TEMP_INCOMING: P.TEMP_INCOMING,
}

# variable: (the half it carries, the composite, the high half, the low half)
_COMPOSITE_VARIABLES: Final[dict[V, tuple[P, P, P, P]]] = {
    V.CO2_HIGH: (P.CO2_HIGH, P.CO2, P.CO2_HIGH, P.CO2_LOW),
    V.CO2_LOW: (P.CO2_LOW, P.CO2, P.CO2_HIGH, P.CO2_LOW),
    V.CO2_SET_POINT_UPPER: (
        P.CO2_SETPOINT_HIGH,
        P.CO2_SETPOINT,
        P.CO2_SETPOINT_HIGH,
        P.CO2_SETPOINT_LOW,
    ),
    V.CO2_SET_POINT_LOWER: (
        P.CO2_SETPOINT_LOW,
        P.CO2_SETPOINT,
        P.CO2_SETPOINT_HIGH,
        P.CO2_SETPOINT_LOW,
    ),
}

# bitfields: the raw byte's property, then (property, bit) pairs (bit 0 is the LSB)
_BITFIELD_VARIABLES: Final[dict[V, tuple[P, tuple[tuple[P, int], ...]]]] = {
    V.IOPORT_MULTI_PURPOSE_1: (
        P.IO_PORT_MULTI_PURPOSE_1,
        ((P.POST_HEATING_ON, 5),),
    ),
    V.IOPORT_MULTI_PURPOSE_2: (
        P.IO_PORT_MULTI_PURPOSE_2,
        (
            (P.DAMPER_MOTOR_POSITION, 1),
            (P.FAULT_SIGNAL_RELAY_CLOSED, 2),
            (P.SUPPLY_FAN_OFF, 3),
            (P.PRE_HEATING_ON, 4),
            (P.EXHAUST_FAN_OFF, 5),
            (P.FIRE_PLACE_BOOSTER_CLOSED, 6),
        ),
    ),
    V.SELECT: (
        P.SELECT_STATUS,
        (
            (P.POWER_STATE, 0),
            (P.CO2_ADJUST_STATE, 1),
            (P.HUMIDITY_ADJUST_STATE, 2),
            (P.HEATING_STATE, 3),
            (P.FILTER_GUARD_INDICATOR, 4),
            (P.HEATING_INDICATOR, 5),
            (P.FAULT_INDICATOR, 6),
            (P.SERVICE_REMINDER_INDICATOR, 7),
        ),
    ),
    V.PROGRAM: (
        P.PROGRAM,
        (
            (P.AUTOMATIC_HUMIDITY_LEVEL_SEEKER_STATE, 4),
            (P.BOOST_SWITCH_MODE, 5),
            (P.RADIATOR_TYPE, 6),
            (P.CASCADE_ADJUST, 7),
        ),
    ),
    V.PROGRAM2: (
        P.PROGRAM_2,
        ((P.MAX_SPEED_LIMIT_MODE, 0),),
    ),
}

# recognised, but not (yet) interpreted
_IGNORED_VARIABLES: Final[frozenset[V]] = frozenset(
    (
        V.POLL,
        V.IOPORT_FANSPEED_RELAYS,
        V.INSTALLED_CO2_SENSORS,
        V.POST_HEATING_ON_COUNTER,
        V.POST_HEATING_OFF_TIME,
        V.POST_HEATING_TARGET_VALUE,
        V.FLAGS_1,
        V.FLAGS_2,
        V.FLAGS_3,
        V.FLAGS_4,
        V.FLAGS_5,
        V.FLAGS_6,
        V.FIRE_PLACE_BOOSTER_COUNTER,
        V.MAINTENANCE_MONTH_COUNTER,
    )
)


def _set(store: ValloxStore, prop: P, value: Any) -> None:
    setattr(store, prop.value, value)


def update_efficiencies(store: ValloxStore, notify: NotifyT) -> None:
    """Recalculate the heat recovery efficiencies, notifying only those that change.

    If the inside temperature is not above the outside, all are clamped to 100%.
    """

    max_possible = store.temp_inside - store.temp_outside

    if max_possible <= 0:
        in_efficiency = out_efficiency = average_efficiency = 100
    else:
        in_efficiency = int(
            (store.temp_incoming - store.temp_outside) * 100 / max_possible
        )
        out_efficiency = int(
            (store.temp_inside - store.temp_exhaust) * 100 / max_possible
        )
        average_efficiency = int((in_efficiency + out_efficiency) / 2)

    if store.in_efficiency != in_efficiency:
        store.in_efficiency = in_efficiency
        notify(P.IN_EFFICIENCY)

    if store.out_efficiency != out_efficiency:
        store.out_efficiency = out_efficiency
        notify(P.OUT_EFFICIENCY)

    if store.average_efficiency != average_efficiency:
        store.average_efficiency = average_efficiency
        notify(P.AVERAGE_EFFICIENCY)


def _update_composite(
    store: ValloxStore, variable: V, value: int, notify: NotifyT
) -> None:
    """Store one half of a composite, and update the composite if both are known.

    The composite is left unchanged if the halves cannot be merged.
    """

    half, composite, high_prop, low_prop = _COMPOSITE_VARIABLES[variable]

    _set(store, half, value)
    notify(half)

    if (high := store.get(high_prop)) is None or (low := store.get(low_prop)) is None:
        return

    try:
        result = merge_hex_pair(high, low)
    except exc.CompositeDecodeFailure as err:
        _LOGGER.debug("Error merging %s: %s", composite, err)
        return

    _set(store, composite, result)
    notify(composite)


def _update_bitfield(
    store: ValloxStore, variable: V, value: int, notify: NotifyT
) -> None:
    """Unpack the bits of a byte, notifying every field (even if unchanged)."""

    raw_prop, fields = _BITFIELD_VARIABLES[variable]

    _set(store, raw_prop, value)
    notify(raw_prop)

    if variable == V.PROGRAM:
        store.adjustment_interval_minutes = value & 0x0F
        notify(P.ADJUSTMENT_INTERVAL_MINUTES)

    for prop, bit in fields:
        _set(store, prop, is_bit_set(value, bit))
        notify(prop)


def process_telegram(store: ValloxStore, tlg: Telegram, notify: NotifyT) -> None:
    """Apply a (valid) telegram to the store, and notify the properties it updated.

    Unknown (or uninterpreted) variables are simply ignored. Never raises.
    """

    if _DBG_FORCE_LOG_TELEGRAMS:
        _LOGGER.warning("%r", tlg)

    variable, value = tlg.variable, tlg.argument

    if variable in _DIRECT_VARIABLES:
        prop, convert = _DIRECT_VARIABLES[variable]
        _set(store, prop, convert(value))
        notify(prop)

    elif variable in _TEMPERATURE_VARIABLES:
        prop = _TEMPERATURE_VARIABLES[variable]
        _set(store, prop, convert_temperature(value))
        notify(prop)
        update_efficiencies(store, notify)

    elif variable in _COMPOSITE_VARIABLES:
        _update_composite(store, variable, value, notify)

    elif variable in _BITFIELD_VARIABLES:
        _update_bitfield(store, variable, value, notify)

    elif variable == V.SUSPEND:  # CO2 sensor communication starts: no Tx allowed!
        store.suspended = True

    elif variable == V.RESUME:  # CO2 sensor communication ends: Tx allowed
        store.suspended = False

    elif variable in _IGNORED_VARIABLES:
        _LOGGER.debug("%r < Not interpreted (ignored)", tlg)

    else:  # V.UNKNOWN
        _LOGGER.debug("%r < Unknown command received (ignored)", tlg)
