#!/usr/bin/env python3
"""Vallox Serial - the variable catalog.

Maps a command byte to its Variable, and a Property to the Variable that must be polled
to (re)fetch its value.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Final

from .const import Property as P, Variable as V

# the purely derived properties (efficiencies) have no entry, so cannot be polled
PROPERTY_VARIABLE_MAP: Final[MappingProxyType[P, V]] = MappingProxyType(
    {
        P.FAN_SPEED: V.FAN_SPEED,
        P.FAN_SPEED_MAX: V.FAN_SPEED_MAX,
        P.FAN_SPEED_MIN: V.FAN_SPEED_MIN,
        P.DC_FAN_INPUT_ADJUSTMENT: V.DC_FAN_INPUT_ADJUSTMENT,
        P.DC_FAN_OUTPUT_ADJUSTMENT: V.DC_FAN_OUTPUT_ADJUSTMENT,
        #
        P.TEMP_INSIDE: V.TEMP_INSIDE,
        P.TEMP_OUTSIDE: V.TEMP_OUTSIDE,
        P.TEMP_EXHAUST: V.TEMP_EXHAUST,
        P.TEMP_INCOMING: V.TEMP_INCOMING,
        #
        P.SELECT_STATUS: V.SELECT,
        P.POWER_STATE: V.SELECT,
        P.CO2_ADJUST_STATE: V.SELECT,
        P.HUMIDITY_ADJUST_STATE: V.SELECT,
        P.HEATING_STATE: V.SELECT,
        P.FILTER_GUARD_INDICATOR: V.SELECT,
        P.HEATING_INDICATOR: V.SELECT,
        P.FAULT_INDICATOR: V.SELECT,
        P.SERVICE_REMINDER_INDICATOR: V.SELECT,
        #
        P.HUMIDITY: V.HUMIDITY,
        P.BASIC_HUMIDITY_LEVEL: V.BASIC_HUMIDITY_LEVEL,
        P.HUMIDITY_SENSOR_1: V.HUMIDITY_SENSOR1,
        P.HUMIDITY_SENSOR_2: V.HUMIDITY_SENSOR2,
        #
        P.CO2: V.CO2_HIGH,  # the unit answers each half separately
        P.CO2_HIGH: V.CO2_HIGH,
        P.CO2_LOW: V.CO2_LOW,
        P.CO2_SETPOINT: V.CO2_SET_POINT_UPPER,
        P.CO2_SETPOINT_HIGH: V.CO2_SET_POINT_UPPER,
        P.CO2_SETPOINT_LOW: V.CO2_SET_POINT_LOWER,
        #
        P.SERVICE_REMINDER: V.SERVICE_REMINDER,
        P.HEATING_SETPOINT: V.HEATING_SET_POINT,
        P.PRE_HEATING_SETPOINT: V.PRE_HEATING_SET_POINT,
        P.INPUT_FAN_STOP_THRESHOLD: V.INPUT_FAN_STOP,
        P.HRC_BYPASS_THRESHOLD: V.HRC_BYPASS,
        P.CELL_DEFROSTING_THRESHOLD: V.CELL_DEFROSTING,
        #
        P.IO_PORT_MULTI_PURPOSE_1: V.IOPORT_MULTI_PURPOSE_1,
        P.POST_HEATING_ON: V.IOPORT_MULTI_PURPOSE_1,
        #
        P.IO_PORT_MULTI_PURPOSE_2: V.IOPORT_MULTI_PURPOSE_2,
        P.DAMPER_MOTOR_POSITION: V.IOPORT_MULTI_PURPOSE_2,
        P.FAULT_SIGNAL_RELAY_CLOSED: V.IOPORT_MULTI_PURPOSE_2,
        P.SUPPLY_FAN_OFF: V.IOPORT_MULTI_PURPOSE_2,
        P.PRE_HEATING_ON: V.IOPORT_MULTI_PURPOSE_2,
        P.EXHAUST_FAN_OFF: V.IOPORT_MULTI_PURPOSE_2,
        P.FIRE_PLACE_BOOSTER_CLOSED: V.IOPORT_MULTI_PURPOSE_2,
        #
        P.INCOMING_CURRENT: V.CURRENT_INCOMING,
        P.LAST_ERROR_NUMBER: V.LAST_ERROR_NUMBER,
        #
        P.PROGRAM: V.PROGRAM,
        P.ADJUSTMENT_INTERVAL_MINUTES: V.PROGRAM,
        P.AUTOMATIC_HUMIDITY_LEVEL_SEEKER_STATE: V.PROGRAM,
        P.BOOST_SWITCH_MODE: V.PROGRAM,
        P.RADIATOR_TYPE: V.PROGRAM,
        P.CASCADE_ADJUST: V.PROGRAM,
        #
        P.PROGRAM_2: V.PROGRAM2,
        P.MAX_SPEED_LIMIT_MODE: V.PROGRAM2,
    }
)

# the properties that can be written, and how their value is encoded
WRITABLE_FAN_SPEEDS: Final[frozenset[P]] = frozenset(
    (P.FAN_SPEED, P.FAN_SPEED_MAX, P.FAN_SPEED_MIN)
)
WRITABLE_TEMPERATURES: Final[frozenset[P]] = frozenset(
    (
        P.HEATING_SETPOINT,
        P.PRE_HEATING_SETPOINT,
        P.INPUT_FAN_STOP_THRESHOLD,
        P.HRC_BYPASS_THRESHOLD,
        P.CELL_DEFROSTING_THRESHOLD,
    )
)
WRITABLE_BYTES: Final[frozenset[P]] = frozenset(
    (
        P.SELECT_STATUS,
        P.PROGRAM,
        P.PROGRAM_2,
        P.SERVICE_REMINDER,
        P.DC_FAN_INPUT_ADJUSTMENT,
        P.DC_FAN_OUTPUT_ADJUSTMENT,
        P.CO2_SETPOINT_HIGH,
        P.CO2_SETPOINT_LOW,
    )
)


def code_to_variable(code: int) -> V:
    """Return the Variable of a command byte, or Variable.UNKNOWN (never fails)."""
    return V(code)


def property_to_variable(prop: P) -> V | None:
    """Return the Variable to poll for a property, or None if it is purely derived."""
    return PROPERTY_VARIABLE_MAP.get(prop)


def is_writable(prop: P) -> bool:
    return prop in WRITABLE_FAN_SPEEDS | WRITABLE_TEMPERATURES | WRITABLE_BYTES
