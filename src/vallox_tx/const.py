#!/usr/bin/env python3
"""Vallox Serial - a Vallox Digit (RS485) telegram decoder & client."""

from __future__ import annotations

from enum import EnumCheck, IntEnum, StrEnum, verify
from typing import Final


# the wire format: [domain][sender][receiver][command][argument][checksum]
TELEGRAM_LENGTH: Final[int] = 6
DOMAIN: Final[int] = 0x01
POLL_REQUEST: Final[int] = 0x00

ADDRESS_MASTERS: Final[int] = 0x10  # all mainboards
ADDRESS_MASTER: Final[int] = 0x11  # mainboard 1
ADDRESS_PANELS: Final[int] = 0x20  # all panels (broadcast)
ADDRESS_PANEL1: Final[int] = 0x21
ADDRESS_PANEL2: Final[int] = 0x22
ADDRESS_PANEL3: Final[int] = 0x23
ADDRESS_PANEL4: Final[int] = 0x24
ADDRESS_PANEL5: Final[int] = 0x25
ADDRESS_PANEL6: Final[int] = 0x26
ADDRESS_PANEL7: Final[int] = 0x27
ADDRESS_PANEL8: Final[int] = 0x28

# we send in the name of panel 8, and listen to the traffic between master & panel 1
DEFAULT_SENDER_ID: Final[int] = ADDRESS_PANEL8
DEFAULT_RECEIVER_ID: Final[int] = ADDRESS_PANEL1


# used by the gateway (connection manager)...
DEFAULT_HEARTBEAT_INTERVAL: Final[float] = 60  # seconds
DEFAULT_SHUTDOWN_TIMEOUT: Final[float] = 5  # grace period before tasks are cancelled
DEFAULT_SUSPEND_TIMEOUT: Final[float] = 10  # max wait for a RESUME before skipping Tx

INSUFFICIENT_DATA_DELAY: Final[float] = 0.2  # seconds
TRANSPORT_ERROR_DELAY: Final[float] = 2.0  # seconds


# IntEnum is intended to include all known command codes, see: catalog.py
@verify(EnumCheck.UNIQUE)
class Variable(IntEnum):
    """The command byte of a telegram, i.e. the variable it carries."""

    POLL = 0x00

    IOPORT_FANSPEED_RELAYS = 0x06
    IOPORT_MULTI_PURPOSE_1 = 0x07
    IOPORT_MULTI_PURPOSE_2 = 0x08

    FAN_SPEED = 0x29
    HUMIDITY = 0x2A  # the highest of the humidity sensors
    CO2_HIGH = 0x2B
    CO2_LOW = 0x2C
    INSTALLED_CO2_SENSORS = 0x2D
    CURRENT_INCOMING = 0x2E
    HUMIDITY_SENSOR1 = 0x2F
    HUMIDITY_SENSOR2 = 0x30

    TEMP_OUTSIDE = 0x32
    TEMP_EXHAUST = 0x33
    TEMP_INSIDE = 0x34
    TEMP_INCOMING = 0x35
    LAST_ERROR_NUMBER = 0x36

    POST_HEATING_ON_COUNTER = 0x55
    POST_HEATING_OFF_TIME = 0x56
    POST_HEATING_TARGET_VALUE = 0x57

    FLAGS_1 = 0x6C
    FLAGS_2 = 0x6D
    FLAGS_3 = 0x6E
    FLAGS_4 = 0x6F
    FLAGS_5 = 0x70
    FLAGS_6 = 0x71

    FIRE_PLACE_BOOSTER_COUNTER = 0x79

    RESUME = 0x8F  # CO2 sensor communication has ended, Tx allowed
    SUSPEND = 0x91  # CO2 sensor communication has started, no Tx allowed!

    SELECT = 0xA3
    HEATING_SET_POINT = 0xA4
    FAN_SPEED_MAX = 0xA5
    SERVICE_REMINDER = 0xA6
    PRE_HEATING_SET_POINT = 0xA7
    INPUT_FAN_STOP = 0xA8
    FAN_SPEED_MIN = 0xA9
    PROGRAM = 0xAA
    MAINTENANCE_MONTH_COUNTER = 0xAB
    BASIC_HUMIDITY_LEVEL = 0xAE
    HRC_BYPASS = 0xAF
    DC_FAN_INPUT_ADJUSTMENT = 0xB0
    DC_FAN_OUTPUT_ADJUSTMENT = 0xB1
    CELL_DEFROSTING = 0xB2
    CO2_SET_POINT_UPPER = 0xB3
    CO2_SET_POINT_LOWER = 0xB4
    PROGRAM2 = 0xB5

    UNKNOWN = -1  # not a byte, so can never be sent

    @classmethod
    def _missing_(cls, value: object) -> Variable:
        return cls.UNKNOWN

    def __str__(self) -> str:
        return self.name


@verify(EnumCheck.UNIQUE)
class Property(StrEnum):
    """The externally observable quantities (the channels of a host application)."""

    FAN_SPEED = "fan_speed"
    FAN_SPEED_MAX = "fan_speed_max"
    FAN_SPEED_MIN = "fan_speed_min"
    DC_FAN_INPUT_ADJUSTMENT = "dc_fan_input_adjustment"
    DC_FAN_OUTPUT_ADJUSTMENT = "dc_fan_output_adjustment"

    TEMP_INSIDE = "temp_inside"
    TEMP_OUTSIDE = "temp_outside"
    TEMP_EXHAUST = "temp_exhaust"
    TEMP_INCOMING = "temp_incoming"

    IN_EFFICIENCY = "in_efficiency"
    OUT_EFFICIENCY = "out_efficiency"
    AVERAGE_EFFICIENCY = "average_efficiency"

    SELECT_STATUS = "select_status"
    POWER_STATE = "power_state"
    CO2_ADJUST_STATE = "co2_adjust_state"
    HUMIDITY_ADJUST_STATE = "humidity_adjust_state"
    HEATING_STATE = "heating_state"
    FILTER_GUARD_INDICATOR = "filter_guard_indicator"
    HEATING_INDICATOR = "heating_indicator"
    FAULT_INDICATOR = "fault_indicator"
    SERVICE_REMINDER_INDICATOR = "service_reminder_indicator"

    HUMIDITY = "humidity"
    BASIC_HUMIDITY_LEVEL = "basic_humidity_level"
    HUMIDITY_SENSOR_1 = "humidity_sensor_1"
    HUMIDITY_SENSOR_2 = "humidity_sensor_2"

    CO2 = "co2"
    CO2_HIGH = "co2_high"
    CO2_LOW = "co2_low"
    CO2_SETPOINT = "co2_setpoint"
    CO2_SETPOINT_HIGH = "co2_setpoint_high"
    CO2_SETPOINT_LOW = "co2_setpoint_low"

    SERVICE_REMINDER = "service_reminder"
    HEATING_SETPOINT = "heating_setpoint"
    PRE_HEATING_SETPOINT = "pre_heating_setpoint"
    INPUT_FAN_STOP_THRESHOLD = "input_fan_stop_threshold"
    HRC_BYPASS_THRESHOLD = "hrc_bypass_threshold"
    CELL_DEFROSTING_THRESHOLD = "cell_defrosting_threshold"

    IO_PORT_MULTI_PURPOSE_1 = "io_port_multi_purpose_1"
    POST_HEATING_ON = "post_heating_on"

    IO_PORT_MULTI_PURPOSE_2 = "io_port_multi_purpose_2"
    DAMPER_MOTOR_POSITION = "damper_motor_position"
    FAULT_SIGNAL_RELAY_CLOSED = "fault_signal_relay_closed"
    SUPPLY_FAN_OFF = "supply_fan_off"
    PRE_HEATING_ON = "pre_heating_on"
    EXHAUST_FAN_OFF = "exhaust_fan_off"
    FIRE_PLACE_BOOSTER_CLOSED = "fire_place_booster_closed"

    INCOMING_CURRENT = "incoming_current"
    LAST_ERROR_NUMBER = "last_error_number"

    PROGRAM = "program"
    ADJUSTMENT_INTERVAL_MINUTES = "adjustment_interval_minutes"
    AUTOMATIC_HUMIDITY_LEVEL_SEEKER_STATE = "automatic_humidity_level_seeker_state"
    BOOST_SWITCH_MODE = "boost_switch_mode"
    RADIATOR_TYPE = "radiator_type"
    CASCADE_ADJUST = "cascade_adjust"

    PROGRAM_2 = "program_2"
    MAX_SPEED_LIMIT_MODE = "max_speed_limit_mode"


class Status(StrEnum):
    ONLINE = "online"
    OFFLINE = "offline"


class StatusDetail(StrEnum):
    NONE = "none"
    COMMUNICATION_ERROR = "communication_error"
