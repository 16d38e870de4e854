#!/usr/bin/env python3
"""Vallox Serial - the state of the ventilation unit (the latest known values)."""

from __future__ import annotations

import dataclasses
from typing import Any

from vallox_tx import Property


@dataclasses.dataclass(kw_only=True)
class ValloxStore:
    """A snapshot of the latest known value of every Property.

    The attribute names are the values of Property. The high/low halves of the CO2
    composites are None until first received. A fan speed is None if it is unknown.
    """

    fan_speed: int | None = None
    fan_speed_max: int | None = None
    fan_speed_min: int | None = None
    dc_fan_input_adjustment: int = 0  # %
    dc_fan_output_adjustment: int = 0  # %

    temp_inside: int = 0  # C
    temp_outside: int = 0
    temp_exhaust: int = 0
    temp_incoming: int = 0

    in_efficiency: int = 0  # %
    out_efficiency: int = 0
    average_efficiency: int = 0

    select_status: int = 0  # the raw byte
    power_state: bool = False
    co2_adjust_state: bool = False
    humidity_adjust_state: bool = False
    heating_state: bool = False
    filter_guard_indicator: bool = False
    heating_indicator: bool = False
    fault_indicator: bool = False
    service_reminder_indicator: bool = False

    humidity: float = 0.0  # %RH
    basic_humidity_level: float = 0.0
    humidity_sensor_1: float = 0.0
    humidity_sensor_2: float = 0.0

    co2: int = 0  # ppm
    co2_high: int | None = None
    co2_low: int | None = None
    co2_setpoint: int = 0
    co2_setpoint_high: int | None = None
    co2_setpoint_low: int | None = None

    service_reminder: int = 0  # months
    heating_setpoint: int = 0  # C
    pre_heating_setpoint: int = 0
    input_fan_stop_threshold: int = 0
    hrc_bypass_threshold: int = 0
    cell_defrosting_threshold: int = 0

    io_port_multi_purpose_1: int = 0  # the raw byte
    post_heating_on: bool = False

    io_port_multi_purpose_2: int = 0  # the raw byte
    damper_motor_position: bool = False  # False = winter, True = season
    fault_signal_relay_closed: bool = False
    supply_fan_off: bool = False
    pre_heating_on: bool = False
    exhaust_fan_off: bool = False
    fire_place_booster_closed: bool = False

    incoming_current: int = 0  # A
    last_error_number: int = 0

    program: int = 0  # the raw byte
    adjustment_interval_minutes: int = 0
    automatic_humidity_level_seeker_state: bool = False
    boost_switch_mode: bool = False  # False = fireplace, True = boost
    radiator_type: bool = False  # False = electric, True = water
    cascade_adjust: bool = False

    program_2: int = 0  # the raw byte
    max_speed_limit_mode: bool = False  # False = with adjustment, True = always

    suspended: bool = False  # the bus is reserved (by a CO2 sensor), no Tx allowed

    def get(self, prop: Property) -> Any:
        """Return the latest known value of a property."""
        return getattr(self, prop.value)

    def as_dict(self) -> dict[str, Any]:
        return dataclasses.asdict(self)
