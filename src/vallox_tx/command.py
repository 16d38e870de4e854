#!/usr/bin/env python3
"""Vallox Serial - a Vallox Digit (RS485) telegram decoder & client.

Construct a command (a telegram that is to be sent).
"""

from __future__ import annotations

import logging

from . import exceptions as exc
from .const import (
    ADDRESS_MASTER,
    DEFAULT_SENDER_ID,
    DOMAIN,
    POLL_REQUEST,
    TELEGRAM_LENGTH,
    Variable,
)
from .frame import Frame, calculate_checksum
from .helpers import convert_back_fan_speed, convert_back_temperature

_LOGGER = logging.getLogger(__name__)


def _check_byte(name: str, value: object) -> int:
    if not isinstance(value, int) or isinstance(value, bool) or not 0 <= value <= 0xFF:
        raise exc.CommandInvalid(f"Invalid {name}: {value!r} (not a byte)")
    return value


class Command(Frame):
    """The Command class (telegrams to be transmitted)."""

    def __init__(self, frame: bytes | bytearray) -> None:
        """Create a command from six bytes."""

        try:
            super().__init__(frame)
            self._validate()
        except exc.MalformedTelegram as err:
            raise exc.CommandInvalid(err.message) from err

    @classmethod  # generic constructor
    def _from_attrs(
        cls,
        command: int | Variable,
        argument: int,
        *,
        dst: int = ADDRESS_MASTER,
        src: int = DEFAULT_SENDER_ID,
    ) -> Command:
        """Create a command from its attrs (the checksum is calculated)."""

        if command == Variable.UNKNOWN:
            raise exc.CommandInvalid(f"Invalid command: {command!r} (not a variable)")

        frame = bytearray(TELEGRAM_LENGTH)
        frame[0] = DOMAIN
        frame[1] = _check_byte("sender", src)
        frame[2] = _check_byte("receiver", dst)
        frame[3] = _check_byte("command", int(command))
        frame[4] = _check_byte("argument", argument)
        frame[5] = calculate_checksum(frame)

        return cls(frame)

    @classmethod  # constructor for a write (a variable's new value)
    def put(
        cls,
        variable: int | Variable,
        value: int,
        *,
        dst: int = ADDRESS_MASTER,
        src: int = DEFAULT_SENDER_ID,
    ) -> Command:
        """Constructor to write a (raw) value to a variable, by default to the master.

        e.g.: 01 28 11 29 07 6A (the fan speed to 3)
        """
        return cls._from_attrs(variable, value, dst=dst, src=src)

    @classmethod  # constructor for a poll (a request for a variable's value)
    def poll(
        cls,
        variable: Variable,
        *,
        dst: int = ADDRESS_MASTER,
        src: int = DEFAULT_SENDER_ID,
    ) -> Command:
        """Constructor to request the value of a variable, by default from the master.

        e.g.: 01 28 11 00 34 6E (the inside temperature)
        """

        if variable in (Variable.UNKNOWN, Variable.POLL):
            raise exc.CommandInvalid(f"Invalid variable: {variable!r} (cannot poll)")
        return cls._from_attrs(POLL_REQUEST, int(variable), dst=dst, src=src)

    @classmethod  # constructor for FAN_SPEED, FAN_SPEED_MAX, FAN_SPEED_MIN
    def set_fan_speed(
        cls,
        speed: int,
        *,
        variable: Variable = Variable.FAN_SPEED,
        dst: int = ADDRESS_MASTER,
        src: int = DEFAULT_SENDER_ID,
    ) -> Command:
        """Constructor to set a fan speed (1-8)."""

        try:
            value = convert_back_fan_speed(speed)
        except ValueError as err:
            raise exc.CommandInvalid(str(err)) from err
        return cls._from_attrs(variable, value, dst=dst, src=src)

    @classmethod  # constructor for setpoints & thresholds (temperatures)
    def set_temperature(
        cls,
        variable: Variable,
        temperature: int,
        *,
        dst: int = ADDRESS_MASTER,
        src: int = DEFAULT_SENDER_ID,
    ) -> Command:
        """Constructor to set a temperature (the closest byte that is not colder)."""
        return cls._from_attrs(
            variable, convert_back_temperature(temperature), dst=dst, src=src
        )
