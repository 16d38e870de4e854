#!/usr/bin/env python3
"""Vallox Serial - a Vallox Digit (RS485) telegram decoder & client.

Provide the base class for commands (constructed/sent telegrams) and telegrams.
"""

from __future__ import annotations

import logging

from . import exceptions as exc
from .address import Address, friendly_name
from .catalog import code_to_variable
from .const import DOMAIN, POLL_REQUEST, TELEGRAM_LENGTH, Variable
from .helpers import hex_str

_LOGGER = logging.getLogger(__name__)


def calculate_checksum(data: bytes | bytearray) -> int:
    """Return the checksum of a frame: the sum of its first five bytes, modulo 256."""
    return sum(data[: TELEGRAM_LENGTH - 1]) & 0xFF


class Frame:
    """The Frame class - used as a base by the Command and Telegram classes.

    `01 28 11 00 29 63`: [domain][sender][receiver][command][argument][checksum]
    """

    def __init__(self, frame: bytes | bytearray) -> None:
        """Create a frame from exactly six bytes.

        Will raise MalformedTelegram if it is not six bytes long.
        """

        if len(frame) != TELEGRAM_LENGTH:
            raise exc.MalformedTelegram(
                f"Bad frame: invalid length: {len(frame)} (not {TELEGRAM_LENGTH})"
            )

        self._frame: bytes = bytes(frame)

        self.domain: int = self._frame[0]
        self.sender: int = self._frame[1]
        self.receiver: int = self._frame[2]
        self.command: int = self._frame[3]
        self.argument: int = self._frame[4]
        self.checksum: int = self._frame[5]

        self._variable: Variable | None = None
        self._repr: str | None = None

    def _validate(self) -> None:
        """Validate the frame: it may be a cmd or a (received) telegram.

        Raise MalformedTelegram if it is not valid.
        """

        if self.domain != DOMAIN:
            raise exc.MalformedTelegram(
                f"Bad frame: invalid domain: {self.domain:02X} (not {DOMAIN:02X})"
            )

        if (checksum := calculate_checksum(self._frame)) != self.checksum:
            raise exc.MalformedTelegram(
                f"Bad frame: invalid checksum: {self.checksum:02X} (not {checksum:02X})"
            )

    def __repr__(self) -> str:
        """Return an unambiguous string representation of this object."""
        # e.g.: PN8 -> MB1 POLL TEMP_INSIDE, or: MB1 -> PN* FAN_SPEED 0x07

        if self._repr is not None:
            return self._repr

        hdr = f"{friendly_name(self.sender)} -> {friendly_name(self.receiver)}"
        if self.is_poll:
            self._repr = f"{hdr} POLL {code_to_variable(self.argument)}"
        else:
            self._repr = f"{hdr} {self.variable} 0x{self.argument:02X}"
        return self._repr

    def __str__(self) -> str:
        """Return a brief readable string representation of this object."""
        # e.g.: 01 28 11 00 34 6E
        return hex_str(self._frame)

    def __eq__(self, other: object) -> bool:
        if not hasattr(other, "_frame"):
            return NotImplemented
        return self._frame == other._frame  # type: ignore[no-any-return]

    def __hash__(self) -> int:
        return hash(self._frame)

    def __bytes__(self) -> bytes:
        return self._frame

    @property
    def frame(self) -> bytes:
        return self._frame

    @property
    def src(self) -> Address:
        return Address(self.sender)

    @property
    def dst(self) -> Address:
        return Address(self.receiver)

    @property
    def variable(self) -> Variable:
        """Return the Variable of the command byte (UNKNOWN if it is not recognised)."""

        if self._variable is None:
            self._variable = code_to_variable(self.command)
        return self._variable

    @property
    def is_poll(self) -> bool:
        """Return True if this is a request for the value of a variable."""
        return self.command == POLL_REQUEST
