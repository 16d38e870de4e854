#!/usr/bin/env python3
"""Vallox Serial - Vallox Digit compatible telegram transport.

Operates at the telegram layer of: app - telegram - h/w

The RS485 bus is usually reached via a serial-to-ethernet bridge, for ser2net:
  connection: &con00
  accepter: tcp,4000
  timeout: 0
  connector: serialdev,/dev/ttyUSB0,9600n81,local

For example:
  vallox_client monitor 192.168.1.20:4000
  vallox_client monitor socket://192.168.1.20:4000
  vallox_client monitor /dev/ttyUSB0
"""

from __future__ import annotations

import contextlib
import logging
import threading
from typing import Final

from serial import (  # type: ignore[import-untyped]
    Serial,
    SerialException,
    serial_for_url,
)

from . import exceptions as exc
from .command import Command
from .const import DEFAULT_RECEIVER_ID, DEFAULT_SENDER_ID
from .helpers import hex_str
from .telegram import Telegram, TelegramBuffer
from .typing import SerPortNameT

BAUDRATE: Final[int] = 9600  # 8N1, ignored by socket:// URLs
READ_CHUNK_SIZE: Final[int] = 64  # bytes per (non-blocking) read


#
# NOTE: All debug flags should be False for deployment to end-users
_DBG_FORCE_FRAME_LOGGING: Final[bool] = False

_LOGGER = logging.getLogger(__name__)


def get_serial_instance(port_name: SerPortNameT) -> Serial:  # type: ignore[no-any-unimported]
    """Return an open, non-blocking, Serial instance for the given port name/URL.

    May: raise ConnectError("Unable to open serial port...")
    """
    # For example:
    # - socket://192.168.1.20:4000
    # - rfc2217://localhost:5001
    # - /dev/ttyUSB0

    try:
        ser_obj = serial_for_url(port_name, baudrate=BAUDRATE, timeout=0)
    except (SerialException, ValueError) as err:
        _LOGGER.error("Failed to open %s: %s", port_name, err)
        raise exc.ConnectError(f"Unable to open the serial port: {port_name}") from err

    # FTDI on Posix/Linux would be a common environment for this library...
    with contextlib.suppress(AttributeError, NotImplementedError, ValueError):
        ser_obj.set_low_latency_mode(True)

    return ser_obj


class SerialTransport:
    """A byte-stream transport: read telegrams from, and write commands to, the bus.

    Reads are non-blocking: whatever bytes are pending are moved into a buffer, from
    which complete telegrams are consumed. Writes are serialised with a lock, so that
    frames are never interleaved on the wire.
    """

    def __init__(
        self,
        ser_instance: Serial,  # type: ignore[no-any-unimported]
        *,
        sender_id: int = DEFAULT_SENDER_ID,
        receiver_id: int = DEFAULT_RECEIVER_ID,
        disable_sending: bool = False,
    ) -> None:
        self.serial = ser_instance

        self._buffer = TelegramBuffer(sender_id=sender_id, receiver_id=receiver_id)
        self._disable_sending = disable_sending
        self._write_lock = threading.Lock()
        self._closing = False

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.serial.portstr})"

    def is_closing(self) -> bool:
        return self._closing

    def _read_pending(self) -> None:
        """Move whatever bytes are pending on the wire into the buffer."""

        if self._closing:
            raise exc.TransportSerialError("Transport is closed")

        try:
            data = self.serial.read(READ_CHUNK_SIZE)
        except (SerialException, OSError) as err:
            raise exc.TransportSerialError(f"Unable to read: {err}") from err

        if data:
            if _DBG_FORCE_FRAME_LOGGING:
                _LOGGER.warning("Rx: %s", hex_str(data))
            self._buffer.extend(data)

    @property
    def available(self) -> int:
        """Return the number of bytes that have been read, but not yet consumed."""

        self._read_pending()
        return len(self._buffer)

    def read_telegram(self) -> Telegram:
        """Return the next telegram (never blocks).

        Raise InsufficientData, MalformedTelegram, WrongRecipient or
        TransportSerialError.
        """

        self._read_pending()
        return self._buffer.pop_telegram()

    def write_frame(self, cmd: Command) -> None:
        """Write a command to the wire (if sending is not disabled)."""

        if self._disable_sending:
            raise exc.TransportError("Sending has been disabled")
        if self._closing:
            raise exc.TransportSerialError("Transport is closed")

        if _LOGGER.isEnabledFor(logging.DEBUG):
            _LOGGER.debug("Tx: %s (%r)", cmd, cmd)

        with self._write_lock:
            try:
                self.serial.write(cmd.frame)
                self.serial.flush()
            except (SerialException, OSError) as err:
                raise exc.TransportSerialError(f"Unable to write: {err}") from err

    def close(self) -> None:
        """Close the transport (the buffered bytes are discarded)."""

        if self._closing:
            return
        self._closing = True
        self._buffer.clear()

        try:
            self.serial.close()
        except (SerialException, OSError) as err:
            _LOGGER.warning("%s: error when closing: %s", self, err)
