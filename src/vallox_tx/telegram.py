#!/usr/bin/env python3
"""Vallox Serial - a Vallox Digit (RS485) telegram decoder & client.

Decode/process a telegram (a frame that was received).
"""

from __future__ import annotations

from datetime import datetime as dt
from typing import Any

from . import exceptions as exc
from .const import (
    ADDRESS_PANELS,
    DEFAULT_RECEIVER_ID,
    DEFAULT_SENDER_ID,
    DOMAIN,
    TELEGRAM_LENGTH,
)
from .frame import Frame
from .helpers import hex_str
from .logger import TLG_LOGGER_NAME, getLogger

TLG_LOGGER = getLogger(TLG_LOGGER_NAME, tlg_log=True)


class Telegram(Frame):
    """The Telegram class (frames that were received); will log invalid frames.

    They have a datetime (when received), and may be addressed to someone else.
    """

    def __init__(self, dtm: dt, frame: bytes | bytearray, **kwargs: Any) -> None:
        """Create a telegram from six bytes.

        Will raise MalformedTelegram if it is invalid.
        """

        super().__init__(frame)

        self.dtm: dt = dtm
        self.comment: str = kwargs.get("comment", "")

        self._validate()

    def __repr__(self) -> str:
        """Return an unambiguous string representation of this object."""
        # e.g.: 2024-05-01T12:34:56.123456 ... MB1 -> PN* TEMP_INSIDE 0x9F
        return f"{self.dtm.isoformat(timespec='microseconds')} ... {super().__repr__()}"

    @classmethod
    def from_bytes(
        cls,
        data: bytes | bytearray,
        *,
        sender_id: int = DEFAULT_SENDER_ID,
        receiver_id: int = DEFAULT_RECEIVER_ID,
        dtm: dt | None = None,
    ) -> Telegram:
        """Create a telegram from the first six bytes of the data (will log it).

        Raise InsufficientData if there are fewer than six bytes, MalformedTelegram if
        the domain/checksum are invalid, and WrongRecipient if the telegram is valid,
        but not addressed to us (i.e. neither receiver_id, sender_id nor all panels).
        """

        if len(data) < TELEGRAM_LENGTH:
            raise exc.InsufficientData(
                f"Not enough data: {len(data)} bytes (need {TELEGRAM_LENGTH})"
            )

        frame = bytes(data[:TELEGRAM_LENGTH])
        extra = {"_frame": hex_str(frame), "error_text": "", "comment": ""}

        try:
            tlg = cls(dtm or dt.now(), frame)
        except exc.MalformedTelegram as err:
            TLG_LOGGER.warning("%s", err, extra=extra)
            raise

        if tlg.receiver not in (receiver_id, sender_id, ADDRESS_PANELS):
            TLG_LOGGER.info("%r", tlg, extra=extra | {"comment": "not for us"})
            raise exc.WrongRecipient(
                f"Not addressed to us: {tlg.receiver:02X} "
                f"(not {receiver_id:02X}, {sender_id:02X} or {ADDRESS_PANELS:02X})"
            )

        TLG_LOGGER.info("%r", tlg, extra=extra)  # the telegram.log line
        return tlg


class TelegramBuffer:
    """The bytes read from the wire, but not yet consumed as telegrams.

    Telegrams are consumed in arrival order. A leading byte that is not the domain
    marker is discarded by itself (resynchronisation), otherwise all six bytes of the
    candidate telegram are discarded, whether it was valid or not.
    """

    def __init__(
        self,
        *,
        sender_id: int = DEFAULT_SENDER_ID,
        receiver_id: int = DEFAULT_RECEIVER_ID,
    ) -> None:
        self._buf = bytearray()
        self._sender_id = sender_id
        self._receiver_id = receiver_id

    def __len__(self) -> int:
        return len(self._buf)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({hex_str(self._buf)})"

    def extend(self, data: bytes | bytearray) -> None:
        self._buf.extend(data)

    def clear(self) -> None:
        self._buf.clear()

    def pop_telegram(self) -> Telegram:
        """Consume the next telegram from the buffer.

        Raise InsufficientData (nothing is consumed), MalformedTelegram or
        WrongRecipient.
        """

        if len(self._buf) < TELEGRAM_LENGTH:
            raise exc.InsufficientData(
                f"Not enough data: {len(self._buf)} bytes (need {TELEGRAM_LENGTH})"
            )

        if self._buf[0] != DOMAIN:
            byte = self._buf.pop(0)
            raise exc.MalformedTelegram(
                f"Bad frame: invalid domain: {byte:02X} (not {DOMAIN:02X}), skipped"
            )

        frame = bytes(self._buf[:TELEGRAM_LENGTH])
        del self._buf[:TELEGRAM_LENGTH]

        return Telegram.from_bytes(
            frame, sender_id=self._sender_id, receiver_id=self._receiver_id
        )
