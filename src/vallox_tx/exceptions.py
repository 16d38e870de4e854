#!/usr/bin/env python3
"""Vallox Serial - exceptions within the telegram/transport layer."""

from __future__ import annotations


class _ValloxBaseException(Exception):
    """Base class for all vallox_tx exceptions."""

    pass


class ValloxException(_ValloxBaseException):
    """Base class for all vallox_tx exceptions."""

    HINT: None | str = None

    def __init__(self, *args: object):
        super().__init__(*args)
        self.message: str | None = args[0] if args else None  # type: ignore[assignment]

    def __str__(self) -> str:
        if self.message and self.HINT:
            return f"{self.message} (hint: {self.HINT})"
        if self.message:
            return self.message
        if self.HINT:
            return f"Hint: {self.HINT}"
        return ""


class _ValloxLowerError(ValloxException):
    """A failure in the lower layer (codec, transport, serial)."""


########################################################################################
# Errors at/below the transport layer


class ProtocolError(_ValloxLowerError):
    """An error occurred when sending, receiving or exchanging telegrams."""


class TransportError(ProtocolError):
    """An error when sending or receiving frames (bytes)."""


class TransportSerialError(TransportError):
    """The transport's serial port (or socket) has thrown an error."""


class ConnectError(TransportError):
    """Unable to open the connection to the serial bridge."""

    HINT = "check the host/port of the serial-to-ethernet bridge"


########################################################################################
# Errors at/below the codec layer, incl. telegram processing


class ParserBaseError(_ValloxLowerError):
    """The telegram is corrupt/not internally consistent, or cannot be parsed."""


class TelegramInvalid(ParserBaseError):
    """The telegram is not acceptable (for whatever reason)."""


class InsufficientData(TelegramInvalid):
    """There are not (yet) enough bytes for a complete telegram."""


class MalformedTelegram(TelegramInvalid):
    """The telegram has no domain byte, or an invalid checksum."""


class WrongRecipient(TelegramInvalid):
    """The telegram is valid, but is not addressed to us."""


class ParserError(ParserBaseError):
    """The telegram cannot be parsed/constructed without error."""


class CommandInvalid(ParserError):
    """The command is corrupt/not internally consistent."""


class CompositeDecodeFailure(ParserError):
    """The high/low bytes of a composite value could not be merged."""
