#!/usr/bin/env python3
"""Vallox Serial - a Vallox Digit (RS485) telegram decoder & client."""

from __future__ import annotations

from .address import Address, friendly_name
from .catalog import code_to_variable, property_to_variable
from .command import Command
from .const import (
    ADDRESS_MASTER,
    ADDRESS_PANELS,
    DOMAIN,
    POLL_REQUEST,
    TELEGRAM_LENGTH,
    Property,
    Status,
    StatusDetail,
    Variable,
)
from .gateway import Engine
from .logger import set_tlg_logging
from .schemas import SCH_GATEWAY_CONFIG, SZ_SERIAL_PORT
from .telegram import TLG_LOGGER, Telegram, TelegramBuffer
from .transport import SerialTransport, get_serial_instance
from .typing import StatusListenerT, ValueListenerT
from .version import VERSION

__all__ = [
    "VERSION",
    #
    "SCH_GATEWAY_CONFIG",
    "SZ_SERIAL_PORT",
    #
    "ADDRESS_MASTER",
    "ADDRESS_PANELS",
    "DOMAIN",
    "POLL_REQUEST",
    "TELEGRAM_LENGTH",
    #
    "Address",
    "Command",
    "Engine",
    "Property",
    "Status",
    "StatusDetail",
    "Telegram",
    "TelegramBuffer",
    "Variable",
    #
    "SerialTransport",
    "StatusListenerT",
    "ValueListenerT",
    #
    "TLG_LOGGER",
    "code_to_variable",
    "friendly_name",
    "get_serial_instance",
    "property_to_variable",
    "set_tlg_logging",
]
