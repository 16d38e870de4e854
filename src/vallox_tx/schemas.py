#!/usr/bin/env python3
"""Vallox Serial - a Vallox Digit (RS485) telegram decoder & client.

Schema processor for the gateway's configuration.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, Final, TypedDict

import voluptuous as vol

from .const import (
    ADDRESS_PANEL1,
    ADDRESS_PANEL8,
    DEFAULT_HEARTBEAT_INTERVAL,
    DEFAULT_RECEIVER_ID,
    DEFAULT_SENDER_ID,
    DEFAULT_SHUTDOWN_TIMEOUT,
    DEFAULT_SUSPEND_TIMEOUT,
)

_LOGGER = logging.getLogger(__name__)


#
# 1/3: Serial source configuration (a serial port/URL, or a host:port of a bridge)
SZ_HOST: Final = "host"
SZ_PORT: Final = "port"
SZ_SERIAL_PORT: Final = "serial_port"

SCH_PANEL_ID = vol.All(
    vol.Coerce(int), vol.Range(min=ADDRESS_PANEL1, max=ADDRESS_PANEL8)
)
SCH_TCP_PORT = vol.All(vol.Coerce(int), vol.Range(min=1, max=65535))

SCH_SERIAL_SOURCE = vol.Any(
    vol.Schema(
        {vol.Required(SZ_SERIAL_PORT): vol.All(str, vol.Length(min=1))},
        extra=vol.PREVENT_EXTRA,
    ),
    vol.Schema(
        {
            vol.Required(SZ_HOST): vol.All(str, vol.Length(min=1)),
            vol.Required(SZ_PORT): SCH_TCP_PORT,
        },
        extra=vol.PREVENT_EXTRA,
    ),
)


def extract_serial_port(config: dict[str, Any]) -> str | None:
    """Return a pyserial URL/device from a serial source dict (None if it has none)."""

    if port_name := config.get(SZ_SERIAL_PORT):
        return port_name  # type: ignore[no-any-return]
    if config.get(SZ_HOST):
        return f"socket://{config[SZ_HOST]}:{config[SZ_PORT]}"
    return None


#
# 2/3: Telegram log configuration
SZ_FILE_NAME: Final = "file_name"
SZ_TELEGRAM_LOG: Final = "telegram_log"
SZ_ROTATE_BACKUPS: Final = "rotate_backups"
SZ_ROTATE_BYTES: Final = "rotate_bytes"


class TlgLogConfigT(TypedDict):
    file_name: str
    rotate_backups: int
    rotate_bytes: int | None


def NormaliseTelegramLog(rotate_backups: int = 0) -> Callable[..., Any]:
    def normalise_telegram_log(node_value: str | TlgLogConfigT) -> TlgLogConfigT:
        if isinstance(node_value, str):
            return {
                SZ_FILE_NAME: node_value,
                SZ_ROTATE_BACKUPS: rotate_backups,
                SZ_ROTATE_BYTES: None,
            }
        return node_value

    return normalise_telegram_log


SCH_TELEGRAM_LOG_CONFIG = vol.Schema(
    {
        vol.Required(SZ_FILE_NAME): str,
        vol.Optional(SZ_ROTATE_BACKUPS, default=0): vol.Any(None, int),
        vol.Optional(SZ_ROTATE_BYTES, default=None): vol.Any(None, int),
    },
    extra=vol.PREVENT_EXTRA,
)

SCH_TELEGRAM_LOG = vol.Any(
    None,
    vol.All(str, NormaliseTelegramLog()),
    SCH_TELEGRAM_LOG_CONFIG,
)


#
# 3/3: Gateway (engine) configuration
SZ_DISABLE_SENDING: Final = "disable_sending"
SZ_HEARTBEAT_INTERVAL: Final = "heartbeat_interval"
SZ_RECEIVER_ID: Final = "receiver_id"
SZ_SENDER_ID: Final = "sender_id"
SZ_SHUTDOWN_TIMEOUT: Final = "shutdown_timeout"
SZ_SUSPEND_TIMEOUT: Final = "suspend_timeout"


SCH_GATEWAY_CONFIG = vol.Schema(
    {
        vol.Optional(SZ_SENDER_ID, default=DEFAULT_SENDER_ID): SCH_PANEL_ID,
        vol.Optional(SZ_RECEIVER_ID, default=DEFAULT_RECEIVER_ID): SCH_PANEL_ID,
        vol.Optional(SZ_HEARTBEAT_INTERVAL, default=DEFAULT_HEARTBEAT_INTERVAL): vol.All(
            vol.Coerce(float), vol.Range(min=10, max=3600)
        ),
        vol.Optional(SZ_SHUTDOWN_TIMEOUT, default=DEFAULT_SHUTDOWN_TIMEOUT): vol.All(
            vol.Coerce(float), vol.Range(min=0, max=60)
        ),
        vol.Optional(SZ_SUSPEND_TIMEOUT, default=DEFAULT_SUSPEND_TIMEOUT): vol.All(
            vol.Coerce(float), vol.Range(min=0, max=60)
        ),
        vol.Optional(SZ_DISABLE_SENDING, default=False): bool,
        vol.Optional(SZ_TELEGRAM_LOG, default=None): SCH_TELEGRAM_LOG,
    },
    extra=vol.PREVENT_EXTRA,
)
