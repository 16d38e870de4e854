#!/usr/bin/env python3
"""Vallox Serial - the gateway (the connection to a ventilation unit, and its state)."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from vallox_tx import (
    Command,
    Property,
    Status,
    StatusDetail,
    StatusListenerT,
    Telegram,
    ValueListenerT,
)
from vallox_tx import exceptions as exc
from vallox_tx.catalog import (
    WRITABLE_BYTES,
    WRITABLE_FAN_SPEEDS,
    WRITABLE_TEMPERATURES,
    property_to_variable,
)
from vallox_tx.gateway import Engine
from vallox_tx.typing import SerPortNameT

from .dispatcher import process_telegram
from .store import ValloxStore

_LOGGER = logging.getLogger(__name__)


class Gateway(Engine):
    """The gateway class.

    Keeps the store up to date from the telegrams it receives, and notifies its
    listeners of any property that was updated (in the order they were added).
    """

    def __init__(
        self,
        port_name: SerPortNameT | None = None,
        *,
        host: str | None = None,
        port: int | None = None,
        config: dict[str, Any] | None = None,
        loop: asyncio.AbstractEventLoop | None = None,
        **kwargs: Any,
    ) -> None:
        if kwargs.pop("debug_mode", None):
            _LOGGER.setLevel(logging.DEBUG)

        super().__init__(
            port_name, host=host, port=port, config=config, loop=loop, **kwargs
        )

        self._store = ValloxStore()

        self._value_listeners: list[ValueListenerT] = []
        self._status_listeners: list[StatusListenerT] = []

    def __repr__(self) -> str:
        return f"Gateway(port_name={self.ser_name}, sender_id={self._sender_id:02X})"

    @property
    def store(self) -> ValloxStore:
        """Return the store (the latest known values), to be treated as read-only."""
        return self._store

    def add_value_listener(self, fnc: ValueListenerT) -> Callable[[], None]:
        """Add a callback for when a property is updated, fnc(prop).

        Return a function that will remove the callback.
        """

        def del_listener() -> None:
            if fnc in self._value_listeners:
                self._value_listeners.remove(fnc)

        if fnc not in self._value_listeners:
            self._value_listeners.append(fnc)
        return del_listener

    def add_status_listener(self, fnc: StatusListenerT) -> Callable[[], None]:
        """Add a callback for when the connection status changes.

        Is invoked as fnc(status, detail, message). Return a function that will
        remove the callback.
        """

        def del_listener() -> None:
            if fnc in self._status_listeners:
                self._status_listeners.remove(fnc)

        if fnc not in self._status_listeners:
            self._status_listeners.append(fnc)
        return del_listener

    def _notify_value(self, prop: Property) -> None:
        for fnc in self._value_listeners:
            try:
                fnc(prop)
            except Exception:  # protect the receive loop from the listeners
                _LOGGER.exception("%s < exception from value listener %s", prop, fnc)

    def _status_changed(
        self, status: Status, detail: StatusDetail, message: str | None = None
    ) -> None:
        super()._status_changed(status, detail, message)

        for fnc in self._status_listeners:
            try:
                fnc(status, detail, message)
            except Exception:  # protect the receive loop from the listeners
                _LOGGER.exception("%s < exception from status listener %s", status, fnc)

    def _tlg_received(self, tlg: Telegram) -> None:
        """A callback to handle telegrams from the receive loop (the only writer)."""

        super()._tlg_received(tlg)

        process_telegram(self._store, tlg, self._notify_value)
        self._set_suspended(self._store.suspended)

    async def start(self, /, *, start_heartbeat: bool = True) -> None:
        """Connect to the bus, then start listening (and the heartbeat).

        Raise ConnectError if the connection cannot be opened.
        """

        await self.connect()
        self.start_listening()

        if start_heartbeat and not self._disable_sending:
            self.start_heartbeat()

    async def stop(self) -> None:
        """Stop listening (and the heartbeat), then close the connection."""

        await self.stop_listening()
        self.close()

    def get_state(self) -> dict[str, Any]:
        """Return the latest known value of every property (and the suspended flag)."""
        return self._store.as_dict()

    async def set_property(self, prop: Property, value: Any) -> bool:
        """Write a new value of a (writable) property to the master.

        Fan speeds are 1-8, setpoints & thresholds are Celsius, the others are bytes.
        Return False if the write was skipped (the bus remained suspended).
        """

        variable = property_to_variable(prop)

        if variable is None:
            raise exc.CommandInvalid(f"{prop} is derived, so is not writable")

        if prop in WRITABLE_FAN_SPEEDS:
            cmd = Command.set_fan_speed(value, variable=variable, src=self._sender_id)
        elif prop in WRITABLE_TEMPERATURES:
            cmd = Command.set_temperature(variable, value, src=self._sender_id)
        elif prop in WRITABLE_BYTES:
            cmd = Command.put(variable, value, src=self._sender_id)
        else:
            raise exc.CommandInvalid(f"{prop} is not writable")

        return await self.send_cmd(cmd)
