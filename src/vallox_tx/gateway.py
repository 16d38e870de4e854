#!/usr/bin/env python3
"""Vallox Serial - The connection to the RS485 bus (usually via a serial bridge)."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Any, Final

from . import exceptions as exc
from .catalog import property_to_variable
from .command import Command
from .const import (
    ADDRESS_MASTER,
    INSUFFICIENT_DATA_DELAY,
    TELEGRAM_LENGTH,
    TRANSPORT_ERROR_DELAY,
    Property,
    Status,
    StatusDetail,
    Variable,
)
from .logger import set_tlg_logging
from .schemas import (
    SCH_GATEWAY_CONFIG,
    SCH_SERIAL_SOURCE,
    SZ_DISABLE_SENDING,
    SZ_HEARTBEAT_INTERVAL,
    SZ_HOST,
    SZ_PORT,
    SZ_RECEIVER_ID,
    SZ_SENDER_ID,
    SZ_SERIAL_PORT,
    SZ_SHUTDOWN_TIMEOUT,
    SZ_SUSPEND_TIMEOUT,
    SZ_TELEGRAM_LOG,
    extract_serial_port,
)
from .telegram import TLG_LOGGER, Telegram
from .transport import SerialTransport, get_serial_instance
from .typing import SerPortNameT

# the property polled by the heartbeat, to confirm the connection is alive
HEARTBEAT_PROPERTY: Final = Property.SELECT_STATUS

SZ_LISTEN_TASK: Final = "listen_task"
SZ_HEARTBEAT_TASK: Final = "heartbeat_task"


_LOGGER = logging.getLogger(__name__)


class Engine:
    """The engine class (the lifecycle of the connection to the bus).

    Background work (the receive loop, the heartbeat) is run as tasks of the event
    loop supplied by the caller: there is a single reader of the bus, and only it
    invokes _tlg_received().
    """

    def __init__(
        self,
        port_name: SerPortNameT | None,
        *,
        host: str | None = None,
        port: int | None = None,
        config: dict[str, Any] | None = None,
        loop: asyncio.AbstractEventLoop | None = None,
        tlg_console: bool = False,
    ) -> None:
        self.ser_name: SerPortNameT | None = None
        if port_name or host:
            self.ser_name = self._ser_name(port_name, host, port)  # may: vol.Invalid

        self.config: dict[str, Any] = SCH_GATEWAY_CONFIG(config or {})

        self._sender_id: int = self.config[SZ_SENDER_ID]
        self._receiver_id: int = self.config[SZ_RECEIVER_ID]
        self._disable_sending: bool = self.config[SZ_DISABLE_SENDING]

        self._loop = loop or asyncio.get_running_loop()

        self._transport: SerialTransport | None = None  # None until connect()

        self._tasks: dict[str, asyncio.Task[None]] = {}
        self._stopping = asyncio.Event()  # the shutdown flag
        self._resumed = asyncio.Event()  # cleared while the bus is suspended
        self._resumed.set()

        if (tlg_log := self.config[SZ_TELEGRAM_LOG]) or tlg_console:
            set_tlg_logging(TLG_LOGGER, cc_console=tlg_console, **(tlg_log or {}))

    def __str__(self) -> str:
        return f"{self.__class__.__name__}({self.ser_name})"

    @staticmethod
    def _ser_name(
        port_name: SerPortNameT | None, host: str | None, port: int | None
    ) -> SerPortNameT:
        pairs = ((SZ_SERIAL_PORT, port_name), (SZ_HOST, host), (SZ_PORT, port))
        source: dict[str, Any] = {k: v for k, v in pairs if v is not None}
        return extract_serial_port(SCH_SERIAL_SOURCE(source))  # type: ignore[return-value]

    @property
    def is_connected(self) -> bool:
        return self._transport is not None and not self._transport.is_closing()

    @property
    def is_listening(self) -> bool:
        return bool((t := self._tasks.get(SZ_LISTEN_TASK)) and not t.done())

    @property
    def is_suspended(self) -> bool:
        return not self._resumed.is_set()

    def _set_suspended(self, suspended: bool) -> None:
        if suspended:
            self._resumed.clear()
        else:
            self._resumed.set()

    def _status_changed(
        self, status: Status, detail: StatusDetail, message: str | None = None
    ) -> None:
        """Handle a change in the status of the connection (to be overridden)."""
        _LOGGER.info("%s: status is now %s (%s): %s", self, status, detail, message)

    def _tlg_received(self, tlg: Telegram) -> None:
        """Handle a (valid) telegram addressed to us (to be overridden)."""
        _LOGGER.debug("%r < Received", tlg)

    async def connect(self, host: str | None = None, port: int | None = None) -> None:
        """Open the connection to the bus, and notify that it is online.

        Raise ConnectError if the connection cannot be opened (it is not retried).
        """

        if host is not None:
            self.ser_name = self._ser_name(None, host, port)
        if not self.ser_name:
            raise exc.ConnectError("No serial port (or host:port) has been specified")

        ser_instance = await self._loop.run_in_executor(
            None, get_serial_instance, self.ser_name
        )  # may: raise ConnectError

        self._transport = SerialTransport(
            ser_instance,
            sender_id=self._sender_id,
            receiver_id=self._receiver_id,
            disable_sending=self._disable_sending,
        )
        _LOGGER.debug("%s: connected", self)

        self._status_changed(Status.ONLINE, StatusDetail.NONE, None)

    async def reconnect(self) -> None:
        """Close the connection (if any), and open it again."""

        _LOGGER.debug("%s: trying to reconnect", self)
        self.close()
        await self.connect()

    def close(self) -> None:
        """Close the connection (the store is not reset)."""

        if self._transport is not None:
            self._transport.close()
            _LOGGER.debug("%s: closed", self)
        self._transport = None

    async def _sleep(self, delay: float) -> None:
        """Sleep for delay seconds, or until the shutdown flag is set."""

        if delay <= 0:
            await asyncio.sleep(0)
            return
        with contextlib.suppress(TimeoutError):
            await asyncio.wait_for(self._stopping.wait(), timeout=delay)

    def _receive(self) -> Telegram:
        if self._transport is None:
            raise exc.TransportError("Not connected")
        if (count := self._transport.available) < TELEGRAM_LENGTH:
            raise exc.InsufficientData(f"Not enough data: {count} bytes")
        return self._transport.read_telegram()

    async def _listen(self) -> None:
        """Read telegrams until the shutdown flag is set, backing off as required.

        No exception terminates this loop.
        """

        while not self._stopping.is_set():
            delay: float = 0

            try:
                tlg = self._receive()

            except exc.InsufficientData:  # wait for more data, but ignore
                delay = INSUFFICIENT_DATA_DELAY

            except exc.MalformedTelegram as err:
                _LOGGER.warning("Issue receiving telegram, discarding: %s", err)

            except exc.WrongRecipient as err:
                _LOGGER.debug("Issue receiving telegram, discarding: %s", err)

            except exc.TransportError as err:  # retry, but not too quickly
                _LOGGER.error("Exception reading from the bus: %s", err)
                delay = TRANSPORT_ERROR_DELAY

            except Exception:  # anything else, but the loop must survive
                _LOGGER.exception("Unexpected exception reading from the bus")
                delay = TRANSPORT_ERROR_DELAY

            else:
                try:
                    self._tlg_received(tlg)
                except Exception:  # e.g. from an overridden _tlg_received
                    _LOGGER.exception("%s < exception processing telegram", tlg)

            await self._sleep(delay)

    async def _heartbeat(self) -> None:
        """Regularly poll a variable, and try to reconnect if that fails."""

        interval: float = self.config[SZ_HEARTBEAT_INTERVAL]

        while not self._stopping.is_set():
            await self._sleep(interval)
            if self._stopping.is_set():
                break

            try:
                await self.send_poll(HEARTBEAT_PROPERTY)
            except exc.TransportError as err:
                msg = f"Exception sending heartbeat poll: {err}"
                _LOGGER.error(msg)
            except Exception as err:  # anything else, but the heartbeat must survive
                msg = f"Unexpected exception sending heartbeat poll: {err}"
                _LOGGER.exception(msg)
            else:
                continue

            self._status_changed(Status.OFFLINE, StatusDetail.COMMUNICATION_ERROR, msg)

            try:
                await self.reconnect()
            except exc.ConnectError as err:
                msg = f"Exception reconnecting: {err}"
                _LOGGER.error(msg)
            except Exception as err:
                msg = f"Unexpected exception reconnecting: {err}"
                _LOGGER.exception(msg)
            else:
                continue

            self._status_changed(Status.OFFLINE, StatusDetail.COMMUNICATION_ERROR, msg)

    def start_listening(self) -> None:
        """Start the receive loop (as a task of the event loop)."""

        if self.is_listening:
            _LOGGER.warning("%s: already listening", self)
            return

        self._stopping.clear()
        self._tasks[SZ_LISTEN_TASK] = self._loop.create_task(
            self._listen(), name=SZ_LISTEN_TASK
        )
        _LOGGER.debug("%s: started listening to telegrams", self)

    def start_heartbeat(self) -> None:
        """Start the heartbeat (as a task of the event loop)."""

        if (t := self._tasks.get(SZ_HEARTBEAT_TASK)) and not t.done():
            _LOGGER.warning("%s: heartbeat already started", self)
            return

        self._stopping.clear()
        self._tasks[SZ_HEARTBEAT_TASK] = self._loop.create_task(
            self._heartbeat(), name=SZ_HEARTBEAT_TASK
        )
        _LOGGER.debug("%s: started the heartbeat", self)

    async def stop_listening(self) -> None:
        """Set the shutdown flag, then cancel any task that has not stopped in time."""

        self._stopping.set()

        if tasks := [t for t in self._tasks.values() if not t.done()]:
            _, pending = await asyncio.wait(
                tasks, timeout=self.config[SZ_SHUTDOWN_TIMEOUT]
            )
            for task in pending:
                _LOGGER.warning("%s: task %s cancelled", self, task.get_name())
                task.cancel()
            if pending:
                await asyncio.wait(pending)

        for task in self._tasks.values():  # collect the result of any failed task
            if not task.cancelled() and (err := task.exception()):
                _LOGGER.error("%s: task %s failed: %r", self, task.get_name(), err)

        self._tasks = {}
        _LOGGER.debug("%s: stopped listening to telegrams", self)

    async def wait_until_stopped(self) -> None:
        """Wait until the shutdown flag is set (e.g. by stop_listening())."""
        await self._stopping.wait()

    async def send_cmd(self, cmd: Command) -> bool:
        """Write a command to the bus, unless the bus is (and remains) suspended.

        If the bus is suspended, wait for it to be resumed (up to suspend_timeout
        seconds). Return True if the command was sent, and False if it was skipped.
        Raise TransportError if it could not be sent, after notifying the failure.
        """

        if self._disable_sending:
            raise exc.TransportError("Sending has been disabled")

        if not self._resumed.is_set():
            timeout = self.config[SZ_SUSPEND_TIMEOUT]
            _LOGGER.info("%r < Bus is suspended, deferring", cmd)
            try:
                await asyncio.wait_for(self._resumed.wait(), timeout=timeout)
            except TimeoutError:
                _LOGGER.warning(
                    "%r < Bus is still suspended after %ss, skipped", cmd, timeout
                )
                return False

        try:
            if self._transport is None:
                raise exc.TransportError("Not connected")
            self._transport.write_frame(cmd)

        except exc.TransportError as err:
            msg = f"Exception writing to the bus: {err}"
            _LOGGER.error(msg)
            self._status_changed(Status.OFFLINE, StatusDetail.COMMUNICATION_ERROR, msg)
            raise

        return True

    async def send(
        self, variable: Variable | int, value: int, dst: int = ADDRESS_MASTER
    ) -> bool:
        """Write a (raw) value to a variable, by default of the master.

        Raise CommandInvalid if the variable or value is not a byte.
        """

        cmd = Command.put(variable, value, dst=dst, src=self._sender_id)
        return await self.send_cmd(cmd)

    async def send_poll(self, prop: Property) -> bool:
        """Request the value of a property (the reply is received asynchronously).

        Return False if the property cannot be polled (e.g. it is derived).
        """

        if not self.is_listening:
            _LOGGER.warning("%s: poll requested while no-one is listening", self)

        if (variable := property_to_variable(prop)) is None:
            _LOGGER.debug("%s: %s is derived, so cannot be polled", self, prop)
            return False

        _LOGGER.debug("%s: polling %s (via %s)", self, prop, variable)
        cmd = Command.poll(variable, src=self._sender_id)
        return await self.send_cmd(cmd)
