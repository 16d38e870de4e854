#!/usr/bin/env python3
"""Fixtures for testing (with a fake serial port, rather than a real bus)."""

import asyncio
import logging
from collections.abc import Callable
from typing import Any

import pytest
from serial import SerialException  # type: ignore[import-untyped]

from vallox_tx import exceptions as exc

_LOGGER = logging.getLogger(__name__)


#######################################################################################


@pytest.fixture(autouse=True)
def patches_for_tests(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("vallox_tx.gateway.INSUFFICIENT_DATA_DELAY", 0.001)
    monkeypatch.setattr("vallox_tx.gateway.TRANSPORT_ERROR_DELAY", 0.01)


class FakeSerial:  # all the 'faking' is done here
    """A pseudo-mocked serial port used for testing.

    Bytes to be received are injected via `inject()`, and are available via `read()`.
    Bytes that are written are kept in `written` (one entry per write).
    """

    def __init__(self, port: str = "/dev/ttyFAKE") -> None:
        self.portstr = port
        self.is_open = True

        self._rx_buffer = bytearray()
        self.written: list[bytes] = []

        self.fail_reads = False
        self.fail_writes = False

    def inject(self, data: bytes) -> None:
        """Make bytes available to be read, as if they had arrived on the wire."""
        self._rx_buffer.extend(data)

    @property
    def in_waiting(self) -> int:
        return len(self._rx_buffer)

    def read(self, size: int = 1) -> bytes:
        if self.fail_reads:
            raise SerialException("read failed: [Errno 5] Input/output error")
        data = bytes(self._rx_buffer[:size])
        del self._rx_buffer[:size]
        return data

    def write(self, data: bytes) -> int:
        if self.fail_writes:
            raise SerialException("write failed: [Errno 5] Input/output error")
        self.written.append(bytes(data))
        return len(data)

    def flush(self) -> None:
        pass

    def close(self) -> None:
        self.is_open = False


class FakeSerialFactory:
    """Stand-in for get_serial_instance(), returning a new FakeSerial per connect."""

    def __init__(self) -> None:
        self.instances: list[FakeSerial] = []
        self.fail_connects = False

    def __call__(self, port_name: str) -> FakeSerial:
        if self.fail_connects:
            raise exc.ConnectError(f"Unable to open the serial port: {port_name}")
        self.instances.append(FakeSerial(port_name))
        return self.instances[-1]

    @property
    def serial(self) -> FakeSerial:
        """Return the most recent instance."""
        return self.instances[-1]


@pytest.fixture()
def fake_serial(monkeypatch: pytest.MonkeyPatch) -> FakeSerialFactory:
    """Utilize a fake serial port (rather than a real bus)."""

    factory = FakeSerialFactory()
    monkeypatch.setattr("vallox_tx.gateway.get_serial_instance", factory)
    return factory


@pytest.fixture()
def frame() -> Callable[..., bytes]:
    """Return a function that will build a (valid) telegram from its attrs."""

    def make_frame(src: int, dst: int, cmd: int, arg: int) -> bytes:
        data = bytes((0x01, src, dst, cmd, arg))
        return data + bytes((sum(data) & 0xFF,))

    return make_frame


@pytest.fixture()
def wait_for() -> Callable[..., Any]:
    """Return a coroutine function that awaits a condition (up to a timeout)."""

    async def _wait_for(fnc: Callable[[], bool], timeout: float = 1.0) -> None:
        async with asyncio.timeout(timeout):
            while not fnc():
                await asyncio.sleep(0.001)

    return _wait_for
