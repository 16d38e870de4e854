#!/usr/bin/env python3
"""Vallox Serial - Test the gateway (its store, listeners, and writes)."""

import asyncio
from collections.abc import Callable
from typing import Any

import pytest

from vallox import Gateway
from vallox_tx import Property, Variable
from vallox_tx.exceptions import CommandInvalid
from vallox_tx.schemas import SZ_SUSPEND_TIMEOUT

pytestmark = pytest.mark.asyncio()

PORT_NAME = "/dev/ttyFAKE"

SET_FAN_SPEED_3 = bytes.fromhex("01 28 11 29 07 6A")


# ### TESTS ############################################################################


async def test_gateway_value_listeners(
    fake_serial: Any, frame: Callable[..., bytes], wait_for: Callable[..., Any]
) -> None:
    gwy = Gateway(PORT_NAME)

    calls: list[tuple[str, Property]] = []

    def bad_listener(prop: Property) -> None:
        calls.append(("bad", prop))
        raise ZeroDivisionError

    def good_listener(prop: Property) -> None:
        calls.append(("good", prop))

    gwy.add_value_listener(bad_listener)
    remove = gwy.add_value_listener(good_listener)
    gwy.add_value_listener(good_listener)  # a duplicate is ignored

    await gwy.start(start_heartbeat=False)

    try:
        fake_serial.serial.inject(frame(0x11, 0x20, Variable.FAN_SPEED, 0x07))
        await wait_for(lambda: len(calls) == 2)

        # in the order they were added, and an exception does not stop the others
        assert calls == [("bad", Property.FAN_SPEED), ("good", Property.FAN_SPEED)]
        assert gwy.get_state()["fan_speed"] == 3

        remove()
        fake_serial.serial.inject(frame(0x11, 0x21, Variable.FAN_SPEED, 0x0F))
        await wait_for(lambda: gwy.store.fan_speed == 4)

        assert calls[2:] == [("bad", Property.FAN_SPEED)]
        assert gwy.is_listening

    finally:
        await gwy.stop()


async def test_gateway_set_property(fake_serial: Any) -> None:
    gwy = Gateway(PORT_NAME)
    await gwy.start(start_heartbeat=False)

    try:
        assert await gwy.set_property(Property.FAN_SPEED, 3) is True
        assert await gwy.set_property(Property.HEATING_SETPOINT, 20) is True
        assert await gwy.set_property(Property.SELECT_STATUS, 0x09) is True

        assert fake_serial.serial.written == [
            SET_FAN_SPEED_3,
            bytes.fromhex("01 28 11 A4 A0 7E"),
            bytes.fromhex("01 28 11 A3 09 E6"),
        ]

        with pytest.raises(CommandInvalid):
            await gwy.set_property(Property.FAN_SPEED, 9)
        with pytest.raises(CommandInvalid):
            await gwy.set_property(Property.TEMP_INSIDE, 20)  # read-only
        with pytest.raises(CommandInvalid):
            await gwy.set_property(Property.IN_EFFICIENCY, 50)  # derived

        assert len(fake_serial.serial.written) == 3

    finally:
        await gwy.stop()


async def test_gateway_suspend_deferred(
    fake_serial: Any, frame: Callable[..., bytes], wait_for: Callable[..., Any]
) -> None:
    """A write during a suspend window waits until the bus is resumed."""

    gwy = Gateway(PORT_NAME)
    notified: list[Property] = []
    gwy.add_value_listener(notified.append)

    await gwy.start(start_heartbeat=False)

    try:
        fake_serial.serial.inject(frame(0x11, 0x20, Variable.SUSPEND, 0x00))
        await wait_for(lambda: gwy.is_suspended)

        assert gwy.store.suspended is True
        assert notified == []

        task = asyncio.create_task(gwy.set_property(Property.FAN_SPEED, 3))
        await asyncio.sleep(0.05)

        assert not task.done()
        assert fake_serial.serial.written == []

        fake_serial.serial.inject(frame(0x11, 0x20, Variable.RESUME, 0x00))

        assert await asyncio.wait_for(task, timeout=1) is True
        assert not gwy.is_suspended
        assert fake_serial.serial.written == [SET_FAN_SPEED_3]

    finally:
        await gwy.stop()


async def test_gateway_suspend_skipped(
    fake_serial: Any, frame: Callable[..., bytes], wait_for: Callable[..., Any]
) -> None:
    """A write is skipped if the bus is not resumed in time."""

    gwy = Gateway(PORT_NAME, config={SZ_SUSPEND_TIMEOUT: 0.05})
    await gwy.start(start_heartbeat=False)

    try:
        fake_serial.serial.inject(frame(0x11, 0x20, Variable.SUSPEND, 0x00))
        await wait_for(lambda: gwy.is_suspended)

        assert await gwy.set_property(Property.FAN_SPEED, 3) is False
        assert await gwy.send_poll(Property.TEMP_INSIDE) is False
        assert fake_serial.serial.written == []

    finally:
        await gwy.stop()


async def test_gateway_send_raw(fake_serial: Any) -> None:
    gwy = Gateway(PORT_NAME, config={"sender_id": 0x21, "receiver_id": 0x22})
    await gwy.start(start_heartbeat=False)

    try:
        assert await gwy.send(Variable.FAN_SPEED, 0x07, dst=0x20) is True
        assert fake_serial.serial.written == [bytes.fromhex("01 21 20 29 07 72")]

        with pytest.raises(CommandInvalid):
            await gwy.send(Variable.FAN_SPEED, 0x100)

    finally:
        await gwy.stop()


async def test_gateway_state_survives_reconnect(
    fake_serial: Any, frame: Callable[..., bytes], wait_for: Callable[..., Any]
) -> None:
    gwy = Gateway(PORT_NAME)
    await gwy.start(start_heartbeat=False)

    try:
        fake_serial.serial.inject(frame(0x11, 0x20, Variable.TEMP_INSIDE, 0xA0))
        await wait_for(lambda: gwy.store.temp_inside == 20)

        await gwy.reconnect()

        assert len(fake_serial.instances) == 2
        assert gwy.store.temp_inside == 20  # the store is not reset

    finally:
        await gwy.stop()
