#!/usr/bin/env python3
"""Vallox Serial - Test the variable catalog, and the bus addresses."""

import pytest

from vallox_tx import Address, Property, Variable, friendly_name
from vallox_tx.catalog import (
    PROPERTY_VARIABLE_MAP,
    WRITABLE_BYTES,
    WRITABLE_FAN_SPEEDS,
    WRITABLE_TEMPERATURES,
    code_to_variable,
    is_writable,
    property_to_variable,
)

DERIVED_PROPERTIES = (
    Property.IN_EFFICIENCY,
    Property.OUT_EFFICIENCY,
    Property.AVERAGE_EFFICIENCY,
)


def test_code_to_variable() -> None:
    for code in range(256):
        variable = code_to_variable(code)  # never fails

        assert isinstance(variable, Variable)
        assert variable == Variable.UNKNOWN or variable == code

    assert code_to_variable(0x29) is Variable.FAN_SPEED
    assert code_to_variable(0x00) is Variable.POLL
    assert code_to_variable(0x01) is Variable.UNKNOWN
    assert code_to_variable(0xFF) is Variable.UNKNOWN


def test_property_to_variable() -> None:
    for prop in Property:
        if prop in DERIVED_PROPERTIES:
            assert property_to_variable(prop) is None
        else:
            assert property_to_variable(prop) in Variable

    assert set(PROPERTY_VARIABLE_MAP) == set(Property) - set(DERIVED_PROPERTIES)

    assert property_to_variable(Property.CO2) is Variable.CO2_HIGH
    assert property_to_variable(Property.CO2_SETPOINT) is Variable.CO2_SET_POINT_UPPER
    assert property_to_variable(Property.POWER_STATE) is Variable.SELECT
    assert property_to_variable(Property.POST_HEATING_ON) is (
        Variable.IOPORT_MULTI_PURPOSE_1
    )


def test_writable_properties() -> None:
    assert not WRITABLE_FAN_SPEEDS & WRITABLE_TEMPERATURES
    assert not WRITABLE_FAN_SPEEDS & WRITABLE_BYTES
    assert not WRITABLE_TEMPERATURES & WRITABLE_BYTES

    assert is_writable(Property.FAN_SPEED)
    assert is_writable(Property.HEATING_SETPOINT)
    assert is_writable(Property.SELECT_STATUS)

    assert not is_writable(Property.TEMP_INSIDE)
    assert not is_writable(Property.POWER_STATE)
    assert not any(is_writable(p) for p in DERIVED_PROPERTIES)


@pytest.mark.parametrize(
    "addr, name",
    (
        (0x10, "MB*"),
        (0x11, "MB1"),
        (0x20, "PN*"),
        (0x21, "PN1"),
        (0x28, "PN8"),
        (0x29, "29"),
        (0x00, "00"),
    ),
)
def test_friendly_name(addr: int, name: str) -> None:
    assert friendly_name(addr) == name
    assert str(Address(addr)) == name


def test_address_class() -> None:
    assert Address(0x11).is_master
    assert not Address(0x11).is_panel
    assert Address(0x20).is_panel
    assert Address(0x28).is_panel

    assert Address(0x21) == Address(0x21)
    assert Address(0x21) == 0x21
    assert len({Address(0x21), Address(0x21), Address(0x22)}) == 2

    assert repr(Address(0x2A)) == "2A"

    with pytest.raises(ValueError):
        Address(0x100)
    with pytest.raises(ValueError):
        Address(-1)
