#!/usr/bin/env python3
"""Vallox Serial - Telegram layer - Helper functions (value conversions)."""

from __future__ import annotations

from typing import Final

from . import exceptions as exc

# NTC temperature conversion table, indexed by the raw byte (monotonic non-decreasing)
TEMPERATURE_MAPPING: Final[tuple[int, ...]] = (
    -74, -70, -66, -62, -59, -56, -54, -52, -50, -48,  # 0x00 - 0x09
    -47, -46, -44, -43, -42, -41, -40, -39, -38, -37,  # 0x0A - 0x13
    -36, -35, -34, -33, -33, -32, -31, -30, -30, -29,  # 0x14 - 0x1D
    -28, -28, -27, -27, -26, -25, -25, -24, -24, -23,  # 0x1E - 0x27
    -23, -22, -22, -21, -21, -20, -20, -19, -19, -19,  # 0x28 - 0x31
    -18, -18, -17, -17, -16, -16, -16, -15, -15, -14,  # 0x32 - 0x3B
    -14, -14, -13, -13, -12, -12, -12, -11, -11, -11,  # 0x3C - 0x45
    -10, -10, -9, -9, -9, -8, -8, -8, -7, -7,  # .......... 0x46 - 0x4F
    -7, -6, -6, -6, -5, -5, -5, -4, -4, -4,  # ............ 0x50 - 0x59
    -3, -3, -3, -2, -2, -2, -1, -1, -1, -1,  # ............ 0x5A - 0x63
    0, 0, 0, 1, 1, 1, 2, 2, 2, 3,  # ...................... 0x64 - 0x6D
    3, 3, 4, 4, 4, 5, 5, 5, 5, 6,  # ...................... 0x6E - 0x77
    6, 6, 7, 7, 7, 8, 8, 8, 9, 9,  # ...................... 0x78 - 0x81
    9, 10, 10, 10, 11, 11, 11, 12, 12, 12,  # ............. 0x82 - 0x8B
    13, 13, 13, 14, 14, 14, 15, 15, 15, 16,  # ............ 0x8C - 0x95
    16, 16, 17, 17, 18, 18, 18, 19, 19, 19,  # ............ 0x96 - 0x9F
    20, 20, 21, 21, 21, 22, 22, 22, 23, 23,  # ............ 0xA0 - 0xA9
    24, 24, 24, 25, 25, 26, 26, 27, 27, 27,  # ............ 0xAA - 0xB3
    28, 28, 29, 29, 30, 30, 31, 31, 32, 32,  # ............ 0xB4 - 0xBD
    33, 33, 34, 34, 35, 35, 36, 36, 37, 37,  # ............ 0xBE - 0xC7
    38, 38, 39, 40, 40, 41, 41, 42, 43, 43,  # ............ 0xC8 - 0xD1
    44, 45, 45, 46, 47, 48, 48, 49, 50, 51,  # ............ 0xD2 - 0xDB
    52, 53, 53, 54, 55, 56, 57, 59, 60, 61,  # ............ 0xDC - 0xE5
    62, 63, 65, 66, 68, 69, 71, 73, 75, 77,  # ............ 0xE6 - 0xEF
    79, 81, 82, 86, 90, 93, 97, 100, 100, 100,  # ......... 0xF0 - 0xF9
    100, 100, 100, 100, 100, 100,  # ...................... 0xFA - 0xFF
)  # fmt: skip

# the index where TEMPERATURE_MAPPING is 0 C, used when no better match is found
DEFAULT_TEMPERATURE_BYTE: Final[int] = 0x64

# fan speeds 1 (index 0) to 8 (index 7)
FAN_SPEED_MAPPING: Final[tuple[int, ...]] = (
    0x01,
    0x03,
    0x07,
    0x0F,
    0x1F,
    0x3F,
    0x7F,
    0xFF,
)
MIN_FAN_SPEED: Final[int] = 1
MAX_FAN_SPEED: Final[int] = 8


def convert_temperature(value: int) -> int:
    """Convert a raw byte (e.g. 0xA0) to a temperature in Celsius (e.g. 20)."""
    return TEMPERATURE_MAPPING[value & 0xFF]


def convert_back_temperature(temperature: int) -> int:
    """Convert a temperature (Celsius) to the first raw byte that is at least as warm.

    Returns DEFAULT_TEMPERATURE_BYTE if the temperature is off the (upper) scale.
    """

    for idx, value in enumerate(TEMPERATURE_MAPPING):
        if value >= temperature:
            return idx
    return DEFAULT_TEMPERATURE_BYTE


def convert_fan_speed(value: int) -> int | None:
    """Convert a raw byte (e.g. 0xFF) to a fan speed (e.g. 8).

    Return None if the byte is not an exact match (i.e. the speed is unknown).
    """

    for idx, raw in enumerate(FAN_SPEED_MAPPING):
        if raw == value & 0xFF:
            return idx + 1
    return None


def convert_back_fan_speed(speed: int) -> int:
    """Convert a fan speed from 1 to 8 to its raw byte (e.g. 8 -> 0xFF)."""

    if not MIN_FAN_SPEED <= speed <= MAX_FAN_SPEED:
        raise ValueError(f"Invalid fan speed: {speed} (not {MIN_FAN_SPEED}-8)")
    return FAN_SPEED_MAPPING[speed - 1]


def convert_humidity(value: int) -> float:
    """Convert a raw byte to a relative humidity (%)."""
    return ((value & 0xFF) - 51) / 2.04


def hex_byte(value: int) -> str:
    """Convert (say) 10 to '0A'."""
    return f"{value & 0xFF:02X}"


def hex_str(frame: bytes | bytearray) -> str:
    """Convert (say) b'\x01\x11\x21\x29\x01\x5d' to '01 11 21 29 01 5D'."""
    return " ".join(hex_byte(b) for b in frame)


def merge_hex_pair(high: int, low: int) -> int:
    """Merge two bytes via their hex digits, so (0x32, 0x07) -> int('3207', 16).

    This is how the unit encodes CO2 values. Raise CompositeDecodeFailure if either
    half is not a byte (i.e. it would not make a pair of hex digits).
    """

    try:
        return int(bytes((high, low)).hex(), 16)
    except (TypeError, ValueError) as err:
        raise exc.CompositeDecodeFailure(
            f"Unable to merge high/low bytes: {high!r}, {low!r}"
        ) from err


def is_bit_set(value: int, bit: int) -> bool:
    """Return True if the bit (0 is the least significant) is set."""
    return bool(value & (1 << bit))
