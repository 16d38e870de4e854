#!/usr/bin/env python3
"""Vallox Serial - bus addresses (mainboards & control panels)."""

from __future__ import annotations

from functools import lru_cache
from typing import Final

from .const import (
    ADDRESS_MASTER,
    ADDRESS_MASTERS,
    ADDRESS_PANEL1,
    ADDRESS_PANEL8,
    ADDRESS_PANELS,
)

MASTER_SLUG: Final = "MB"
PANEL_SLUG: Final = "PN"


class Address:
    """The bus Address class (a single byte)."""

    def __init__(self, addr: int) -> None:
        """Create an address from a valid address byte."""

        if not self.is_valid(addr):
            raise ValueError(f"Invalid address: {addr!r}")
        self.id = addr

    def __repr__(self) -> str:
        return f"{self.id:02X}"

    def __str__(self) -> str:
        return friendly_name(self.id)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Address):
            return self.id == other.id
        if isinstance(other, int):
            return self.id == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.id)

    @staticmethod
    def is_valid(value: object) -> bool:
        return isinstance(value, int) and 0 <= value <= 0xFF

    @property
    def is_master(self) -> bool:
        return self.id & 0xF0 == ADDRESS_MASTERS

    @property
    def is_panel(self) -> bool:
        return self.id & 0xF0 == ADDRESS_PANELS


@lru_cache(maxsize=256)
def friendly_name(addr: int) -> str:
    """Convert (say) 0x11 to 'MB1', 0x28 to 'PN8', 0x20 to 'PN*' and 0x05 to '05'."""

    if addr == ADDRESS_MASTERS:
        return f"{MASTER_SLUG}*"
    if ADDRESS_MASTER <= addr <= ADDRESS_MASTERS + 0x0F:
        return f"{MASTER_SLUG}{addr - ADDRESS_MASTERS}"
    if addr == ADDRESS_PANELS:
        return f"{PANEL_SLUG}*"
    if ADDRESS_PANEL1 <= addr <= ADDRESS_PANEL8:
        return f"{PANEL_SLUG}{addr - ADDRESS_PANELS}"
    return f"{addr:02X}"
