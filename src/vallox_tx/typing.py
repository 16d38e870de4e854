#!/usr/bin/env python3
"""Vallox Serial - Typing for the gateway's listeners & transport."""

from collections.abc import Callable
from typing import TypeAlias

from .const import Property, Status, StatusDetail

SerPortNameT: TypeAlias = str

# fnc(prop), invoked zero or more times per telegram
ValueListenerT: TypeAlias = Callable[[Property], None]

# fnc(status, detail, message), invoked upon connect, write failure & reconnect failure
StatusListenerT: TypeAlias = Callable[[Status, StatusDetail, str | None], None]
