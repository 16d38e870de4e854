#!/usr/bin/env python3
"""Vallox Serial - a client for Vallox Digit ventilation units (via RS485).

Works with (amongst others):
- Vallox Digit SE
- Vallox Digit2 SE (with, or without, a CO2 sensor)
"""

from __future__ import annotations

import logging

from vallox_tx import Command, Property, Status, StatusDetail, Telegram  # noqa: F401
from vallox_tx.version import VERSION  # noqa: F401

from .dispatcher import process_telegram, update_efficiencies  # noqa: F401
from .gateway import Gateway  # noqa: F401
from .store import ValloxStore  # noqa: F401

_LOGGER = logging.getLogger(__name__)


class GracefulExit(SystemExit):
    code = 1
