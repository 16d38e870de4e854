#!/usr/bin/env python3
"""Vallox Serial - a Vallox Digit (RS485) telegram decoder & client.

This module wraps logger to provide a telegram log (a record of all bus traffic).
"""

from __future__ import annotations

import logging
import shutil
import sys
from datetime import datetime as dt
from logging.handlers import RotatingFileHandler, TimedRotatingFileHandler
from typing import Final

import colorlog

from .version import VERSION

DEV_MODE = False

_LOGGER = logging.getLogger(__name__)
if DEV_MODE:
    _LOGGER.setLevel(logging.DEBUG)

TLG_LOGGER_NAME: Final = "vallox_tx.telegram_log"

CONSOLE_COLS = int(shutil.get_terminal_size(fallback=(int(2e3), 24)).columns - 1)

CONSOLE_FMT = f"%(asctime)s%(frame).{CONSOLE_COLS - 13}s"
TLG_LOG_FMT = "%(asctime)s%(frame)s"

BANDW_SUFFIX = "%(message)s%(error_text)s%(comment)s"
COLOR_SUFFIX = "%(yellow)s%(message)s%(red)s%(error_text)s%(cyan)s%(comment)s"

LOG_COLOURS = {
    "DEBUG": "white",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "bold_red",
    "CRITICAL": "bold_red",
}  # default_log_colors


class _Formatter:  # format asctime with configurable precision
    """Formatter instances convert a LogRecord to text."""

    default_time_format = "%Y-%m-%dT%H:%M:%S.%f"
    precision = 6

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        """Return the creation time (asctime) of the LogRecord as formatted text.

        Allows for sub-millisecond precision, using datetime instead of time objects.
        """
        result = dt.fromtimestamp(record.created).strftime(
            datefmt or self.default_time_format
        )
        precision = self.precision or -1
        return result[: precision - 6] if -1 <= precision < 6 else result


class ColoredFormatter(_Formatter, colorlog.ColoredFormatter):  # type: ignore[misc]
    pass


class Formatter(_Formatter, logging.Formatter):
    pass


class TlgRecordFilter(logging.Filter):  # always True, adds the telegram fields
    """Shape every record of the telegram log, so the formatters can rely upon it."""

    def filter(self, record: logging.LogRecord) -> bool:
        frame = getattr(record, "_frame", "")
        record.frame = f" {frame}" if frame else ""

        record.msg = f" < {record.msg}" if record.msg else ""

        value = getattr(record, "error_text", "")
        record.error_text = f" * {value}" if value else ""

        value = getattr(record, "comment", "")
        record.comment = f" # {value}" if value else ""
        return True


class TlgLogFilter(logging.Filter):  # record.levelno in (logging.INFO, logging.WARNING)
    """For telegram log files, process only wanted telegrams."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Return True if the record is to be processed."""
        return record.levelno in (logging.INFO, logging.WARNING)


class StdErrFilter(logging.Filter):  # record.levelno >= logging.WARNING
    """For sys.stderr, process only wanted telegrams."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Return True if the record is to be processed."""  # WARNING-30, ERROR-40
        return record.levelno >= logging.WARNING


class StdOutFilter(logging.Filter):  # record.levelno < logging.WARNING
    """For sys.stdout, process only wanted telegrams."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Return True if the record is to be processed."""  # INFO-20, DEBUG-10
        return record.levelno < logging.WARNING


def getLogger(name: str | None = None, tlg_log: bool = False) -> logging.Logger:
    """Return a logger with the specified name, creating it if necessary.

    A telegram logger always has its records shaped with the telegram fields.
    """

    logger = logging.getLogger(name)
    if tlg_log and not any(isinstance(f, TlgRecordFilter) for f in logger.filters):
        logger.addFilter(TlgRecordFilter())
    return logger


def set_tlg_logging(
    logger: logging.Logger,
    cc_console: bool = False,
    file_name: str | None = None,
    rotate_backups: int = 0,
    rotate_bytes: int | None = None,
) -> None:
    """Create/configure handlers, formatters, etc.

    Parameters:
    - rotate_backups: keep this many copies, and rotate at midnight unless:
    - rotate_bytes:   rotate log files when log > rotate_bytes
    """

    logger.propagate = False  # log file is distinct from any app/debug logging
    logger.setLevel(logging.DEBUG)  # must be at least .INFO

    # as set_tlg_logging() may be called several times: to avoid duplicates in logs...
    for handler in list(logger.handlers):  # not hasHandlers(), as not propagating
        logger.removeHandler(handler)
        handler.close()

    handler: logging.Handler

    if file_name:
        if rotate_bytes:
            rotate_backups = rotate_backups or 2
            handler = RotatingFileHandler(
                file_name, maxBytes=rotate_bytes, backupCount=rotate_backups
            )
        elif rotate_backups:
            handler = TimedRotatingFileHandler(
                file_name, when="MIDNIGHT", backupCount=rotate_backups
            )
        else:
            handler = logging.FileHandler(file_name)

        handler.setFormatter(Formatter(fmt=TLG_LOG_FMT + BANDW_SUFFIX))
        handler.setLevel(logging.INFO)  # .INFO (usually), or .DEBUG
        handler.addFilter(TlgLogFilter())  # record.levelno in (.INFO, .WARNING)
        logger.addHandler(handler)

    elif cc_console:
        logger.addHandler(logging.NullHandler())

    else:
        logger.setLevel(logging.CRITICAL)
        return

    if cc_console:  # CC: output to stdout/stderr
        console_fmt = ColoredFormatter(
            fmt=f"%(log_color)s{CONSOLE_FMT + COLOR_SUFFIX}",
            reset=True,
            log_colors=LOG_COLOURS,
        )

        handler = logging.StreamHandler(stream=sys.stderr)
        handler.setFormatter(console_fmt)
        handler.setLevel(logging.WARNING)  # must be .WARNING or less
        handler.addFilter(StdErrFilter())  # record.levelno >= .WARNING
        logger.addHandler(handler)

        handler = logging.StreamHandler(stream=sys.stdout)
        handler.setFormatter(console_fmt)
        handler.setLevel(logging.DEBUG)  # must be .INFO or less
        handler.addFilter(StdOutFilter())  # record.levelno < .WARNING
        logger.addHandler(handler)

    extras = {
        "_frame": "",
        "error_text": "",
        "comment": f"vallox_tx {VERSION}",
    }
    logger.warning("", extra=extras)  # initial log line
