#!/usr/bin/env python3
"""A CLI for the vallox library."""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from datetime import datetime as dt
from typing import Any, Final, TextIO

import click
from colorama import Fore, Style, init as colorama_init

from vallox import Gateway, GracefulExit, Property, ValloxStore, process_telegram
from vallox_tx import Telegram, exceptions as exc
from vallox_tx.catalog import is_writable
from vallox_tx.logger import CONSOLE_COLS
from vallox_tx.schemas import (
    SZ_DISABLE_SENDING,
    SZ_RECEIVER_ID,
    SZ_SENDER_ID,
    SZ_SERIAL_PORT,
    SZ_TELEGRAM_LOG,
)

SZ_CONFIG: Final = "config"
SZ_INPUT_FILE: Final = "input_file"

DEFAULT_FMT: Final = "%(asctime)s.%(msecs)03d %(message)s"
DEFAULT_DATEFMT: Final = "%H:%M:%S"

# this is called after import colorlog to ensure its handlers wrap the correct streams
logging.basicConfig(level=logging.WARNING, format=DEFAULT_FMT, datefmt=DEFAULT_DATEFMT)


MONITOR: Final = "monitor"
PARSE: Final = "parse"
SET: Final = "set"


COLORS = {
    "poll": Fore.CYAN,  # a request for a value
    "master": Fore.GREEN,  # a value from a mainboard
    "panel": Style.BRIGHT + Fore.MAGENTA,  # a value from a (another) panel
}

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])

LIB_CFG_KEYS = (SZ_DISABLE_SENDING, SZ_RECEIVER_ID, SZ_SENDER_ID, SZ_TELEGRAM_LOG)


def split_kwargs(obj: tuple[dict, dict], kwargs: dict) -> tuple[dict, dict]:
    """Split kwargs into cli/library kwargs."""
    cli_kwargs, lib_kwargs = obj

    cli_kwargs.update({k: v for k, v in kwargs.items() if k not in LIB_CFG_KEYS})
    lib_kwargs[SZ_CONFIG].update(
        {k: v for k, v in kwargs.items() if k in LIB_CFG_KEYS and v is not None}
    )

    return cli_kwargs, lib_kwargs


def split_serial_port(serial_port: str) -> dict[str, Any]:
    """Convert a HOST:PORT (e.g. a ser2net bridge) into host/port kwargs."""

    host, sep, port = serial_port.rpartition(":")
    if sep and host and port.isdigit() and "/" not in serial_port:
        return {"host": host, "port": int(port)}
    return {"port_name": serial_port}


def parse_line(line: str) -> tuple[dt | None, bytes] | None:
    """Return the (optional) timestamp & the frame of a line, or None if no frame.

    Accepts lines with only hex bytes (e.g. '01 11 20 29 07 5A'), and telegram log
    lines (e.g. '2024-05-01T12:34:56.123456 01 11 20 29 07 5A < ...').
    """

    line = line.split("#", 1)[0].split(" < ", 1)[0].strip()
    if not line:
        return None

    tokens = line.split()
    dtm = None
    if len(tokens[0]) > 2:
        dtm = dt.fromisoformat(tokens.pop(0))  # may: raise ValueError
        if not tokens:  # e.g. a comment line of a telegram log
            return None

    return dtm, bytes.fromhex("".join(tokens))  # may: raise ValueError


class PropertyParamType(click.ParamType):
    name = "property"

    def convert(self, value: str, param, ctx):
        try:
            return Property(value.lower())
        except ValueError:
            self.fail(f"{value!r} is not a valid property", param, ctx)


# Args/Params for both serial and file
@click.group(context_settings=CONTEXT_SETTINGS)
@click.option("-d", "--debug-mode", count=True, help="-d for INFO, -dd for DEBUG")
@click.option("-c", "--config-file", type=click.File("r"))
@click.option("-g", "--print-state", is_flag=True, help="print the state (as JSON)")
@click.option("-lf", "--long-format", is_flag=True, help="dont truncate STDOUT")
@click.pass_context
def cli(ctx, config_file=None, **kwargs: Any) -> None:
    """A CLI for the vallox library."""

    if kwargs["debug_mode"]:
        level = logging.DEBUG if kwargs["debug_mode"] > 1 else logging.INFO
        logging.getLogger("vallox").setLevel(level)
        logging.getLogger("vallox_tx").setLevel(level)

    lib_kwargs: dict[str, Any] = {SZ_CONFIG: {}}
    if config_file:  # the CLI takes precedence
        lib_kwargs[SZ_CONFIG] = json.load(config_file)

    ctx.obj = kwargs, lib_kwargs


# Args/Params for telegram log only
class FileCommand(click.Command):  # client.py parse <file>
    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.params.insert(  # input_file
            0,
            click.Argument(
                ("input-file",),
                type=click.Path(exists=True, dir_okay=False, allow_dash=True),
                default="-",
            ),
        )


# Args/Params for serial port only
class PortCommand(click.Command):  # client.py <command> <port> --telegram-log xxx
    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.params.insert(0, click.Argument(("serial-port",)))
        self.params.insert(  # --telegram-log
            1,
            click.Option(
                ("-o", "--telegram-log"),
                type=click.Path(),
                help="Log all telegrams to this file",
            ),
        )


#
# 1/3: PARSE (a file of telegrams)
@click.command(cls=FileCommand)  # parse a telegram log, then stop
@click.pass_obj
def parse(obj, **kwargs: Any):
    """Parse a log file (or hex dump) for telegrams."""
    config, lib_config = split_kwargs(obj, kwargs)

    lib_config[SZ_INPUT_FILE] = config.pop(SZ_INPUT_FILE)

    return PARSE, lib_config, config


#
# 2/3: MONITOR (listen to the bus, +/- polling)
@click.command(cls=PortCommand)  # (optionally) poll some properties, then monitor
@click.option(  # --poll fan_speed --poll co2_high ...
    "-p", "--poll", type=PropertyParamType(), multiple=True, help="e.g. fan_speed"
)
@click.option("-l/-nl", "--listen-only/--no-listen-only", default=False)
@click.pass_obj
def monitor(obj, listen_only: bool = False, **kwargs: Any):
    """Monitor (eavesdrop and/or poll) a serial port for telegrams."""
    config, lib_config = split_kwargs(obj, kwargs)

    if listen_only:
        print(" - sending is force-disabled")
        lib_config[SZ_CONFIG][SZ_DISABLE_SENDING] = True

    return MONITOR, lib_config, config


#
# 3/3: SET (write a property, then stop)
@click.command(cls=PortCommand)
@click.argument("property", type=PropertyParamType())
@click.argument("value", type=click.INT)
@click.pass_obj
def set(obj, **kwargs: Any):  # noqa: A001
    """Set the value of a (writable) property, then quit.

    Fan speeds are 1-8, and setpoints & thresholds are in Celsius.
    """
    config, lib_config = split_kwargs(obj, kwargs)

    if not is_writable(kwargs["property"]):
        raise click.BadParameter(f"{kwargs['property']} is not writable")

    return SET, lib_config, config


def print_telegram(tlg: Telegram, long_format: bool = False) -> None:
    if long_format:
        print(f"{tlg!r}  # {tlg}")
        return

    if tlg.is_poll:
        color = COLORS["poll"]
    elif tlg.src.is_master:
        color = COLORS["master"]
    else:
        color = COLORS["panel"]

    print(f"{color}{tlg!r}"[:CONSOLE_COLS])


def _print_engine_state(store: ValloxStore) -> None:
    print(f"state: {json.dumps(store.as_dict(), indent=4)}\r\n")


def parse_file(input_file: TextIO, **kwargs: Any) -> ValloxStore:
    """Apply every telegram of a file to a store, printing the properties updated."""

    store = ValloxStore()

    def handle_value(prop: Property) -> None:
        print(f"{Fore.YELLOW}   {prop} = {store.get(prop)}")

    for line in input_file:
        try:
            if (result := parse_line(line)) is None:
                continue
            dtm, frame = result
            tlg = Telegram(dtm or dt.now(), frame)

        except (ValueError, exc.MalformedTelegram) as err:
            print(f"{Fore.RED}{line.strip()}  * {err}")
            continue

        print_telegram(tlg, long_format=kwargs.get("long_format", False))
        process_telegram(store, tlg, handle_value)

    return store


async def async_main(command: str, lib_kwargs: dict, **kwargs: Any) -> None:
    """Do certain things."""

    colorama_init(autoreset=True)

    if command == PARSE:
        with click.open_file(lib_kwargs[SZ_INPUT_FILE]) as input_file:
            store = parse_file(input_file, **kwargs)
        if kwargs["print_state"]:
            _print_engine_state(store)
        return

    gwy = Gateway(
        **split_serial_port(kwargs[SZ_SERIAL_PORT]), config=lib_kwargs[SZ_CONFIG]
    )

    def handle_value(prop: Property) -> None:
        """Process the value as it arrives (a callback).

        In this case, the value is merely printed.
        """
        dtm = f"{dt.now():%H:%M:%S.%f}"[:-3]
        print(f"{COLORS['master']}{dtm} {prop} = {gwy.store.get(prop)}"[:CONSOLE_COLS])

    if command == MONITOR:
        gwy.add_value_listener(handle_value)

    print("\r\nclient.py: Starting engine...")

    try:  # main code here
        await gwy.start(start_heartbeat=command == MONITOR)

        if command == MONITOR:
            for prop in kwargs["poll"]:
                await gwy.send_poll(prop)
            await gwy.wait_until_stopped()

        elif command == SET:
            if await gwy.set_property(kwargs["property"], kwargs["value"]):
                print(f" - {kwargs['property']} set to {kwargs['value']}")
            else:
                print(f" - {kwargs['property']} not set (the bus remained suspended)")

    except asyncio.CancelledError:
        msg = "ended via: CancelledError (e.g. SIGINT)"
    except GracefulExit:
        msg = "ended via: GracefulExit"
    except exc.ValloxException as err:
        msg = f"ended via: ValloxException: {err}"
    else:
        msg = "ended without error"
    finally:
        await gwy.stop()

    print(f"\r\nclient.py: Engine stopped: {msg}")

    if kwargs["print_state"]:
        _print_engine_state(gwy.store)


cli.add_command(parse)
cli.add_command(monitor)
cli.add_command(set)


def main() -> None:
    print("\r\nclient.py: Starting vallox...")

    try:
        result = cli(standalone_mode=False)
    except click.ClickException as err:
        print(f"Error: {err}")
        sys.exit(-1)

    if isinstance(result, int):
        sys.exit(result)

    (command, lib_kwargs, kwargs) = result

    if sys.platform == "win32":
        print(" - event_loop_policy set for win32")  # do before asyncio.run()
        asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

    try:
        asyncio.run(async_main(command, lib_kwargs, **kwargs))
    except KeyboardInterrupt:
        print("\r\nclient.py: Engine stopped: ended via: KeyboardInterrupt")

    print(" - finished vallox.\r\n")


if __name__ == "__main__":
    main()
