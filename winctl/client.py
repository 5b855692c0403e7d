"""Client side of the control socket: library helpers and the CLI commands."""

__all__ = [
    "encode_command",
    "format_window",
    "open_connection",
    "read_events",
    "run_client",
    "send_command",
    "wait_event",
    "watch_events",
]

import asyncio
import contextlib
import json
import sys
from collections.abc import AsyncIterator
from logging import Logger
from typing import Any

from .constants import CLIENT_TIMEOUT, WATCH_RETRY_DELAY
from .logging_setup import get_logger
from .models import Command, ExitCode, WinctlError

_log: Logger | None = None


def get_log() -> Logger:
    """Return the client logger, creating it on first use."""
    global _log  # noqa: PLW0603
    if _log is None:
        _log = get_logger("client")
    return _log


GEOMETRY_FIELDS = ("x", "y", "width", "height")


async def open_connection(path: str) -> tuple[asyncio.StreamReader, asyncio.StreamWriter]:
    """Connect to the control socket.

    Raises:
        WinctlError: no server is listening on `path`
    """
    try:
        return await asyncio.open_unix_connection(path)
    except (ConnectionRefusedError, FileNotFoundError) as e:
        get_log().critical("Cannot connect to winctl at %s.\nIs the daemon running? Start it with: winctl (no arguments)", path)
        raise WinctlError from e


def encode_command(cmd: str, target: str | None = None, **fields: int) -> bytes:
    """Build a command line.

    Args:
        cmd: command name
        target: window id, as found in events
        fields: geometry fields
    """
    payload: dict[str, Any] = {"cmd": cmd}
    if target is not None:
        payload["id"] = target
    payload.update(fields)
    return (json.dumps(payload, separators=(",", ":")) + "\n").encode()


async def send_command(writer: asyncio.StreamWriter, cmd: str, target: str | None = None, **fields: int) -> None:
    """Write one command and wait for it to be flushed."""
    writer.write(encode_command(cmd, target, **fields))
    await writer.drain()


async def read_events(reader: asyncio.StreamReader) -> AsyncIterator[dict[str, Any]]:
    """Yield decoded events until the server closes the connection."""
    while line := await reader.readline():
        try:
            event = json.loads(line)
        except json.JSONDecodeError:
            get_log().warning("Invalid event: %r", line)
            continue
        yield event


async def wait_event(reader: asyncio.StreamReader, name: str, timeout: float = CLIENT_TIMEOUT) -> dict[str, Any]:
    """Return the next event called `name`, skipping the others.

    Raises:
        WinctlError: connection closed before the event arrived
        TimeoutError: nothing came in time
    """

    async def _wait() -> dict[str, Any]:
        async for event in read_events(reader):
            if event.get("event") == name:
                return event
        msg = f"connection closed while waiting for {name}"
        raise WinctlError(msg)

    return await asyncio.wait_for(_wait(), timeout=timeout)


async def watch_events(path: str, retry_delay: float = WATCH_RETRY_DELAY) -> ExitCode:
    """Print every event until interrupted, reconnecting when the daemon goes away.

    Returns:
        CONNECTION_ERROR if the first connection fails, never returns otherwise
    """
    try:
        reader, writer = await open_connection(path)
    except WinctlError:
        return ExitCode.CONNECTION_ERROR

    while True:
        try:
            with contextlib.suppress(ConnectionResetError):
                async for event in read_events(reader):
                    print(json.dumps(event), flush=True)
        finally:
            writer.close()
        get_log().warning("Connection to %s lost, reconnecting", path)
        while True:
            await asyncio.sleep(retry_delay)
            try:
                reader, writer = await asyncio.open_unix_connection(path)
                break
            except OSError:
                continue


def format_window(window: dict[str, Any]) -> str:
    """Return a one line description of a window."""
    flags = [name for name in ("focused", "minimized") if window.get(name)]
    geometry = f"{window['width']}x{window['height']}+{window['x']}+{window['y']}"
    text = f"{window['id']:>6}  {geometry:<20} {window['title']} [{window['app_id']}]"
    if flags:
        text += f" ({', '.join(flags)})"
    return text


def get_help() -> str:
    """Get the documentation."""
    return """Syntax: winctl [--debug FILE] [--config FILE] [command]

If the command is omitted, runs the daemon.

Available commands:
 list                 Show the mapped windows.
 watch                Print every event as it arrives.
 enable_decorations   Remove server side decorations from every window.
 close ID             Close a window.
 minimize ID          Toggle minimization.
 maximize ID          Toggle maximization.
 focus ID             Focus a window.
 always_on_top ID     Toggle always on top.
 always_on_bottom ID  Toggle always on bottom.
 move ID X Y W H      Set position and size.
 help                 Show this help."""


def _parse_args(args: list[str]) -> tuple[Command, str | None, dict[str, int]]:
    """Validate command line arguments.

    Raises:
        ValueError: with the usage problem
    """
    try:
        command = Command(args[0].replace("-", "_"))
    except ValueError:
        msg = f'Unknown command "{args[0]}". Try "help" for available commands.'
        raise ValueError(msg) from None

    if not command.needs_target:
        return command, None, {}
    if len(args) < 2:  # noqa: PLR2004
        msg = f"{command} requires a window id"
        raise ValueError(msg)

    fields: dict[str, int] = {}
    if command == Command.MOVE:
        if len(args) != 2 + len(GEOMETRY_FIELDS):
            msg = "move requires: ID X Y WIDTH HEIGHT"
            raise ValueError(msg)
        try:
            fields = {name: int(value) for name, value in zip(GEOMETRY_FIELDS, args[2:], strict=True)}
        except ValueError:
            msg = "move coordinates must be integers"
            raise ValueError(msg) from None
    return command, args[1], fields


async def run_client(args: list[str], path: str) -> ExitCode:
    """Run the client (CLI).

    Args:
        args: command line, without the program name
        path: control socket path
    """
    if args[0] in {"help", "--help", "-h"}:
        print(get_help())
        return ExitCode.SUCCESS

    if args[0] == "watch":
        return await watch_events(path)

    try:
        command, target, fields = _parse_args(args)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return ExitCode.USAGE_ERROR

    try:
        reader, writer = await open_connection(path)
    except WinctlError:
        return ExitCode.CONNECTION_ERROR

    try:
        if command == Command.LIST:
            # a snapshot is sent on connection
            for window in (await wait_event(reader, "window_list"))["windows"]:
                print(format_window(window))
        elif command == Command.ENABLE_DECORATIONS:
            await send_command(writer, command)
            await wait_event(reader, "decorations_disabled")
        else:
            await send_command(writer, command, target, **fields)
    except (TimeoutError, WinctlError, ConnectionResetError) as e:
        print(f"Error: {str(e) or 'no answer from server'}", file=sys.stderr)
        return ExitCode.COMMAND_ERROR
    finally:
        writer.close()
        with contextlib.suppress(BrokenPipeError, ConnectionResetError):
            await writer.wait_closed()
    return ExitCode.SUCCESS
