"""Wire format of the control socket.

Every message is one line of UTF-8 JSON terminated by a newline.

Inbound::

    {"cmd": "move", "id": "2a", "x": 10, "y": 20, "width": 640, "height": 480}

Outbound events are flat objects carrying an ``event`` key, except for the
window list which nests one object per window under ``windows``.
"""

__all__ = [
    "DECORATIONS_DISABLED",
    "ProtocolError",
    "UnknownCommandError",
    "decode_command",
    "encode_cursor_event",
    "encode_event",
    "encode_window_event",
    "encode_window_list",
    "format_handle",
    "parse_handle",
]

import json
from collections.abc import Iterable
from typing import Any

from .models import Command, DecodedCommand, WinctlError

NUMERIC_FIELDS = ("x", "y", "width", "height")


class ProtocolError(WinctlError):
    """A line that is not a valid command message."""


class UnknownCommandError(ProtocolError):
    """A well formed message naming a command we don't know."""

    def __init__(self, name: str) -> None:
        super().__init__(f"unknown command: {name}")
        self.name = name


def format_handle(handle: int) -> str:
    """Return the wire representation of a window handle."""
    return f"{handle:x}"


def parse_handle(text: str) -> int:
    """Parse a hexadecimal handle, with or without the "0x" prefix.

    Raises:
        ProtocolError: if `text` isn't a non-negative hex number
    """
    digits = text[2:] if text[:2].lower() == "0x" else text
    if not digits or any(c not in "0123456789abcdefABCDEF" for c in digits):
        msg = f"invalid window id: {text!r}"
        raise ProtocolError(msg)
    return int(digits, 16)


def _int_field(obj: dict[str, Any], name: str) -> int:
    value = obj.get(name, 0)
    # bool is an int subclass
    if isinstance(value, bool) or not isinstance(value, int):
        msg = f"field {name!r} must be an integer, got {value!r}"
        raise ProtocolError(msg)
    return value


def decode_command(line: bytes | str) -> DecodedCommand:
    """Decode one message (without its newline).

    Args:
        line: the raw message

    Raises:
        ProtocolError: the message is not a flat JSON object with a string "cmd"
        UnknownCommandError: "cmd" doesn't name a known command
    """
    try:
        obj = json.loads(line)
    # ValueError covers JSONDecodeError and oversized integer literals
    except (ValueError, RecursionError) as e:
        msg = f"malformed message: {e}"
        raise ProtocolError(msg) from e

    if not isinstance(obj, dict):
        msg = "message is not an object"
        raise ProtocolError(msg)
    if any(isinstance(value, dict | list) for value in obj.values()):
        msg = "nested values are not supported"
        raise ProtocolError(msg)

    name = obj.get("cmd")
    if not isinstance(name, str):
        msg = "missing command name"
        raise ProtocolError(msg)
    try:
        command = Command(name)
    except ValueError:
        raise UnknownCommandError(name) from None

    handle = None
    if "id" in obj:
        if not isinstance(obj["id"], str):
            msg = f"window id must be a string, got {obj['id']!r}"
            raise ProtocolError(msg)
        handle = parse_handle(obj["id"])

    x, y, width, height = (_int_field(obj, field) for field in NUMERIC_FIELDS)
    return DecodedCommand(command, handle, x, y, width, height)


def encode_event(payload: dict[str, Any]) -> bytes:
    """Serialize an event object to a wire line."""
    return (json.dumps(payload, separators=(",", ":"), ensure_ascii=False) + "\n").encode("utf-8")


DECORATIONS_DISABLED = encode_event({"event": "decorations_disabled"})


def encode_window_event(event: str, window: dict[str, Any]) -> bytes:
    """Encode a single window notification.

    Args:
        event: the event name (eg: "mapped")
        window: the window properties, see `Broadcaster.describe`
    """
    return encode_event({"event": event, **window})


def encode_cursor_event(x: float, y: float) -> bytes:
    """Encode a pointer position, rounded to whole units."""
    return encode_event({"event": "cursor", "x": round(x), "y": round(y)})


def encode_window_list(windows: Iterable[dict[str, Any]]) -> bytes:
    """Encode the full window enumeration."""
    return encode_event({"event": "window_list", "windows": list(windows)})
