import json

import pytest

from winctl.models import Command, DecodedCommand, Geometry
from winctl.protocol import (
    DECORATIONS_DISABLED,
    ProtocolError,
    UnknownCommandError,
    decode_command,
    encode_cursor_event,
    encode_window_event,
    encode_window_list,
    format_handle,
    parse_handle,
)


def test_decode_move():
    cmd = decode_command(b'{"cmd":"move","id":"2a","x":10,"y":-20,"width":640,"height":480}')
    assert cmd == DecodedCommand(Command.MOVE, 0x2A, 10, -20, 640, 480)
    assert cmd.geometry == Geometry(10, -20, 640, 480)


def test_decode_field_order_and_spacing():
    cmd = decode_command('{ "height": 4, "id": "ff", "cmd": "move" }')
    assert cmd.command == Command.MOVE
    assert cmd.handle == 255
    assert (cmd.x, cmd.y, cmd.width, cmd.height) == (0, 0, 0, 4)


def test_missing_fields_default_to_zero():
    cmd = decode_command(b'{"cmd":"focus","id":"0x1"}')
    assert cmd == DecodedCommand(Command.FOCUS, 1)


def test_decode_without_id():
    cmd = decode_command(b'{"cmd":"list"}')
    assert cmd.command == Command.LIST
    assert cmd.handle is None


def test_escaped_strings():
    cmd = decode_command(b'{"cmd":"focus","id":"a","note":"a \\"quoted\\" }"}')
    assert cmd.handle == 10


@pytest.mark.parametrize(
    "line",
    [
        b"",
        b"not json",
        b'{"cmd":"list"',
        b'["list"]',
        b'"list"',
        b"{}",
        b'{"cmd":1}',
        b'{"cmd":"focus","id":42}',
        b'{"cmd":"focus","id":"xyz"}',
        b'{"cmd":"focus","id":""}',
        b'{"cmd":"focus","id":"-1"}',
        b'{"cmd":"move","id":"1","x":1.5}',
        b'{"cmd":"move","id":"1","width":"10"}',
        b'{"cmd":"move","id":"1","height":true}',
        b'{"cmd":"list","extra":{"nested":1}}',
        b'{"cmd":"list","extra":[1]}',
        b'{"cmd":"list"}\xff',
    ],
)
def test_rejects_invalid(line):
    with pytest.raises(ProtocolError):
        decode_command(line)


def test_unknown_command():
    with pytest.raises(UnknownCommandError) as info:
        decode_command(b'{"cmd":"Focus","id":"1"}')
    assert info.value.name == "Focus"


def test_handles():
    assert format_handle(42) == "2a"
    assert parse_handle("2a") == 42
    assert parse_handle("0X2A") == 42
    with pytest.raises(ProtocolError):
        parse_handle("0x")


def test_cursor_event_rounding():
    assert encode_cursor_event(10.4, 20.6) == b'{"event":"cursor","x":10,"y":21}\n'
    assert encode_cursor_event(-3.7, 0) == b'{"event":"cursor","x":-4,"y":0}\n'


def test_window_event():
    data = encode_window_event("moved", {"id": "1", "title": 'say "hi"', "x": 1})
    assert data.endswith(b"\n")
    assert data.count(b"\n") == 1
    assert json.loads(data) == {"event": "moved", "id": "1", "title": 'say "hi"', "x": 1}


def test_window_event_utf8():
    data = encode_window_event("title_changed", {"id": "1", "title": "café"})
    assert "café".encode() in data


def test_window_list():
    data = encode_window_list(iter([{"id": "1"}, {"id": "2"}]))
    assert json.loads(data) == {"event": "window_list", "windows": [{"id": "1"}, {"id": "2"}]}
    assert encode_window_list([]) == b'{"event":"window_list","windows":[]}\n'


def test_decorations_ack():
    assert DECORATIONS_DISABLED == b'{"event":"decorations_disabled"}\n'


@pytest.mark.parametrize(
    "line",
    [
        b'{"cmd":"move","id":"1","x":' + b"1" * 5000 + b"}",
        b"[" * 100000 + b"]" * 100000,
    ],
)
def test_parser_limits_are_protocol_errors(line):
    with pytest.raises(ProtocolError):
        decode_command(line)
