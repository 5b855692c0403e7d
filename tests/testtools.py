import asyncio
import json
from unittest.mock import Mock

from winctl.registry import View


class FakeServer:
    "The parts of ControlServer used by a ClientSession"

    def __init__(self):
        self.log = Mock()
        self.loop = Mock()
        self.dispatcher = Mock()
        self.sessions = set()

    def remove_session(self, session):
        self.sessions.discard(session)


def mock_socket(fd=42):
    "A socket mock, `send` has to be configured by the test"
    sock = Mock()
    sock.fileno.return_value = fd
    return sock


async def next_event(reader: asyncio.StreamReader, timeout=1.0) -> dict:
    "Read and decode one event line"
    line = await asyncio.wait_for(reader.readline(), timeout=timeout)
    assert line.endswith(b"\n"), line
    return json.loads(line)


def find_window(windows: list[dict], title: str) -> dict:
    for window in windows:
        if window["title"] == title:
            return window
    raise KeyError(title)


def make_view(**kw) -> View:
    return View(**kw)
