import asyncio
import os
import signal

import pytest

from winctl.daemon import is_running, run_daemon
from winctl.registry import MemoryRegistry

from .testtools import next_event


@pytest.fixture
def config_file(tmp_path, socket_path):
    fname = tmp_path / "config.toml"
    fname.write_text(f'[winctl]\nsocket_path = "{socket_path}"\n')
    return fname


async def wait_for_socket(path):
    for _ in range(100):
        if await is_running(path):
            return
        await asyncio.sleep(0.01)
    raise TimeoutError(path)


@pytest.mark.asyncio
async def test_run_until_sigterm(config_file, socket_path):
    registry = MemoryRegistry()
    registry.add_view("term", "foot")
    task = asyncio.create_task(run_daemon(config_file, registry))
    await wait_for_socket(socket_path)

    reader, writer = await asyncio.open_unix_connection(socket_path)
    snapshot = await next_event(reader)
    assert [w["title"] for w in snapshot["windows"]] == ["term"]

    os.kill(os.getpid(), signal.SIGTERM)
    await asyncio.wait_for(task, timeout=2)
    assert not os.path.exists(socket_path)
    assert await reader.read() == b""
    writer.close()


@pytest.mark.asyncio
async def test_refuses_to_run_twice(config_file, socket_path, server):
    assert server.path == socket_path
    await asyncio.wait_for(run_daemon(config_file, MemoryRegistry()), timeout=2)
    assert os.path.exists(socket_path)
    assert await is_running(socket_path)


@pytest.mark.asyncio
async def test_is_running(socket_path):
    assert await is_running(socket_path) is False
