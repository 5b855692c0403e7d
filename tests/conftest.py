" generic fixtures "
import logging
import tempfile
from pathlib import Path
from unittest.mock import Mock

import pytest
from pytest_asyncio import fixture

from winctl.config import WINCTL_CONFIG_SCHEMA, Configuration
from winctl.models import Geometry
from winctl.registry import MemoryRegistry
from winctl.server import ControlServer


def pytest_configure():
    "Runs once before all"
    from winctl.logging_setup import init_logger

    init_logger("/dev/null", force_debug=True)


@pytest.fixture
def test_logger():
    "A logger recording its calls"
    return Mock(spec=logging.Logger)


@pytest.fixture
def socket_path():
    "A short socket path (AF_UNIX paths are limited to 108 bytes)"
    with tempfile.TemporaryDirectory(prefix="winctl-", dir="/tmp") as folder:  # noqa: S108
        yield str(Path(folder) / "ctl.sock")


@pytest.fixture
def registry():
    "A registry with a terminal and a browser, the browser being focused"
    reg = MemoryRegistry()
    reg.add_view("shell", "foot", Geometry(0, 0, 800, 600))
    browser = reg.add_view("Mozilla Firefox", "firefox", Geometry(100, 50, 1200, 900))
    reg.focus(browser)
    return reg


@pytest.fixture
def config(socket_path, test_logger):
    "Configuration using the temporary socket"
    return Configuration({"socket_path": socket_path}, logger=test_logger, schema=WINCTL_CONFIG_SCHEMA)


@fixture
async def server(registry, config):
    "A started control server"
    srv = ControlServer(registry, config)
    srv.start()
    yield srv
    srv.shutdown()
