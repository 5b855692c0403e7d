"""Daemon startup functions."""

import asyncio
import signal
from pathlib import Path

from .config import load_config
from .logging_setup import get_logger
from .registry import MemoryRegistry, WindowRegistry
from .server import ControlServer, SetupError

__all__ = ["is_running", "run_daemon"]


async def is_running(path: str) -> bool:
    """Return True if a server answers on `path`."""
    try:
        _, writer = await asyncio.open_unix_connection(path)
    except OSError:
        return False
    writer.close()
    await writer.wait_closed()
    return True


async def run_daemon(config_file: str | Path, registry: WindowRegistry | None = None) -> None:
    """Run the control server until a termination signal.

    Args:
        config_file: TOML configuration path
        registry: the window registry, a headless one is used if omitted
    """
    log = get_logger()
    config = await load_config(config_file, log)
    server = ControlServer(registry or MemoryRegistry(), config, log=get_logger("server"))

    if await is_running(server.path):
        log.critical("%s is in use, is winctl already running ?", server.path)
        return

    ipc_folder = Path(server.path).parent
    try:
        ipc_folder.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        log.critical("Cannot create IPC folder %s: %s", ipc_folder, e)
        return

    try:
        server.start()
    except SetupError:
        log.critical("Control plane disabled")
        return

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, server.shutdown)

    log.debug("[ initialized ]".center(80, "="))
    try:
        await server.wait_closed()
    except asyncio.CancelledError:
        log.critical("cancelled")
    finally:
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.remove_signal_handler(sig)
        server.shutdown()
