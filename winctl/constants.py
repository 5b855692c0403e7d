"""Shared constants for winctl."""

import os
from pathlib import Path

__all__ = [
    "CONFIG_FILE",
    "CONTROL",
    "CONFIG_SECTION",
    "DEFAULT_BUFFER_SIZE",
    "DEFAULT_LISTEN_BACKLOG",
    "DEFAULT_MAX_MESSAGE_SIZE",
    "DEFAULT_MAX_OUTBOUND_SIZE",
    "CLIENT_TIMEOUT",
    "WATCH_RETRY_DELAY",
]

IPC_FOLDER = os.environ.get("XDG_RUNTIME_DIR") or "/tmp"  # noqa: S108

CONTROL = f"{IPC_FOLDER}/winctl.sock"

_xdg_config_home = Path(os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config")
CONFIG_FILE = _xdg_config_home / "winctl" / "config.toml"
CONFIG_SECTION = "winctl"

# Receive buffer defaults (bytes)
DEFAULT_BUFFER_SIZE = 4096
DEFAULT_MAX_MESSAGE_SIZE = 1024 * 1024

# Outbound queue bound per session (bytes)
DEFAULT_MAX_OUTBOUND_SIZE = 1024 * 1024

DEFAULT_LISTEN_BACKLOG = 3

# Seconds a client waits for a reply event
CLIENT_TIMEOUT = 5.0

# Seconds between reconnection attempts of `winctl watch`
WATCH_RETRY_DELAY = 1.0
