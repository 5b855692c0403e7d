"""Common types shared by the control plane."""

from dataclasses import dataclass
from enum import IntEnum, IntFlag, StrEnum

__all__ = [
    "Command",
    "DecodedCommand",
    "ExitCode",
    "Geometry",
    "SsdMode",
    "ViewAxis",
    "WindowEvent",
    "WinctlError",
]


class WinctlError(Exception):
    """Used for errors which already triggered logging."""


class Command(StrEnum):
    """Commands accepted on the control socket."""

    CLOSE = "close"
    MINIMIZE = "minimize"
    MAXIMIZE = "maximize"
    MOVE = "move"
    FOCUS = "focus"
    ALWAYS_ON_TOP = "always_on_top"
    ALWAYS_ON_BOTTOM = "always_on_bottom"
    LIST = "list"
    ENABLE_DECORATIONS = "enable_decorations"

    @property
    def needs_target(self) -> bool:
        """Return True if the command acts on a single window."""
        return self not in {Command.LIST, Command.ENABLE_DECORATIONS}


class WindowEvent(StrEnum):
    """Window notification names, as reported by the registry."""

    MAPPED = "mapped"
    UNMAPPED = "unmapped"
    CLOSED = "closed"
    MOVED = "moved"
    FOCUSED = "focused"
    TITLE_CHANGED = "title_changed"
    MINIMIZED = "minimized"
    MAXIMIZED = "maximized"
    FULLSCREEN = "fullscreen"


class ViewAxis(IntFlag):
    """Maximization axis."""

    NONE = 0
    HORIZONTAL = 1
    VERTICAL = 2
    BOTH = 3


class SsdMode(IntEnum):
    """Server side decoration mode."""

    NONE = 0
    BORDER = 1
    FULL = 2


@dataclass
class Geometry:
    """Window box in layout coordinates."""

    x: int = 0
    y: int = 0
    width: int = 0
    height: int = 0


@dataclass(frozen=True)
class DecodedCommand:
    """One command read from a client line."""

    command: Command
    handle: int | None = None
    x: int = 0
    y: int = 0
    width: int = 0
    height: int = 0

    @property
    def geometry(self) -> Geometry:
        """Return the requested box."""
        return Geometry(self.x, self.y, self.width, self.height)


# Exit codes for client
class ExitCode(IntEnum):
    """Standard exit codes for the winctl client."""

    SUCCESS = 0
    USAGE_ERROR = 1  # No command provided, invalid arguments
    CONNECTION_ERROR = 3  # Cannot connect to daemon
    COMMAND_ERROR = 4  # Command could not be sent
