"""Apply decoded client commands to the window registry."""

from __future__ import annotations

__all__ = ["Dispatcher"]

from logging import Logger
from typing import TYPE_CHECKING

from .logging_setup import HandlerStyles, colorize
from .models import DecodedCommand, SsdMode, ViewAxis
from .protocol import DECORATIONS_DISABLED, ProtocolError, UnknownCommandError, decode_command

if TYPE_CHECKING:
    from .broadcaster import Broadcaster
    from .handles import HandleTable
    from .registry import View, WindowRegistry
    from .session import ClientSession


class Dispatcher:
    """Turn protocol lines into registry calls.

    Commands are fire-and-forget: invalid input is logged and dropped, only
    `list` and `enable_decorations` send something back to the caller.
    Handlers are the `run_<command>` methods.
    """

    def __init__(
        self,
        registry: WindowRegistry,
        handles: HandleTable,
        broadcaster: Broadcaster,
        log: Logger,
        colored: bool = True,
    ) -> None:
        self.registry = registry
        self.handles = handles
        self.broadcaster = broadcaster
        self.log = log
        self.colored = colored

    def handle_line(self, session: ClientSession, line: bytes) -> None:
        """Decode and run one message received from `session`."""
        try:
            command = decode_command(line)
        except UnknownCommandError as e:
            self.log.debug("%s: unknown command: %s", session.name, e.name)
            return
        except ProtocolError as e:
            self.log.debug("%s: ignoring message: %s", session.name, e)
            return
        self.dispatch(session, command)

    def _log_command(self, session: ClientSession, command: DecodedCommand) -> None:
        target = "" if command.handle is None else f"({command.handle:#x})"
        text = f"{command.command}{target}"
        if self.colored:
            text = colorize(text, *HandlerStyles.COMMAND)
        self.log.debug("%s: %s", session.name, text)

    def dispatch(self, session: ClientSession, command: DecodedCommand) -> None:
        """Run a decoded command on behalf of `session`."""
        self._log_command(session, command)
        handler = getattr(self, f"run_{command.command}")
        target: View | ClientSession = session
        if command.command.needs_target:
            view = self.handles.resolve(command.handle)
            if view is None:
                self.log.debug("%s: view not found: %s", session.name, command.handle)
                return
            target = view
        try:
            handler(target, command)
        except Exception:  # pylint: disable=broad-exception-caught
            self.log.exception("%s: %s failed", session.name, command.command)

    def run_close(self, view: View, _command: DecodedCommand) -> None:
        """Close the window."""
        self.registry.close(view)

    def run_minimize(self, view: View, _command: DecodedCommand) -> None:
        """Toggle minimization."""
        self.registry.minimize(view, not view.minimized)

    def run_maximize(self, view: View, _command: DecodedCommand) -> None:
        """Toggle maximization on both axis."""
        self.registry.toggle_maximize(view, ViewAxis.BOTH)

    def run_move(self, view: View, command: DecodedCommand) -> None:
        """Set position and size."""
        if command.width <= 0 or command.height <= 0:
            self.log.debug("invalid size for move: %dx%d", command.width, command.height)
            return
        self.registry.move_resize(view, command.geometry)

    def run_focus(self, view: View, _command: DecodedCommand) -> None:
        """Focus and raise the window."""
        self.registry.focus(view)

    def run_always_on_top(self, view: View, _command: DecodedCommand) -> None:
        """Toggle always on top."""
        self.registry.toggle_always_on_top(view)

    def run_always_on_bottom(self, view: View, _command: DecodedCommand) -> None:
        """Toggle always on bottom."""
        self.registry.toggle_always_on_bottom(view)

    def run_list(self, session: ClientSession, _command: DecodedCommand) -> None:
        """Send the window list to the caller."""
        self.broadcaster.send_window_list(session)

    def run_enable_decorations(self, session: ClientSession, _command: DecodedCommand) -> None:
        """Remove server side decorations from every window, then acknowledge."""
        for view in list(self.registry.views()):
            try:
                self.registry.set_decoration_mode(view, SsdMode.NONE)
            except Exception:  # pylint: disable=broad-exception-caught
                self.log.exception("%s: can't change decorations", session.name)
        session.send(DECORATIONS_DISABLED)
