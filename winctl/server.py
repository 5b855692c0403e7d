"""Control socket listener."""

from __future__ import annotations

__all__ = [
    "ControlServer",
    "SetupError",
    "SocketBindError",
    "SocketCreateError",
    "SocketListenError",
]

import asyncio
import contextlib
import os
import socket
from logging import Logger
from typing import Self

from .broadcaster import Broadcaster
from .config import WINCTL_CONFIG_SCHEMA, Configuration
from .dispatcher import Dispatcher
from .handles import HandleTable
from .logging_setup import HandlerStyles, colorize, get_logger
from .models import WindowEvent, WinctlError
from .reactor import Registration
from .registry import View, WindowRegistry
from .session import ClientSession


class SetupError(WinctlError):
    """The control socket couldn't be set up."""


class SocketCreateError(SetupError):
    """socket() failed."""


class SocketBindError(SetupError):
    """bind() failed."""


class SocketListenError(SetupError):
    """listen() failed."""


class ControlServer:  # pylint: disable=too-many-instance-attributes
    """Owns the listening socket and the set of connected clients.

    Also acts as the registry listener: window and cursor notifications are
    forwarded to the broadcaster.
    """

    loop: asyncio.AbstractEventLoop
    sock: socket.socket | None = None
    registration: Registration | None = None

    def __init__(self, registry: WindowRegistry, config: Configuration | None = None, log: Logger | None = None) -> None:
        self.log = log or get_logger("server")
        self.config = config if config is not None else Configuration(logger=self.log, schema=WINCTL_CONFIG_SCHEMA)
        self.path = os.path.expanduser(self.config.get_str("socket_path"))
        self.registry = registry
        self.sessions: set[ClientSession] = set()
        self.handles = HandleTable()
        self.broadcaster = Broadcaster(self.sessions, registry, self.handles)
        self.dispatcher = Dispatcher(
            registry,
            self.handles,
            self.broadcaster,
            self.log,
            colored=self.config.get_bool("colored_handlers_log"),
        )
        self._closed = asyncio.Event()

    async def __aenter__(self) -> Self:
        self.start()
        return self

    async def __aexit__(self, *_: object) -> None:
        self.shutdown()

    def start(self) -> None:
        """Bind the socket and start accepting clients.

        Must be called with a running event loop.

        Raises:
            SocketCreateError, SocketBindError, SocketListenError
        """
        self.loop = asyncio.get_running_loop()
        with contextlib.suppress(FileNotFoundError):
            os.unlink(self.path)

        try:
            sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        except OSError as e:
            self.log.error("Failed to create control socket: %s", e)
            raise SocketCreateError(str(e)) from e

        # python sockets are created close-on-exec
        sock.setblocking(False)
        try:
            sock.bind(self.path)
        except OSError as e:
            self.log.error("Failed to bind control socket %s: %s", self.path, e)
            sock.close()
            raise SocketBindError(str(e)) from e

        try:
            sock.listen(self.config.get_int("listen_backlog"))
        except OSError as e:
            self.log.error("Failed to listen on control socket: %s", e)
            sock.close()
            with contextlib.suppress(OSError):
                os.unlink(self.path)
            raise SocketListenError(str(e)) from e

        self.sock = sock
        self.registration = Registration(self.loop, sock.fileno(), self.on_connection)
        self._closed.clear()
        for view in self.registry.views():
            self.handles.handle_for(view)
        self.registry.listener = self
        self.log.info("Control server listening on %s", self.path)

    def on_connection(self) -> None:
        """Accept one pending client."""
        assert self.sock is not None
        try:
            conn, _ = self.sock.accept()
        except (BlockingIOError, InterruptedError):
            return
        except OSError as e:
            self.log.error("Accept failed: %s", e)
            return

        conn.setblocking(False)
        try:
            session = ClientSession(
                self,
                conn,
                buffer_size=self.config.get_int("buffer_size"),
                max_message_size=self.config.get_int("max_message_size"),
                max_outbound_size=self.config.get_int("max_outbound_size"),
            )
        except Exception:  # pylint: disable=broad-exception-caught
            self.log.exception("Can't set up client session")
            conn.close()
            return
        self.add_session(session)
        self.log.debug("%s connected", session.name)
        self.broadcaster.send_window_list(session)

    def add_session(self, session: ClientSession) -> None:
        """Track a new client."""
        self.sessions.add(session)

    def remove_session(self, session: ClientSession) -> None:
        """Forget a client, called by `ClientSession.destroy`."""
        self.sessions.discard(session)

    def window_event(self, view: View, event: WindowEvent) -> None:
        """Registry notification: `view` changed."""
        # issues the handle of newly mapped views
        handle = self.handles.handle_for(view)
        text = f"{event}({handle:#x})"
        if self.dispatcher.colored:
            text = colorize(text, *HandlerStyles.EVENT)
        self.log.debug("registry: %s", text)
        self.broadcaster.window_event(view, event)
        if event == WindowEvent.CLOSED:
            self.handles.release(view)

    def cursor_moved(self, x: float, y: float) -> None:
        """Registry notification: the pointer moved."""
        self.broadcaster.cursor_moved(x, y)

    def shutdown(self) -> None:
        """Disconnect every client and remove the socket."""
        if self.sock is None:
            return
        for session in list(self.sessions):
            session.destroy()
        if self.registration is not None:
            self.registration.revoke()
            self.registration = None
        self.sock.close()
        self.sock = None
        with contextlib.suppress(FileNotFoundError):
            os.unlink(self.path)
        if self.registry.listener is self:
            self.registry.listener = None
        self._closed.set()
        self.log.debug("Control server stopped")

    async def wait_closed(self) -> None:
        """Wait until `shutdown` is called."""
        await self._closed.wait()
