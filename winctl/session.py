"""One accepted control connection."""

from __future__ import annotations

__all__ = ["ClientSession"]

import socket
from typing import TYPE_CHECKING

from .buffer import LineBuffer, MessageTooLarge
from .constants import DEFAULT_BUFFER_SIZE, DEFAULT_MAX_MESSAGE_SIZE, DEFAULT_MAX_OUTBOUND_SIZE
from .reactor import Registration

if TYPE_CHECKING:
    from .server import ControlServer


class ClientSession:  # pylint: disable=too-many-instance-attributes
    """Buffers, decodes and answers a single client.

    Reads are processed line by line in arrival order. Writes that the socket
    can't take right away are queued (up to `max_outbound_size` bytes, the
    client is disconnected past that) and flushed on write readiness.
    Every failure path ends in `destroy`.
    """

    def __init__(
        self,
        server: ControlServer,
        sock: socket.socket,
        *,
        buffer_size: int = DEFAULT_BUFFER_SIZE,
        max_message_size: int = DEFAULT_MAX_MESSAGE_SIZE,
        max_outbound_size: int = DEFAULT_MAX_OUTBOUND_SIZE,
    ) -> None:
        self.server = server
        self.sock = sock
        self.log = server.log
        self.name = f"client#{sock.fileno()}"
        self.buffer = LineBuffer(buffer_size, max_message_size)
        self.outbound = bytearray()
        self.max_outbound_size = max_outbound_size
        self.destroyed = False
        self.registration = Registration(server.loop, sock.fileno(), self.on_readable, self.on_writable)

    def __repr__(self) -> str:
        return f"<ClientSession {self.name}>"

    def on_readable(self) -> None:
        """Read what is available and handle every complete line."""
        try:
            nbytes = self.buffer.read_from(self.sock)
        except (BlockingIOError, InterruptedError):
            return
        except OSError as e:
            self.log.debug("%s read error: %s", self.name, e)
            self.destroy()
            return
        if nbytes == 0:
            self.on_hangup()
            return

        for line in self.buffer.extract():
            if self.destroyed:
                return
            self.server.dispatcher.handle_line(self, line)

        if self.destroyed:
            return
        try:
            self.buffer.check_limit()
        except MessageTooLarge as e:
            self.log.warning("%s: %s, disconnecting", self.name, e)
            self.destroy()

    def on_hangup(self) -> None:
        """Peer went away: drop everything."""
        self.destroy()

    def send(self, data: bytes) -> None:
        """Write `data`, queuing what the socket doesn't accept yet."""
        if self.destroyed:
            return
        if self.outbound:
            self._enqueue(data)
            return
        try:
            sent = self.sock.send(data)
        except (BlockingIOError, InterruptedError):
            sent = 0
        except OSError as e:
            self.log.debug("%s write error: %s", self.name, e)
            self.destroy()
            return
        if sent < len(data):
            self.log.debug("%s partial write: %d/%d", self.name, sent, len(data))
            self._enqueue(data[sent:])

    def _enqueue(self, data: bytes) -> None:
        if len(self.outbound) + len(data) > self.max_outbound_size:
            self.log.warning("%s is not reading its events (%d bytes pending), disconnecting", self.name, len(self.outbound))
            self.destroy()
            return
        self.outbound += data
        self.registration.want_write(True)

    def on_writable(self) -> None:
        """Flush the queued output."""
        if self.destroyed or not self.outbound:
            self.registration.want_write(False)
            return
        try:
            sent = self.sock.send(self.outbound)
        except (BlockingIOError, InterruptedError):
            return
        except OSError as e:
            self.log.debug("%s write error: %s", self.name, e)
            self.destroy()
            return
        del self.outbound[:sent]
        if not self.outbound:
            self.registration.want_write(False)

    def destroy(self) -> None:
        """Forget the session and release its resources."""
        if self.destroyed:
            return
        self.destroyed = True
        self.server.remove_session(self)
        self.registration.revoke()
        self.sock.close()
        self.buffer.release()
        self.outbound.clear()
        self.log.debug("%s disconnected", self.name)
