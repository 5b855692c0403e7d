"""Per-connection receive buffer splitting a byte stream into lines."""

__all__ = ["LineBuffer", "MessageTooLarge"]

import socket

from .constants import DEFAULT_BUFFER_SIZE, DEFAULT_MAX_MESSAGE_SIZE
from .models import WinctlError


class MessageTooLarge(WinctlError):
    """An unterminated message outgrew the allowed size."""


class LineBuffer:
    """Accumulate bytes and hand out complete newline terminated messages.

    The storage is preallocated and doubled whenever it has at most one free
    byte left, a partial trailing message always sits at the start of it.
    """

    def __init__(self, capacity: int = DEFAULT_BUFFER_SIZE, max_message_size: int = DEFAULT_MAX_MESSAGE_SIZE) -> None:
        if capacity < 2:  # noqa: PLR2004
            msg = f"buffer capacity is too small: {capacity}"
            raise ValueError(msg)
        self._data = bytearray(capacity)
        self.used = 0
        self.max_message_size = max_message_size

    @property
    def capacity(self) -> int:
        """Return the allocated size."""
        return len(self._data)

    @property
    def pending(self) -> bytes:
        """Return the buffered bytes not yet part of a complete message."""
        return bytes(self._data[: self.used])

    def reserve(self) -> None:
        """Grow the storage if there is no room left for a read."""
        if self.capacity - self.used <= 1:
            self._data.extend(bytes(self.capacity or DEFAULT_BUFFER_SIZE))

    def read_from(self, sock: socket.socket) -> int:
        """Receive as much as fits from a non-blocking socket.

        Returns:
            the number of bytes read, 0 when the peer closed the connection

        Raises:
            BlockingIOError: nothing to read yet
            OSError: the connection failed
        """
        self.reserve()
        with memoryview(self._data) as view, view[self.used :] as tail:
            nbytes = sock.recv_into(tail)
        self.used += nbytes
        return nbytes

    def feed(self, data: bytes) -> None:
        """Append `data`, growing as needed."""
        while data:
            self.reserve()
            chunk = data[: self.capacity - self.used]
            self._data[self.used : self.used + len(chunk)] = chunk
            self.used += len(chunk)
            data = data[len(chunk) :]

    def extract(self) -> list[bytes]:
        """Pop every complete message, newlines stripped, in arrival order."""
        messages = []
        start = 0
        while (newline := self._data.find(b"\n", start, self.used)) != -1:
            messages.append(bytes(self._data[start:newline]))
            start = newline + 1

        if start:
            remaining = self.used - start
            self._data[:remaining] = self._data[start : self.used]
            self.used = remaining

        return messages

    def check_limit(self) -> None:
        """Ensure the partial message left in the buffer is not too long.

        Raises:
            MessageTooLarge: the partial message exceeds `max_message_size`
        """
        if self.used > self.max_message_size:
            msg = f"message exceeds {self.max_message_size} bytes"
            raise MessageTooLarge(msg)

    def release(self) -> None:
        """Drop the storage."""
        self._data = bytearray()
        self.used = 0
