"""Registration of sockets with the asyncio event loop."""

__all__ = ["Registration"]

import asyncio
from collections.abc import Callable


class Registration:
    """Read (and optionally write) interest of one file descriptor.

    The loop invokes `on_readable` whenever the descriptor becomes readable,
    and `on_writable` while write interest is enabled.
    """

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop,
        fd: int,
        on_readable: Callable[[], None],
        on_writable: Callable[[], None] | None = None,
    ) -> None:
        self.loop = loop
        self.fd = fd
        self._on_writable = on_writable
        self.writing = False
        self.active = True
        loop.add_reader(fd, on_readable)

    def want_write(self, enabled: bool) -> None:
        """Enable or disable write readiness callbacks."""
        if not self.active or enabled == self.writing:
            return
        if enabled:
            assert self._on_writable is not None, "no write callback registered"
            self.loop.add_writer(self.fd, self._on_writable)
        else:
            self.loop.remove_writer(self.fd)
        self.writing = enabled

    def revoke(self) -> None:
        """Stop every callback for this descriptor. Safe to call twice."""
        if not self.active:
            return
        self.active = False
        self.loop.remove_reader(self.fd)
        if self.writing:
            self.loop.remove_writer(self.fd)
            self.writing = False
