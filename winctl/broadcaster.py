"""Format state notifications and fan them out to the connected clients."""

from __future__ import annotations

__all__ = ["Broadcaster"]

from collections.abc import Collection
from typing import TYPE_CHECKING, Any

from .protocol import encode_cursor_event, encode_window_event, encode_window_list, format_handle

if TYPE_CHECKING:
    from .handles import HandleTable
    from .models import WindowEvent
    from .registry import View, WindowRegistry
    from .session import ClientSession


class Broadcaster:
    """Build window, cursor and window-list events.

    Nothing is formatted while no client is connected.
    """

    def __init__(self, sessions: Collection[ClientSession], registry: WindowRegistry, handles: HandleTable) -> None:
        self.sessions = sessions
        self.registry = registry
        self.handles = handles

    def describe(self, view: View, detailed: bool = True) -> dict[str, Any]:
        """Return the public properties of `view`.

        Args:
            view: the window
            detailed: include the maximized & fullscreen states
        """
        box = view.current
        props: dict[str, Any] = {
            "id": format_handle(self.handles.handle_for(view)),
            "title": view.title or "",
            "app_id": view.app_id or "",
            "x": box.x,
            "y": box.y,
            "width": box.width,
            "height": box.height,
            "minimized": view.minimized,
        }
        if detailed:
            props["maximized"] = int(view.maximized)
            props["fullscreen"] = view.fullscreen
        props["focused"] = self.registry.active_view is view
        return props

    def broadcast(self, data: bytes) -> None:
        """Send `data` to every client."""
        # sessions may be destroyed while writing
        for session in list(self.sessions):
            session.send(data)

    def window_event(self, view: View, event: WindowEvent) -> None:
        """Notify every client of a window change."""
        if not self.sessions:
            return
        self.broadcast(encode_window_event(event, self.describe(view)))

    def cursor_moved(self, x: float, y: float) -> None:
        """Notify every client of the pointer position."""
        if not self.sessions:
            return
        self.broadcast(encode_cursor_event(x, y))

    def send_window_list(self, session: ClientSession | None = None) -> None:
        """Send the mapped windows to `session`, or to every client."""
        if not self.sessions:
            return
        data = encode_window_list(self.describe(view, detailed=False) for view in self.registry.views() if view.mapped)
        if session is None:
            self.broadcast(data)
        else:
            session.send(data)
