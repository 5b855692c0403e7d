"""Window registry interface and the headless in-memory implementation."""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Protocol

from .logging_setup import get_logger
from .models import Geometry, SsdMode, ViewAxis, WindowEvent

__all__ = ["MemoryRegistry", "RegistryListener", "View", "WindowRegistry"]


@dataclass(eq=False)
class View:  # pylint: disable=too-many-instance-attributes
    """A window, as owned by the registry.

    Compared and hashed by identity.
    """

    title: str = ""
    app_id: str = ""
    current: Geometry = field(default_factory=Geometry)
    mapped: bool = True
    minimized: bool = False
    maximized: ViewAxis = ViewAxis.NONE
    fullscreen: bool = False
    always_on_top: bool = False
    always_on_bottom: bool = False
    ssd_mode: SsdMode = SsdMode.FULL


class RegistryListener(Protocol):
    """Receives the registry notifications."""

    def window_event(self, view: View, event: WindowEvent) -> None:
        """Called when `view` changed."""

    def cursor_moved(self, x: float, y: float) -> None:
        """Called on pointer motion."""


class WindowRegistry(ABC):
    """Authoritative window state.

    The control plane only reads `View` fields and calls the methods below,
    all of them synchronously from the event loop thread.
    """

    listener: RegistryListener | None = None

    @abstractmethod
    def views(self) -> Iterable[View]:
        """Return every known view, mapped or not, in stacking order."""

    @property
    @abstractmethod
    def active_view(self) -> View | None:
        """Return the focused view."""

    @abstractmethod
    def close(self, view: View) -> None:
        """Ask the view to close."""

    @abstractmethod
    def minimize(self, view: View, minimized: bool) -> None:
        """Set the minimized state."""

    @abstractmethod
    def toggle_maximize(self, view: View, axis: ViewAxis) -> None:
        """Toggle maximization along `axis`."""

    @abstractmethod
    def move_resize(self, view: View, geometry: Geometry) -> None:
        """Set the view's box."""

    @abstractmethod
    def focus(self, view: View) -> None:
        """Give the keyboard focus to `view`, raising it."""

    @abstractmethod
    def toggle_always_on_top(self, view: View) -> None:
        """Toggle the always-on-top flag."""

    @abstractmethod
    def toggle_always_on_bottom(self, view: View) -> None:
        """Toggle the always-on-bottom flag."""

    @abstractmethod
    def set_decoration_mode(self, view: View, mode: SsdMode) -> None:
        """Change the server side decoration mode."""

    def notify(self, view: View, event: WindowEvent) -> None:
        """Forward a window notification to the listener, if any."""
        if self.listener is not None:
            self.listener.window_event(view, event)


class MemoryRegistry(WindowRegistry):
    """Registry holding plain `View` objects, without any display attached.

    Used by the daemon when running headless and by the test-suite.
    """

    def __init__(self) -> None:
        self.log = get_logger("registry")
        self._views: list[View] = []
        self._active: View | None = None

    def views(self) -> list[View]:
        return list(self._views)

    @property
    def active_view(self) -> View | None:
        return self._active

    def add_view(self, title: str = "", app_id: str = "", geometry: Geometry | None = None) -> View:
        """Create and map a new view."""
        view = View(title=title, app_id=app_id, current=geometry or Geometry(0, 0, 640, 480))
        self._views.append(view)
        self.log.debug("new view %s (%s)", title, app_id)
        self.notify(view, WindowEvent.MAPPED)
        return view

    def set_title(self, view: View, title: str) -> None:
        """Rename a view."""
        view.title = title
        self.notify(view, WindowEvent.TITLE_CHANGED)

    def move_cursor(self, x: float, y: float) -> None:
        """Report a pointer motion."""
        if self.listener is not None:
            self.listener.cursor_moved(x, y)

    def close(self, view: View) -> None:
        if view not in self._views:
            return
        if view.mapped:
            view.mapped = False
            self.notify(view, WindowEvent.UNMAPPED)
        self._views.remove(view)
        if self._active is view:
            self._active = None
        self.notify(view, WindowEvent.CLOSED)

    def minimize(self, view: View, minimized: bool) -> None:
        if view.minimized == minimized:
            return
        view.minimized = minimized
        if minimized and self._active is view:
            self._active = None
        self.notify(view, WindowEvent.MINIMIZED)

    def toggle_maximize(self, view: View, axis: ViewAxis) -> None:
        view.maximized = ViewAxis.NONE if view.maximized == axis else axis
        self.notify(view, WindowEvent.MAXIMIZED)

    def move_resize(self, view: View, geometry: Geometry) -> None:
        view.current = Geometry(geometry.x, geometry.y, geometry.width, geometry.height)
        self.notify(view, WindowEvent.MOVED)

    def focus(self, view: View) -> None:
        if view not in self._views:
            return
        if view.minimized:
            view.minimized = False
        self._active = view
        # raise to the top of the stack
        self._views.remove(view)
        self._views.append(view)
        self.notify(view, WindowEvent.FOCUSED)

    def toggle_always_on_top(self, view: View) -> None:
        view.always_on_top = not view.always_on_top
        if view.always_on_top:
            view.always_on_bottom = False

    def toggle_always_on_bottom(self, view: View) -> None:
        view.always_on_bottom = not view.always_on_bottom
        if view.always_on_bottom:
            view.always_on_top = False

    def set_decoration_mode(self, view: View, mode: SsdMode) -> None:
        view.ssd_mode = mode
