"""Opaque window handles exposed to clients."""

__all__ = ["HandleTable"]

import itertools
from collections.abc import Iterator

from .registry import View


class HandleTable:
    """Map small integer handles to views.

    Handles increase monotonically and are never reused, so a handle kept by a
    client after its window is gone simply stops resolving.
    """

    def __init__(self) -> None:
        self._counter = itertools.count(1)
        self._by_handle: dict[int, View] = {}
        # keyed by id(): the view is kept alive by `_by_handle` while listed here
        self._by_view: dict[int, int] = {}

    def __len__(self) -> int:
        return len(self._by_handle)

    def __iter__(self) -> Iterator[int]:
        return iter(self._by_handle)

    def handle_for(self, view: View) -> int:
        """Return the handle of `view`, issuing one if it has none yet."""
        handle = self._by_view.get(id(view))
        if handle is None:
            handle = next(self._counter)
            self._by_view[id(view)] = handle
            self._by_handle[handle] = view
        return handle

    def resolve(self, handle: int | None) -> View | None:
        """Return the view for `handle`, or None if it is unknown or released."""
        if handle is None:
            return None
        return self._by_handle.get(handle)

    def release(self, view: View) -> int | None:
        """Invalidate the handle of `view`, returning it if there was one."""
        handle = self._by_view.pop(id(view), None)
        if handle is not None:
            del self._by_handle[handle]
        return handle
