"""winctl - control plane for a window manager.

Exposes a local Unix socket where clients send line based JSON commands
(focus, move, close...) and receive window, cursor and window-list events.
The server runs on the asyncio event loop, driven by socket readiness callbacks.
"""
