"""Watch registration.

A watch flag on get, exists or get_children becomes the transport's watch
argument. Watches are one-shot: once fired, the caller must ask again.
"""

from ..transport.base import WatchCallback
from .normalize import Request


class WatchRegistrar:
    """Resolves a request's watch flag to the session watcher."""

    def __init__(self, watcher: WatchCallback):
        self._watcher = watcher

    def watch_for(self, request: Request) -> WatchCallback | None:
        return self._watcher if request.watch else None
