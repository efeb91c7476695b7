"""Session watchers.

The session watcher receives session state changes and every watch that
fires. Three kinds are provided:

- SilentWatcher ignores everything (the default)
- FunctionWatcher wraps a plain callable
- EventDispatcher routes events to handlers registered per path
"""

import logging
import threading
from typing import Any, Callable, Protocol

from .exceptions import InvalidArgumentError
from .types import EventType, KeeperState, WatchedEvent

logger = logging.getLogger(__name__)

EventHandler = Callable[[WatchedEvent], None]


class Watcher(Protocol):
    def process(self, event: WatchedEvent) -> None: ...


class SilentWatcher:
    """Watcher that drops every event."""

    def process(self, event: WatchedEvent) -> None:
        pass


class FunctionWatcher:
    """Watcher backed by a plain callable."""

    def __init__(self, func: EventHandler):
        self._func = func

    def process(self, event: WatchedEvent) -> None:
        self._func(event)


class EventDispatcher:
    """Routes watch events to handlers subscribed to a path.

    Session events (type NONE) go to handlers subscribed with
    ``register_state``.

    Example:
        zk = ZooKeeper(hosts, watcher="default")
        zk.watcher.register("/config", lambda event: reload())
        zk.get("/config", watch=True)
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._path_handlers: dict[str, list[EventHandler]] = {}
        self._state_handlers: dict[KeeperState, list[EventHandler]] = {}

    def register(self, path: str, handler: EventHandler) -> EventHandler:
        """Subscribe ``handler`` to events on ``path``."""
        with self._lock:
            self._path_handlers.setdefault(path, []).append(handler)
        return handler

    def unregister(self, path: str, handler: EventHandler | None = None) -> None:
        """Drop one handler, or every handler when ``handler`` is None."""
        with self._lock:
            if handler is None:
                self._path_handlers.pop(path, None)
                return
            handlers = self._path_handlers.get(path, [])
            if handler in handlers:
                handlers.remove(handler)
            if not handlers:
                self._path_handlers.pop(path, None)

    def register_state(self, state: KeeperState, handler: EventHandler) -> EventHandler:
        """Subscribe ``handler`` to session transitions into ``state``."""
        with self._lock:
            self._state_handlers.setdefault(state, []).append(handler)
        return handler

    def process(self, event: WatchedEvent) -> None:
        with self._lock:
            if event.type == EventType.NONE:
                handlers = list(self._state_handlers.get(event.state, []))
            else:
                handlers = list(self._path_handlers.get(event.path or "", []))

        logger.debug("Dispatching %s on %s to %d handler(s)", event.type.name, event.path, len(handlers))
        for handler in handlers:
            try:
                handler(event)
            except Exception:
                logger.exception("Error in watch handler for %s", event.path)


def resolve_watcher(watcher: Any) -> Watcher:
    """Turn the ``watcher`` argument of a session into a Watcher.

    None gives a SilentWatcher, ``"default"`` an EventDispatcher, a callable
    a FunctionWatcher; objects with ``process`` are used as-is.
    """
    if watcher is None:
        return SilentWatcher()
    if isinstance(watcher, str):
        if watcher == "default":
            return EventDispatcher()
        raise InvalidArgumentError("connect", f"unknown watcher {watcher!r}")
    if callable(getattr(watcher, "process", None)):
        return watcher
    if callable(watcher):
        return FunctionWatcher(watcher)
    raise InvalidArgumentError("connect", f"watcher must be callable or define process, got {type(watcher).__name__}")
