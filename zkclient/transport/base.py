"""Base transport interface for zkclient.

A transport owns the connection to the coordination store and performs the
primitive calls on wire values. All transport implementations must inherit
from BaseTransport.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable

from ..types import KeeperState, Operation, WatchedEvent

# completion(code, raw_result, error=None), invoked from the transport's delivery
# thread; ``error`` is the original exception when the call failed
Completion = Callable[..., None]
WatchCallback = Callable[[WatchedEvent], None]


class TransportError(Exception):
    """Failure raised by a transport, carrying the store's outcome code."""

    def __init__(self, code: int, message: str | None = None):
        self.code = code
        super().__init__(message or f"transport call failed with code {code}")


class BaseTransport(ABC):
    """Abstract base class for transports.

    Synchronous methods block until the store answers and raise an exception
    with a numeric ``code`` attribute on failure. ``call_async`` starts the
    same call without blocking and later reports ``(code, raw_result)``.

    Example:
        class MyTransport(BaseTransport):
            name = "mine"

            def get_data(self, path, watch):
                ...
    """

    # Transport identifier
    name: str = ""

    def __init__(self, hosts: str = "", timeout: int = 10000):
        """Initialize the base transport.

        Args:
            hosts: Comma separated host:port list.
            timeout: Session timeout in milliseconds.
        """
        self.hosts = hosts
        self.timeout = timeout

    @abstractmethod
    def connect(self, watcher: WatchCallback) -> None:
        """Open the session; session events go to ``watcher``."""
        pass

    @property
    @abstractmethod
    def state(self) -> KeeperState:
        """Current session state."""
        pass

    @property
    @abstractmethod
    def session_id(self) -> int:
        """Id of the current session, 0 when not connected."""
        pass

    @abstractmethod
    def close(self) -> None:
        """Close the session and release the connection."""
        pass

    # =========================================================================
    # PRIMITIVE CALLS
    # =========================================================================

    @abstractmethod
    def create(
        self,
        path: str,
        data: bytes,
        acl: list[tuple[int, tuple[str, str]]],
        ephemeral: bool,
        sequential: bool,
    ) -> str:
        """Create a node and return its actual path."""
        pass

    @abstractmethod
    def get_data(self, path: str, watch: WatchCallback | None) -> tuple[bytes, tuple[int, ...]]:
        """Return ``(data, stat)`` of a node."""
        pass

    @abstractmethod
    def exists(self, path: str, watch: WatchCallback | None) -> tuple[int, ...] | None:
        """Return the stat of a node, or None if it does not exist."""
        pass

    @abstractmethod
    def set_data(self, path: str, data: bytes, version: int) -> tuple[int, ...]:
        """Replace the data of a node and return its new stat."""
        pass

    @abstractmethod
    def delete(self, path: str, version: int) -> None:
        """Delete a node."""
        pass

    @abstractmethod
    def get_children(self, path: str, watch: WatchCallback | None) -> list[str]:
        """Return the child names of a node."""
        pass

    @abstractmethod
    def get_acl(self, path: str) -> tuple[list[tuple[int, tuple[str, str]]], tuple[int, ...]]:
        """Return ``(acl, stat)`` of a node."""
        pass

    @abstractmethod
    def set_acl(
        self, path: str, acl: list[tuple[int, tuple[str, str]]], version: int
    ) -> tuple[int, ...]:
        """Replace the ACL of a node and return its new stat."""
        pass

    @abstractmethod
    def add_auth(self, scheme: str, credential: bytes) -> None:
        """Add authentication info to the session."""
        pass

    @abstractmethod
    def call_async(self, operation: Operation, args: tuple[Any, ...], completion: Completion) -> None:
        """Start ``operation`` without blocking.

        ``args`` are the positional arguments of the matching synchronous
        method. Raises only if the call cannot be issued at all. A failure
        after that is reported as ``completion(code, None, exc)``, where
        ``code`` is ``exc.code`` or None when the exception carries none.
        """
        pass


class TransportFactory:
    """Factory for creating transport instances.

    Example:
        TransportFactory.register("memory", InMemoryTransport)
        transport = TransportFactory.create("memory", hosts="", timeout=10000)
    """

    _transports: dict[str, type[BaseTransport]] = {}

    @classmethod
    def register(cls, name: str, transport_class: type[BaseTransport]) -> None:
        """Register a transport class.

        Args:
            name: Transport name (e.g., "kazoo").
            transport_class: Transport class to register.
        """
        cls._transports[name] = transport_class

    @classmethod
    def create(cls, name: str, **kwargs: Any) -> BaseTransport:
        """Create a transport instance.

        Raises:
            KeyError: If transport not registered.
        """
        if name not in cls._transports:
            raise KeyError(f"Transport '{name}' not registered")
        return cls._transports[name](**kwargs)

    @classmethod
    def list_transports(cls) -> list[str]:
        """List registered transports."""
        return list(cls._transports.keys())

    @classmethod
    def is_registered(cls, name: str) -> bool:
        return name in cls._transports
