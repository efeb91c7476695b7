"""zkclient - Session facade.

Usage:
    from zkclient import ZooKeeper

    # Blocking
    zk = ZooKeeper("127.0.0.1:2181")
    zk.create("/app", b"config", mode="persistent")
    data, stat = zk.get("/app")

    # Non-blocking, result delivered to a completion handler
    zk.get("/app", callback=lambda code, path, context, data, stat: ...)
"""

from typing import Any

from pydantic import ValidationError

from .acl import ACL
from .dispatch import ArgumentNormalizer, Dispatcher, ErrorTranslator, WatchRegistrar
from .exceptions import InvalidArgumentError
from .transport import BaseTransport, TransportFactory
from .types import ClientConfig, CreateMode, KeeperState, Stat
from .utils.logging import get_logger
from .watchers import Watcher, resolve_watcher

logger = get_logger("client")


class ZooKeeper:
    """A session with a coordination store.

    Every operation runs blocking unless a ``callback`` is given, in which
    case it returns None at once and the callback later receives
    ``(code, path, context, *results)``.

    Usage:
        with ZooKeeper(transport="memory") as zk:
            path = zk.create("/jobs/job-", b"", mode="ephemeral_sequential")
            stat = zk.exists(path)
            zk.set(path, b"done", version=stat.version)
    """

    def __init__(
        self,
        hosts: str = "127.0.0.1:2181",
        timeout: int = 10000,
        watcher: Any = None,
        transport: BaseTransport | str | None = None,
        default_acl: list[ACL] | None = None,
        default_mode: CreateMode | str | None = None,
        config: ClientConfig | None = None,
    ):
        """Open a session.

        Args:
            hosts: Comma separated host:port list.
            timeout: Session timeout in milliseconds.
            watcher: None, "default", a callable or an object with
                ``process(event)``. Receives session events and fired watches.
            transport: A transport instance or a registered name
                ("kazoo", "memory"). Defaults to "kazoo".
            default_acl: ACL used by create when none is given.
            default_mode: Create mode used when none is given.
            config: Full configuration; overrides the individual arguments.
        """
        self._config = config or self._build_config(hosts, timeout, default_acl, default_mode)
        self._watcher = resolve_watcher(watcher)
        self._transport = self._resolve_transport(transport)

        self._normalizer = ArgumentNormalizer(self._config.default_acl, self._config.default_mode)
        self._dispatcher = Dispatcher(
            self._transport,
            ErrorTranslator(),
            WatchRegistrar(self._watcher.process),
        )

        logger.info("Connecting to %s via %s transport", self._config.hosts, self._transport.name)
        self._transport.connect(self._watcher.process)

    @staticmethod
    def _build_config(
        hosts: str,
        timeout: int,
        default_acl: list[ACL] | None,
        default_mode: CreateMode | str | None,
    ) -> ClientConfig:
        values: dict[str, Any] = {"hosts": hosts, "timeout": timeout}
        if default_acl is not None:
            values["default_acl"] = default_acl
        if default_mode is not None:
            values["default_mode"] = default_mode
        try:
            return ClientConfig(**values)
        except ValidationError as exc:
            raise InvalidArgumentError("connect", str(exc)) from exc

    def _resolve_transport(self, transport: BaseTransport | str | None) -> BaseTransport:
        if isinstance(transport, BaseTransport):
            return transport
        name = transport or "kazoo"
        if not isinstance(name, str) or not TransportFactory.is_registered(name):
            raise InvalidArgumentError(
                "connect",
                f"unknown transport {name!r}, expected one of {TransportFactory.list_transports()}",
            )
        return TransportFactory.create(name, hosts=self._config.hosts, timeout=self._config.timeout)

    # =========================================================================
    # OPERATIONS
    # =========================================================================

    def create(self, path: str, data: Any = b"", options: Any = None, **kwargs: Any) -> str | None:
        """Create a node and return its actual path.

        Options: ``acl``, ``mode`` (or the ``ephemeral``/``sequential``
        flags), ``callback``, ``context``.
        """
        return self._dispatcher.create(self._normalizer.create(path, data, options, **kwargs))

    def get(self, path: str, options: Any = None, **kwargs: Any) -> tuple[bytes, Stat] | None:
        """Return ``(data, stat)``. Options: ``watch``, ``callback``, ``context``."""
        return self._dispatcher.get(self._normalizer.get(path, options, **kwargs))

    def exists(self, path: str, options: Any = None, **kwargs: Any) -> Stat | None:
        """Return the node's Stat, or None if there is no such node."""
        return self._dispatcher.exists(self._normalizer.exists(path, options, **kwargs))

    def set(self, path: str, data: Any = b"", options: Any = None, **kwargs: Any) -> Stat | None:
        """Replace a node's data. ``version=-1`` (default) skips the version check."""
        return self._dispatcher.set(self._normalizer.set(path, data, options, **kwargs))

    def delete(self, path: str, options: Any = None, **kwargs: Any) -> None:
        self._dispatcher.delete(self._normalizer.delete(path, options, **kwargs))

    def get_children(self, path: str, options: Any = None, **kwargs: Any) -> list[str] | None:
        return self._dispatcher.get_children(self._normalizer.get_children(path, options, **kwargs))

    def get_acls(self, path: str, options: Any = None, **kwargs: Any) -> tuple[list[ACL], Stat] | None:
        return self._dispatcher.get_acls(self._normalizer.get_acls(path, options, **kwargs))

    def set_acls(self, path: str, options: Any = None, **kwargs: Any) -> Stat | None:
        """Replace a node's ACL. ``acl`` is required."""
        return self._dispatcher.set_acls(self._normalizer.set_acls(path, options, **kwargs))

    def add_auth(self, credential: Any, options: Any = None, **kwargs: Any) -> None:
        """Add credentials to the session, e.g. ``zk.add_auth("user:secret")``."""
        self._dispatcher.add_auth(self._normalizer.add_auth(credential, options, **kwargs))

    # =========================================================================
    # SESSION
    # =========================================================================

    @property
    def state(self) -> KeeperState:
        return self._transport.state

    @property
    def connected(self) -> bool:
        return self.state == KeeperState.CONNECTED

    @property
    def closed(self) -> bool:
        return self.state == KeeperState.CLOSED

    @property
    def session_id(self) -> int:
        return self._transport.session_id

    @property
    def watcher(self) -> Watcher:
        return self._watcher

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def transport(self) -> BaseTransport:
        return self._transport

    def close(self) -> None:
        """Close the session. Safe to call more than once."""
        if self.closed:
            return
        logger.info("Closing session 0x%x", self.session_id)
        self._transport.close()

    def __enter__(self) -> "ZooKeeper":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"ZooKeeper(hosts={self._config.hosts!r}, state={self.state.value})"
