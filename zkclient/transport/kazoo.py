"""Kazoo transport implementation for zkclient.

Talks to a real ensemble through ``kazoo.client.KazooClient``.
"""

import logging
from typing import Any, Callable

from ..exceptions import Code
from ..types import EventType, KeeperState, Operation, WatchedEvent
from .base import BaseTransport, Completion, WatchCallback

logger = logging.getLogger(__name__)

_LISTENER_STATES = {
    "CONNECTED": KeeperState.CONNECTED,
    "SUSPENDED": KeeperState.CONNECTING,
    "LOST": KeeperState.EXPIRED_SESSION,
}


def _keeper_state(value: Any) -> KeeperState:
    name = str(value)
    if name == "CONNECTED_RO":
        return KeeperState.CONNECTED
    try:
        return KeeperState(name)
    except ValueError:
        return KeeperState.CONNECTING


def _stat_tuple(stat: Any) -> tuple[int, ...] | None:
    # ZnodeStat is a namedtuple in wire order
    return tuple(stat) if stat is not None else None


def _acl_tuples(acls: Any) -> list[tuple[int, tuple[str, str]]]:
    return [(acl.perms, (acl.id.scheme, acl.id.id)) for acl in acls]


class KazooTransport(BaseTransport):
    """Transport backed by kazoo.

    Example:
        transport = KazooTransport(hosts="zk1:2181,zk2:2181", timeout=10000)
        zk = ZooKeeper(transport=transport)
    """

    name = "kazoo"

    def __init__(
        self,
        hosts: str = "127.0.0.1:2181",
        timeout: int = 10000,
        connect_timeout: float = 15.0,
        client: Any = None,
    ):
        """Initialize kazoo transport.

        Args:
            hosts: Comma separated host:port list.
            timeout: Session timeout in milliseconds.
            connect_timeout: Seconds to wait for the first connection.
            client: Pre-built KazooClient to use instead of creating one.
        """
        super().__init__(hosts=hosts, timeout=timeout)
        self._connect_timeout = connect_timeout
        self._client: Any = client
        self._watcher: WatchCallback | None = None

    def _get_client(self) -> Any:
        """Lazily initialize and return the kazoo client."""
        if self._client is None:
            try:
                from kazoo.client import KazooClient
            except ImportError:
                raise ImportError(
                    "kazoo package not installed. Install with: pip install zkclient[kazoo]"
                )

            self._client = KazooClient(hosts=self.hosts, timeout=self.timeout / 1000)
        return self._client

    # =========================================================================
    # SESSION
    # =========================================================================

    def connect(self, watcher: WatchCallback) -> None:
        client = self._get_client()
        self._watcher = watcher
        client.add_listener(self._on_state_change)
        client.start(timeout=self._connect_timeout)

    def _on_state_change(self, state: Any) -> None:
        # Listeners run on kazoo's connection thread and must not block
        keeper_state = _LISTENER_STATES.get(str(state), KeeperState.CONNECTING)
        event = WatchedEvent(type=EventType.NONE, state=keeper_state, path=None)
        if self._watcher is not None:
            self._client.handler.spawn(self._watcher, event)

    @property
    def state(self) -> KeeperState:
        if self._client is None:
            return KeeperState.CONNECTING
        return _keeper_state(self._client.client_state)

    @property
    def session_id(self) -> int:
        if self._client is None or self._client.client_id is None:
            return 0
        return self._client.client_id[0]

    def close(self) -> None:
        if self._client is None:
            return
        self._client.stop()
        self._client.close()

    # =========================================================================
    # PRIMITIVE CALLS
    # =========================================================================

    def _kazoo_acls(self, acl: list[tuple[int, tuple[str, str]]]) -> list[Any]:
        from kazoo.security import ACL, Id

        return [ACL(perms, Id(scheme, ident)) for perms, (scheme, ident) in acl]

    def _kazoo_watch(self, watch: WatchCallback | None) -> Callable[[Any], None] | None:
        if watch is None:
            return None

        def relay(event: Any) -> None:
            watch(
                WatchedEvent(
                    type=EventType[str(event.type)],
                    state=_keeper_state(event.state),
                    path=event.path,
                )
            )

        return relay

    def create(
        self, path: str, data: bytes, acl: list[tuple[int, tuple[str, str]]], ephemeral: bool, sequential: bool
    ) -> str:
        return self._get_client().create(
            path, data, acl=self._kazoo_acls(acl), ephemeral=ephemeral, sequence=sequential
        )

    def get_data(self, path: str, watch: WatchCallback | None) -> tuple[bytes, tuple[int, ...]]:
        data, stat = self._get_client().get(path, watch=self._kazoo_watch(watch))
        return data, _stat_tuple(stat)

    def exists(self, path: str, watch: WatchCallback | None) -> tuple[int, ...] | None:
        return _stat_tuple(self._get_client().exists(path, watch=self._kazoo_watch(watch)))

    def set_data(self, path: str, data: bytes, version: int) -> tuple[int, ...]:
        return _stat_tuple(self._get_client().set(path, data, version=version))

    def delete(self, path: str, version: int) -> None:
        self._get_client().delete(path, version=version)

    def get_children(self, path: str, watch: WatchCallback | None) -> list[str]:
        return list(self._get_client().get_children(path, watch=self._kazoo_watch(watch)))

    def get_acl(self, path: str) -> tuple[list[tuple[int, tuple[str, str]]], tuple[int, ...]]:
        acls, stat = self._get_client().get_acls(path)
        return _acl_tuples(acls), _stat_tuple(stat)

    def set_acl(self, path: str, acl: list[tuple[int, tuple[str, str]]], version: int) -> tuple[int, ...]:
        return _stat_tuple(self._get_client().set_acls(path, self._kazoo_acls(acl), version=version))

    def add_auth(self, scheme: str, credential: bytes) -> None:
        self._get_client().add_auth(scheme, credential.decode("utf-8"))

    def call_async(self, operation: Operation, args: tuple[Any, ...], completion: Completion) -> None:
        client = self._get_client()
        if operation == Operation.CREATE:
            path, data, acl, ephemeral, sequential = args
            result = client.create_async(
                path, data, acl=self._kazoo_acls(acl), ephemeral=ephemeral, sequence=sequential
            )
            convert: Callable[[Any], Any] = lambda raw: raw
        elif operation == Operation.GET:
            path, watch = args
            result = client.get_async(path, watch=self._kazoo_watch(watch))
            convert = lambda raw: (raw[0], _stat_tuple(raw[1]))
        elif operation == Operation.EXISTS:
            path, watch = args
            result = client.exists_async(path, watch=self._kazoo_watch(watch))
            convert = _stat_tuple
        elif operation == Operation.SET:
            path, data, version = args
            result = client.set_async(path, data, version=version)
            convert = _stat_tuple
        elif operation == Operation.DELETE:
            path, version = args
            result = client.delete_async(path, version=version)
            convert = lambda raw: None
        elif operation == Operation.GET_CHILDREN:
            path, watch = args
            result = client.get_children_async(path, watch=self._kazoo_watch(watch))
            convert = list
        elif operation == Operation.GET_ACLS:
            (path,) = args
            result = client.get_acls_async(path)
            convert = lambda raw: (_acl_tuples(raw[0]), _stat_tuple(raw[1]))
        elif operation == Operation.SET_ACLS:
            path, acl, version = args
            result = client.set_acls_async(path, self._kazoo_acls(acl), version=version)
            convert = _stat_tuple
        else:
            raise ValueError(f"Operation '{operation.value}' has no asynchronous form")

        def on_complete(async_result: Any) -> None:
            try:
                raw = async_result.get_nowait()
            except Exception as exc:
                logger.debug("%s failed: %r", operation.value, exc)
                completion(getattr(exc, "code", None), None, exc)
                return
            completion(int(Code.OK), convert(raw))

        result.rawlink(on_complete)
