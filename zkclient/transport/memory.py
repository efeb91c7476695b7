"""In-memory transport for running zkclient without a store ensemble.

InMemoryStore keeps a node tree with the store's semantics (versions,
sequential names, ephemeral ownership, ACL checks, one-shot watches).
InMemoryTransport is one session against a store. Several transports may
share a store to act as independent sessions.

Useful for:
- Unit and integration testing
- Development without a running ensemble
"""

import itertools
import logging
import queue
import threading
import time
from typing import Any, Callable

from ..acl import ANYONE_ID_UNSAFE, OPEN_ACL_UNSAFE, Permission, make_digest_id
from ..exceptions import Code
from ..types import EventType, KeeperState, Operation, WatchedEvent
from .base import BaseTransport, Completion, TransportError, WatchCallback

logger = logging.getLogger(__name__)

WireACL = tuple[int, tuple[str, str]]

_KNOWN_SCHEMES = ("world", "auth", "digest", "ip", "host")


def _now_ms() -> int:
    return int(time.time() * 1000)


def _parent_of(path: str) -> str:
    parent = path.rsplit("/", 1)[0]
    return parent or "/"


def _name_of(path: str) -> str:
    return path.rsplit("/", 1)[1]


def _validate_path(path: str, sequential: bool = False) -> None:
    if not isinstance(path, str) or not path.startswith("/"):
        raise TransportError(Code.BAD_ARGUMENTS, f"path must start with '/': {path!r}")
    if path == "/":
        return
    if "//" in path or "\x00" in path:
        raise TransportError(Code.BAD_ARGUMENTS, f"invalid path: {path!r}")
    if path.endswith("/") and not sequential:
        raise TransportError(Code.BAD_ARGUMENTS, f"path must not end with '/': {path!r}")


class _Node:
    """A node in the in-memory tree."""

    __slots__ = (
        "data", "acl", "czxid", "mzxid", "ctime", "mtime", "version",
        "cversion", "aversion", "ephemeral_owner", "pzxid", "children",
    )

    def __init__(self, data: bytes, acl: list[WireACL], zxid: int, ephemeral_owner: int = 0):
        now = _now_ms()
        self.data = data
        self.acl = acl
        self.czxid = zxid
        self.mzxid = zxid
        self.ctime = now
        self.mtime = now
        self.version = 0
        self.cversion = 0
        self.aversion = 0
        self.ephemeral_owner = ephemeral_owner
        self.pzxid = zxid
        self.children: dict[str, None] = {}  # insertion ordered set

    def stat(self) -> tuple[int, ...]:
        return (
            self.czxid,
            self.mzxid,
            self.ctime,
            self.mtime,
            self.version,
            self.cversion,
            self.aversion,
            self.ephemeral_owner,
            len(self.data),
            len(self.children),
            self.pzxid,
        )


class InMemoryStore:
    """A node tree shared by one or more in-memory sessions.

    Example:
        store = InMemoryStore()
        first = InMemoryTransport(store=store)
        second = InMemoryTransport(store=store)
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._zxid = 0
        self._session_ids = itertools.count(0x100000001)
        self._sessions: dict[int, "InMemoryTransport"] = {}
        self._nodes: dict[str, _Node] = {
            "/": _Node(b"", _wire(OPEN_ACL_UNSAFE), 0),
        }
        # path -> [(session_id, callback)]
        self._data_watches: dict[str, list[tuple[int, WatchCallback]]] = {}
        self._child_watches: dict[str, list[tuple[int, WatchCallback]]] = {}

    # =========================================================================
    # SESSIONS
    # =========================================================================

    def open_session(self, session: "InMemoryTransport") -> int:
        with self._lock:
            session_id = next(self._session_ids)
            self._sessions[session_id] = session
            return session_id

    def close_session(self, session_id: int) -> None:
        """Drop a session, its watches and its ephemeral nodes."""
        with self._lock:
            self._sessions.pop(session_id, None)
            for watches in (self._data_watches, self._child_watches):
                for path in list(watches):
                    watches[path] = [w for w in watches[path] if w[0] != session_id]
                    if not watches[path]:
                        del watches[path]
            owned = sorted(
                (p for p, n in self._nodes.items() if n.ephemeral_owner == session_id),
                key=len,
                reverse=True,
            )
            events = []
            for path in owned:
                events.extend(self._remove(path))
        self._fire(events)

    # =========================================================================
    # OPERATIONS
    # =========================================================================

    def create(
        self,
        session: "InMemoryTransport",
        path: str,
        data: bytes,
        acl: list[WireACL],
        ephemeral: bool,
        sequential: bool,
    ) -> str:
        _validate_path(path, sequential)
        with self._lock:
            if path == "/":
                raise TransportError(Code.NODE_EXISTS, "root node always exists")
            parent_path = _parent_of(path)
            parent = self._nodes.get(parent_path)
            if parent is None:
                raise TransportError(Code.NO_NODE, f"parent of {path} does not exist")
            self._check_access(session, parent, Permission.CREATE)
            resolved_acl = self._resolve_acl(session, acl)
            if parent.ephemeral_owner:
                raise TransportError(Code.NO_CHILDREN_FOR_EPHEMERALS, parent_path)

            if sequential:
                path = f"{path}{parent.cversion:010d}"
            if path in self._nodes:
                raise TransportError(Code.NODE_EXISTS, path)

            zxid = self._next_zxid()
            owner = session.session_id if ephemeral else 0
            self._nodes[path] = _Node(bytes(data), resolved_acl, zxid, owner)
            parent.children[_name_of(path)] = None
            parent.cversion += 1
            parent.pzxid = zxid

            events = self._trigger(self._data_watches, path, EventType.CREATED)
            events += self._trigger(self._child_watches, parent_path, EventType.CHILD)
        self._fire(events)
        return path

    def get_data(
        self, session: "InMemoryTransport", path: str, watch: WatchCallback | None
    ) -> tuple[bytes, tuple[int, ...]]:
        _validate_path(path)
        with self._lock:
            node = self._get(path)
            self._check_access(session, node, Permission.READ)
            if watch is not None:
                self._add_watch(self._data_watches, path, session, watch)
            return node.data, node.stat()

    def exists(
        self, session: "InMemoryTransport", path: str, watch: WatchCallback | None
    ) -> tuple[int, ...] | None:
        _validate_path(path)
        with self._lock:
            if watch is not None:
                self._add_watch(self._data_watches, path, session, watch)
            node = self._nodes.get(path)
            return node.stat() if node is not None else None

    def set_data(
        self, session: "InMemoryTransport", path: str, data: bytes, version: int
    ) -> tuple[int, ...]:
        _validate_path(path)
        with self._lock:
            node = self._get(path)
            self._check_access(session, node, Permission.WRITE)
            self._check_version(node.version, version, path)
            node.data = bytes(data)
            node.version += 1
            node.mzxid = self._next_zxid()
            node.mtime = _now_ms()
            stat = node.stat()
            events = self._trigger(self._data_watches, path, EventType.CHANGED)
        self._fire(events)
        return stat

    def delete(self, session: "InMemoryTransport", path: str, version: int) -> None:
        _validate_path(path)
        with self._lock:
            if path == "/":
                raise TransportError(Code.BAD_ARGUMENTS, "cannot delete the root node")
            node = self._get(path)
            self._check_access(session, self._nodes[_parent_of(path)], Permission.DELETE)
            self._check_version(node.version, version, path)
            if node.children:
                raise TransportError(Code.NOT_EMPTY, path)
            events = self._remove(path)
        self._fire(events)

    def get_children(
        self, session: "InMemoryTransport", path: str, watch: WatchCallback | None
    ) -> list[str]:
        _validate_path(path)
        with self._lock:
            node = self._get(path)
            self._check_access(session, node, Permission.READ)
            if watch is not None:
                self._add_watch(self._child_watches, path, session, watch)
            return list(node.children)

    def get_acl(
        self, session: "InMemoryTransport", path: str
    ) -> tuple[list[WireACL], tuple[int, ...]]:
        _validate_path(path)
        with self._lock:
            node = self._get(path)
            return list(node.acl), node.stat()

    def set_acl(
        self, session: "InMemoryTransport", path: str, acl: list[WireACL], version: int
    ) -> tuple[int, ...]:
        _validate_path(path)
        with self._lock:
            node = self._get(path)
            self._check_access(session, node, Permission.ADMIN)
            self._check_version(node.aversion, version, path)
            node.acl = self._resolve_acl(session, acl)
            node.aversion += 1
            return node.stat()

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _next_zxid(self) -> int:
        self._zxid += 1
        return self._zxid

    def _get(self, path: str) -> _Node:
        node = self._nodes.get(path)
        if node is None:
            raise TransportError(Code.NO_NODE, path)
        return node

    @staticmethod
    def _check_version(current: int, expected: int, path: str) -> None:
        if expected != -1 and expected != current:
            raise TransportError(Code.BAD_VERSION, f"{path}: expected {expected}, at {current}")

    @staticmethod
    def _check_access(session: "InMemoryTransport", node: _Node, permission: Permission) -> None:
        for perms, (scheme, ident) in node.acl:
            if not perms & permission:
                continue
            if (scheme, ident) == (ANYONE_ID_UNSAFE.scheme, ANYONE_ID_UNSAFE.id):
                return
            if (scheme, ident) in session.auth_ids:
                return
        raise TransportError(Code.NO_AUTH, f"missing {permission!r}")

    @staticmethod
    def _resolve_acl(session: "InMemoryTransport", acl: list[WireACL]) -> list[WireACL]:
        """Validate an ACL and expand ``auth`` entries to the session's ids."""
        if not acl:
            raise TransportError(Code.INVALID_ACL, "ACL list is empty")
        resolved: list[WireACL] = []
        for perms, (scheme, ident) in acl:
            if scheme not in _KNOWN_SCHEMES:
                raise TransportError(Code.INVALID_ACL, f"unknown scheme {scheme!r}")
            if scheme == "world" and ident != "anyone":
                raise TransportError(Code.INVALID_ACL, f"invalid world id {ident!r}")
            if scheme == "digest" and ":" not in ident:
                raise TransportError(Code.INVALID_ACL, f"invalid digest id {ident!r}")
            if scheme == "auth":
                if not session.auth_ids:
                    raise TransportError(Code.INVALID_ACL, "no authenticated ids for 'auth'")
                resolved.extend((perms, auth_id) for auth_id in sorted(session.auth_ids))
            else:
                resolved.append((perms, (scheme, ident)))
        return resolved

    def _remove(self, path: str) -> list[tuple[int, WatchCallback, WatchedEvent]]:
        parent_path = _parent_of(path)
        parent = self._nodes[parent_path]
        del self._nodes[path]
        parent.children.pop(_name_of(path), None)
        parent.cversion += 1
        parent.pzxid = self._next_zxid()

        events = self._trigger(self._data_watches, path, EventType.DELETED)
        events += self._trigger(self._child_watches, path, EventType.DELETED)
        events += self._trigger(self._child_watches, parent_path, EventType.CHILD)
        return events

    @staticmethod
    def _add_watch(
        watches: dict[str, list[tuple[int, WatchCallback]]],
        path: str,
        session: "InMemoryTransport",
        callback: WatchCallback,
    ) -> None:
        entry = (session.session_id, callback)
        registered = watches.setdefault(path, [])
        if entry not in registered:
            registered.append(entry)

    @staticmethod
    def _trigger(
        watches: dict[str, list[tuple[int, WatchCallback]]], path: str, event_type: EventType
    ) -> list[tuple[int, WatchCallback, WatchedEvent]]:
        event = WatchedEvent(type=event_type, state=KeeperState.CONNECTED, path=path)
        return [(session_id, callback, event) for session_id, callback in watches.pop(path, [])]

    def _fire(self, events: list[tuple[int, WatchCallback, WatchedEvent]]) -> None:
        for session_id, callback, event in events:
            session = self._sessions.get(session_id)
            if session is not None:
                session.deliver(callback, event)


def _wire(acls: list[Any]) -> list[WireACL]:
    return [(int(a.perms), (a.id.scheme, a.id.id)) for a in acls]


class _DeliveryThread:
    """Runs completions and watch callbacks in submission order."""

    _STOP = object()

    def __init__(self, name: str):
        self._queue: queue.Queue = queue.Queue()
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)
        self._thread.start()

    def submit(self, func: Callable[..., Any], *args: Any) -> None:
        self._queue.put((func, args))

    def wait_idle(self, timeout: float | None = None) -> bool:
        """Block until everything submitted so far has run."""
        if threading.current_thread() is self._thread:
            return True
        done = threading.Event()
        self._queue.put((done.set, ()))
        return done.wait(timeout)

    def stop(self) -> None:
        self._queue.put(self._STOP)
        if threading.current_thread() is not self._thread:
            self._thread.join()

    def _run(self) -> None:
        while True:
            item = self._queue.get()
            if item is self._STOP:
                return
            func, args = item
            try:
                func(*args)
            except Exception:
                logger.exception("Error in callback %r", func)


class InMemoryTransport(BaseTransport):
    """In-process transport backed by an InMemoryStore.

    Example:
        transport = InMemoryTransport()
        zk = ZooKeeper(transport=transport)
        zk.create("/app", b"config", mode="persistent")
    """

    name = "memory"

    def __init__(self, hosts: str = "", timeout: int = 10000, store: InMemoryStore | None = None):
        """Initialize in-memory transport.

        Args:
            hosts: Ignored, kept for interface compatibility.
            timeout: Session timeout in milliseconds (informational).
            store: Store to attach to. A private store is created if None.
        """
        super().__init__(hosts=hosts, timeout=timeout)
        self.store = store or InMemoryStore()
        self.auth_ids: set[tuple[str, str]] = set()
        self._state = KeeperState.CONNECTING
        self._session_id = 0
        self._reachable = True
        self._watcher: WatchCallback | None = None
        self._delivery: _DeliveryThread | None = None

    # =========================================================================
    # SESSION
    # =========================================================================

    def connect(self, watcher: WatchCallback) -> None:
        if self._state != KeeperState.CONNECTING:
            return
        self._watcher = watcher
        self._session_id = self.store.open_session(self)
        self._delivery = _DeliveryThread(f"zkclient-memory-{self._session_id:x}")
        self._state = KeeperState.CONNECTED
        logger.debug("Session 0x%x connected", self._session_id)
        self._notify_state(KeeperState.CONNECTED)

    @property
    def state(self) -> KeeperState:
        return self._state

    @property
    def session_id(self) -> int:
        return self._session_id

    def close(self) -> None:
        if self._state == KeeperState.CLOSED:
            return
        if self._session_id:
            self.store.close_session(self._session_id)
        self._state = KeeperState.CLOSED
        logger.debug("Session 0x%x closed", self._session_id)
        if self._delivery is not None:
            self._delivery.stop()

    def expire(self) -> None:
        """Expire the session as the store would after a timeout."""
        if self._state != KeeperState.CONNECTED:
            return
        self.store.close_session(self._session_id)
        self._state = KeeperState.EXPIRED_SESSION
        self._notify_state(KeeperState.EXPIRED_SESSION)

    def disconnect(self) -> None:
        """Simulate losing the connection; calls fail with connection loss."""
        self._reachable = False

    def reconnect(self) -> None:
        self._reachable = True

    def wait_idle(self, timeout: float | None = 5.0) -> bool:
        """Wait until every pending completion and watch has been delivered."""
        if self._delivery is None or self._state == KeeperState.CLOSED:
            return True
        return self._delivery.wait_idle(timeout)

    def deliver(self, callback: WatchCallback, event: WatchedEvent) -> None:
        if self._delivery is not None and self._state == KeeperState.CONNECTED:
            self._delivery.submit(callback, event)

    def _notify_state(self, state: KeeperState) -> None:
        if self._watcher is not None and self._delivery is not None:
            event = WatchedEvent(type=EventType.NONE, state=state, path=None)
            self._delivery.submit(self._watcher, event)

    def _ensure_usable(self) -> None:
        if self._state in (KeeperState.CLOSED, KeeperState.EXPIRED_SESSION):
            raise TransportError(Code.SESSION_EXPIRED, f"session is {self._state.value}")
        if self._state == KeeperState.AUTH_FAILED:
            raise TransportError(Code.AUTH_FAILED, "session authentication failed")
        if self._state == KeeperState.CONNECTING or not self._reachable:
            raise TransportError(Code.CONNECTION_LOSS, "not connected")

    # =========================================================================
    # PRIMITIVE CALLS
    # =========================================================================

    def create(
        self, path: str, data: bytes, acl: list[WireACL], ephemeral: bool, sequential: bool
    ) -> str:
        self._ensure_usable()
        return self.store.create(self, path, data, acl, ephemeral, sequential)

    def get_data(self, path: str, watch: WatchCallback | None) -> tuple[bytes, tuple[int, ...]]:
        self._ensure_usable()
        return self.store.get_data(self, path, watch)

    def exists(self, path: str, watch: WatchCallback | None) -> tuple[int, ...] | None:
        self._ensure_usable()
        return self.store.exists(self, path, watch)

    def set_data(self, path: str, data: bytes, version: int) -> tuple[int, ...]:
        self._ensure_usable()
        return self.store.set_data(self, path, data, version)

    def delete(self, path: str, version: int) -> None:
        self._ensure_usable()
        self.store.delete(self, path, version)

    def get_children(self, path: str, watch: WatchCallback | None) -> list[str]:
        self._ensure_usable()
        return self.store.get_children(self, path, watch)

    def get_acl(self, path: str) -> tuple[list[WireACL], tuple[int, ...]]:
        self._ensure_usable()
        return self.store.get_acl(self, path)

    def set_acl(self, path: str, acl: list[WireACL], version: int) -> tuple[int, ...]:
        self._ensure_usable()
        return self.store.set_acl(self, path, acl, version)

    def add_auth(self, scheme: str, credential: bytes) -> None:
        self._ensure_usable()
        text = credential.decode("utf-8", errors="replace")
        if scheme != "digest" or ":" not in text:
            self._state = KeeperState.AUTH_FAILED
            self._notify_state(KeeperState.AUTH_FAILED)
            raise TransportError(Code.AUTH_FAILED, f"cannot authenticate with scheme {scheme!r}")
        username, password = text.split(":", 1)
        self.auth_ids.add(("digest", make_digest_id(username, password)))

    def call_async(self, operation: Operation, args: tuple[Any, ...], completion: Completion) -> None:
        if self._state in (KeeperState.CLOSED, KeeperState.EXPIRED_SESSION) or self._delivery is None:
            raise TransportError(Code.SESSION_EXPIRED, "cannot issue calls on a closed session")
        method = self._methods[operation]
        try:
            raw = method(self, *args)
        except Exception as exc:
            self._delivery.submit(completion, getattr(exc, "code", None), None, exc)
            return
        self._delivery.submit(completion, int(Code.OK), raw)

    _methods: dict[Operation, Callable[..., Any]] = {
        Operation.CREATE: create,
        Operation.GET: get_data,
        Operation.EXISTS: exists,
        Operation.SET: set_data,
        Operation.DELETE: delete,
        Operation.GET_CHILDREN: get_children,
        Operation.GET_ACLS: get_acl,
        Operation.SET_ACLS: set_acl,
    }
