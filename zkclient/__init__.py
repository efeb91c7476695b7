"""zkclient - Client for ZooKeeper-style coordination stores.

Simple usage:
    from zkclient import ZooKeeper

    zk = ZooKeeper("127.0.0.1:2181")
    zk.create("/app", b"config", mode="persistent")
    data, stat = zk.get("/app")

Non-blocking usage:
    zk.get("/app", callback=lambda code, path, context, data, stat: ...)

Awaitable usage:
    from zkclient import AsyncZooKeeper

    data, stat = await AsyncZooKeeper(zk).get("/app")
"""

__version__ = "0.1.0"

# =============================================================================
# SIMPLE API (start here)
# =============================================================================

from .aio import AsyncZooKeeper
from .client import ZooKeeper

# =============================================================================
# ADVANCED API
# =============================================================================

# Types
from .acl import (
    ACL,
    ANYONE_ID_UNSAFE,
    AUTH_IDS,
    CREATOR_ALL_ACL,
    OPEN_ACL_UNSAFE,
    READ_ACL_UNSAFE,
    Id,
    Permission,
    make_acl,
    make_digest_acl,
    make_digest_id,
)
from .types import (
    ClientConfig,
    CreateMode,
    EventType,
    KeeperState,
    Operation,
    Stat,
    WatchedEvent,
)

# Exceptions
from .exceptions import (
    APIError,
    AuthFailedError,
    BadArgumentsError,
    BadVersionError,
    CallSite,
    Code,
    CodecError,
    ConnectionLossError,
    DataInconsistencyError,
    InvalidACLError,
    InvalidArgumentError,
    InvalidCallbackError,
    KeeperError,
    MarshallingError,
    NoAuthError,
    NoChildrenForEphemeralsError,
    NodeExistsError,
    NoNodeError,
    NotEmptyError,
    OperationTimeoutError,
    RuntimeInconsistencyError,
    SessionExpiredError,
    SystemZookeeperError,
    UnimplementedError,
    ZkClientError,
)

# Watchers
from .watchers import EventDispatcher, FunctionWatcher, SilentWatcher, Watcher

# Transports
from .transport import (
    BaseTransport,
    InMemoryStore,
    InMemoryTransport,
    KazooTransport,
    TransportError,
    TransportFactory,
)

# Utils
from .utils.logging import configure_logging

__all__ = [
    # Version
    "__version__",
    # Simple API
    "ZooKeeper",
    "AsyncZooKeeper",
    # Types
    "ACL",
    "ANYONE_ID_UNSAFE",
    "AUTH_IDS",
    "CREATOR_ALL_ACL",
    "OPEN_ACL_UNSAFE",
    "READ_ACL_UNSAFE",
    "Id",
    "Permission",
    "make_acl",
    "make_digest_acl",
    "make_digest_id",
    "ClientConfig",
    "CreateMode",
    "EventType",
    "KeeperState",
    "Operation",
    "Stat",
    "WatchedEvent",
    # Exceptions
    "APIError",
    "AuthFailedError",
    "BadArgumentsError",
    "BadVersionError",
    "CallSite",
    "Code",
    "CodecError",
    "ConnectionLossError",
    "DataInconsistencyError",
    "InvalidACLError",
    "InvalidArgumentError",
    "InvalidCallbackError",
    "KeeperError",
    "MarshallingError",
    "NoAuthError",
    "NoChildrenForEphemeralsError",
    "NodeExistsError",
    "NoNodeError",
    "NotEmptyError",
    "OperationTimeoutError",
    "RuntimeInconsistencyError",
    "SessionExpiredError",
    "SystemZookeeperError",
    "UnimplementedError",
    "ZkClientError",
    # Watchers
    "EventDispatcher",
    "FunctionWatcher",
    "SilentWatcher",
    "Watcher",
    # Transports
    "BaseTransport",
    "InMemoryStore",
    "InMemoryTransport",
    "KazooTransport",
    "TransportError",
    "TransportFactory",
    # Utils
    "configure_logging",
]
