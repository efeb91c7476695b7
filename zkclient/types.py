"""Core types and data models for zkclient."""

from datetime import datetime, timezone
from enum import Enum, IntEnum

from pydantic import BaseModel, ConfigDict, Field

from .acl import ACL, OPEN_ACL_UNSAFE


# =============================================================================
# Enums
# =============================================================================


class Operation(str, Enum):
    """Primitive operations understood by the dispatcher."""

    CREATE = "create"
    GET = "get"
    EXISTS = "exists"
    SET = "set"
    DELETE = "delete"
    GET_CHILDREN = "get_children"
    GET_ACLS = "get_acls"
    SET_ACLS = "set_acls"
    ADD_AUTH = "add_auth"


class CreateMode(str, Enum):
    """Lifetime and naming policy of a created node."""

    PERSISTENT = "persistent"
    EPHEMERAL = "ephemeral"
    PERSISTENT_SEQUENTIAL = "persistent_sequential"
    EPHEMERAL_SEQUENTIAL = "ephemeral_sequential"

    @property
    def ephemeral(self) -> bool:
        return self in (CreateMode.EPHEMERAL, CreateMode.EPHEMERAL_SEQUENTIAL)

    @property
    def sequential(self) -> bool:
        return self in (CreateMode.PERSISTENT_SEQUENTIAL, CreateMode.EPHEMERAL_SEQUENTIAL)

    @classmethod
    def from_flags(cls, ephemeral: bool, sequential: bool) -> "CreateMode":
        if ephemeral:
            return cls.EPHEMERAL_SEQUENTIAL if sequential else cls.EPHEMERAL
        return cls.PERSISTENT_SEQUENTIAL if sequential else cls.PERSISTENT


class KeeperState(str, Enum):
    """Session state as reported by the transport."""

    CONNECTING = "CONNECTING"
    CONNECTED = "CONNECTED"
    AUTH_FAILED = "AUTH_FAILED"
    EXPIRED_SESSION = "EXPIRED_SESSION"
    CLOSED = "CLOSED"


class EventType(IntEnum):
    """Kind of change a watch reports."""

    NONE = -1  # Session state change, no node involved
    CREATED = 1
    DELETED = 2
    CHANGED = 3
    CHILD = 4


# =============================================================================
# Node metadata
# =============================================================================


STAT_FIELDS = (
    "czxid",
    "mzxid",
    "ctime",
    "mtime",
    "version",
    "cversion",
    "aversion",
    "ephemeral_owner",
    "data_length",
    "num_children",
    "pzxid",
)


class Stat(BaseModel):
    """Metadata of a node, as reported by the store."""

    model_config = ConfigDict(frozen=True, strict=True)

    czxid: int = Field(description="Transaction id that created the node")
    mzxid: int = Field(description="Transaction id that last modified the node")
    ctime: int = Field(description="Creation time, ms since epoch")
    mtime: int = Field(description="Last modification time, ms since epoch")
    version: int = Field(description="Number of changes to the data")
    cversion: int = Field(description="Number of changes to the children")
    aversion: int = Field(description="Number of changes to the ACL")
    ephemeral_owner: int = Field(description="Owning session id, 0 if not ephemeral")
    data_length: int = Field(description="Length of the data in bytes")
    num_children: int = Field(description="Number of children")
    pzxid: int = Field(description="Transaction id that last modified the children")

    @property
    def created(self) -> datetime:
        return datetime.fromtimestamp(self.ctime / 1000, tz=timezone.utc)

    @property
    def last_modified(self) -> datetime:
        return datetime.fromtimestamp(self.mtime / 1000, tz=timezone.utc)

    @property
    def is_ephemeral(self) -> bool:
        return self.ephemeral_owner != 0


# =============================================================================
# Watches
# =============================================================================


class WatchedEvent(BaseModel):
    """A one-shot watch notification."""

    model_config = ConfigDict(frozen=True)

    type: EventType
    state: KeeperState
    path: str | None = None


# =============================================================================
# Session configuration
# =============================================================================


class ClientConfig(BaseModel):
    """Configuration of a client session."""

    hosts: str = Field(default="127.0.0.1:2181", description="Comma separated host:port list")
    timeout: int = Field(default=10000, gt=0, description="Session timeout in milliseconds")
    default_acl: list[ACL] = Field(
        default_factory=lambda: list(OPEN_ACL_UNSAFE),
        min_length=1,
        description="ACL applied by create when none is given",
    )
    default_mode: CreateMode = Field(
        default=CreateMode.EPHEMERAL,
        description="Create mode applied when none is given",
    )
