"""Access control lists for zkclient.

An ACL entry pairs a permission bit-set with an identity. Identities are a
``(scheme, id)`` pair; the store ships with these schemes:

- ``world`` has a single id, ``anyone``, that represents anyone.
- ``auth`` ignores the id and stands for every identity the creating session
  has authenticated as.
- ``digest`` uses a ``username:password`` string. Authentication sends it in
  clear text; in an ACL the id is ``username:base64(sha1(username:password))``.
- ``host`` matches a hostname suffix.
- ``ip`` matches ``addr/bits`` against the client address.
"""

import base64
import hashlib
from enum import IntFlag
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, PlainValidator


class Permission(IntFlag):
    """Permission bits, combinable with ``|``."""

    READ = 1
    WRITE = 2
    CREATE = 4
    DELETE = 8
    ADMIN = 16
    ALL = 31


def _to_permission(value: Any) -> Permission:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"permissions must be an int, got {type(value).__name__}")
    if value < 0 or value > Permission.ALL:
        raise ValueError(f"permissions out of range: {value}")
    return Permission(value)


PermissionBits = Annotated[Permission, PlainValidator(_to_permission)]


class Id(BaseModel):
    """Identity an ACL entry applies to."""

    model_config = ConfigDict(frozen=True)

    scheme: str
    id: str


class ACL(BaseModel):
    """A single access control entry."""

    model_config = ConfigDict(frozen=True)

    perms: PermissionBits
    id: Id

    def allows(self, permission: Permission) -> bool:
        """Check whether this entry grants every bit of ``permission``."""
        return (self.perms & permission) == permission


# =============================================================================
# Well-known identities and ACLs
# =============================================================================

ANYONE_ID_UNSAFE = Id(scheme="world", id="anyone")
AUTH_IDS = Id(scheme="auth", id="")

OPEN_ACL_UNSAFE = [ACL(perms=Permission.ALL, id=ANYONE_ID_UNSAFE)]
READ_ACL_UNSAFE = [ACL(perms=Permission.READ, id=ANYONE_ID_UNSAFE)]
CREATOR_ALL_ACL = [ACL(perms=Permission.ALL, id=AUTH_IDS)]


def make_digest_id(username: str, password: str) -> str:
    """Compute the ``digest`` scheme id for a username and password."""
    credential = f"{username}:{password}".encode("utf-8")
    hashed = base64.b64encode(hashlib.sha1(credential).digest()).decode("ascii")
    return f"{username}:{hashed}"


def make_acl(
    scheme: str,
    credential: str,
    read: bool = False,
    write: bool = False,
    create: bool = False,
    delete: bool = False,
    admin: bool = False,
    all: bool = False,
) -> ACL:
    """Build an ACL entry from permission switches.

    Example:
        acl = make_acl("ip", "10.0.0.0/8", read=True, write=True)
    """
    if all:
        perms = Permission.ALL
    else:
        perms = Permission(0)
        if read:
            perms |= Permission.READ
        if write:
            perms |= Permission.WRITE
        if create:
            perms |= Permission.CREATE
        if delete:
            perms |= Permission.DELETE
        if admin:
            perms |= Permission.ADMIN
    return ACL(perms=perms, id=Id(scheme=scheme, id=credential))


def make_digest_acl(username: str, password: str, **permissions: bool) -> ACL:
    """Build a ``digest`` ACL entry for a username and password."""
    return make_acl("digest", make_digest_id(username, password), **permissions)
