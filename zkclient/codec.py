"""Conversion between native values and the transport's wire forms.

Wire forms:
    payload  bytes
    ACL      (perms: int, (scheme: str, id: str))
    Stat     11-tuple of ints, in ``STAT_FIELDS`` order

Encoders reject bad application input with ``InvalidArgumentError``.
Decoders raise ``CodecError`` for anything the store should never send.
"""

from collections.abc import Iterable
from typing import Any

from pydantic import ValidationError

from .acl import ACL, Id
from .exceptions import CodecError, InvalidArgumentError
from .types import STAT_FIELDS, Stat

WireACL = tuple[int, tuple[str, str]]
WireStat = tuple[int, ...]


# =============================================================================
# Payload
# =============================================================================


def encode_data(data: Any, operation: str = "encode") -> bytes:
    """Encode a payload; ``None`` becomes an empty byte string."""
    if data is None:
        return b""
    if isinstance(data, bytes):
        return data
    if isinstance(data, (bytearray, memoryview)):
        return bytes(data)
    if isinstance(data, str):
        return data.encode("utf-8")
    raise InvalidArgumentError(
        operation, f"data must be bytes or str, got {type(data).__name__}"
    )


def decode_data(raw: Any) -> bytes:
    """Decode a payload returned by the store, never returning None."""
    if raw is None:
        return b""
    if isinstance(raw, bytes):
        return raw
    if isinstance(raw, (bytearray, memoryview)):
        return bytes(raw)
    raise CodecError("payload", raw, "expected a byte sequence")


# =============================================================================
# ACL
# =============================================================================


def encode_acl(acl: ACL | WireACL, operation: str = "encode") -> WireACL:
    """Encode one ACL entry."""
    if isinstance(acl, ACL):
        return (int(acl.perms), (acl.id.scheme, acl.id.id))
    if isinstance(acl, tuple):
        try:
            return encode_acl(decode_acl(acl), operation)
        except CodecError as exc:
            raise InvalidArgumentError(operation, f"malformed ACL entry {acl!r}") from exc
    raise InvalidArgumentError(operation, f"ACL entries must be ACL, got {type(acl).__name__}")


def encode_acls(acls: Iterable[ACL | WireACL], operation: str = "encode") -> list[WireACL]:
    """Encode an ACL list, keeping its order."""
    if isinstance(acls, (ACL, str, bytes)):
        raise InvalidArgumentError(operation, "acl must be a list of ACL entries")
    return [encode_acl(acl, operation) for acl in acls]


def decode_acl(raw: Any) -> ACL:
    """Decode one ACL entry; ``ACL`` instances pass through."""
    if isinstance(raw, ACL):
        return raw
    try:
        perms, ident = raw
        scheme, id_ = ident
    except (TypeError, ValueError) as exc:
        raise CodecError("ACL", raw, "expected (perms, (scheme, id))") from exc
    try:
        return ACL(perms=perms, id=Id(scheme=scheme, id=id_))
    except ValidationError as exc:
        raise CodecError("ACL", raw, str(exc)) from exc


def decode_acls(raw: Any) -> list[ACL]:
    """Decode an ACL list returned by the store."""
    if raw is None or isinstance(raw, (str, bytes)):
        raise CodecError("ACL list", raw, "expected a sequence of entries")
    try:
        entries = list(raw)
    except TypeError as exc:
        raise CodecError("ACL list", raw, "expected a sequence of entries") from exc
    return [decode_acl(entry) for entry in entries]


# =============================================================================
# Stat
# =============================================================================


def decode_stat(raw: Any) -> Stat:
    """Decode a Stat tuple; ``Stat`` instances pass through."""
    if isinstance(raw, Stat):
        return raw
    if raw is None or isinstance(raw, (str, bytes)):
        raise CodecError("Stat", raw, "expected a tuple of ints")
    try:
        values = tuple(raw)
    except TypeError as exc:
        raise CodecError("Stat", raw, "expected a tuple of ints") from exc
    if len(values) != len(STAT_FIELDS):
        raise CodecError("Stat", raw, f"expected {len(STAT_FIELDS)} fields, got {len(values)}")
    try:
        return Stat(**dict(zip(STAT_FIELDS, values)))
    except ValidationError as exc:
        raise CodecError("Stat", raw, str(exc)) from exc


def decode_children(raw: Any) -> list[str]:
    """Decode a child-name list, keeping the store's order."""
    if raw is None or isinstance(raw, (str, bytes)):
        raise CodecError("children", raw, "expected a sequence of names")
    try:
        children = list(raw)
    except TypeError as exc:
        raise CodecError("children", raw, "expected a sequence of names") from exc
    for name in children:
        if not isinstance(name, str):
            raise CodecError("children", raw, f"child name {name!r} is not a str")
    return children
