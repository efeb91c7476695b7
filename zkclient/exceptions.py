"""Custom exceptions for zkclient."""

from enum import IntEnum
from typing import NamedTuple


class Code(IntEnum):
    """Outcome codes returned by the coordination store."""

    OK = 0
    SYSTEM_ERROR = -1
    RUNTIME_INCONSISTENCY = -2
    DATA_INCONSISTENCY = -3
    CONNECTION_LOSS = -4
    MARSHALLING_ERROR = -5
    UNIMPLEMENTED = -6
    OPERATION_TIMEOUT = -7
    BAD_ARGUMENTS = -8
    API_ERROR = -100
    NO_NODE = -101
    NO_AUTH = -102
    BAD_VERSION = -103
    NO_CHILDREN_FOR_EPHEMERALS = -108
    NODE_EXISTS = -110
    NOT_EMPTY = -111
    SESSION_EXPIRED = -112
    INVALID_CALLBACK = -113
    INVALID_ACL = -114
    AUTH_FAILED = -115


class CallSite(NamedTuple):
    """Application frame that issued a failing call."""

    filename: str
    lineno: int
    function: str

    def __str__(self) -> str:
        return f"{self.filename}:{self.lineno} in {self.function}"


class ZkClientError(Exception):
    """Base exception for all zkclient errors."""

    pass


class InvalidArgumentError(ZkClientError, ValueError):
    """Raised when call options are unknown, malformed or mutually exclusive."""

    def __init__(self, operation: str, message: str):
        self.operation = operation
        super().__init__(f"Invalid arguments for '{operation}': {message}")


class CodecError(ZkClientError):
    """Raised when the store hands back data that cannot be decoded.

    This is a contract violation between the transport and the codec, never
    an ordinary outcome of a call.
    """

    def __init__(self, kind: str, value: object, reason: str):
        self.kind = kind
        self.value = value
        super().__init__(f"Cannot decode {kind} from {value!r}: {reason}")


# =============================================================================
# Outcome code taxonomy
# =============================================================================


_EXCEPTIONS: dict[int, type["KeeperError"]] = {}


def _register(code: Code):
    def decorator(klass: type["KeeperError"]) -> type["KeeperError"]:
        klass.code = code
        _EXCEPTIONS[int(code)] = klass
        return klass

    return decorator


class KeeperError(ZkClientError):
    """Base exception for errors reported by the store as an outcome code."""

    code: Code = Code.SYSTEM_ERROR
    description: str = "store reported an error"

    def __init__(
        self,
        path: str | None = None,
        operation: str | None = None,
        call_site: CallSite | None = None,
    ):
        self.path = path
        self.operation = operation
        self.call_site = call_site

        message = f"{self.description} (code {int(self.code)})"
        if operation:
            target = f"{operation} {path}" if path else operation
            message = f"{target}: {message}"
        if call_site is not None:
            message += f" [called from {call_site}]"
        super().__init__(message)


@_register(Code.SYSTEM_ERROR)
class SystemZookeeperError(KeeperError):
    description = "system error"


@_register(Code.RUNTIME_INCONSISTENCY)
class RuntimeInconsistencyError(KeeperError):
    description = "runtime inconsistency"


@_register(Code.DATA_INCONSISTENCY)
class DataInconsistencyError(KeeperError):
    description = "data inconsistency"


@_register(Code.CONNECTION_LOSS)
class ConnectionLossError(KeeperError):
    description = "connection to the store was lost"


@_register(Code.MARSHALLING_ERROR)
class MarshallingError(KeeperError):
    description = "error while marshalling or unmarshalling data"


@_register(Code.UNIMPLEMENTED)
class UnimplementedError(KeeperError):
    description = "operation is unimplemented"


@_register(Code.OPERATION_TIMEOUT)
class OperationTimeoutError(KeeperError):
    description = "operation timed out"


@_register(Code.BAD_ARGUMENTS)
class BadArgumentsError(KeeperError):
    description = "invalid arguments"


@_register(Code.API_ERROR)
class APIError(KeeperError):
    description = "API error"


@_register(Code.NO_NODE)
class NoNodeError(KeeperError):
    """Target or parent node does not exist."""

    description = "node does not exist"


@_register(Code.NO_AUTH)
class NoAuthError(KeeperError):
    """Session lacks permission for the operation."""

    description = "not authenticated"


@_register(Code.BAD_VERSION)
class BadVersionError(KeeperError):
    """Supplied version does not match the node's current version."""

    description = "version conflict"


@_register(Code.NO_CHILDREN_FOR_EPHEMERALS)
class NoChildrenForEphemeralsError(KeeperError):
    """Ephemeral nodes cannot have children."""

    description = "ephemeral nodes may not have children"


@_register(Code.NODE_EXISTS)
class NodeExistsError(KeeperError):
    """Create target already exists."""

    description = "node already exists"


@_register(Code.NOT_EMPTY)
class NotEmptyError(KeeperError):
    """Delete attempted on a node that has children."""

    description = "node has children"


@_register(Code.SESSION_EXPIRED)
class SessionExpiredError(KeeperError):
    """Underlying session is no longer valid."""

    description = "session expired"


@_register(Code.INVALID_CALLBACK)
class InvalidCallbackError(KeeperError):
    description = "invalid callback"


@_register(Code.INVALID_ACL)
class InvalidACLError(KeeperError):
    """ACL list is malformed or not allowed."""

    description = "invalid ACL"


@_register(Code.AUTH_FAILED)
class AuthFailedError(KeeperError):
    """Authentication was rejected."""

    description = "authentication failed"


def is_recognized_code(code: object) -> bool:
    """Check whether a value is an outcome code with a named error."""
    return isinstance(code, int) and not isinstance(code, bool) and code in _EXCEPTIONS


def error_for_code(
    code: int,
    path: str | None = None,
    operation: str | None = None,
    call_site: CallSite | None = None,
) -> KeeperError:
    """Build the taxonomy error for a recognised outcome code.

    Raises:
        KeyError: If the code has no named error.
    """
    return _EXCEPTIONS[code](path=path, operation=operation, call_site=call_site)
