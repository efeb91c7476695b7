"""Argument normalization.

Turns a path, an optional payload and loosely given options (a mapping, an
options model or keyword arguments) into a fully resolved Request.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, TypeVar

from pydantic import ValidationError

from ..acl import ACL, OPEN_ACL_UNSAFE
from ..codec import encode_data
from ..exceptions import InvalidArgumentError
from ..types import CreateMode, Operation
from .handlers import CompletionHandler, as_completion_handler
from .options import (
    AddAuthOptions,
    AsyncCallOptions,
    CallOptions,
    CreateOptions,
    DeleteOptions,
    ExistsOptions,
    GetAclsOptions,
    GetChildrenOptions,
    GetOptions,
    SetAclsOptions,
    SetOptions,
)

OptionsT = TypeVar("OptionsT", bound=CallOptions)


@dataclass(frozen=True, slots=True)
class Request:
    """A fully resolved call, created fresh for every call."""

    operation: Operation
    path: str
    data: bytes = b""
    version: int = -1
    acl: tuple[ACL, ...] = ()
    watch: bool = False
    mode: CreateMode | None = None
    handler: CompletionHandler | None = None
    context: Any = None
    scheme: str | None = None

    @property
    def is_async(self) -> bool:
        return self.handler is not None


def _describe(exc: ValidationError) -> str:
    problems = []
    for error in exc.errors():
        where = ".".join(str(part) for part in error["loc"])
        if error["type"] == "extra_forbidden":
            problems.append(f"unknown option '{where}'")
        elif where:
            problems.append(f"{where}: {error['msg']}")
        else:
            problems.append(error["msg"])
    return "; ".join(problems)


class ArgumentNormalizer:
    """Builds Requests, filling defaults and rejecting bad options.

    Example:
        normalizer = ArgumentNormalizer()
        request = normalizer.get("/app", {"watch": True})
    """

    def __init__(
        self,
        default_acl: list[ACL] | None = None,
        default_mode: CreateMode = CreateMode.EPHEMERAL,
    ):
        """Initialize the normalizer.

        Args:
            default_acl: ACL used by create when none is given.
            default_mode: Create mode used when none is given.
        """
        self._default_acl = tuple(default_acl or OPEN_ACL_UNSAFE)
        self._default_mode = default_mode

    def _parse(
        self,
        operation: Operation,
        model: type[OptionsT],
        options: Mapping[str, Any] | CallOptions | None,
        kwargs: dict[str, Any],
    ) -> OptionsT:
        if options is None:
            merged: dict[str, Any] = {}
        elif isinstance(options, model):
            merged = {name: getattr(options, name) for name in options.model_fields_set}
        elif isinstance(options, Mapping):
            merged = dict(options)
        else:
            raise InvalidArgumentError(
                operation.value,
                f"options must be a mapping or {model.__name__}, got {type(options).__name__}",
            )
        merged.update(kwargs)
        try:
            return model(**merged)
        except ValidationError as exc:
            raise InvalidArgumentError(operation.value, _describe(exc)) from exc
        except TypeError as exc:
            # non-string keys in a mapping
            raise InvalidArgumentError(operation.value, str(exc)) from exc

    def _async_fields(self, operation: Operation, parsed: AsyncCallOptions) -> dict[str, Any]:
        return {
            "handler": as_completion_handler(parsed.callback, operation.value),
            "context": parsed.context,
        }

    # =========================================================================
    # ONE BUILDER PER OPERATION
    # =========================================================================

    def create(self, path: str, data: Any = b"", options: Any = None, **kwargs: Any) -> Request:
        op = Operation.CREATE
        parsed = self._parse(op, CreateOptions, options, kwargs)
        if parsed.mode is not None:
            mode = parsed.mode
        elif parsed.ephemeral is not None or parsed.sequential is not None:
            mode = CreateMode.from_flags(bool(parsed.ephemeral), bool(parsed.sequential))
        else:
            mode = self._default_mode
        return Request(
            operation=op,
            path=path,
            data=encode_data(data, op.value),
            acl=tuple(parsed.acl) if parsed.acl is not None else self._default_acl,
            mode=mode,
            **self._async_fields(op, parsed),
        )

    def get(self, path: str, options: Any = None, **kwargs: Any) -> Request:
        op = Operation.GET
        parsed = self._parse(op, GetOptions, options, kwargs)
        return Request(operation=op, path=path, watch=parsed.watch, **self._async_fields(op, parsed))

    def exists(self, path: str, options: Any = None, **kwargs: Any) -> Request:
        op = Operation.EXISTS
        parsed = self._parse(op, ExistsOptions, options, kwargs)
        return Request(operation=op, path=path, watch=parsed.watch, **self._async_fields(op, parsed))

    def set(self, path: str, data: Any = b"", options: Any = None, **kwargs: Any) -> Request:
        op = Operation.SET
        parsed = self._parse(op, SetOptions, options, kwargs)
        return Request(
            operation=op,
            path=path,
            data=encode_data(data, op.value),
            version=parsed.version,
            **self._async_fields(op, parsed),
        )

    def delete(self, path: str, options: Any = None, **kwargs: Any) -> Request:
        op = Operation.DELETE
        parsed = self._parse(op, DeleteOptions, options, kwargs)
        return Request(operation=op, path=path, version=parsed.version, **self._async_fields(op, parsed))

    def get_children(self, path: str, options: Any = None, **kwargs: Any) -> Request:
        op = Operation.GET_CHILDREN
        parsed = self._parse(op, GetChildrenOptions, options, kwargs)
        return Request(operation=op, path=path, watch=parsed.watch, **self._async_fields(op, parsed))

    def get_acls(self, path: str, options: Any = None, **kwargs: Any) -> Request:
        op = Operation.GET_ACLS
        parsed = self._parse(op, GetAclsOptions, options, kwargs)
        return Request(operation=op, path=path, **self._async_fields(op, parsed))

    def set_acls(self, path: str, options: Any = None, **kwargs: Any) -> Request:
        op = Operation.SET_ACLS
        parsed = self._parse(op, SetAclsOptions, options, kwargs)
        return Request(
            operation=op,
            path=path,
            acl=tuple(parsed.acl),
            version=parsed.version,
            **self._async_fields(op, parsed),
        )

    def add_auth(self, credential: Any, options: Any = None, **kwargs: Any) -> Request:
        op = Operation.ADD_AUTH
        parsed = self._parse(op, AddAuthOptions, options, kwargs)
        return Request(operation=op, path="", data=encode_data(credential, op.value), scheme=parsed.scheme)
