"""Dispatcher - every primitive call flows through here.

FLOW:
1. Facade normalizes arguments into a Request
2. Dispatcher encodes wire arguments (payload, ACL, watch)
3. No handler: blocking transport call, decode, return or raise
4. Handler: non-blocking transport call, decode later, invoke handler
   (failures without a recognized code go to the handler unchanged)

Failures carrying an outcome code become named errors; anything else
propagates untouched.
"""

from typing import Any, Callable

from ..codec import decode_acls, decode_children, decode_data, decode_stat, encode_acls
from ..exceptions import Code, CodecError, is_recognized_code
from ..transport.base import BaseTransport
from ..utils.logging import StructuredLogger
from .normalize import Request
from .outcome import Outcome
from .translate import ErrorTranslator
from .watches import WatchRegistrar

Decoder = Callable[[Any], Any]


def _decode_path(raw: Any) -> str:
    if not isinstance(raw, str):
        raise CodecError("path", raw, "expected a str")
    return raw


def _decode_pair(first: Decoder, second: Decoder, kind: str) -> Decoder:
    def decode(raw: Any) -> tuple[Any, Any]:
        try:
            a, b = raw
        except (TypeError, ValueError) as exc:
            raise CodecError(kind, raw, "expected a pair") from exc
        return first(a), second(b)

    return decode


def _decode_optional_stat(raw: Any) -> Any:
    return None if raw is None else decode_stat(raw)


def _decode_nothing(raw: Any) -> None:
    return None


_decode_data_and_stat = _decode_pair(decode_data, decode_stat, "data and Stat")
_decode_acls_and_stat = _decode_pair(decode_acls, decode_stat, "ACL and Stat")


class Dispatcher:
    """Runs Requests against a transport in blocking or non-blocking mode.

    Usage:
        dispatcher = Dispatcher(transport, ErrorTranslator(), WatchRegistrar(watcher))
        stat = dispatcher.exists(normalizer.exists("/app"))
    """

    def __init__(
        self,
        transport: BaseTransport,
        translator: ErrorTranslator,
        watches: WatchRegistrar,
    ):
        self._transport = transport
        self._translator = translator
        self._watches = watches
        self._log = StructuredLogger("dispatch")

    # =========================================================================
    # ONE ENTRY POINT PER OPERATION
    # =========================================================================

    def create(self, request: Request) -> str | None:
        """Returns the created path (with any sequential suffix)."""
        args = (
            request.path,
            request.data,
            encode_acls(request.acl, request.operation.value),
            request.mode.ephemeral,
            request.mode.sequential,
        )
        return self._dispatch(request, self._transport.create, args, _decode_path, arity=1)

    def get(self, request: Request) -> tuple[bytes, Any] | None:
        """Returns ``(data, Stat)``."""
        args = (request.path, self._watches.watch_for(request))
        return self._dispatch(request, self._transport.get_data, args, _decode_data_and_stat, arity=2)

    def exists(self, request: Request) -> Any:
        """Returns a Stat, or None when the node does not exist."""
        args = (request.path, self._watches.watch_for(request))
        return self._dispatch(request, self._transport.exists, args, _decode_optional_stat, arity=1)

    def set(self, request: Request) -> Any:
        """Returns the Stat after the write."""
        args = (request.path, request.data, request.version)
        return self._dispatch(request, self._transport.set_data, args, decode_stat, arity=1)

    def delete(self, request: Request) -> None:
        args = (request.path, request.version)
        return self._dispatch(request, self._transport.delete, args, _decode_nothing, arity=0)

    def get_children(self, request: Request) -> list[str] | None:
        """Returns child names in the order the store gave them."""
        args = (request.path, self._watches.watch_for(request))
        return self._dispatch(request, self._transport.get_children, args, decode_children, arity=1)

    def get_acls(self, request: Request) -> tuple[list[Any], Any] | None:
        """Returns ``(ACL list, Stat)``."""
        args = (request.path,)
        return self._dispatch(request, self._transport.get_acl, args, _decode_acls_and_stat, arity=2)

    def set_acls(self, request: Request) -> Any:
        """Returns the Stat after the ACL change."""
        args = (request.path, encode_acls(request.acl, request.operation.value), request.version)
        return self._dispatch(request, self._transport.set_acl, args, decode_stat, arity=1)

    def add_auth(self, request: Request) -> None:
        args = (request.scheme, request.data)
        return self._call_sync(request, self._transport.add_auth, args, _decode_nothing).unwrap()

    # =========================================================================
    # THE TWO MODES
    # =========================================================================

    def _dispatch(
        self,
        request: Request,
        call: Callable[..., Any],
        args: tuple[Any, ...],
        decode: Decoder,
        arity: int,
    ) -> Any:
        self._log.debug(
            "dispatch",
            operation=request.operation.value,
            path=request.path,
            mode="async" if request.is_async else "sync",
        )
        if not request.is_async:
            return self._call_sync(request, call, args, decode).unwrap()
        self._call_async(request, args, decode, arity)
        return None

    def _call_sync(
        self,
        request: Request,
        call: Callable[..., Any],
        args: tuple[Any, ...],
        decode: Decoder,
    ) -> Outcome[Any]:
        try:
            raw = call(*args)
        except Exception as exc:
            error = self._translator.translate(exc, request.operation.value, request.path or None)
            self._log.debug("failed", operation=request.operation.value, error=type(error).__name__)
            return Outcome.failure(error.code, error)
        return Outcome.success(decode(raw))

    def _call_async(
        self,
        request: Request,
        args: tuple[Any, ...],
        decode: Decoder,
        arity: int,
    ) -> None:
        handler = request.handler

        def complete(code: int | None, raw: Any, error: BaseException | None = None) -> None:
            if error is not None and not is_recognized_code(code):
                self._log.debug("unrecognized failure", operation=request.operation.value, error=type(error).__name__)
                handler.fail(request.path, request.context, error)
                return
            outcome = Outcome.success(decode(raw)) if code == Code.OK else Outcome.failure(code)
            handler.invoke(outcome.code, request.path, request.context, *outcome.handler_args(arity))

        try:
            self._transport.call_async(request.operation, args, complete)
        except Exception as exc:
            error = self._translator.translate(exc, request.operation.value, request.path)
            Outcome.failure(error.code, error).unwrap()
