"""Completion handlers for non-blocking calls.

A caller may pass either a plain callable or an object with a
``process_result`` method. Both are wrapped into something with ``invoke``;
the variant is picked by looking at what was passed.

A failure that carries no recognized outcome code is not turned into one.
Objects may define ``process_error(path, context, error)`` to receive the
original exception; otherwise it is re-raised on the delivery thread.

Example:
    class StatCallback:
        def process_result(self, code, path, context, stat):
            ...

    zk.exists("/path", callback=StatCallback())
    zk.exists("/path", callback=lambda code, path, context, stat: ...)
"""

from typing import Any, Callable, Protocol

from ..exceptions import InvalidArgumentError


class CompletionHandler(Protocol):
    """Anything the dispatcher can hand a completed call to."""

    def invoke(self, code: int, path: str, context: Any, *results: Any) -> None: ...

    def fail(self, path: str, context: Any, error: BaseException) -> None: ...


class FunctionHandler:
    """Handler backed by a plain callable, invoked positionally."""

    __slots__ = ("func",)

    def __init__(self, func: Callable[..., Any]):
        self.func = func

    def invoke(self, code: int, path: str, context: Any, *results: Any) -> None:
        self.func(code, path, context, *results)

    def fail(self, path: str, context: Any, error: BaseException) -> None:
        raise error

    def __repr__(self) -> str:
        return f"FunctionHandler({self.func!r})"


class ObjectHandler:
    """Handler backed by an object exposing ``process_result``."""

    __slots__ = ("target",)

    def __init__(self, target: Any):
        self.target = target

    def invoke(self, code: int, path: str, context: Any, *results: Any) -> None:
        self.target.process_result(code, path, context, *results)

    def fail(self, path: str, context: Any, error: BaseException) -> None:
        process_error = getattr(self.target, "process_error", None)
        if not callable(process_error):
            raise error
        process_error(path, context, error)

    def __repr__(self) -> str:
        return f"ObjectHandler({self.target!r})"


def as_completion_handler(callback: Any, operation: str) -> CompletionHandler | None:
    """Wrap a caller-supplied callback; None stays None.

    Raises:
        InvalidArgumentError: If the callback is neither callable nor has
            a ``process_result`` method.
    """
    if callback is None:
        return None
    if isinstance(callback, (FunctionHandler, ObjectHandler)):
        return callback
    if callable(getattr(callback, "process_result", None)):
        return ObjectHandler(callback)
    if callable(callback):
        return FunctionHandler(callback)
    raise InvalidArgumentError(
        operation, f"callback must be callable or define process_result, got {type(callback).__name__}"
    )
