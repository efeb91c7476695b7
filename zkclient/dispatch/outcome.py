"""Outcome of a dispatched call.

One representation serves both calling conventions: blocking calls unwrap
it (returning the value or raising the error), non-blocking calls spread it
into the completion handler's arguments.
"""

from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from ..exceptions import Code, KeeperError, ZkClientError

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Outcome(Generic[T]):
    code: int
    value: T | None = None
    error: KeeperError | None = None

    @classmethod
    def success(cls, value: T) -> "Outcome[T]":
        return cls(code=int(Code.OK), value=value)

    @classmethod
    def failure(cls, code: int, error: KeeperError | None = None) -> "Outcome[T]":
        return cls(code=int(code), error=error)

    @property
    def ok(self) -> bool:
        return self.code == Code.OK

    def unwrap(self) -> T:
        if self.ok:
            return self.value  # type: ignore[return-value]
        if self.error is not None:
            raise self.error
        raise ZkClientError(f"Unrecognized outcome code {self.code}")

    def handler_args(self, arity: int) -> tuple[Any, ...]:
        """Result slots for a completion handler expecting ``arity`` values."""
        if arity == 0:
            return ()
        if not self.ok:
            return (None,) * arity
        if arity == 1:
            return (self.value,)
        return tuple(self.value)  # type: ignore[arg-type]
