"""asyncio bridge.

Awaitable versions of the session operations, built on the non-blocking
calling convention: each call is issued with a completion handler that
resolves a future on the caller's event loop.

Usage:
    zk = AsyncZooKeeper(ZooKeeper(transport="memory"))
    path = await zk.create("/app", b"config", mode="persistent")
    data, stat = await zk.get(path)
"""

import asyncio
import functools
from collections.abc import Mapping
from typing import Any, Callable

from .client import ZooKeeper
from .dispatch import ErrorTranslator, find_call_site
from .dispatch.options import CallOptions
from .exceptions import CallSite, Code, InvalidArgumentError, ZkClientError
from .types import Operation


def _reject_callback(operation: Operation, options: Any, kwargs: dict[str, Any]) -> None:
    given = set(kwargs)
    if isinstance(options, Mapping):
        given |= set(options)
    elif isinstance(options, CallOptions):
        given |= options.model_fields_set
    clash = sorted(given & {"callback", "context"})
    if clash:
        raise InvalidArgumentError(operation.value, f"{', '.join(clash)} cannot be used with awaitable calls")


class _FutureCompletion:
    """Completion handler that settles an asyncio future from any thread."""

    def __init__(
        self,
        future: asyncio.Future,
        operation: Operation,
        call_site: CallSite | None,
        translator: ErrorTranslator,
    ):
        self.future = future
        self.operation = operation
        self.call_site = call_site
        self.translator = translator

    def process_result(self, code: int, path: str, context: Any, *results: Any) -> None:
        if not results:
            value = None
        elif len(results) == 1:
            value = results[0]
        else:
            value = results
        self.future.get_loop().call_soon_threadsafe(self._resolve, code, path, value)

    def process_error(self, path: str, context: Any, error: BaseException) -> None:
        self.future.get_loop().call_soon_threadsafe(self._reject, error)

    def _resolve(self, code: int, path: str, value: Any) -> None:
        if self.future.done():
            return
        if code == Code.OK:
            self.future.set_result(value)
        elif code == Code.NO_NODE and self.operation == Operation.EXISTS:
            self.future.set_result(None)
        else:
            self._reject(self._error(code, path))

    def _reject(self, error: BaseException) -> None:
        if not self.future.done():
            self.future.set_exception(error)

    def _error(self, code: int, path: str) -> Exception:
        error = self.translator.error_for(code, self.operation.value, path, self.call_site)
        if error is None:
            return ZkClientError(f"Unrecognized outcome code {code}")
        return error


class AsyncZooKeeper:
    """Awaitable facade over a ZooKeeper session.

    Failures raise the same named errors as blocking calls; ``exists``
    resolves to None when the node is absent. A failure without an outcome
    code is raised as the original exception.
    """

    def __init__(self, client: ZooKeeper):
        self._client = client
        self._translator = ErrorTranslator()

    @property
    def client(self) -> ZooKeeper:
        return self._client

    async def _call(
        self,
        operation: Operation,
        call: Callable[..., Any],
        args: tuple[Any, ...],
        options: Any,
        kwargs: dict[str, Any],
    ) -> Any:
        _reject_callback(operation, options, kwargs)
        future = asyncio.get_running_loop().create_future()
        completion = _FutureCompletion(future, operation, find_call_site(), self._translator)
        call(*args, options, callback=completion, **kwargs)
        return await future

    # =========================================================================
    # OPERATIONS
    # =========================================================================

    async def create(self, path: str, data: Any = b"", options: Any = None, **kwargs: Any) -> str:
        return await self._call(Operation.CREATE, self._client.create, (path, data), options, kwargs)

    async def get(self, path: str, options: Any = None, **kwargs: Any) -> tuple[bytes, Any]:
        return await self._call(Operation.GET, self._client.get, (path,), options, kwargs)

    async def exists(self, path: str, options: Any = None, **kwargs: Any) -> Any:
        return await self._call(Operation.EXISTS, self._client.exists, (path,), options, kwargs)

    async def set(self, path: str, data: Any = b"", options: Any = None, **kwargs: Any) -> Any:
        return await self._call(Operation.SET, self._client.set, (path, data), options, kwargs)

    async def delete(self, path: str, options: Any = None, **kwargs: Any) -> None:
        await self._call(Operation.DELETE, self._client.delete, (path,), options, kwargs)

    async def get_children(self, path: str, options: Any = None, **kwargs: Any) -> list[str]:
        return await self._call(Operation.GET_CHILDREN, self._client.get_children, (path,), options, kwargs)

    async def get_acls(self, path: str, options: Any = None, **kwargs: Any) -> tuple[list[Any], Any]:
        return await self._call(Operation.GET_ACLS, self._client.get_acls, (path,), options, kwargs)

    async def set_acls(self, path: str, options: Any = None, **kwargs: Any) -> Any:
        return await self._call(Operation.SET_ACLS, self._client.set_acls, (path,), options, kwargs)

    async def add_auth(self, credential: Any, options: Any = None, **kwargs: Any) -> None:
        # add_auth has no non-blocking form; run it off the loop
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(
            None, functools.partial(self._client.add_auth, credential, options, **kwargs)
        )

    # =========================================================================
    # SESSION
    # =========================================================================

    def close(self) -> None:
        self._client.close()

    async def __aenter__(self) -> "AsyncZooKeeper":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        self.close()
