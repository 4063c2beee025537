from __future__ import annotations

import asyncio
import enum
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Generic, Iterable, Optional, TypeVar

if TYPE_CHECKING:
    from collections.abc import Generator

_T = TypeVar("_T")
_R = TypeVar("_R")


class _State(enum.Enum):
    PENDING = "pending"
    FULFILLED = "fulfilled"
    REJECTED = "rejected"


class Deferred(Generic[_T]):
    """A value computed once, on demand, and shared by every waiter.

    `settle()` runs the executor a single time. Callbacks registered with
    `then()` are called once the value is known. Awaiting a deferred runs
    `async_executor` instead of `executor` when given, shared by every
    concurrent waiter.
    """

    def __init__(
        self,
        executor: Callable[[], _T],
        *,
        async_executor: Optional[Callable[[], Awaitable[_T]]] = None,
    ):
        self._executor = executor
        self._async_executor = async_executor
        self._state = _State.PENDING
        self._value: Any = None
        self._error: Optional[Exception] = None
        self._callbacks: list[Callable[[], None]] = []
        self._running = False
        self._task: Optional[asyncio.Future[None]] = None

    def __repr__(self):
        return f"<Deferred {self._state.value}>"

    @property
    def is_settled(self) -> bool:
        return self._state is not _State.PENDING

    def settle(self) -> None:
        if self.is_settled or self._running:
            return

        self._running = True
        try:
            value = self._executor()
        except Exception as e:
            self._reject(e)
        else:
            self._fulfill(value)
        finally:
            self._running = False

    def wait(self) -> _T:
        self.settle()
        return self._result()

    def then(
        self,
        on_fulfilled: Callable[[_T], _R],
        on_rejected: Optional[Callable[[Exception], _R]] = None,
    ) -> Deferred[_R]:
        """Return a deferred for the value transformed by the callbacks."""

        def transform() -> _R:
            try:
                value = self._result()
            except Exception as e:
                if on_rejected is None:
                    raise
                return on_rejected(e)
            return on_fulfilled(value)

        def executor() -> _R:
            self.settle()
            return transform()

        async def async_executor() -> _R:
            await self._settle_async()
            return transform()

        chained: Deferred[_R] = Deferred(executor, async_executor=async_executor)
        self._add_callback(chained.settle)
        return chained

    @classmethod
    def gather(cls, values: Iterable[Any]) -> Deferred[list[Any]]:
        """Deferred list of values, waiting every deferred among them."""
        items = list(values)

        def executor() -> list[Any]:
            return [v.wait() if isinstance(v, Deferred) else v for v in items]

        async def async_executor() -> list[Any]:
            return [await v if isinstance(v, Deferred) else v for v in items]

        return cls(executor, async_executor=async_executor)

    def __await__(self) -> Generator[Any, None, _T]:
        return self._wait_async().__await__()

    async def _wait_async(self) -> _T:
        await self._settle_async()
        return self._result()

    async def _settle_async(self) -> None:
        if self.is_settled:
            return

        if self._async_executor is None:
            self.settle()
            return

        if self._task is None:
            self._task = asyncio.ensure_future(self._run_async_executor())
        await self._task

    async def _run_async_executor(self) -> None:
        assert self._async_executor is not None
        self._running = True
        try:
            value = await self._async_executor()
        except Exception as e:
            self._reject(e)
        else:
            self._fulfill(value)
        finally:
            self._running = False

    def _result(self) -> _T:
        if self._state is _State.REJECTED:
            assert self._error is not None
            raise self._error
        return self._value

    def _add_callback(self, callback: Callable[[], None]) -> None:
        if self.is_settled:
            callback()
        else:
            self._callbacks.append(callback)

    def _fulfill(self, value: _T) -> None:
        if self.is_settled:
            return
        self._state = _State.FULFILLED
        self._value = value
        self._flush()

    def _reject(self, error: Exception) -> None:
        if self.is_settled:
            return
        self._state = _State.REJECTED
        self._error = error
        self._flush()

    def _flush(self) -> None:
        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback()
