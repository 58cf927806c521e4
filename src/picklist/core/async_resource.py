"""Async resource binder — loading/success/failure around a fetch coroutine.

The binder runs a caller-supplied zero-argument operation as an asyncio task
and publishes an AsyncState for every transition. Only the newest invocation
may publish: each invocation carries a generation number, and results from
an older generation are dropped when they arrive.

// [LAW:single-enforcer] _is_current is the sole stale-result gate.
// [LAW:one-source-of-truth] AsyncState.__post_init__ enforces the
//   data-iff-success / error-iff-failure invariant at construction.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

logger = logging.getLogger(__name__)

Operation = Callable[[], Union[Awaitable[Iterable[Any]], Iterable[Any]]]


class AsyncStatus(Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True)
class ErrorInfo:
    """Failure description. The original exception is kept but not compared."""

    type_name: str
    message: str
    exception: BaseException | None = field(default=None, compare=False, repr=False)

    @classmethod
    def from_exception(cls, exc: BaseException) -> ErrorInfo:
        return cls(type_name=type(exc).__name__, message=str(exc), exception=exc)

    def __str__(self) -> str:
        return f"{self.type_name}: {self.message}" if self.message else self.type_name


@dataclass(frozen=True)
class AsyncState:
    status: AsyncStatus = AsyncStatus.IDLE
    data: tuple | None = None
    error: ErrorInfo | None = None

    def __post_init__(self):
        if (self.data is not None) != (self.status is AsyncStatus.SUCCESS):
            raise ValueError(f"data must be present iff status is success (got {self.status.value})")
        if (self.error is not None) != (self.status is AsyncStatus.FAILURE):
            raise ValueError(f"error must be present iff status is failure (got {self.status.value})")

    @classmethod
    def idle(cls) -> AsyncState:
        return cls()

    @classmethod
    def loading(cls) -> AsyncState:
        return cls(status=AsyncStatus.LOADING)

    @classmethod
    def succeeded(cls, data: Iterable[Any]) -> AsyncState:
        return cls(status=AsyncStatus.SUCCESS, data=tuple(data))

    @classmethod
    def failed(cls, exc: BaseException) -> AsyncState:
        return cls(status=AsyncStatus.FAILURE, error=ErrorInfo.from_exception(exc))

    @property
    def is_loading(self) -> bool:
        return self.status is AsyncStatus.LOADING


class AsyncResource:
    """Binds one fetch operation at a time and tracks its outcome.

    Args:
        on_success: called with the fetched tuple after the SUCCESS state is
            published (the controller passes SelectionMachine.set_items).
        on_change: called with the new AsyncState after every transition.
        name: label used in log records.

    Must be driven from inside a running event loop; bind() and refresh()
    raise RuntimeError otherwise.
    """

    def __init__(
        self,
        *,
        on_success: Callable[[tuple], None] | None = None,
        on_change: Callable[[AsyncState], None] | None = None,
        name: str = "resource",
    ):
        self._on_success = on_success
        self._on_change = on_change
        self._name = name
        self._state = AsyncState.idle()
        self._operation: Operation | None = None
        self._generation = 0
        self._current_task: asyncio.Task | None = None
        self._tasks: set[asyncio.Task] = set()
        self._closed = False

    @property
    def state(self) -> AsyncState:
        return self._state

    @property
    def operation(self) -> Operation | None:
        return self._operation

    @property
    def closed(self) -> bool:
        return self._closed

    # -- Invocation ----------------------------------------------------------

    def bind(self, operation: Operation) -> None:
        """Activate ``operation``. Re-binding the same reference is a no-op."""
        if self._closed:
            logger.debug("%s: bind ignored after close", self._name)
            return
        if operation is self._operation:
            return
        self._invoke(operation)

    def refresh(self) -> None:
        """Invoke the bound operation again, superseding any pending call."""
        if self._closed or self._operation is None:
            return
        self._invoke(self._operation)

    def _invoke(self, operation: Operation) -> None:
        loop = asyncio.get_running_loop()
        self._operation = operation
        self._generation += 1
        generation = self._generation
        self._set_state(AsyncState.loading())
        task = loop.create_task(self._run(generation, operation))
        self._current_task = task
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run(self, generation: int, operation: Operation) -> None:
        try:
            result = operation()
            if inspect.isawaitable(result):
                result = await result
            data = tuple(result)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            if not self._is_current(generation):
                logger.debug("%s: dropped stale failure (generation %d)", self._name, generation)
                return
            logger.warning("%s: fetch failed: %s: %s", self._name, type(exc).__name__, exc)
            self._set_state(AsyncState.failed(exc))
            return

        if not self._is_current(generation):
            logger.debug("%s: dropped stale result (generation %d)", self._name, generation)
            return
        logger.debug("%s: fetched %d items", self._name, len(data))
        # Items land before listeners hear about SUCCESS.
        if self._on_success is not None:
            self._on_success(data)
        self._set_state(AsyncState.succeeded(data))

    def _is_current(self, generation: int) -> bool:
        return not self._closed and generation == self._generation

    def _set_state(self, state: AsyncState) -> None:
        self._state = state
        if self._on_change is not None:
            self._on_change(state)

    async def wait(self) -> AsyncState:
        """Wait until the newest invocation settles and return the state."""
        while self._current_task is not None and not self._current_task.done():
            await asyncio.wait({self._current_task})
        return self._state

    # -- Teardown ------------------------------------------------------------

    def close(self) -> None:
        """Tear down: late results are discarded and pending tasks cancelled."""
        if self._closed:
            return
        self._closed = True
        self._generation += 1
        for task in list(self._tasks):
            task.cancel()
        self._current_task = None
        logger.debug("%s: closed", self._name)
