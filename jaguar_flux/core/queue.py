"""
Bounded-concurrency request queue.

Admits zero-argument coroutine functions, runs at most ``max_concurrent`` of
them at a time and starts the rest in submission order as slots free up.
Each caller gets back exactly what its own operation returned or raised.
"""

from __future__ import annotations

import asyncio
from collections import deque
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeAlias, TypeVar

from jaguar_flux.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")
R = TypeVar("R")

Operation: TypeAlias = Callable[[], Awaitable[R]]


@dataclass(slots=True)
class _QueueEntry(Generic[T]):
    operation: Operation[T]
    future: asyncio.Future[T]


class RequestQueue:
    """
    FIFO queue that limits how many operations are in flight.

    The running counter is checked and bumped synchronously before any task
    is created, so overlapping dispatches can never exceed the limit.
    """

    def __init__(self, max_concurrent: int = 3) -> None:
        if max_concurrent < 1:
            raise ValueError("max_concurrent must be >= 1")
        self._max_concurrent = max_concurrent
        self._running = 0
        self._pending: deque[_QueueEntry[Any]] = deque()
        # Strong references so running tasks are not garbage collected.
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def max_concurrent(self) -> int:
        return self._max_concurrent

    @property
    def running(self) -> int:
        return self._running

    @property
    def pending(self) -> int:
        return len(self._pending)

    async def submit(self, operation: Operation[T]) -> T:
        """
        Admit an operation and wait for its outcome.

        Args:
            operation: Zero-argument coroutine function to run.

        Returns:
            Whatever the operation returns.

        Raises:
            Whatever the operation raises.
        """
        future: asyncio.Future[T] = asyncio.get_running_loop().create_future()
        self._pending.append(_QueueEntry(operation=operation, future=future))
        self._dispatch()
        return await future

    def _dispatch(self) -> None:
        if self._running >= self._max_concurrent or not self._pending:
            return

        entry = self._pending.popleft()
        self._running += 1
        logger.debug(
            "request_queue_dispatch",
            running=self._running,
            pending=len(self._pending),
            max_concurrent=self._max_concurrent,
        )
        task = asyncio.ensure_future(self._run(entry))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run(self, entry: _QueueEntry[Any]) -> None:
        try:
            result = await entry.operation()
        except asyncio.CancelledError:
            if not entry.future.done():
                entry.future.cancel()
            raise
        except BaseException as exc:
            # A caller that stopped waiting leaves a cancelled future behind.
            if not entry.future.done():
                entry.future.set_exception(exc)
            if not isinstance(exc, Exception):
                raise
        else:
            if not entry.future.done():
                entry.future.set_result(result)
        finally:
            self._running -= 1
            self._dispatch()
