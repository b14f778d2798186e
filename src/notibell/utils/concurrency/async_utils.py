"""async_utils.py

asyncio helpers used by the notification client and the refresh coordinator:

* ``retry_async``: exponential back-off for transient failures; never
  retries ``CancelledError``.
* ``TaskHandle``: awaitable wrapper around a scheduled refresh.
* ``AsyncTaskManager``: keeps fire-and-forget tasks alive until they finish
  and cancels them when their owner goes away.

Python >= 3.11 required.
"""

from __future__ import annotations

import asyncio
import contextlib
import functools
import random
import time
from dataclasses import dataclass
from typing import (
    Any,
    Awaitable,
    Callable,
    Generic,
    ParamSpec,
    TypeVar,
)

from notibell.utils.log_service import debug, warning, error

T = TypeVar("T")
P = ParamSpec("P")


def retry_async(
    *,
    attempts: int = 3,
    base_delay: float = 0.5,
    backoff_factor: float = 2.0,
    jitter: float = 0.1,
    exceptions: tuple[type[Exception], ...] = (Exception,),
) -> Callable[[Callable[P, Awaitable[T]]], Callable[P, Awaitable[T]]]:
    """Retry an async callable up to ``attempts`` times.

    The n-th retry waits ``base_delay * backoff_factor ** (n - 1)`` plus up to
    ``jitter`` seconds. Exceptions outside ``exceptions`` propagate at once.
    """

    def decorator(fn: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[T]]:
        @functools.wraps(fn)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            attempt = 1
            while True:
                try:
                    return await fn(*args, **kwargs)
                except asyncio.CancelledError:
                    raise
                except exceptions as exc:
                    if attempt >= attempts:
                        error("retry_exhausted", fn=fn.__qualname__, attempts=attempts, exc_info=exc)
                        raise
                    delay = base_delay * backoff_factor ** (attempt - 1) + random.uniform(0, jitter)
                    warning("retry_scheduled", fn=fn.__qualname__, attempt=attempt,
                            sleep=f"{delay:.3f}", exc_info=exc)
                    await asyncio.sleep(delay)
                    attempt += 1

        return wrapper

    return decorator


@dataclass(slots=True)
class TaskHandle(Generic[T]):
    """Awaitable handle for a task scheduled by :class:`AsyncTaskManager`."""

    _task: asyncio.Task[T]

    def done(self) -> bool:
        return self._task.done()

    def cancel(self) -> None:
        self._task.cancel()

    def __await__(self):
        return self._task.__await__()


class AsyncTaskManager:
    """Owns background tasks by id until they complete or are cancelled."""

    def __init__(self, name: str = "manager") -> None:
        self._name = name
        self._counter = 0
        # strong refs so that un-awaited tasks are not garbage collected
        self._tasks: dict[str, asyncio.Task[Any]] = {}

    def __len__(self) -> int:
        return len(self._tasks)

    @property
    def running(self) -> list[asyncio.Task[Any]]:
        return list(self._tasks.values())

    async def _run(
        self,
        task_id: str,
        coro: Awaitable[T],
        on_error: Callable[[Exception], Awaitable[None]] | None,
    ) -> T:
        start = time.perf_counter()
        debug("task_started", task_id=task_id, manager=self._name)
        try:
            result = await coro
        except asyncio.CancelledError:
            warning("task_cancelled", dt=time.perf_counter() - start, task_id=task_id, manager=self._name)
            raise
        except Exception as exc:
            error("task_failed", dt=time.perf_counter() - start, exc_info=exc,
                  task_id=task_id, manager=self._name)
            if on_error:
                with contextlib.suppress(Exception):
                    await on_error(exc)
            raise
        debug("task_finished", dt=time.perf_counter() - start, task_id=task_id, manager=self._name)
        return result

    def create_task(
        self,
        coro: Awaitable[T],
        *,
        task_id: str | None = None,
        on_error: Callable[[Exception], Awaitable[None]] | None = None,
    ) -> TaskHandle[T]:
        """Schedule *coro*; ids default to ``task-<n>`` and must be unique."""
        if task_id is None:
            self._counter += 1
            task_id = f"task-{self._counter}"
        if task_id in self._tasks:
            raise KeyError(f"Task id {task_id!r} already exists")

        task = asyncio.create_task(self._run(task_id, coro, on_error), name=f"{self._name}:{task_id}")
        self._tasks[task_id] = task

        def _forget(t: asyncio.Task[Any], tid: str = task_id) -> None:
            if self._tasks.get(tid) is t:
                del self._tasks[tid]
            # retrieve the exception so asyncio does not warn about it
            if not t.cancelled():
                t.exception()

        task.add_done_callback(_forget)
        return TaskHandle(task)

    def cancel_all(self) -> None:
        """Cancel every tracked task without waiting for it."""
        for task in self.running:
            if not task.done():
                task.cancel()

    async def stop_all_tasks(self, *, timeout: float = 5.0) -> None:
        """Cancel every tracked task and wait up to ``timeout`` seconds."""
        tasks = self.running
        if not tasks:
            return
        self.cancel_all()
        _, pending = await asyncio.wait(tasks, timeout=timeout)
        if pending:
            warning("pending_after_shutdown", count=len(pending), manager=self._name)
        self._tasks.clear()


__all__ = [
    "AsyncTaskManager",
    "TaskHandle",
    "retry_async",
]
