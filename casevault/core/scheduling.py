"""
Clock and timer abstractions.

Time-dependent components (sync debounce, analysis trigger, rate limiter)
take a Clock and a Scheduler so tests can substitute deterministic fakes.

Dependencies: asyncio, time
System role: Injectable time source and delayed-task runner
"""

import asyncio
import logging
import time
from typing import Awaitable, Callable, Protocol

logger = logging.getLogger(__name__)


class Clock(Protocol):
    """Time source in seconds."""

    def now(self) -> float: ...


class SystemClock:
    """Wall-clock time, comparable across processes sharing a store."""

    def now(self) -> float:
        return time.time()


class ScheduledHandle(Protocol):
    """Handle to a delayed callback that may still be cancelled."""

    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Runs an async callback once after a delay."""

    def call_later(
        self,
        delay: float,
        callback: Callable[[], Awaitable[None]],
    ) -> ScheduledHandle: ...


class _TaskHandle:
    def __init__(self, task: asyncio.Task) -> None:
        self._task = task

    def cancel(self) -> None:
        self._task.cancel()


class AsyncioScheduler:
    """
    Scheduler running each callback in its own asyncio task.

    Tasks are held until they finish so the event loop cannot drop them
    mid-flight, and ``shutdown()`` cancels anything still outstanding.
    """

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task] = set()

    def call_later(
        self,
        delay: float,
        callback: Callable[[], Awaitable[None]],
    ) -> ScheduledHandle:
        async def _run() -> None:
            await asyncio.sleep(delay)
            await callback()

        task = asyncio.get_running_loop().create_task(_run())
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return _TaskHandle(task)

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(
                "Scheduled task failed",
                exc_info=exc,
                extra={"error_type": type(exc).__name__},
            )

    @property
    def pending_count(self) -> int:
        return len(self._tasks)

    async def shutdown(self) -> None:
        """Cancel outstanding tasks and wait for them to unwind."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()
