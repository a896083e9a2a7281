"""Cancellable deferred callback used for automatic play"""
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional


logger = logging.getLogger("app.game.scheduler")

Callback = Callable[[], Awaitable[None]]


class AutoPlayScheduler:
    """
    Holds at most one pending callback.

    Scheduling replaces whatever was pending. Cancelling (on pause, reset or
    teardown) guarantees the pending callback never runs against a state it
    was not scheduled for. Once a callback starts running it is no longer
    "pending", so it may safely schedule its own successor.
    """

    def __init__(self, name: str = "session"):
        self.name = name
        self._task: Optional[asyncio.Task] = None
        self._running: set[asyncio.Task] = set()
        self._generation = 0

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def active(self) -> bool:
        """A callback is running right now"""
        return bool(self._running)

    def schedule(self, delay: float, callback: Callback, *, label: str = "turn") -> bool:
        """Run ``callback`` after ``delay`` seconds on the running loop.

        Returns False when there is no running event loop to schedule on.
        """
        self.cancel()

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("[%s] No running event loop; %s not scheduled", self.name, label)
            return False

        self._generation += 1
        generation = self._generation
        self._task = loop.create_task(self._run(delay, callback, generation, label))
        logger.debug("[%s] Scheduled %s in %.2fs", self.name, label, delay)
        return True

    async def _run(self, delay: float, callback: Callback, generation: int, label: str) -> None:
        await asyncio.sleep(delay)
        if generation != self._generation:
            return

        # Detach before running so the callback can reschedule without
        # cancelling itself. The loop only holds weak task references, so
        # _running keeps this one alive until the callback returns.
        task = asyncio.current_task()
        self._running.add(task)
        self._task = None
        try:
            await callback()
        except Exception:
            logger.exception("[%s] Scheduled %s failed", self.name, label)
        finally:
            self._running.discard(task)

    def cancel(self) -> bool:
        """Drop the pending callback, if any. Returns True if one was cancelled."""
        self._generation += 1
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
            logger.debug("[%s] Cancelled pending callback", self.name)
            return True
        return False
