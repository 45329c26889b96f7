"""Cooperative scheduler for deferred, cancellable engine tasks."""
from __future__ import annotations

import heapq
import itertools
import logging
import time
from typing import Callable, List, Tuple

from aivault.core.types import Clock

logger = logging.getLogger(__name__)


class ScheduledTask:
    """Handle returned by :meth:`Scheduler.call_later`."""

    __slots__ = ("deadline", "callback", "cancelled", "done")

    def __init__(self, deadline: float, callback: Callable[[], None]) -> None:
        self.deadline = deadline
        self.callback = callback
        self.cancelled = False
        self.done = False

    @property
    def pending(self) -> bool:
        return not (self.cancelled or self.done)

    def cancel(self) -> None:
        self.cancelled = True


class Scheduler:
    """
    Runs callbacks once their deadline passes, on the caller's thread.

    Nothing runs in the background: the owner calls :meth:`run_pending`
    (the console loop does so between commands), which keeps every state
    mutation on a single thread.
    """

    def __init__(self, clock: Clock | None = None) -> None:
        self._clock = clock or time.monotonic
        self._queue: List[Tuple[float, int, ScheduledTask]] = []
        self._counter = itertools.count()

    def now(self) -> float:
        return self._clock()

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledTask:
        """Schedule ``callback`` to run ``delay`` seconds from now."""
        task = ScheduledTask(self._clock() + max(delay, 0.0), callback)
        heapq.heappush(self._queue, (task.deadline, next(self._counter), task))
        return task

    def run_pending(self) -> int:
        """Run every task whose deadline has passed; return how many ran."""
        ran = 0
        now = self._clock()
        while self._queue and self._queue[0][0] <= now:
            _, _, task = heapq.heappop(self._queue)
            if not task.pending:
                continue
            task.done = True
            try:
                task.callback()
            except Exception:
                logger.exception("Scheduled task failed")
            ran += 1
        return ran

    def next_deadline(self) -> float | None:
        """Return the earliest deadline of a task that has not been cancelled."""
        while self._queue and not self._queue[0][2].pending:
            heapq.heappop(self._queue)
        return self._queue[0][0] if self._queue else None
