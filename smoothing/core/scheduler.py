"""
Deferred task scheduling for filter reverts.

Any object with ``call_later(delay_seconds, callback)`` returning a handle
with ``cancel()`` can serve as the host scheduler; an asyncio event loop
qualifies. FrameScheduler is the default: a cooperative scheduler driven by
the game loop calling ``run_pending()`` once per frame.
"""

import heapq
import itertools
import logging
import time

from .errors import SchedulingUnavailable

LOGGER = logging.getLogger(__name__)


class ScheduledTask:
    """
    Handle for a one-shot deferred callback.
    """

    def __init__(self, deadline, callback):
        self.deadline = deadline
        self.callback = callback
        self.cancelled = False
        self.done = False

    def cancel(self):
        """Cancel the task. Cancelling a finished task is a no-op."""
        self.cancelled = True

    @property
    def active(self):
        return not (self.cancelled or self.done)


class FrameScheduler:
    """
    Single-threaded scheduler that fires due callbacks when polled.
    """

    def __init__(self, clock=time.monotonic):
        """
        Initialize the scheduler.

        Args:
            clock: Callable returning the current time in seconds
        """
        self.clock = clock
        self._queue = []
        self._counter = itertools.count()
        self._closed = False

    def call_later(self, delay, callback):
        """
        Schedule a callback.

        Args:
            delay: Delay in seconds from now
            callback: Zero-argument callable

        Returns:
            task: ScheduledTask handle

        Raises:
            SchedulingUnavailable: if the scheduler has been shut down
        """
        if self._closed:
            raise SchedulingUnavailable("Scheduler has been shut down")
        task = ScheduledTask(self.clock() + max(0.0, delay), callback)
        heapq.heappush(self._queue, (task.deadline, next(self._counter), task))
        return task

    def run_pending(self):
        """
        Fire every due, non-cancelled task in deadline order.

        Returns:
            count: Number of callbacks fired
        """
        now = self.clock()
        fired = 0
        while self._queue and self._queue[0][0] <= now:
            _, _, task = heapq.heappop(self._queue)
            if task.cancelled:
                continue
            task.done = True
            task.callback()
            fired += 1
        return fired

    def pending(self):
        """Number of tasks still waiting to fire"""
        return sum(1 for _, _, task in self._queue if task.active)

    def shutdown(self):
        """Cancel all tasks and refuse new ones"""
        for _, _, task in self._queue:
            task.cancel()
        self._queue.clear()
        self._closed = True
        LOGGER.debug("Frame scheduler shut down")
