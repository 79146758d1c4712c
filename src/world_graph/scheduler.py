"""Timer sources for driving a simulation.

Every ``ForceSimulation`` owns one scheduler. ``AsyncioScheduler`` runs on an
event loop shared with the rendering layer; ``ManualScheduler`` keeps a
virtual clock so tests can advance time without sleeping.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
from typing import Callable, List, Protocol, Tuple, runtime_checkable

Callback = Callable[[], None]


@runtime_checkable
class TimerHandle(Protocol):
    def cancel(self) -> None:
        ...


@runtime_checkable
class Scheduler(Protocol):
    """Anything that can run a callback once after ``delay`` seconds."""

    def call_later(self, delay: float, callback: Callback) -> TimerHandle:
        ...


class AsyncioScheduler:
    """Schedules callbacks on an asyncio event loop.

    When ``loop`` is omitted the running loop is looked up at call time, so
    the scheduler can be created before the loop starts.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def call_later(self, delay: float, callback: Callback) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay, callback)


class ManualTimerHandle:
    def __init__(self, due: float) -> None:
        self.due = due
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Virtual-time scheduler; nothing fires until :meth:`advance` is called."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = float(start)
        self.scheduled_delays: List[float] = []
        self._queue: List[Tuple[float, int, ManualTimerHandle, Callback]] = []
        self._counter = itertools.count()

    def call_later(self, delay: float, callback: Callback) -> ManualTimerHandle:
        delay = max(float(delay), 0.0)
        handle = ManualTimerHandle(self.now + delay)
        self.scheduled_delays.append(delay)
        heapq.heappush(self._queue, (handle.due, next(self._counter), handle, callback))
        return handle

    @property
    def pending(self) -> int:
        return sum(1 for _, _, handle, _ in self._queue if not handle.cancelled)

    def advance(self, seconds: float) -> int:
        """Move the clock forward, firing due callbacks in time order.

        Callbacks scheduled while advancing fire too if they fall inside the
        window. Returns the number of callbacks run.
        """

        if seconds < 0:
            raise ValueError("cannot advance a clock backwards")
        deadline = self.now + seconds
        fired = 0
        # Small tolerance so accumulated float intervals still land inside the window.
        while self._queue and self._queue[0][0] <= deadline + 1e-9:
            due, _, handle, callback = heapq.heappop(self._queue)
            if handle.cancelled:
                continue
            self.now = max(self.now, due)
            callback()
            fired += 1
        self.now = deadline
        return fired
