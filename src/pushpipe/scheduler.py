"""Timer seam used by time-driven nodes.

Production code uses LoopScheduler, which hands timers to the running
asyncio event loop. Tests inject ManualScheduler to step a virtual clock
without sleeping.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
from dataclasses import dataclass, field
from typing import Callable, Protocol


class TimerHandle(Protocol):
    def cancel(self) -> None:
        ...


class Scheduler(Protocol):
    """Anything that can run a callback after a delay (in seconds)."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        ...


class LoopScheduler:
    """Schedules callbacks on an asyncio event loop.

    Without an explicit loop the running loop is looked up each time a timer
    is armed, so arming outside of a running loop raises RuntimeError.
    A delay of 0 still defers the callback to a later loop iteration.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        loop = self._loop if self._loop is not None else asyncio.get_running_loop()
        return loop.call_later(delay, callback)


@dataclass(order=True)
class _ManualTimer:
    due: float
    seq: int
    callback: Callable[[], None] = field(compare=False)
    cancelled: bool = field(default=False, compare=False)

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Deterministic scheduler driven by hand.

    Example:
        sched = ManualScheduler()
        node = Batch(idle_timeout=1.0, scheduler=sched)
        node.input("a")
        sched.advance(0.5)   # nothing yet
        sched.advance(0.5)   # idle timer fires, ["a"] is emitted
    """

    def __init__(self, start: float = 0.0) -> None:
        self._now = start
        self._timers: list[_ManualTimer] = []
        self._seq = itertools.count()

    @property
    def now(self) -> float:
        return self._now

    @property
    def pending(self) -> int:
        """Number of armed, not yet cancelled timers."""
        return sum(1 for t in self._timers if not t.cancelled)

    def call_later(self, delay: float, callback: Callable[[], None]) -> _ManualTimer:
        if delay < 0:
            delay = 0
        timer = _ManualTimer(self._now + delay, next(self._seq), callback)
        heapq.heappush(self._timers, timer)
        return timer

    def advance(self, seconds: float) -> None:
        """Move the clock forward, firing due timers in due-time order.

        Ties fire in the order the timers were armed. Timers armed by a
        callback fire within the same call if they fall due before the
        target time.
        """
        if seconds < 0:
            raise ValueError("cannot move a clock backwards")
        target = self._now + seconds
        while self._timers and self._timers[0].due <= target:
            timer = heapq.heappop(self._timers)
            if timer.cancelled:
                continue
            self._now = timer.due
            timer.callback()
        self._now = target

    def run_pending(self) -> None:
        """Fire what is due now and was armed before this call (one "tick").

        Zero-delay timers armed by those callbacks wait for the next call,
        as they would wait for the next event loop iteration.
        """
        cutoff = next(self._seq)
        deferred: list[_ManualTimer] = []
        while self._timers and self._timers[0].due <= self._now:
            timer = heapq.heappop(self._timers)
            if timer.cancelled:
                continue
            if timer.seq > cutoff:
                deferred.append(timer)
                continue
            timer.callback()
        for timer in deferred:
            heapq.heappush(self._timers, timer)
