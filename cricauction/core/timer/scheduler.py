"""
Schedulers - cancellable delayed callbacks on a single logical thread.

Two implementations share one interface:
- AsyncioScheduler: real time, backed by an asyncio event loop
- VirtualScheduler: simulated clock advanced explicitly (tests, CLI simulator)

Callbacks never run concurrently: both schedulers invoke them one at a time
from the thread that drives the loop or the clock.
"""

import asyncio
import heapq
import itertools
from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Tuple

Callback = Callable[[], None]


class TimerHandle(ABC):
    """A scheduled callback that can be cancelled before it fires."""

    @abstractmethod
    def cancel(self) -> None:
        ...

    @property
    @abstractmethod
    def cancelled(self) -> bool:
        ...


class Scheduler(ABC):
    """Source of delayed callbacks."""

    @abstractmethod
    def call_later(self, delay: float, callback: Callback) -> TimerHandle:
        """Run ``callback`` once after ``delay`` seconds."""

    @abstractmethod
    def now(self) -> float:
        """Current scheduler time in seconds."""


# =============================================================================
# Virtual clock
# =============================================================================


class VirtualTimer(TimerHandle):
    def __init__(self, due: float, callback: Callback):
        self.due = due
        self.callback = callback
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class VirtualScheduler(Scheduler):
    """
    Deterministic scheduler driven by ``advance()``.

    Timers due at the same instant fire in scheduling order.
    """

    def __init__(self, start: float = 0.0):
        self._now = start
        self._queue: List[Tuple[float, int, VirtualTimer]] = []
        self._seq = itertools.count()

    def now(self) -> float:
        return self._now

    def call_later(self, delay: float, callback: Callback) -> VirtualTimer:
        timer = VirtualTimer(self._now + max(0.0, delay), callback)
        heapq.heappush(self._queue, (timer.due, next(self._seq), timer))
        return timer

    @property
    def pending(self) -> int:
        """Number of live (not cancelled) timers."""
        return sum(1 for _, _, t in self._queue if not t.cancelled)

    def next_due(self) -> Optional[float]:
        self._discard_cancelled()
        return self._queue[0][0] if self._queue else None

    def _discard_cancelled(self) -> None:
        while self._queue and self._queue[0][2].cancelled:
            heapq.heappop(self._queue)

    def _fire_next(self) -> None:
        due, _, timer = heapq.heappop(self._queue)
        self._now = max(self._now, due)
        timer.cancel()
        timer.callback()

    def advance(self, seconds: float) -> int:
        """
        Move the clock forward, firing every timer that falls due.

        Timers scheduled by callbacks fire too if they fall within the window.

        Returns:
            Number of callbacks fired
        """
        target = self._now + seconds
        fired = 0
        while True:
            self._discard_cancelled()
            if not self._queue or self._queue[0][0] > target:
                break
            self._fire_next()
            fired += 1
        self._now = target
        return fired

    def run_until_idle(self, max_callbacks: int = 1_000_000) -> int:
        """
        Fire timers in order until none remain.

        Raises:
            RuntimeError: if ``max_callbacks`` is reached first
        """
        fired = 0
        while True:
            self._discard_cancelled()
            if not self._queue:
                return fired
            if fired >= max_callbacks:
                raise RuntimeError(f"Scheduler still busy after {max_callbacks} callbacks")
            self._fire_next()
            fired += 1


# =============================================================================
# asyncio
# =============================================================================


class AsyncioTimer(TimerHandle):
    def __init__(self, handle: asyncio.TimerHandle):
        self._handle = handle

    def cancel(self) -> None:
        self._handle.cancel()

    @property
    def cancelled(self) -> bool:
        return self._handle.cancelled()


class AsyncioScheduler(Scheduler):
    """Scheduler backed by an asyncio event loop."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def now(self) -> float:
        return self.loop.time()

    def call_later(self, delay: float, callback: Callback) -> AsyncioTimer:
        return AsyncioTimer(self.loop.call_later(delay, callback))
