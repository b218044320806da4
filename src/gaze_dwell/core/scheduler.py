import asyncio
import heapq
import itertools
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class TimerHandle(Protocol):
    """A scheduled one-shot callback that can be cancelled before it runs."""

    def cancel(self) -> None: ...

    def cancelled(self) -> bool: ...


class Scheduler(ABC):
    """
    Clock and one-shot timer service shared by the poller and the region deadlines.

    All times are milliseconds. Implementations run callbacks one at a time
    on a single thread, which is what lets the tracker go without locks.
    """

    @abstractmethod
    def now(self) -> float:
        """Current time in milliseconds on a monotonic clock."""
        ...

    @abstractmethod
    def call_later(self, delay_ms: float, callback: Callable[..., Any], *args: Any) -> TimerHandle:
        """Runs `callback(*args)` once, `delay_ms` from now."""
        ...


class AsyncioScheduler(Scheduler):
    """
    Scheduler backed by an asyncio event loop.

    Must be used from the loop's own thread; use
    `loop.call_soon_threadsafe` to reach the tracker from other threads.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop or asyncio.get_running_loop()

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop

    def now(self) -> float:
        return self._loop.time() * 1000.0

    def call_later(self, delay_ms: float, callback: Callable[..., Any], *args: Any) -> asyncio.TimerHandle:
        return self._loop.call_later(max(0.0, delay_ms) / 1000.0, callback, *args)


class _VirtualTimer:
    __slots__ = ("when", "seq", "callback", "args", "_cancelled")

    def __init__(self, when: float, seq: int, callback: Callable[..., Any], args: tuple):
        self.when = when
        self.seq = seq
        self.callback = callback
        self.args = args
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    def cancelled(self) -> bool:
        return self._cancelled

    def __lt__(self, other: "_VirtualTimer") -> bool:
        return (self.when, self.seq) < (other.when, other.seq)


class VirtualScheduler(Scheduler):
    """
    Deterministic scheduler whose clock only moves when `advance` is called.

    Timers due at the same instant run in the order they were scheduled.
    Used by the test-suite and for offline simulation.
    """

    def __init__(self, start_ms: float = 0.0):
        self._now = float(start_ms)
        self._queue: list[_VirtualTimer] = []
        self._counter = itertools.count()

    def now(self) -> float:
        return self._now

    def call_later(self, delay_ms: float, callback: Callable[..., Any], *args: Any) -> _VirtualTimer:
        timer = _VirtualTimer(self._now + max(0.0, delay_ms), next(self._counter), callback, args)
        heapq.heappush(self._queue, timer)
        return timer

    @property
    def pending(self) -> int:
        """Number of timers still waiting to run (cancelled ones excluded)."""
        return sum(1 for t in self._queue if not t.cancelled())

    def advance(self, ms: float) -> None:
        """Moves the clock forward by `ms`, running every timer that falls due on the way."""
        if ms < 0:
            raise ValueError("Cannot move a clock backwards.")
        target = self._now + ms
        while self._queue and self._queue[0].when <= target:
            timer = heapq.heappop(self._queue)
            if timer.cancelled():
                continue
            self._now = timer.when
            timer.callback(*timer.args)
        self._now = target
