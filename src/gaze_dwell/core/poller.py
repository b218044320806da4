import logging
import math
from typing import Callable, Optional

from .regions import RegionRegistry
from .scheduler import Scheduler, TimerHandle
from .smoothing import SmoothingBuffer
from ..acquisition.base import SampleSource
from ..models import GazeSample, StableGazePoint
from ..utils.logging import ThrottledLogger

logger = logging.getLogger(__name__)


def _noop() -> None:
    pass


class Poller:
    """
    Drives Source -> SmoothingBuffer -> (listeners, RegionRegistry) on a fixed cadence.

    One tick polls one sample. Ticks are chained one-shot timers on the
    scheduler, so a tick never overlaps the next one. A run of
    `max_consecutive_failures` missing samples resets every in-progress
    dwell and declares the signal lost until the next good sample.
    """
    def __init__(
        self,
        source: SampleSource,
        scheduler: Scheduler,
        buffer: SmoothingBuffer,
        registry: RegionRegistry,
        poll_interval_ms: float = 100.0,
        max_consecutive_failures: int = 5,
        on_point: Callable[[StableGazePoint], None] = lambda point: None,
        on_signal_lost: Callable[[], None] = _noop,
        on_signal_reacquired: Callable[[], None] = _noop,
    ):
        if poll_interval_ms <= 0:
            raise ValueError("Poll interval must be positive.")
        if max_consecutive_failures <= 0:
            raise ValueError("Failure limit must be positive.")

        self.source = source
        self.buffer = buffer
        self.registry = registry
        self._scheduler = scheduler
        self._interval = float(poll_interval_ms)
        self._max_failures = int(max_consecutive_failures)
        self._on_point = on_point
        self._on_signal_lost = on_signal_lost
        self._on_signal_reacquired = on_signal_reacquired

        self._running = False
        self._in_tick = False
        self._timer: Optional[TimerHandle] = None
        self._next_at = 0.0

        self._failures = 0
        self._signal_lost = False
        self.last_point: Optional[StableGazePoint] = None
        self._error_logger = ThrottledLogger(
            logger, interval_sec=5.0, clock=lambda: scheduler.now() / 1000.0
        )

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def consecutive_failures(self) -> int:
        return self._failures

    @property
    def signal_lost(self) -> bool:
        return self._signal_lost

    # --- Lifecycle ---

    def start(self) -> None:
        if self._running:
            return

        self._running = True
        self._failures = 0
        self._next_at = self._scheduler.now()
        if self._timer is None:
            self._schedule_next()
        logger.debug(f"Poller started ({self._interval:.0f}ms interval).")

    def stop(self) -> None:
        if not self._running:
            return

        self._running = False
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        logger.debug("Poller stopped.")

    def reset(self) -> None:
        """Forgets the sample history, the last point and the failure state."""
        self.buffer.clear()
        self.last_point = None
        self._failures = 0
        self._signal_lost = False
        self._error_logger.reset()

    def _schedule_next(self) -> None:
        now = self._scheduler.now()
        self._next_at += self._interval
        if self._next_at < now:
            # Fell behind; skip the missed ticks instead of bursting
            self._next_at = now
        self._timer = self._scheduler.call_later(self._next_at - now, self._run_tick)

    def _run_tick(self) -> None:
        self._timer = None
        try:
            self.tick()
        finally:
            # A listener may have stopped or restarted us during the tick
            if self._running and self._timer is None:
                self._schedule_next()

    # --- Tick ---

    def tick(self) -> None:
        """Runs one pipeline step. Re-entrant calls are ignored."""
        if self._in_tick:
            logger.debug("Tick already in progress, skipping.")
            return

        self._in_tick = True
        try:
            sample = self._poll_source()
            if sample is None:
                self._handle_failure()
            else:
                self._handle_sample(sample)
        finally:
            self._in_tick = False

    def _poll_source(self) -> Optional[GazeSample]:
        try:
            sample = self.source.poll()
        except Exception as e:
            self._error_logger.warning("Error getting prediction: %s", e)
            return None

        if sample is None:
            return None
        if not (math.isfinite(sample.x) and math.isfinite(sample.y)):
            logger.debug(f"Discarding non-finite sample {sample}")
            return None
        return sample

    def _handle_sample(self, sample: GazeSample) -> None:
        self._failures = 0
        if self._signal_lost:
            self._signal_lost = False
            self._error_logger.reset()
            logger.info("Gaze signal reacquired.")
            self._on_signal_reacquired()

        self.buffer.push(sample)
        point = self.buffer.compute_stable()
        if point is None:
            return

        self.last_point = point
        self._on_point(point)
        self.registry.evaluate(point)

    def _handle_failure(self) -> None:
        self._failures += 1
        if self._failures < self._max_failures:
            return

        reset = self.registry.reset_all()
        if reset:
            logger.info(f"Reset {reset} in-progress dwell(s) after signal loss.")
        if not self._signal_lost:
            self._signal_lost = True
            logger.warning(f"No gaze signal for {self._failures} consecutive polls.")
            self._on_signal_lost()
