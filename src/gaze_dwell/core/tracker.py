import logging
from typing import Iterable, List, Optional

from .errors import PredictorUnavailableError
from .poller import Poller
from .regions import BoundsLike, DwellCallback, RegionRegistry, RegionState, WatchHandle
from .scheduler import Scheduler
from .smoothing import SmoothingBuffer
from ..acquisition.base import SampleSource
from ..configs import TrackerSettings
from ..models import StableGazePoint
from ..sinks.base import GazeEventSink

logger = logging.getLogger(__name__)


class GazeDwellTracker:
    """
    The public face of the library: one owned instance per gaze source.

    Wires a SampleSource, a SmoothingBuffer, a RegionRegistry and the
    Poller together on a single Scheduler, and fans events out to the
    attached sinks. Narrative/UI code only talks to this class.

    Lifecycle: construct -> start() -> [pause()/resume()]* -> stop().
    """
    def __init__(
        self,
        source: SampleSource,
        scheduler: Scheduler,
        settings: Optional[TrackerSettings] = None,
        sinks: Iterable[GazeEventSink] = (),
    ):
        self.settings: TrackerSettings = settings or TrackerSettings()
        self.source = source
        self.scheduler = scheduler
        self.sinks: List[GazeEventSink] = list(sinks)

        self.buffer = SmoothingBuffer(
            capacity=self.settings.buffer_capacity,
            stability_threshold_px=self.settings.stability_threshold_px,
        )
        self.registry = RegionRegistry(scheduler, on_triggered=self._notify_triggered)
        self.poller = Poller(
            source=source,
            scheduler=scheduler,
            buffer=self.buffer,
            registry=self.registry,
            poll_interval_ms=self.settings.poll_interval_ms,
            max_consecutive_failures=self.settings.max_consecutive_failures,
            on_point=self._notify_point,
            on_signal_lost=self._notify_signal_lost,
            on_signal_reacquired=self._notify_signal_reacquired,
        )

        self._tracking = False
        self._paused = False

    # --- Status ---

    @property
    def is_tracking(self) -> bool:
        return self._tracking

    @property
    def is_paused(self) -> bool:
        return self._paused

    @property
    def signal_lost(self) -> bool:
        return self.poller.signal_lost

    # --- Lifecycle ---

    def start(self) -> None:
        """
        Starts polling the source.

        Raises:
            PredictorUnavailableError: the source has no predictor behind it.
        """
        if self._tracking:
            logger.warning("Tracker is already running.")
            return

        if not self.source.is_available:
            reason = getattr(self.source, "reason", None) or "Gaze predictor is not available."
            logger.error(f"Initialization failed: {reason}")
            raise PredictorUnavailableError(reason)

        logger.info("Initializing...")
        # The sink whose start() raised is closed as well
        attempted: List[GazeEventSink] = []
        try:
            for sink in self.sinks:
                attempted.append(sink)
                sink.start()
        except Exception:
            logger.exception("Failed to start event sinks.")
            for sink in attempted:
                self._close_sink(sink)
            raise

        self.poller.start()
        self._tracking = True
        self._paused = False
        logger.info("Initialized and running.")

    def stop(self) -> None:
        """Full teardown: stops polling, clears the buffer, drops every region, closes sinks."""
        if not self._tracking:
            logger.info("Already stopped.")
            return

        logger.info("Stopping...")
        self.poller.stop()
        self.registry.unwatch_all()
        self.poller.reset()

        for sink in self.sinks:
            self._close_sink(sink)
        try:
            self.source.close()
        except Exception:
            logger.exception("Failed to close gaze source.")

        self._tracking = False
        self._paused = False
        logger.info("Tracking has stopped.")

    def pause(self) -> None:
        """Suspends polling. Regions and their dwell state are kept."""
        if not self._tracking or self._paused:
            return
        self.poller.stop()
        self._paused = True
        logger.info("Paused.")

    def resume(self) -> None:
        if not self._tracking or not self._paused:
            return
        self.poller.start()
        self._paused = False
        logger.info("Resumed.")

    # --- Regions ---

    def watch(
        self,
        region_id: str,
        bounds_provider: BoundsLike,
        duration_ms: Optional[float] = None,
        callback: Optional[DwellCallback] = None,
    ) -> WatchHandle:
        """
        Calls `callback(region_id, elapsed_ms)` once the stable gaze has
        stayed inside the region for `duration_ms` without interruption.
        """
        if duration_ms is None:
            duration_ms = self.settings.default_dwell_ms
        return self.registry.watch(region_id, bounds_provider, duration_ms, callback)

    def unwatch(self, region_id: str, missing_ok: bool = True) -> bool:
        return self.registry.unwatch(region_id, missing_ok=missing_ok)

    def unwatch_all(self) -> None:
        self.registry.unwatch_all()

    def region_state(self, region_id: str) -> RegionState:
        return self.registry.get_state(region_id)

    def region_progress(self, region_id: str) -> float:
        return self.registry.progress(region_id)

    # --- Gaze ---

    def get_current_gaze(self) -> Optional[StableGazePoint]:
        """Last computed point; does not poll the source."""
        return self.poller.last_point

    # --- Sinks ---

    def add_sink(self, sink: GazeEventSink) -> None:
        if self._tracking:
            sink.start()
        self.sinks.append(sink)

    def remove_sink(self, sink: GazeEventSink) -> bool:
        """Detaches a sink, closing it if the tracker is running. Returns False if it was not attached."""
        if sink not in self.sinks:
            return False
        self.sinks.remove(sink)
        if self._tracking:
            self._close_sink(sink)
        return True

    def _close_sink(self, sink: GazeEventSink) -> None:
        try:
            sink.close()
        except Exception:
            logger.exception(f"Failed to close sink {type(sink).__name__}.")

    def _notify_point(self, point: StableGazePoint) -> None:
        for sink in list(self.sinks):
            try:
                sink.on_stable_point(point)
            except Exception:
                logger.exception(f"Sink {type(sink).__name__} failed on gaze point.")

    def _notify_triggered(self, region_id: str, elapsed_ms: float) -> None:
        for sink in list(self.sinks):
            try:
                sink.on_region_triggered(region_id, elapsed_ms)
            except Exception:
                logger.exception(f"Sink {type(sink).__name__} failed on dwell trigger.")

    def _notify_signal_lost(self) -> None:
        for sink in list(self.sinks):
            try:
                sink.on_signal_lost()
            except Exception:
                logger.exception(f"Sink {type(sink).__name__} failed on signal loss.")

    def _notify_signal_reacquired(self) -> None:
        for sink in list(self.sinks):
            try:
                sink.on_signal_reacquired()
            except Exception:
                logger.exception(f"Sink {type(sink).__name__} failed on signal reacquired.")
