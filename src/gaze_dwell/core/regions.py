import logging
import math
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Callable, Iterator, Optional, Protocol, Union, runtime_checkable

from .errors import InvalidArgumentError, RegionNotFoundError
from .scheduler import Scheduler, TimerHandle
from ..models import Rect, StableGazePoint
from ..utils.logging import ThrottledLogger

logger = logging.getLogger(__name__)

DwellCallback = Callable[[str, float], Any]


@runtime_checkable
class BoundsProvider(Protocol):
    """Anything that can report where a watched region currently is on screen."""

    def get_rect(self) -> Rect: ...


BoundsLike = Union[BoundsProvider, Callable[[], Any]]


class RegionState(Enum):
    """
    Dwell state of a watched region.

    IDLE -> GAZING when a stable gaze point enters the region.
    GAZING -> IDLE when the gaze leaves or becomes unstable.
    GAZING -> TRIGGERED when the required dwell time elapses.
    TRIGGERED is terminal until the region is unwatched.
    """
    IDLE = auto()
    GAZING = auto()
    TRIGGERED = auto()


@dataclass(eq=False)
class WatchedRegion:
    region_id: str
    get_rect: Callable[[], Any]
    required_dwell_ms: float
    callback: DwellCallback
    state: RegionState = RegionState.IDLE
    gaze_start_time: Optional[float] = None
    triggered: bool = False
    _deadline: Optional[TimerHandle] = field(default=None, repr=False)
    # Bumped on every arm/disarm so a deadline that outlived its window is ignored.
    _generation: int = field(default=0, repr=False)

    def current_rect(self) -> Rect:
        return Rect.coerce(self.get_rect())

    def cancel_deadline(self) -> None:
        if self._deadline is not None:
            self._deadline.cancel()
            self._deadline = None


class WatchHandle:
    """Returned by `watch`; `stop()` unregisters exactly the region it was created for."""

    def __init__(self, registry: "RegionRegistry", region: WatchedRegion):
        self._registry = registry
        self._region = region

    @property
    def region_id(self) -> str:
        return self._region.region_id

    @property
    def active(self) -> bool:
        return self._registry.get(self._region.region_id) is self._region

    def stop(self) -> bool:
        return self._registry._remove(self._region)

    def __repr__(self) -> str:
        return f"<WatchHandle region={self.region_id!r} active={self.active}>"


def _resolve_bounds(bounds_provider: BoundsLike) -> Callable[[], Any]:
    if bounds_provider is None:
        raise InvalidArgumentError("A bounds provider is required.")
    get_rect = getattr(bounds_provider, "get_rect", None)
    if callable(get_rect):
        return get_rect
    if callable(bounds_provider):
        return bounds_provider
    raise InvalidArgumentError(
        f"Bounds provider must expose get_rect() or be callable, got {type(bounds_provider).__name__}."
    )


class RegionRegistry:
    """
    Holds the watched regions and advances their dwell state machines.

    `evaluate` is called once per poll tick with the latest smoothed point.
    Dwell deadlines are one-shot timers on the shared scheduler; they are
    cancelled on every transition back to IDLE and on unwatch.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        on_triggered: Optional[DwellCallback] = None,
    ):
        self._scheduler = scheduler
        self._on_triggered = on_triggered
        self._regions: dict[str, WatchedRegion] = {}
        self._bounds_errors = ThrottledLogger(
            logger, interval_sec=5.0, clock=lambda: scheduler.now() / 1000.0
        )

    def __len__(self) -> int:
        return len(self._regions)

    def __contains__(self, region_id: object) -> bool:
        return region_id in self._regions

    def __iter__(self) -> Iterator[WatchedRegion]:
        return iter(list(self._regions.values()))

    def get(self, region_id: str) -> Optional[WatchedRegion]:
        return self._regions.get(region_id)

    # --- Registration ---

    def watch(
        self,
        region_id: str,
        bounds_provider: BoundsLike,
        duration_ms: float,
        callback: DwellCallback,
    ) -> WatchHandle:
        """
        Starts watching a region.

        Raises:
            InvalidArgumentError: missing id, bounds provider or callback, a
                non-positive duration, or an id that is already watched.
        """
        if region_id is None or region_id == "":
            raise InvalidArgumentError("A region id is required.")
        get_rect = _resolve_bounds(bounds_provider)
        if callback is None or not callable(callback):
            raise InvalidArgumentError(f"Region '{region_id}' needs a callable callback.")
        try:
            duration_ms = float(duration_ms)
        except (TypeError, ValueError):
            raise InvalidArgumentError(f"Invalid dwell duration: {duration_ms!r}") from None
        if not math.isfinite(duration_ms) or duration_ms <= 0:
            raise InvalidArgumentError(f"Dwell duration must be positive, got {duration_ms}.")
        if region_id in self._regions:
            raise InvalidArgumentError(f"Region '{region_id}' is already being watched.")

        region = WatchedRegion(
            region_id=region_id,
            get_rect=get_rect,
            required_dwell_ms=duration_ms,
            callback=callback,
        )
        self._regions[region_id] = region
        logger.info(f"Watching region '{region_id}' (trigger after {duration_ms:.0f}ms)")
        return WatchHandle(self, region)

    def unwatch(self, region_id: str, missing_ok: bool = True) -> bool:
        """
        Stops watching a region and cancels its pending deadline.

        Returns False for an unknown id, or raises RegionNotFoundError when
        `missing_ok` is False.
        """
        region = self._regions.get(region_id)
        if region is None:
            if missing_ok:
                logger.debug(f"Unwatch ignored, region '{region_id}' is not watched.")
                return False
            raise RegionNotFoundError(region_id)
        return self._remove(region)

    def unwatch_all(self) -> None:
        for region in list(self._regions.values()):
            self._remove(region)

    def _remove(self, region: WatchedRegion) -> bool:
        if self._regions.get(region.region_id) is not region:
            return False
        del self._regions[region.region_id]
        region.cancel_deadline()
        region._generation += 1
        logger.info(f"Stopped watching region '{region.region_id}'")
        return True

    # --- Queries ---

    def get_state(self, region_id: str) -> RegionState:
        region = self._regions.get(region_id)
        if region is None:
            raise RegionNotFoundError(region_id)
        return region.state

    def progress(self, region_id: str) -> float:
        """Dwell progress in [0, 1], for drawing a fill/ring indicator."""
        region = self._regions.get(region_id)
        if region is None:
            raise RegionNotFoundError(region_id)
        if region.state is RegionState.TRIGGERED:
            return 1.0
        if region.state is RegionState.IDLE or region.gaze_start_time is None:
            return 0.0
        elapsed = self._scheduler.now() - region.gaze_start_time
        return max(0.0, min(1.0, elapsed / region.required_dwell_ms))

    # --- Per-tick evaluation ---

    def evaluate(self, point: StableGazePoint) -> None:
        now = self._scheduler.now()
        for region in list(self._regions.values()):
            if region.triggered:
                continue

            if point.stable and self._contains(region, point):
                if region.state is RegionState.IDLE:
                    self._arm(region, now)
            elif region.state is RegionState.GAZING:
                self._disarm(region, now)

    def reset_all(self) -> int:
        """Sends every GAZING region back to IDLE. TRIGGERED regions are left alone."""
        now = self._scheduler.now()
        count = 0
        for region in list(self._regions.values()):
            if region.state is RegionState.GAZING:
                self._disarm(region, now)
                count += 1
        return count

    def _contains(self, region: WatchedRegion, point: StableGazePoint) -> bool:
        try:
            rect = region.current_rect()
        except Exception as e:
            self._bounds_errors.warning(
                "Bounds provider for region '%s' failed: %s", region.region_id, e
            )
            return False
        return rect.contains(point.x, point.y)

    def _arm(self, region: WatchedRegion, now: float) -> None:
        region.state = RegionState.GAZING
        region.gaze_start_time = now
        region._generation += 1
        region._deadline = self._scheduler.call_later(
            region.required_dwell_ms, self._on_deadline, region, region._generation
        )
        logger.info(f"Started gazing at region '{region.region_id}'")

    def _disarm(self, region: WatchedRegion, now: float) -> None:
        gazed_for = now - region.gaze_start_time if region.gaze_start_time is not None else 0.0
        region.cancel_deadline()
        region.state = RegionState.IDLE
        region.gaze_start_time = None
        region._generation += 1
        logger.info(f"Stopped gazing at region '{region.region_id}' (gazed for {gazed_for:.0f}ms)")

    def _on_deadline(self, region: WatchedRegion, generation: int) -> None:
        if (
            self._regions.get(region.region_id) is not region
            or region._generation != generation
            or region.state is not RegionState.GAZING
            or region.triggered
        ):
            logger.debug(f"Ignoring stale dwell deadline for region '{region.region_id}'")
            return

        elapsed = self._scheduler.now() - region.gaze_start_time
        region._deadline = None
        region.triggered = True
        region.state = RegionState.TRIGGERED
        logger.info(f"User fixated on region '{region.region_id}' for {elapsed:.0f}ms")

        try:
            region.callback(region.region_id, elapsed)
        except Exception:
            logger.exception(f"Dwell callback for region '{region.region_id}' raised.")

        if self._on_triggered is not None:
            try:
                self._on_triggered(region.region_id, elapsed)
            except Exception:
                logger.exception("Dwell trigger listener raised.")
