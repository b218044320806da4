from typing import Callable, Optional

from .base import GazeEventSink
from ..models import StableGazePoint


class CallbackSink(GazeEventSink):
    """Forwards tracker events to plain functions. Any hook may be left out."""

    def __init__(
        self,
        on_stable_point: Optional[Callable[[StableGazePoint], None]] = None,
        on_region_triggered: Optional[Callable[[str, float], None]] = None,
        on_signal_lost: Optional[Callable[[], None]] = None,
        on_signal_reacquired: Optional[Callable[[], None]] = None,
    ):
        self._on_stable_point = on_stable_point
        self._on_region_triggered = on_region_triggered
        self._on_signal_lost = on_signal_lost
        self._on_signal_reacquired = on_signal_reacquired

    def on_stable_point(self, point: StableGazePoint) -> None:
        if self._on_stable_point:
            self._on_stable_point(point)

    def on_region_triggered(self, region_id: str, elapsed_ms: float) -> None:
        if self._on_region_triggered:
            self._on_region_triggered(region_id, elapsed_ms)

    def on_signal_lost(self) -> None:
        if self._on_signal_lost:
            self._on_signal_lost()

    def on_signal_reacquired(self) -> None:
        if self._on_signal_reacquired:
            self._on_signal_reacquired()
