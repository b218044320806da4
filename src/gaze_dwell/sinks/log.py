import logging

from .base import GazeEventSink
from ..models import StableGazePoint

logger = logging.getLogger(__name__)


class LoggingSink(GazeEventSink):
    """
    Writes tracker events to the log.

    Gaze points go out at DEBUG since they arrive every tick; the rest at
    INFO/WARNING.
    """

    def __init__(self, point_level: int = logging.DEBUG):
        self._point_level = point_level

    def on_stable_point(self, point: StableGazePoint) -> None:
        if logger.isEnabledFor(self._point_level):
            logger.log(
                self._point_level,
                "gaze: (%.0f, %.0f)%s", point.x, point.y, "" if point.stable else " unstable",
            )

    def on_region_triggered(self, region_id: str, elapsed_ms: float) -> None:
        logger.info(f"Dwell on '{region_id}' completed after {elapsed_ms:.0f}ms")

    def on_signal_lost(self) -> None:
        logger.warning("No face detected, gaze signal lost.")

    def on_signal_reacquired(self) -> None:
        logger.info("Gaze signal reacquired.")
