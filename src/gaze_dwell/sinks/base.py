# src/gaze_dwell/sinks/base.py

from abc import ABC, abstractmethod

from ..models import StableGazePoint


class GazeEventSink(ABC):
    """
    Abstract Base Class for consumers of tracker events.

    A sink receives every smoothed gaze point, every dwell trigger and the
    signal lost / reacquired transitions, and forwards them to its
    destination (narrative code, a log, a socket). Events are delivered
    synchronously from the poll tick, so implementations must not block.
    """

    def start(self) -> None:
        """Acquires resources. Called when the tracker starts."""

    def close(self) -> None:
        """Releases resources. Called when the tracker stops."""

    @abstractmethod
    def on_stable_point(self, point: StableGazePoint) -> None:
        """Called once per successful tick with the smoothed point (stable or not)."""
        raise NotImplementedError

    @abstractmethod
    def on_region_triggered(self, region_id: str, elapsed_ms: float) -> None:
        """Called after a region's dwell callback has fired."""
        raise NotImplementedError

    def on_signal_lost(self) -> None:
        """Called once when a run of failed polls reaches the failure limit."""

    def on_signal_reacquired(self) -> None:
        """Called on the first successful poll after the signal was lost."""
