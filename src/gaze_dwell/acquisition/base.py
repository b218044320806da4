from abc import ABC, abstractmethod
from typing import Optional

from gaze_dwell.models import GazeSample


class SampleSource(ABC):
    """
    Abstract Base Class for all gaze sample sources.

    A SampleSource wraps a gaze predictor (camera + model, hardware tracker,
    recording, simulation) and hands out one sample per poll. The tracker
    checks `is_available` once at start-up and then calls `poll()` on every
    tick.
    """

    @property
    def is_available(self) -> bool:
        """Whether the predictor capability exists at all. Checked when the tracker starts."""
        return True

    @abstractmethod
    def poll(self) -> Optional[GazeSample]:
        """
        Returns the predictor's current estimate, or None when there is no
        signal (e.g. no face detected).

        May raise PredictorError (or any other exception) on failure; the
        poller treats that as a missing sample.
        """
        raise NotImplementedError

    def close(self) -> None:
        """Releases predictor resources. Called when the tracker stops."""
