import logging
from typing import Optional

from gaze_dwell.models import GazeSample
from .base import SampleSource

logger = logging.getLogger(__name__)


class NullSource(SampleSource):
    """
    Stand-in for machines without a gaze predictor.

    Reports itself unavailable so `GazeDwellTracker.start()` fails with
    PredictorUnavailableError and the caller can fall back to another
    interaction mode.
    """

    def __init__(self, reason: str = "No gaze predictor configured."):
        self.reason = reason

    @property
    def is_available(self) -> bool:
        return False

    def poll(self) -> Optional[GazeSample]:
        return None
