import logging
from typing import Any, Callable, Optional

from gaze_dwell.core.errors import PredictorError
from gaze_dwell.models import GazeSample
from .base import SampleSource

logger = logging.getLogger(__name__)


class CallableSource(SampleSource):
    """
    Adapts a plain predictor function to the SampleSource interface.

    The function takes no arguments and returns None (no signal), a
    GazeSample, an (x, y) pair, or any object with `x` and `y` attributes.
    Missing timestamps are filled in from `clock` (milliseconds).
    """

    def __init__(
        self,
        predict: Callable[[], Any],
        clock: Callable[[], float],
        close: Optional[Callable[[], None]] = None,
    ):
        if not callable(predict):
            raise TypeError("predict must be callable.")
        self._predict = predict
        self._clock = clock
        self._close = close

    def poll(self) -> Optional[GazeSample]:
        prediction = self._predict()
        if prediction is None:
            return None
        if isinstance(prediction, GazeSample):
            return prediction

        try:
            if isinstance(prediction, (tuple, list)):
                x, y = prediction
            else:
                x, y = prediction.x, prediction.y
            return GazeSample(x=float(x), y=float(y), timestamp=self._clock())
        except (TypeError, ValueError, AttributeError) as e:
            raise PredictorError(f"Unrecognised prediction {prediction!r}") from e

    def close(self) -> None:
        if self._close is not None:
            self._close()
