import logging
import random
from typing import Callable, Optional, Sequence

from gaze_dwell.models import GazeSample
from .base import SampleSource

logger = logging.getLogger(__name__)


class DummySource(SampleSource):
    """
    A SampleSource that simulates a webcam gaze predictor for development.

    The simulated user fixates each target in turn for `fixation_ms`, then
    saccades to the next one over `saccade_ms`. Every estimate carries
    Gaussian jitter, and a fraction of polls return no signal, like a
    predictor that briefly loses the face.
    """

    def __init__(
        self,
        clock: Callable[[], float],
        targets: Sequence[tuple[float, float]] = ((960.0, 540.0),),
        fixation_ms: float = 4000.0,
        saccade_ms: float = 80.0,
        noise_px: float = 12.0,
        dropout_rate: float = 0.0,
        seed: Optional[int] = None,
    ):
        """
        Initializes the DummySource.

        Args:
            clock: Millisecond clock, normally the tracker's scheduler `now`.
            targets: Screen points (px) the simulated user looks at, in order.
            fixation_ms: How long each target is fixated.
            saccade_ms: Travel time between two targets.
            noise_px: Standard deviation of the per-sample jitter.
            dropout_rate: Probability in [0, 1] that a poll returns no signal.
            seed: Seed for reproducible noise.
        """
        if not targets:
            raise ValueError("At least one fixation target is required.")
        if fixation_ms <= 0:
            raise ValueError("Fixation duration must be positive.")
        if not 0.0 <= dropout_rate <= 1.0:
            raise ValueError("Dropout rate must be within [0, 1].")

        self._clock = clock
        self._targets = [(float(x), float(y)) for x, y in targets]
        self._fixation_ms = float(fixation_ms)
        self._saccade_ms = max(0.0, float(saccade_ms))
        self._noise_px = max(0.0, float(noise_px))
        self._dropout_rate = float(dropout_rate)
        self._rng = random.Random(seed)
        self._start_time = clock()

        logger.info(
            f"DummySource initialized with {len(self._targets)} target(s), "
            f"{self._fixation_ms:.0f}ms fixations, {self._noise_px:.1f}px noise."
        )

    def true_position(self, now: float) -> tuple[float, float]:
        """Noise-free gaze position of the simulated user at `now`."""
        period = self._fixation_ms + self._saccade_ms
        t = max(0.0, now - self._start_time)
        index = int(t // period) % len(self._targets)
        phase = t % period

        current = self._targets[index]
        if phase < self._fixation_ms or len(self._targets) == 1:
            return current

        # Linear travel towards the next target during the saccade
        nxt = self._targets[(index + 1) % len(self._targets)]
        alpha = (phase - self._fixation_ms) / self._saccade_ms
        return (
            current[0] + (nxt[0] - current[0]) * alpha,
            current[1] + (nxt[1] - current[1]) * alpha,
        )

    def poll(self) -> Optional[GazeSample]:
        if self._dropout_rate and self._rng.random() < self._dropout_rate:
            return None

        now = self._clock()
        x, y = self.true_position(now)
        if self._noise_px:
            x += self._rng.gauss(0.0, self._noise_px)
            y += self._rng.gauss(0.0, self._noise_px)
        return GazeSample(x=x, y=y, timestamp=now)
