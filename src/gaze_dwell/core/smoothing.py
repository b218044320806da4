import logging
from collections import deque
from typing import Deque, Final, Optional

import numpy as np

from ..models import GazeSample, StableGazePoint

logger = logging.getLogger(__name__)


class SmoothingBuffer:
    """
    Sliding window over the most recent raw gaze samples.

    The window mean is the smoothed gaze point. The per-axis population
    standard deviation decides whether the gaze has settled: if the larger
    of the two is under `stability_threshold_px` the point is flagged stable.
    """

    MIN_SAMPLES: Final[int] = 3

    def __init__(self, capacity: int = 10, stability_threshold_px: float = 50.0):
        if capacity < self.MIN_SAMPLES:
            raise ValueError(f"Capacity must be at least {self.MIN_SAMPLES}, got {capacity}.")
        if stability_threshold_px <= 0:
            raise ValueError("Stability threshold must be positive.")

        self._samples: Deque[GazeSample] = deque(maxlen=capacity)
        self._threshold = float(stability_threshold_px)

    @property
    def capacity(self) -> int:
        return self._samples.maxlen

    @property
    def stability_threshold_px(self) -> float:
        return self._threshold

    @property
    def samples(self) -> tuple[GazeSample, ...]:
        return tuple(self._samples)

    def __len__(self) -> int:
        return len(self._samples)

    def push(self, sample: GazeSample) -> None:
        # deque(maxlen) drops the oldest entry on overflow
        self._samples.append(sample)

    def clear(self) -> None:
        self._samples.clear()

    def compute_stable(self) -> Optional[StableGazePoint]:
        """
        Returns the window mean flagged with its stability, or None while
        fewer than MIN_SAMPLES samples have been collected.
        """
        if len(self._samples) < self.MIN_SAMPLES:
            return None

        points = np.array([(s.x, s.y) for s in self._samples], dtype=np.float64)
        mean_x, mean_y = points.mean(axis=0)
        std_x, std_y = points.std(axis=0)

        stable = bool(max(std_x, std_y) < self._threshold)
        return StableGazePoint(x=float(mean_x), y=float(mean_y), stable=stable)
