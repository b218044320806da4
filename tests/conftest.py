from collections import deque
from typing import Optional

import pytest

from gaze_dwell.acquisition import SampleSource
from gaze_dwell.configs import TrackerSettings
from gaze_dwell.core import GazeDwellTracker, VirtualScheduler
from gaze_dwell.models import GazeSample, StableGazePoint
from gaze_dwell.sinks import GazeEventSink


class ScriptedSource(SampleSource):
    """
    Test predictor: returns whatever the test last told it to look at.

    `current` is an (x, y) pair, None (no face) or an exception instance
    (raised on poll). `queue` holds one-off values consumed before `current`.
    """

    def __init__(self, scheduler: VirtualScheduler, available: bool = True):
        self._scheduler = scheduler
        self._available = available
        self.current = None
        self.queue = deque()
        self.polls = 0
        self.closed = False

    @property
    def is_available(self) -> bool:
        return self._available

    def look_at(self, x: float, y: float) -> None:
        self.current = (x, y)

    def lose_face(self) -> None:
        self.current = None

    def fail_with(self, exc: BaseException) -> None:
        self.current = exc

    def poll(self) -> Optional[GazeSample]:
        self.polls += 1
        item = self.queue.popleft() if self.queue else self.current
        if isinstance(item, BaseException):
            raise item
        if item is None:
            return None
        x, y = item
        return GazeSample(x=x, y=y, timestamp=self._scheduler.now())

    def close(self) -> None:
        self.closed = True


class RecordingSink(GazeEventSink):
    def __init__(self):
        self.events = []
        self.started = False
        self.closed = False

    def start(self) -> None:
        self.started = True

    def close(self) -> None:
        self.closed = True

    def on_stable_point(self, point: StableGazePoint) -> None:
        self.events.append(("point", point))

    def on_region_triggered(self, region_id: str, elapsed_ms: float) -> None:
        self.events.append(("triggered", region_id, elapsed_ms))

    def on_signal_lost(self) -> None:
        self.events.append(("lost",))

    def on_signal_reacquired(self) -> None:
        self.events.append(("reacquired",))

    def of_kind(self, kind: str) -> list:
        return [e for e in self.events if e[0] == kind]


class Recorder:
    """Dwell callback that remembers every call and when it happened."""

    def __init__(self, scheduler: VirtualScheduler):
        self._scheduler = scheduler
        self.calls = []

    def __call__(self, region_id: str, elapsed_ms: float) -> None:
        self.calls.append((region_id, elapsed_ms, self._scheduler.now()))


@pytest.fixture
def scheduler() -> VirtualScheduler:
    return VirtualScheduler()


@pytest.fixture
def source(scheduler) -> ScriptedSource:
    return ScriptedSource(scheduler)


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def recorder(scheduler) -> Recorder:
    return Recorder(scheduler)


@pytest.fixture
def settings() -> TrackerSettings:
    return TrackerSettings()


@pytest.fixture
def tracker(source, scheduler, settings, sink) -> GazeDwellTracker:
    t = GazeDwellTracker(source, scheduler, settings=settings, sinks=[sink])
    yield t
    t.stop()
