from .errors import (
    GazeDwellError,
    InvalidArgumentError,
    PredictorError,
    PredictorUnavailableError,
    RegionNotFoundError,
)
from .scheduler import AsyncioScheduler, Scheduler, TimerHandle, VirtualScheduler
from .smoothing import SmoothingBuffer
from .regions import BoundsProvider, RegionRegistry, RegionState, WatchedRegion, WatchHandle
from .poller import Poller
from .tracker import GazeDwellTracker

__all__ = [
    "AsyncioScheduler",
    "BoundsProvider",
    "GazeDwellError",
    "GazeDwellTracker",
    "InvalidArgumentError",
    "Poller",
    "PredictorError",
    "PredictorUnavailableError",
    "RegionNotFoundError",
    "RegionRegistry",
    "RegionState",
    "Scheduler",
    "SmoothingBuffer",
    "TimerHandle",
    "VirtualScheduler",
    "WatchHandle",
    "WatchedRegion",
]
