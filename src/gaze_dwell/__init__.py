from .models import GazeSample, Rect, StableGazePoint
from .core import (
    AsyncioScheduler,
    GazeDwellError,
    GazeDwellTracker,
    InvalidArgumentError,
    PredictorError,
    PredictorUnavailableError,
    RegionNotFoundError,
    RegionState,
    VirtualScheduler,
    WatchHandle,
)
from .acquisition import CallableSource, DummySource, NullSource, SampleSource
from .sinks import CallbackSink, GazeEventSink, LoggingSink, ZMQSink
from .configs import AppSettings, TrackerSettings

__all__ = [
    "AppSettings",
    "AsyncioScheduler",
    "CallableSource",
    "CallbackSink",
    "DummySource",
    "GazeDwellError",
    "GazeDwellTracker",
    "GazeEventSink",
    "GazeSample",
    "InvalidArgumentError",
    "LoggingSink",
    "NullSource",
    "PredictorError",
    "PredictorUnavailableError",
    "Rect",
    "RegionNotFoundError",
    "RegionState",
    "SampleSource",
    "StableGazePoint",
    "TrackerSettings",
    "VirtualScheduler",
    "WatchHandle",
    "ZMQSink",
]
