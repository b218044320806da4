from .app import AppSettings, DummySourceSettings, TrackerSettings, ZmqSinkConfig
from .utils import LoggingConfig

__all__ = [
    "AppSettings",
    "DummySourceSettings",
    "LoggingConfig",
    "TrackerSettings",
    "ZmqSinkConfig",
]
