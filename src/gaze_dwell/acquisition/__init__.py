from .base import SampleSource
from .adapter import CallableSource
from .dummy import DummySource
from .null import NullSource

__all__ = ["SampleSource", "CallableSource", "DummySource", "NullSource"]
