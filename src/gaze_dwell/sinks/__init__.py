from .base import GazeEventSink
from .callback import CallbackSink
from .log import LoggingSink
from .zmq import ZMQSink

__all__ = ["GazeEventSink", "CallbackSink", "LoggingSink", "ZMQSink"]
