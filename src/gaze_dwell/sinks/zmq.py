import logging
import struct
import time
from typing import Callable, Final, Optional

import zmq

from .base import GazeEventSink
from ..models import StableGazePoint
from ..utils.logging import ThrottledLogger

logger = logging.getLogger(__name__)


def _epoch_ms() -> int:
    return time.time_ns() // 1_000_000


class ZMQSink(GazeEventSink):
    """
    Real-time broadcast of tracker events over ZMQ PUB/SUB, for indicator
    rendering in another process.

    Wire Format (4 byte topic, then big-endian payload):
    - b'gaze': Epoch TS int64, X float64, Y float64, Stable bool  (25 bytes)
    - b'dwel': Epoch TS int64, Elapsed ms float64, then UTF-8 region id
    - b'lost': Epoch TS int64
    - b'back': Epoch TS int64
    """

    # ! = Network (Big Endian)
    # q = int64 (timestamp)
    # d = float64 (x, y, elapsed)
    # ? = bool  (stable)
    _POINT: Final[struct.Struct] = struct.Struct("!qdd?")
    _DWELL: Final[struct.Struct] = struct.Struct("!qd")
    _STAMP: Final[struct.Struct] = struct.Struct("!q")

    TOPIC_GAZE: Final[bytes] = b"gaze"
    TOPIC_DWELL: Final[bytes] = b"dwel"
    TOPIC_LOST: Final[bytes] = b"lost"
    TOPIC_BACK: Final[bytes] = b"back"

    def __init__(
        self,
        host: str = "tcp://*:5556",
        send_hwm: int = 100,
        clock: Callable[[], int] = _epoch_ms,
    ):
        """
        Args:
            host: The ZMQ binding address.
            send_hwm: Messages buffered per slow subscriber before dropping.
            clock: Epoch milliseconds used to stamp every message.
        """
        self.host = host
        self._clock = clock
        self._send_hwm = send_hwm
        # Opened in start() so the sink survives a tracker stop/start cycle
        self._ctx: Optional[zmq.Context] = None
        self._sock: Optional[zmq.Socket] = None
        self._drop_logger = ThrottledLogger(logger, interval_sec=5.0)

    # --- Encoding ---

    @classmethod
    def encode_point(cls, timestamp_ms: int, point: StableGazePoint) -> bytes:
        return cls.TOPIC_GAZE + cls._POINT.pack(timestamp_ms, point.x, point.y, point.stable)

    @classmethod
    def encode_dwell(cls, timestamp_ms: int, region_id: str, elapsed_ms: float) -> bytes:
        return cls.TOPIC_DWELL + cls._DWELL.pack(timestamp_ms, elapsed_ms) + region_id.encode("utf-8")

    @classmethod
    def encode_signal(cls, timestamp_ms: int, lost: bool) -> bytes:
        topic = cls.TOPIC_LOST if lost else cls.TOPIC_BACK
        return topic + cls._STAMP.pack(timestamp_ms)

    @classmethod
    def decode(cls, message: bytes) -> tuple:
        """Inverse of the encoders; returns (topic, *fields). Used by subscribers."""
        topic, payload = message[:4], message[4:]
        if topic == cls.TOPIC_GAZE:
            return (topic, *cls._POINT.unpack(payload))
        if topic == cls.TOPIC_DWELL:
            size = cls._DWELL.size
            ts, elapsed = cls._DWELL.unpack(payload[:size])
            return (topic, ts, elapsed, payload[size:].decode("utf-8"))
        if topic in (cls.TOPIC_LOST, cls.TOPIC_BACK):
            return (topic, *cls._STAMP.unpack(payload))
        raise ValueError(f"Unknown topic {topic!r}")

    # --- Lifecycle ---

    @property
    def is_open(self) -> bool:
        return self._sock is not None

    def start(self) -> None:
        """Open a fresh context and bind the publisher socket."""
        if self._sock is not None:
            return
        self._ctx = zmq.Context()
        self._sock = self._ctx.socket(zmq.PUB)
        self._sock.setsockopt(zmq.SNDHWM, self._send_hwm)
        try:
            self._sock.bind(self.host)
            logger.info(f"ZMQSink bound to {self.host}")
        except zmq.ZMQError as e:
            logger.error(f"Failed to bind ZMQSink to {self.host}: {e}")
            self.close()
            raise

    def close(self) -> None:
        """Shut down the ZMQ context. start() may be called again afterwards."""
        if self._sock is None:
            return
        logger.info("Closing ZMQSink...")
        # Close immediately, don't wait for unsent messages
        self._sock.close(linger=0)
        self._ctx.term()
        self._sock = None
        self._ctx = None

    # --- Events ---

    def on_stable_point(self, point: StableGazePoint) -> None:
        self._send(self.encode_point(self._clock(), point))

    def on_region_triggered(self, region_id: str, elapsed_ms: float) -> None:
        self._send(self.encode_dwell(self._clock(), region_id, elapsed_ms))

    def on_signal_lost(self) -> None:
        self._send(self.encode_signal(self._clock(), lost=True))

    def on_signal_reacquired(self) -> None:
        self._send(self.encode_signal(self._clock(), lost=False))

    def _send(self, message: bytes) -> None:
        """Non-blocking publish; a full buffer drops the message rather than stalling the tick."""
        if self._sock is None:
            self._drop_logger.warning("ZMQSink is not started, dropping events.")
            return
        try:
            self._sock.send(message, flags=zmq.NOBLOCK)
        except zmq.Again:
            self._drop_logger.warning("ZMQ send buffer full, dropping events.")
        except zmq.ZMQError as e:
            self._drop_logger.error("ZMQ broadcast failed: %s", e)
