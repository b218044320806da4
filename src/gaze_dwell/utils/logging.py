import time
import logging
from typing import Callable

class ThrottledLogger:
    """
    Collapses a burst of identical warnings into one line per interval.

    The emitted line is prefixed with the number of occurrences since the
    previous emitted line.
    """
    def __init__(
        self,
        logger: logging.Logger,
        interval_sec: float = 5.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._logger = logger
        self._interval = interval_sec
        self._clock = clock
        self._last_log_time: float | None = None
        self._counter = 0

    def warning(self, message: str, *args, **kwargs):
        self._log(logging.WARNING, message, *args, **kwargs)

    def error(self, message: str, *args, **kwargs):
        self._log(logging.ERROR, message, *args, **kwargs)

    def reset(self) -> None:
        self._last_log_time = None
        self._counter = 0

    def _log(self, level: int, message: str, *args, **kwargs):
        self._counter += 1
        now = self._clock()

        if self._last_log_time is None or now - self._last_log_time >= self._interval:
            self._logger.log(level, "[%d] " + message, self._counter, *args, **kwargs)
            self._last_log_time = now
            self._counter = 0
