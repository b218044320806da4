from dataclasses import dataclass
from typing import Any, Mapping, Sequence


@dataclass(slots=True, frozen=True)
class GazeSample:
    """
    A single raw gaze estimate as produced by a sample source.

    Coordinates are in screen pixels; the timestamp is in milliseconds on
    the scheduler's clock.
    """
    x: float
    y: float
    timestamp: float


@dataclass(slots=True, frozen=True)
class StableGazePoint:
    """
    The smoothed gaze position for one poll tick.

    `stable` is False when the sample window is too scattered; the point is
    still the window mean and may be used for display, but not for dwell.
    """
    x: float
    y: float
    stable: bool


@dataclass(slots=True, frozen=True)
class Rect:
    """Screen rectangle in pixels. Containment is half-open: [left, right) x [top, bottom)."""
    left: float
    top: float
    right: float
    bottom: float

    @classmethod
    def from_xywh(cls, x: float, y: float, width: float, height: float) -> "Rect":
        return cls(x, y, x + width, y + height)

    @classmethod
    def coerce(cls, value: Any) -> "Rect":
        """
        Normalises what a bounds provider returns into a Rect.

        Accepts a Rect, a (left, top, right, bottom) sequence, or a mapping /
        object exposing left, top, right and bottom.
        """
        if isinstance(value, Rect):
            return value
        if isinstance(value, Mapping):
            return cls(value["left"], value["top"], value["right"], value["bottom"])
        if isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
            if len(value) != 4:
                raise ValueError(f"Expected 4 values (left, top, right, bottom), got {len(value)}.")
            left, top, right, bottom = value
            return cls(left, top, right, bottom)
        try:
            return cls(value.left, value.top, value.right, value.bottom)
        except AttributeError:
            raise TypeError(f"Cannot interpret {value!r} as a rectangle.") from None

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.bottom - self.top

    def get_rect(self) -> "Rect":
        """A fixed rectangle is its own bounds provider."""
        return self

    def contains(self, x: float, y: float) -> bool:
        return self.left <= x < self.right and self.top <= y < self.bottom
