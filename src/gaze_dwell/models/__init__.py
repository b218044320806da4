from .gaze import GazeSample, Rect, StableGazePoint

__all__ = ["GazeSample", "Rect", "StableGazePoint"]
