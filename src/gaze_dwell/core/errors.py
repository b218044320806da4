class GazeDwellError(Exception):
    """Base class for all errors raised by gaze_dwell."""


class PredictorUnavailableError(GazeDwellError):
    """The gaze predictor capability is missing. Raised when starting a tracker."""


class PredictorError(GazeDwellError):
    """A transient failure while polling the gaze predictor for one sample."""


class InvalidArgumentError(GazeDwellError, ValueError):
    """A region registration was rejected (missing collaborator, bad duration, duplicate id)."""


class RegionNotFoundError(GazeDwellError, KeyError):
    """No region is registered under the requested id."""

    def __init__(self, region_id: str):
        super().__init__(region_id)
        self.region_id = region_id

    def __str__(self) -> str:
        return f"Region '{self.region_id}' is not being watched."
