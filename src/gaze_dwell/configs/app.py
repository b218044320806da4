import logging
from importlib.metadata import PackageNotFoundError, version
from typing import ClassVar, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import BaseModel, Field, PositiveFloat, PositiveInt, confloat, model_validator

from .utils import LoggingConfig

logger = logging.getLogger(__name__)

try:
    _VERSION = version("gaze-dwell")
except PackageNotFoundError:
    _VERSION = "0.0.0"


class TrackerSettings(BaseModel):
    """Tuning of the smoothing window, the poll loop and the dwell defaults."""
    buffer_capacity: PositiveInt = Field(10, description="Number of recent samples averaged into one gaze point.")
    stability_threshold_px: PositiveFloat = Field(50.0, description="Max per-axis std-dev (px) for a point to count as stable.")
    poll_interval_ms: PositiveFloat = Field(100.0, description="Time between two poll ticks.")
    max_consecutive_failures: PositiveInt = Field(5, description="Failed polls in a row before all dwells are reset.")
    default_dwell_ms: PositiveFloat = Field(6000.0, description="Dwell duration used when watch() is given none.")

    @model_validator(mode='after')
    def validate_buffer_capacity(self) -> "TrackerSettings":
        if self.buffer_capacity < 3:
            raise ValueError('Buffer must hold at least 3 samples.')
        return self


class DummySourceSettings(BaseModel):
    """Simulated predictor used when no real one is wired in."""
    enabled: bool = True
    targets: list[tuple[float, float]] = Field(
        default=[(480.0, 270.0), (1440.0, 270.0), (960.0, 810.0)],
        description="Screen points (px) the simulated user fixates in turn."
    )
    fixation_ms: PositiveFloat = 4000.0
    saccade_ms: confloat(ge=0) = 80.0
    noise_px: confloat(ge=0) = 12.0
    dropout_rate: confloat(ge=0, le=1) = 0.02
    seed: Optional[int] = None

class ZmqSinkConfig(BaseModel):
    enabled: bool = False
    host: str = "tcp://*:5556"
    send_hwm: PositiveInt = 100

class AppSettings(BaseSettings):
    """
    Main application settings, loaded from environment variables and defaults.
    """
    tracker: TrackerSettings = Field(default_factory=TrackerSettings)
    source: DummySourceSettings = Field(default_factory=DummySourceSettings)

    # Sinks
    zmq: ZmqSinkConfig = Field(default_factory=ZmqSinkConfig)

    # Logging
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    __version__: ClassVar[str] = _VERSION

    model_config = SettingsConfigDict(
        env_prefix="DWELL__",
        env_file=".env",
        env_nested_delimiter='__',
        case_sensitive=False
    )
