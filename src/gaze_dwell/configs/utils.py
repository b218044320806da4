import logging

from pydantic import BaseModel, field_validator


def _check_level(v: str) -> str:
    v = v.upper()
    if not isinstance(logging.getLevelName(v), int):
        raise ValueError(f'Unknown log level: {v}')
    return v


class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    # Per-logger overrides, e.g. {"gaze_dwell.sinks.log": "DEBUG"} to see every tick
    levels: dict[str, str] = {}

    @field_validator('level')
    @classmethod
    def validate_level(cls, v: str) -> str:
        return _check_level(v)

    @field_validator('levels')
    @classmethod
    def validate_levels(cls, v: dict[str, str]) -> dict[str, str]:
        return {name: _check_level(level) for name, level in v.items()}

    def apply_overrides(self) -> None:
        for name, level in self.levels.items():
            logging.getLogger(name).setLevel(level)
