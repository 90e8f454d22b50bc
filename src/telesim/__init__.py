"""Live race telemetry simulation engine."""

from .config import EngineConfig, default_config, load_config
from .errors import (
    ConfigError,
    DegenerateSegmentWarning,
    InvalidTrackError,
    NumericInstability,
    TelesimError,
)
from .simulation import RaceEngine, RaceSnapshot, TickScheduler

__version__ = "0.1.0"

__all__ = [
    "ConfigError",
    "DegenerateSegmentWarning",
    "EngineConfig",
    "InvalidTrackError",
    "NumericInstability",
    "RaceEngine",
    "RaceSnapshot",
    "TelesimError",
    "TickScheduler",
    "default_config",
    "load_config",
]
