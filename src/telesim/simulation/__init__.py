"""Simulation engine components."""

from .context import SimulationContext
from .driver import DetailedDriverModel, DriverModel, SimplifiedDriverModel, driver_model_for
from .events import FlagEvent, FlagManager
from .kinematics import AdvanceResult, advance_along_track
from .laps import LapTracker
from .race import RaceAggregator, RaceEngine, RaceSnapshot
from .scheduler import TickScheduler

__all__ = [
    "AdvanceResult",
    "DetailedDriverModel",
    "DriverModel",
    "FlagEvent",
    "FlagManager",
    "LapTracker",
    "RaceAggregator",
    "RaceEngine",
    "RaceSnapshot",
    "SimplifiedDriverModel",
    "SimulationContext",
    "TickScheduler",
    "advance_along_track",
    "driver_model_for",
]
