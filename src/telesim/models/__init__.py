"""Data models for the telemetry simulation."""

from .environment import Flag, FlagState, RaceEnvironment
from .track import BrakingZone, ResolvedPosition, Track, TrackPoint, TrackSegment
from .vehicle import (
    CarSetup,
    Corner,
    DriverModelKind,
    DriverPhase,
    DriverState,
    KinematicState,
    LapRecord,
    LapState,
    TireState,
    Vehicle,
    VehicleClass,
    VehicleIdentity,
)

__all__ = [
    "BrakingZone",
    "CarSetup",
    "Corner",
    "DriverModelKind",
    "DriverPhase",
    "DriverState",
    "Flag",
    "FlagState",
    "KinematicState",
    "LapRecord",
    "LapState",
    "RaceEnvironment",
    "ResolvedPosition",
    "TireState",
    "Track",
    "TrackPoint",
    "TrackSegment",
    "Vehicle",
    "VehicleClass",
    "VehicleIdentity",
]
