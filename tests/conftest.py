"""Shared fixtures for engine tests."""

import warnings

import numpy as np
import pytest

from telesim.config import DriverTuning, EngineConfig, TrackConfig, default_config
from telesim.errors import DegenerateSegmentWarning
from telesim.models import BrakingZone, Track, TrackPoint
from telesim.simulation import SimulationContext


def points(*coords: tuple[float, float]) -> list[TrackPoint]:
    return [TrackPoint(x=x, y=y) for x, y in coords]


@pytest.fixture
def seed():
    """Fixed seed for reproducibility."""
    return 42


@pytest.fixture
def rng(seed):
    return np.random.default_rng(seed)


@pytest.fixture
def unit_square():
    """Four segments of length 1."""
    return Track([(0, 0), (1, 0), (1, 1), (0, 1), (0, 0)])


@pytest.fixture
def rectangle():
    """Segment lengths 2, 1, 2, 1."""
    return Track([(0, 0), (2, 0), (2, 1), (0, 1), (0, 0)])


@pytest.fixture
def track_with_gap():
    """Segment 1 has zero length."""
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", DegenerateSegmentWarning)
        return Track([(0, 0), (1, 0), (1, 0), (1, 1), (0, 1), (0, 0)])


@pytest.fixture
def quiet_tuning():
    """Driver tuning with every noise source switched off."""
    return DriverTuning(speed_jitter=0.0, rpm_jitter=0.0, brake_target_jitter=0.0)


@pytest.fixture
def corner_track_config():
    """Square with one tight corner (2 gears per tick) at the end of segment 1."""
    return TrackConfig(
        name="Test Square",
        points=points((0, 0), (100, 0), (100, 100), (0, 100), (0, 0)),
        braking_zones=[
            BrakingZone(
                segment_index=1,
                brake_start_fraction=0.9,
                brake_target=100,
                target_gear=3,
                min_corner_speed=80,
                severity=1.0,
            ),
            BrakingZone(
                segment_index=2,
                brake_start_fraction=0.5,
                brake_target=60,
                target_gear=4,
                min_corner_speed=120,
                severity=0.5,
            ),
        ],
    )


@pytest.fixture
def quiet_context(corner_track_config, quiet_tuning, seed):
    """Simulation context without driver noise."""
    config = EngineConfig(track=corner_track_config, driver=quiet_tuning, seed=seed)
    return SimulationContext.from_config(config)


@pytest.fixture
def race_config(seed):
    """Default circuit with a ten-car generated roster."""
    return default_config(vehicle_count=10, seed=seed)
