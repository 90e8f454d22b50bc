"""Engine configuration: pydantic models, defaults and YAML loading."""

from enum import Enum
from pathlib import Path

import numpy as np
import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from telesim.models.environment import Flag, RaceEnvironment
from telesim.models.track import BrakingZone, Track, TrackPoint
from telesim.models.vehicle import DriverModelKind, VehicleClass, VehicleIdentity

# Closed circuit used by the dashboard, map and cockpit views.
# Point 0 is the start/finish line.
DEFAULT_TRACK_POINTS: list[tuple[float, float]] = [
    (100, 190), (180, 190), (190, 170), (190, 60),
    (140, 60), (140, 65), (90, 65), (50, 65),
    (50, 70), (10, 70), (10, 120), (50, 150),
    (100, 190),
]

DEFAULT_BRAKING_ZONES: list[BrakingZone] = [
    BrakingZone(segment_index=1, brake_start_fraction=0.90, brake_target=80,
                target_gear=3, min_corner_speed=150, severity=0.3),
    BrakingZone(segment_index=3, brake_start_fraction=0.85, brake_target=100,
                target_gear=3, min_corner_speed=80, severity=1.0),
    BrakingZone(segment_index=6, brake_start_fraction=0.85, brake_target=95,
                target_gear=3, min_corner_speed=80, severity=1.0),
    BrakingZone(segment_index=9, brake_start_fraction=0.90, brake_target=85,
                target_gear=4, min_corner_speed=140, severity=0.7),
    BrakingZone(segment_index=10, brake_start_fraction=0.50, brake_target=60,
                target_gear=4, min_corner_speed=120, severity=0.5),
]

PILOT_LICENSES = ["FIA Bronze", "FIA Silver", "FIA Gold", "FIA Platinum"]
NATIONALITIES = ["BR", "DE", "US", "FR", "IT"]


class RaceOrder(str, Enum):
    """How the running order is computed."""

    SPEED = "speed"  # instantaneous speed, descending
    DISTANCE = "distance"  # laps completed, then position on the lap


class TrackConfig(BaseModel):
    """Track geometry as it appears in a config file."""

    name: str = Field(default="Le Mans Circuit", description="Track display name")
    points: list[TrackPoint] = Field(
        default_factory=lambda: [TrackPoint(x=x, y=y) for x, y in DEFAULT_TRACK_POINTS],
        description="Ordered polyline points; the first point is start/finish",
    )
    braking_zones: list[BrakingZone] = Field(
        default_factory=lambda: list(DEFAULT_BRAKING_ZONES),
        description="Braking zones, at most one per segment",
    )
    scale: float = Field(default=1.0, gt=0, description="Multiplier on raw segment lengths")
    sector_starts: list[int] | None = Field(
        default=None,
        description="Segment indices where timing sectors begin (default: 3 sectors)",
    )

    def build(self) -> Track:
        """Construct the immutable Track. Raises InvalidTrackError."""
        return Track(
            points=self.points,
            braking_zones=self.braking_zones,
            scale=self.scale,
            sector_starts=self.sector_starts,
            name=self.name,
        )


class GearboxConfig(BaseModel):
    """Gear-speed thresholds and engine speed range."""

    speed_thresholds: list[float] = Field(
        default_factory=lambda: [0, 90, 140, 200, 250, 295, 335],
        description="Maximum speed (kph) per gear, index 0 is standstill",
    )
    max_speed: float = Field(default=340.0, gt=0, description="Top speed in kph")
    rpm_floor: float = Field(default=1000.0, ge=0, description="Idle RPM")
    rpm_ceiling: float = Field(default=9000.0, gt=0, description="Redline RPM")
    rpm_overrun_margin: float = Field(
        default=500.0,
        ge=0,
        description="How far RPM may stray outside [floor, ceiling]",
    )
    rev_match_flare_offset: float = Field(
        default=500.0,
        ge=0,
        description="RPM above the redline while the rev-match lock is held",
    )
    rev_match_ticks: int = Field(default=2, ge=1, description="Rev-match lock length in ticks")
    upshift_margin: float = Field(
        default=10.0,
        ge=0,
        description="Upshift this many kph before the gear's threshold",
    )
    upshift_throttle: float = Field(
        default=50.0,
        ge=0,
        le=100,
        description="Minimum throttle for an upshift",
    )

    @field_validator("speed_thresholds")
    @classmethod
    def _thresholds_increase(cls, value: list[float]) -> list[float]:
        if len(value) < 2:
            raise ValueError("need at least one gear")
        if value[0] != 0:
            raise ValueError("first threshold must be 0")
        if any(b <= a for a, b in zip(value, value[1:])):
            raise ValueError("thresholds must be strictly increasing")
        return value

    @model_validator(mode="after")
    def _check_ranges(self) -> "GearboxConfig":
        if self.rpm_ceiling <= self.rpm_floor:
            raise ValueError("rpm_ceiling must be above rpm_floor")
        if self.rev_match_flare_offset > self.rpm_overrun_margin:
            raise ValueError("rev_match_flare_offset cannot exceed rpm_overrun_margin")
        return self

    @property
    def max_gear(self) -> int:
        return len(self.speed_thresholds) - 1

    @property
    def rpm_min_allowed(self) -> float:
        return self.rpm_floor - self.rpm_overrun_margin

    @property
    def rpm_max_allowed(self) -> float:
        return self.rpm_ceiling + self.rpm_overrun_margin

    @property
    def flare_rpm(self) -> float:
        return self.rpm_ceiling + self.rev_match_flare_offset

    def gear_band(self, gear: int) -> tuple[float, float]:
        """Speed range (low, high) covered by a gear."""
        return self.speed_thresholds[gear - 1], self.speed_thresholds[gear]

    def gear_for_speed(self, speed: float) -> int:
        """Lowest gear whose threshold covers the speed."""
        for gear in range(1, self.max_gear + 1):
            if speed <= self.speed_thresholds[gear]:
                return gear
        return self.max_gear


class ThrottleCeiling(BaseModel):
    """Throttle the driver settles at, per class."""

    base: float = Field(default=85.0, ge=0, le=100, description="Throttle below top gears")
    top_gear: float = Field(default=98.0, ge=0, le=100, description="Throttle in top gears")


def _default_class_ceilings() -> dict[VehicleClass, ThrottleCeiling]:
    return {
        VehicleClass.GTP: ThrottleCeiling(base=85.0, top_gear=98.0),
        VehicleClass.LMP2: ThrottleCeiling(base=83.0, top_gear=96.0),
        VehicleClass.GT3: ThrottleCeiling(base=80.0, top_gear=94.0),
    }


class DriverTuning(BaseModel):
    """Driver model gains and vehicle longitudinal dynamics."""

    throttle_smoothing: float = Field(default=0.15, gt=0, le=1)
    brake_release_step: float = Field(default=15.0, ge=0, description="Brake release per tick")
    brake_smoothing: float = Field(default=0.3, gt=0, le=1)
    brake_target_jitter: float = Field(default=5.0, ge=0, description="Random extra brake")
    throttle_cut: float = Field(default=50.0, ge=0, le=100, description="Throttle lift per tick")
    top_gear_from: int = Field(default=5, ge=1, description="Gear where top-gear throttle applies")
    tight_corner_severity: float = Field(
        default=0.9,
        ge=0,
        le=1,
        description="Zones at or above this severity downshift two gears per tick",
    )
    rpm_smoothing: float = Field(default=0.35, gt=0, le=1)
    rpm_jitter: float = Field(default=100.0, ge=0, description="Peak-to-peak RPM noise")
    acceleration_rate: float = Field(default=120.0, ge=0, description="kph/s at full throttle")
    braking_rate: float = Field(default=180.0, ge=0, description="kph/s at full brake")
    drag_coefficient: float = Field(default=5e-4, ge=0, description="Drag per kph^2 per second")
    speed_jitter: float = Field(default=1.0, ge=0, description="Peak-to-peak speed noise")


class TireConfig(BaseModel):
    """Tire temperature, pressure and wear model."""

    heat_rate: float = Field(default=4.0, ge=0, description="C/s at full throttle")
    cool_rate: float = Field(default=2.0, ge=0, description="C/s at full brake")
    temp_noise: float = Field(default=0.1, ge=0, description="Peak-to-peak temperature noise")
    temp_floor: float = Field(default=20.0, description="Minimum tire temperature")
    temp_ceiling: float = Field(default=150.0, description="Maximum tire temperature")
    wear_throttle_rate: float = Field(default=1e-3, ge=0, description="Wear/s at full throttle")
    wear_brake_rate: float = Field(default=5e-4, ge=0, description="Wear/s at full brake")
    pressure_noise: float = Field(default=0.01, ge=0, description="Peak-to-peak pressure drift")
    pressure_range: tuple[float, float] = Field(default=(15.0, 35.0))


class FuelConfig(BaseModel):
    """Fuel load and consumption."""

    capacity: float = Field(default=60.0, gt=0, description="Starting fuel in liters")
    burn_rate: float = Field(default=0.05, ge=0, description="Liters/s at full throttle")


class WeatherConfig(BaseModel):
    """Weather random-walk parameters."""

    cloud_step: float = Field(default=0.01, ge=0, le=1)
    rain_cloud_threshold: float = Field(default=0.7, ge=0, le=1)
    rain_probability: float = Field(default=0.01, ge=0, le=1, description="Per tick")
    rain_step: float = Field(default=0.01, ge=0, le=1)
    air_temp_step: float = Field(default=0.005, ge=0)
    track_temp_step: float = Field(default=0.01, ge=0)
    air_temp_range: tuple[float, float] = Field(default=(-10.0, 50.0))
    track_temp_range: tuple[float, float] = Field(default=(-10.0, 70.0))


class FlagConfig(BaseModel):
    """Timed flag event model."""

    activation_probability: float = Field(default=0.005, ge=0, le=1, description="Per tick")
    duration: float = Field(default=5.0, gt=0, description="Seconds a flag stays out")
    weights: dict[Flag, float] = Field(
        default_factory=lambda: {
            Flag.YELLOW: 0.5,
            Flag.BLUE: 0.3,
            Flag.RED: 0.1,
            Flag.BLACK: 0.1,
        }
    )

    @field_validator("weights")
    @classmethod
    def _weights_positive(cls, value: dict[Flag, float]) -> dict[Flag, float]:
        if not value or any(w < 0 for w in value.values()) or sum(value.values()) <= 0:
            raise ValueError("flag weights must be non-negative with a positive sum")
        return value


class SetupConfig(BaseModel):
    """Random adjustments of driver aids."""

    drift_probability: float = Field(default=0.002, ge=0, le=1, description="Per tick")


class EngineConfig(BaseModel):
    """Everything needed to build a RaceEngine."""

    tick_period_ms: int = Field(default=100, ge=10, le=1000, description="Scheduler period")
    max_vehicles: int = Field(default=30, ge=1, description="Roster size limit")
    seed: int | None = Field(default=None, description="Seed for the engine's random source")
    total_laps: int = Field(default=25, gt=0, description="Race length shown to consumers")
    movement_scale: float = Field(
        default=60.0,
        gt=0,
        description="Divides speed x dt to get track distance",
    )
    min_lap_time: float = Field(
        default=10.0,
        ge=0,
        description="Crossings before this lap time are not counted",
    )
    grid_spacing: float = Field(
        default=0.01,
        ge=0,
        lt=1,
        description="Progress gap between grid slots on segment 0",
    )
    order: RaceOrder = Field(default=RaceOrder.SPEED, description="Running order metric")

    track: TrackConfig = Field(default_factory=TrackConfig)
    gearbox: GearboxConfig = Field(default_factory=GearboxConfig)
    driver: DriverTuning = Field(default_factory=DriverTuning)
    classes: dict[VehicleClass, ThrottleCeiling] = Field(default_factory=_default_class_ceilings)
    tires: TireConfig = Field(default_factory=TireConfig)
    fuel: FuelConfig = Field(default_factory=FuelConfig)
    weather: WeatherConfig = Field(default_factory=WeatherConfig)
    flags: FlagConfig = Field(default_factory=FlagConfig)
    setup: SetupConfig = Field(default_factory=SetupConfig)
    environment: RaceEnvironment = Field(
        default_factory=RaceEnvironment,
        description="Initial race environment",
    )
    roster: list[VehicleIdentity] = Field(default_factory=list)

    @property
    def tick_period(self) -> float:
        """Tick period in seconds."""
        return self.tick_period_ms / 1000.0

    @model_validator(mode="after")
    def _check_roster(self) -> "EngineConfig":
        ids = [entry.id for entry in self.roster]
        if len(ids) != len(set(ids)):
            raise ValueError("roster vehicle ids must be unique")
        missing = {entry.vehicle_class for entry in self.roster} - set(self.classes)
        if missing:
            raise ValueError(f"no throttle ceiling for classes: {sorted(c.value for c in missing)}")
        if self.gearbox.max_gear < max((z.target_gear for z in self.track.braking_zones), default=1):
            raise ValueError("braking zone target gear exceeds the gearbox")
        return self


def generate_roster(
    count: int,
    rng: np.random.Generator,
    detailed_count: int = 1,
) -> list[VehicleIdentity]:
    """Draw a random roster.

    Args:
        count: Number of vehicles
        rng: Random number generator
        detailed_count: How many entries (from the front) use the detailed driver model

    Returns:
        Vehicle identities numbered from 1
    """
    classes = list(VehicleClass)
    roster = []
    for i in range(count):
        detailed = i < detailed_count
        roster.append(VehicleIdentity(
            id=f"car{i + 1}",
            number=i + 1,
            license=PILOT_LICENSES[int(rng.integers(len(PILOT_LICENSES)))],
            nationality=NATIONALITIES[int(rng.integers(len(NATIONALITIES)))],
            vehicle_class=VehicleClass.GTP if detailed else classes[int(rng.integers(len(classes)))],
            driver_model=DriverModelKind.DETAILED if detailed else DriverModelKind.SIMPLIFIED,
            pace_factor=1.0 if detailed else float(rng.uniform(0.94, 1.0)),
        ))
    return roster


def default_config(
    vehicle_count: int = 10,
    seed: int | None = None,
    detailed_count: int = 1,
) -> EngineConfig:
    """Default circuit with a generated roster."""
    rng = np.random.default_rng(seed)
    return EngineConfig(
        seed=seed,
        roster=generate_roster(vehicle_count, rng, detailed_count=detailed_count),
    )


def load_config(path: str | Path) -> EngineConfig:
    """Load an engine configuration from a YAML file.

    Args:
        path: YAML file with EngineConfig fields at the top level

    Returns:
        Validated EngineConfig

    Raises:
        FileNotFoundError: If the file does not exist
        pydantic.ValidationError: If any value is missing or out of range
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, encoding="utf-8") as fh:
        data = yaml.safe_load(fh) or {}

    return EngineConfig.model_validate(data)
