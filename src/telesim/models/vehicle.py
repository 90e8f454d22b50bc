"""Vehicle identity and per-vehicle simulation state."""

from dataclasses import dataclass, field
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class VehicleClass(str, Enum):
    """Racing classes sharing the circuit."""

    GTP = "GTP"
    LMP2 = "LMP2"
    GT3 = "GT3"


class DriverModelKind(str, Enum):
    """Driver model used to control a vehicle."""

    DETAILED = "detailed"
    SIMPLIFIED = "simplified"


class DriverPhase(str, Enum):
    """Driver state machine phase."""

    ACCELERATING = "accelerating"
    MANAGED_BRAKING = "managed_braking"
    REV_MATCH_LOCK = "rev_match_lock"


class Corner(str, Enum):
    """Tire position on the car."""

    FL = "FL"
    FR = "FR"
    RL = "RL"
    RR = "RR"


class VehicleIdentity(BaseModel):
    """Who is driving what. Fixed for the whole session."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Unique vehicle identifier (e.g., 'car1')")
    number: int = Field(..., ge=0, description="Race number")
    license: str = Field(default="FIA Silver", description="Pilot license grade")
    nationality: str = Field(default="BR", description="Nationality code")
    vehicle_class: VehicleClass = Field(default=VehicleClass.GTP, description="Racing class")
    driver_model: DriverModelKind = Field(
        default=DriverModelKind.SIMPLIFIED,
        description="Driver model strategy controlling this vehicle",
    )
    pace_factor: float = Field(
        default=1.0,
        gt=0.0,
        le=1.2,
        description="Multiplier on acceleration and top speed",
    )


@dataclass(frozen=True)
class KinematicState:
    """Position on the track and speed (kph)."""

    segment_index: int = 0
    progress: float = 0.0
    speed: float = 0.0
    x: float = 0.0
    y: float = 0.0
    heading: float = 0.0


@dataclass(frozen=True)
class DriverState:
    """Pedals, gearbox and engine speed."""

    throttle: float = 0.0
    brake: float = 0.0
    gear: int = 1
    rpm: float = 1000.0
    rev_match_timer: int = 0
    phase: DriverPhase = DriverPhase.ACCELERATING

    @property
    def is_braking(self) -> bool:
        return self.phase is DriverPhase.MANAGED_BRAKING or self.brake > 50.0


@dataclass(frozen=True)
class TireState:
    """One tire: temperature (C), pressure (psi) and wear (0 new, 1 gone)."""

    temperature: float = 20.0
    pressure: float = 20.0
    wear: float = 0.01


@dataclass(frozen=True)
class CarSetup:
    """Driver-adjustable car settings shown in the cockpit view."""

    brake_bias: float = 54.5
    tc1: int = 5
    tc_cut: int = 4
    abs: int = 3
    engine_map: int = 1


@dataclass(frozen=True)
class LapRecord:
    """A completed lap."""

    lap_time: float
    sectors: tuple[float, ...] = ()


@dataclass(frozen=True)
class LapState:
    """Lap timing for one vehicle."""

    lap_time: float = 0.0
    sector_elapsed: float = 0.0
    current_sector: int = 0
    sector_times: tuple[float, ...] = ()
    history: tuple[LapRecord, ...] = ()
    best_lap_time: float | None = None
    laps_completed: int = 0
    fuel_at_lap_start: float = 0.0
    fuel_avg_per_lap: float = 0.0

    @property
    def last_lap(self) -> LapRecord | None:
        return self.history[-1] if self.history else None


def default_tires() -> tuple[TireState, ...]:
    """Fresh tires ordered FL, FR, RL, RR."""
    return (
        TireState(temperature=20.3, pressure=20.1),
        TireState(temperature=20.3, pressure=20.1),
        TireState(temperature=20.1, pressure=20.0),
        TireState(temperature=20.1, pressure=20.0),
    )


@dataclass(frozen=True)
class Vehicle:
    """Everything the engine knows about one car."""

    identity: VehicleIdentity
    kinematics: KinematicState = field(default_factory=KinematicState)
    driver: DriverState = field(default_factory=DriverState)
    tires: tuple[TireState, ...] = field(default_factory=default_tires)
    fuel: float = 60.0
    setup: CarSetup = field(default_factory=CarSetup)
    laps: LapState = field(default_factory=LapState)
    position: int = 0

    @property
    def id(self) -> str:
        return self.identity.id

    @property
    def speed(self) -> float:
        return self.kinematics.speed

    def tire(self, corner: Corner) -> TireState:
        """Get the tire at a corner of the car."""
        return self.tires[list(Corner).index(corner)]
