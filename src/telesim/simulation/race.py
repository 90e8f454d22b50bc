"""Race engine: advances every vehicle one tick and orders the field."""

import logging
import math
from dataclasses import dataclass, replace
from typing import Iterable

import numpy as np

from telesim.config import EngineConfig, RaceOrder
from telesim.errors import ConfigError
from telesim.models.environment import RaceEnvironment
from telesim.models.track import Track
from telesim.models.vehicle import (
    DriverState,
    KinematicState,
    LapRecord,
    LapState,
    Vehicle,
    VehicleIdentity,
)
from telesim.simulation.ancillary import drift_setup, update_fuel, update_tires
from telesim.simulation.context import SimulationContext
from telesim.simulation.driver import driver_model_for
from telesim.simulation.events import FlagEvent, FlagManager
from telesim.simulation.kinematics import advance_along_track
from telesim.simulation.laps import LapTracker

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RaceSnapshot:
    """Complete, read-only race state published after each tick."""

    tick: int
    elapsed: float
    vehicles: tuple[Vehicle, ...]
    environment: RaceEnvironment
    total_laps: int
    events: tuple[FlagEvent, ...] = ()

    def vehicle(self, vehicle_id: str) -> Vehicle:
        """Look up a vehicle by id."""
        for vehicle in self.vehicles:
            if vehicle.id == vehicle_id:
                return vehicle
        raise KeyError(vehicle_id)

    @property
    def leader(self) -> Vehicle | None:
        return self.vehicles[0] if self.vehicles else None

    @property
    def fastest_lap(self) -> tuple[str, float] | None:
        """(vehicle id, lap time) of the best lap so far."""
        best: tuple[str, float] | None = None
        for vehicle in self.vehicles:
            lap = vehicle.laps.best_lap_time
            if lap is not None and (best is None or lap < best[1]):
                best = (vehicle.id, lap)
        return best


class RaceAggregator:
    """Computes the running order of the field.

    The default order is by instantaneous speed, which is what every live
    view has always shown. It is not a true race position; use
    RaceOrder.DISTANCE for laps-then-track-position ordering.
    """

    def __init__(self, order: RaceOrder = RaceOrder.SPEED):
        self.order = order

    def _key(self, vehicle: Vehicle) -> tuple:
        if self.order is RaceOrder.DISTANCE:
            return (
                -vehicle.laps.laps_completed,
                -vehicle.kinematics.segment_index,
                -vehicle.kinematics.progress,
                vehicle.identity.number,
            )
        return (-vehicle.kinematics.speed, vehicle.identity.number)

    def rank(self, vehicles: Iterable[Vehicle]) -> tuple[Vehicle, ...]:
        """Sort vehicles and assign 1-based positions."""
        ordered = sorted(vehicles, key=self._key)
        return tuple(replace(v, position=pos) for pos, v in enumerate(ordered, 1))


class RaceEngine:
    """Time-stepped telemetry simulation for a field of vehicles.

    The engine holds only static data (track, config, random source). All
    race state lives in RaceSnapshot objects; advance() builds a new one
    from the previous one and never mutates its input.
    """

    def __init__(self, config: EngineConfig, rng: np.random.Generator | None = None):
        """Initialize the engine.

        Args:
            config: Engine configuration including track and roster
            rng: Random number generator (seeded from config.seed if None)

        Raises:
            InvalidTrackError: If the track definition is unusable
            ConfigError: If the roster does not fit the engine limits
        """
        if len(config.roster) > config.max_vehicles:
            raise ConfigError(
                f"Roster has {len(config.roster)} vehicles, limit is {config.max_vehicles}"
            )
        if len(config.roster) > 1 and (len(config.roster) - 1) * config.grid_spacing >= 1.0:
            raise ConfigError("Grid does not fit on the first segment; reduce grid_spacing")

        self.config = config
        self.context = SimulationContext.from_config(config, rng)
        self.lap_tracker = LapTracker(self.track, min_lap_time=config.min_lap_time)
        self.flag_manager = FlagManager(config.flags, rng=self.context.rng)
        self.aggregator = RaceAggregator(config.order)
        self._roster_order = {entry.id: i for i, entry in enumerate(config.roster)}

        logger.info(
            "Race engine ready: %s, %d vehicles, tick %d ms",
            self.track,
            len(config.roster),
            config.tick_period_ms,
        )

    @property
    def track(self) -> Track:
        return self.context.track

    @property
    def rng(self) -> np.random.Generator:
        return self.context.rng

    def initial_snapshot(self) -> RaceSnapshot:
        """Line the roster up on the grid at the start of segment 0."""
        vehicles = [
            self._grid_vehicle(entry, slot) for slot, entry in enumerate(self.config.roster)
        ]
        return RaceSnapshot(
            tick=0,
            elapsed=0.0,
            vehicles=self.aggregator.rank(vehicles),
            environment=self.config.environment,
            total_laps=self.config.total_laps,
        )

    def _grid_vehicle(self, identity: VehicleIdentity, slot: int) -> Vehicle:
        progress = slot * self.config.grid_spacing
        position = self.track.resolve(0, progress)
        fuel = self.config.fuel.capacity
        return Vehicle(
            identity=identity,
            kinematics=KinematicState(
                segment_index=0,
                progress=progress,
                speed=0.0,
                x=position.x,
                y=position.y,
                heading=position.heading,
            ),
            driver=DriverState(rpm=self.config.gearbox.rpm_floor),
            fuel=fuel,
            laps=LapState(fuel_at_lap_start=fuel),
        )

    def advance(self, snapshot: RaceSnapshot, dt: float) -> RaceSnapshot:
        """Advance the whole race by one tick.

        The environment evolves once, then every vehicle is advanced from its
        state in the previous snapshot. The new snapshot is only returned
        once the whole field has been updated.

        Args:
            snapshot: Race state after the previous tick
            dt: Elapsed time in seconds

        Returns:
            New snapshot (the input is left untouched)
        """
        if not math.isfinite(dt) or dt <= 0:
            logger.warning("Ignoring tick with dt=%r", dt)
            return replace(snapshot, tick=snapshot.tick + 1, events=())

        elapsed = snapshot.elapsed + dt
        environment = snapshot.environment.evolve(self.rng, self.config.weather)
        environment, flag_event = self.flag_manager.process_tick(environment, dt, elapsed)

        # Fixed roster order keeps random draws reproducible
        previous = sorted(
            snapshot.vehicles, key=lambda v: self._roster_order.get(v.id, len(self._roster_order))
        )
        vehicles = [self._advance_vehicle_safely(vehicle, dt) for vehicle in previous]

        return RaceSnapshot(
            tick=snapshot.tick + 1,
            elapsed=elapsed,
            vehicles=self.aggregator.rank(vehicles),
            environment=environment,
            total_laps=snapshot.total_laps,
            events=(flag_event,) if flag_event is not None else (),
        )

    def run(self, snapshot: RaceSnapshot, dts: Iterable[float]) -> RaceSnapshot:
        """Apply a sequence of ticks and return the final snapshot."""
        for dt in dts:
            snapshot = self.advance(snapshot, dt)
        return snapshot

    def _advance_vehicle_safely(self, vehicle: Vehicle, dt: float) -> Vehicle:
        try:
            updated, lap = self._advance_vehicle(vehicle, dt)
        except (ArithmeticError, ValueError):
            logger.exception("Vehicle %s held in place after a failed update", vehicle.id)
            return vehicle

        if not _is_finite(updated):
            logger.warning("Vehicle %s held in place after a non-finite update", vehicle.id)
            return vehicle

        if lap is not None:
            logger.info(
                "%s (#%d) completed lap %d in %.3fs",
                vehicle.id,
                vehicle.identity.number,
                updated.laps.laps_completed,
                lap.lap_time,
            )
        return updated

    def _advance_vehicle(self, vehicle: Vehicle, dt: float) -> tuple[Vehicle, LapRecord | None]:
        ctx = self.context
        config = self.config

        model = driver_model_for(vehicle.identity.driver_model)
        step = model.step(ctx, vehicle.identity, vehicle.kinematics, vehicle.driver, dt)

        movement = advance_along_track(
            self.track,
            vehicle.kinematics.segment_index,
            vehicle.kinematics.progress,
            step.speed,
            dt,
            config.movement_scale,
        )
        kinematics = KinematicState(
            segment_index=movement.segment_index,
            progress=movement.progress,
            speed=step.speed,
            x=movement.position.x,
            y=movement.position.y,
            heading=movement.position.heading,
        )

        throttle = step.driver.throttle
        brake = step.driver.brake
        fuel = update_fuel(vehicle.fuel, throttle, dt, config.fuel)
        tires = update_tires(vehicle.tires, throttle, brake, dt, config.tires, ctx.rng)
        setup = drift_setup(vehicle.setup, ctx.rng, config.setup)
        laps, lap = self.lap_tracker.update(vehicle.laps, movement, dt, fuel)

        return (
            replace(
                vehicle,
                kinematics=kinematics,
                driver=step.driver,
                tires=tires,
                fuel=fuel,
                setup=setup,
                laps=laps,
            ),
            lap,
        )


def _is_finite(vehicle: Vehicle) -> bool:
    k = vehicle.kinematics
    d = vehicle.driver
    values = [k.progress, k.speed, k.x, k.y, k.heading, d.throttle, d.brake, d.rpm, vehicle.fuel]
    values.extend(v for t in vehicle.tires for v in (t.temperature, t.pressure, t.wear))
    return all(math.isfinite(v) for v in values)
