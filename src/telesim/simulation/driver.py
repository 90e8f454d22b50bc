"""Driver models: throttle, brake, gear and RPM from braking-zone proximity."""

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass

from telesim.models.vehicle import (
    DriverModelKind,
    DriverPhase,
    DriverState,
    KinematicState,
    VehicleIdentity,
)
from telesim.simulation.context import SimulationContext
from telesim.simulation.numeric import bounded, clamp, finite_or


@dataclass(frozen=True)
class DriverStep:
    """Driver output for one tick."""

    driver: DriverState
    speed: float


class DriverModel(ABC):
    """Base class for per-vehicle driver strategies."""

    kind: DriverModelKind

    @abstractmethod
    def step(
        self,
        ctx: SimulationContext,
        identity: VehicleIdentity,
        kinematics: KinematicState,
        state: DriverState,
        dt: float,
    ) -> DriverStep:
        """Compute the next driver state and vehicle speed.

        Args:
            ctx: Simulation context (track, config, random source)
            identity: Vehicle being driven
            kinematics: Position and speed at the start of the tick
            state: Driver state at the start of the tick
            dt: Elapsed time in seconds

        Returns:
            New driver state and the speed to move with this tick
        """

    def _throttle_target(self, ctx: SimulationContext, identity: VehicleIdentity, gear: int) -> float:
        ceiling = ctx.config.classes[identity.vehicle_class]
        return ceiling.top_gear if gear >= ctx.config.driver.top_gear_from else ceiling.base

    def _integrate_speed(
        self,
        ctx: SimulationContext,
        identity: VehicleIdentity,
        speed: float,
        throttle: float,
        brake: float,
        dt: float,
        corner_speed: float | None = None,
    ) -> float:
        tuning = ctx.config.driver
        max_speed = ctx.config.gearbox.max_speed * min(1.0, identity.pace_factor)

        accel = (throttle / 100) * tuning.acceleration_rate * identity.pace_factor
        decel = (brake / 100) * tuning.braking_rate
        if corner_speed is not None and speed <= corner_speed:
            # Brakes stop biting once the car is down to the corner speed
            decel = 0.0
        drag = tuning.drag_coefficient * speed * speed
        noise = (ctx.rng.random() - 0.5) * tuning.speed_jitter

        next_speed = speed + (accel - decel - drag) * dt + noise
        return bounded(next_speed, 0.0, max_speed, fallback=speed, label="speed")

    def _target_rpm(self, ctx: SimulationContext, gear: int, speed: float) -> float:
        box = ctx.config.gearbox
        low, high = box.gear_band(gear)
        # Guard against a zero-width gear band
        span = max(1.0, high - low)
        target = box.rpm_floor + (speed - low) / span * (box.rpm_ceiling - box.rpm_floor)
        if not math.isfinite(target) or target < box.rpm_floor:
            return box.rpm_floor
        return target


class DetailedDriverModel(DriverModel):
    """Braking-zone-aware driver with downshifts and a rev-match lock.

    Phases:
        accelerating: brake releases and throttle eases toward the class
            ceiling; RPM follows speed within the current gear.
        managed_braking: past a zone's brake point, the brake rises toward
            the zone target, throttle is lifted and the gearbox steps down
            toward the zone's target gear.
        rev_match_lock: for a few ticks after each downshift RPM is pinned
            at the flare value and throttle/RPM relaxation is suspended.
    """

    kind = DriverModelKind.DETAILED

    def step(
        self,
        ctx: SimulationContext,
        identity: VehicleIdentity,
        kinematics: KinematicState,
        state: DriverState,
        dt: float,
    ) -> DriverStep:
        tuning = ctx.config.driver
        box = ctx.config.gearbox

        prev_throttle = finite_or(state.throttle, 0.0, "throttle")
        prev_brake = finite_or(state.brake, 0.0, "brake")
        prev_rpm = finite_or(state.rpm, box.rpm_floor, "rpm")

        timer = max(0, state.rev_match_timer - 1)
        throttle = prev_throttle
        brake = prev_brake
        gear = int(clamp(state.gear, 1, box.max_gear))
        phase = DriverPhase.ACCELERATING

        if timer == 0:
            brake = max(0.0, prev_brake - tuning.brake_release_step)
            target = self._throttle_target(ctx, identity, gear)
            throttle = clamp(throttle + (target - throttle) * tuning.throttle_smoothing, 0.0, 100.0)

        zone = ctx.track.braking_zone(kinematics.segment_index)
        braking = zone is not None and kinematics.progress > zone.brake_start_fraction
        downshifted = False

        if braking:
            phase = DriverPhase.MANAGED_BRAKING
            target_brake = zone.brake_target + ctx.rng.random() * tuning.brake_target_jitter
            brake = clamp(prev_brake + (target_brake - prev_brake) * tuning.brake_smoothing, 0.0, 100.0)
            throttle = max(0.0, prev_throttle - tuning.throttle_cut)

            if gear > zone.target_gear:
                # Tight corners drop two gears per tick
                step = 2 if zone.severity >= tuning.tight_corner_severity else 1
                new_gear = max(zone.target_gear, gear - step)
                if new_gear != gear:
                    gear = new_gear
                    timer = box.rev_match_ticks
                    downshifted = True

        speed = self._integrate_speed(
            ctx,
            identity,
            kinematics.speed,
            throttle,
            brake,
            dt,
            corner_speed=zone.min_corner_speed if braking else None,
        )

        # Upshifts ignore the brake; only a downshift this tick holds the gear
        if (
            not downshifted
            and gear < box.max_gear
            and speed >= box.speed_thresholds[gear] - box.upshift_margin
            and prev_throttle > box.upshift_throttle
        ):
            gear += 1

        if timer > 0:
            phase = DriverPhase.REV_MATCH_LOCK
            rpm = box.flare_rpm
        else:
            target_rpm = self._target_rpm(ctx, gear, speed)
            rpm = prev_rpm + (target_rpm - prev_rpm) * tuning.rpm_smoothing
            rpm += (ctx.rng.random() - 0.5) * tuning.rpm_jitter
            rpm = bounded(rpm, box.rpm_min_allowed, box.rpm_max_allowed, box.rpm_floor, "rpm")

        return DriverStep(
            driver=DriverState(
                throttle=throttle,
                brake=brake,
                gear=gear,
                rpm=rpm,
                rev_match_timer=timer,
                phase=phase,
            ),
            speed=speed,
        )


class SimplifiedDriverModel(DriverModel):
    """Cheap driver for the rest of the field: brake hard or go flat out."""

    kind = DriverModelKind.SIMPLIFIED

    def step(
        self,
        ctx: SimulationContext,
        identity: VehicleIdentity,
        kinematics: KinematicState,
        state: DriverState,
        dt: float,
    ) -> DriverStep:
        tuning = ctx.config.driver
        box = ctx.config.gearbox

        zone = ctx.track.braking_zone(kinematics.segment_index)
        if (
            zone is not None
            and kinematics.progress >= zone.brake_start_fraction
            and kinematics.speed > zone.min_corner_speed
        ):
            phase = DriverPhase.MANAGED_BRAKING
            brake = zone.severity * 100
            throttle = 0.0
        else:
            phase = DriverPhase.ACCELERATING
            brake = 0.0
            prev_throttle = finite_or(state.throttle, 0.0, "throttle")
            target = self._throttle_target(ctx, identity, state.gear)
            throttle = clamp(
                prev_throttle + (target - prev_throttle) * tuning.throttle_smoothing, 0.0, 100.0
            )

        speed = self._integrate_speed(ctx, identity, kinematics.speed, throttle, brake, dt)
        gear = box.gear_for_speed(speed)
        rpm = bounded(
            self._target_rpm(ctx, gear, speed), box.rpm_floor, box.rpm_ceiling, box.rpm_floor, "rpm"
        )

        return DriverStep(
            driver=DriverState(throttle=throttle, brake=brake, gear=gear, rpm=rpm, phase=phase),
            speed=speed,
        )


DRIVER_MODELS: dict[DriverModelKind, DriverModel] = {
    DriverModelKind.DETAILED: DetailedDriverModel(),
    DriverModelKind.SIMPLIFIED: SimplifiedDriverModel(),
}


def driver_model_for(kind: DriverModelKind) -> DriverModel:
    """Get the driver model strategy for a roster entry."""
    return DRIVER_MODELS[kind]
