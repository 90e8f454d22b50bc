"""Tire, fuel and car-setup models updated every tick."""

from dataclasses import replace

import numpy as np

from telesim.config import FuelConfig, SetupConfig, TireConfig
from telesim.models.vehicle import CarSetup, TireState
from telesim.simulation.numeric import bounded, clamp


def update_tire(
    tire: TireState,
    throttle: float,
    brake: float,
    dt: float,
    config: TireConfig,
    rng: np.random.Generator,
) -> TireState:
    """Heat, wear and pressure drift for one tire.

    Throttle heats the tire and brake usage cools it. Wear grows with both
    and never goes down.

    Args:
        tire: Tire before the tick
        throttle: Throttle in percent
        brake: Brake in percent
        dt: Elapsed time in seconds
        config: Tire model parameters
        rng: Random number generator

    Returns:
        Updated tire
    """
    heat = (throttle / 100) * config.heat_rate - (brake / 100) * config.cool_rate
    temperature = tire.temperature + heat * dt + (rng.random() - 0.5) * config.temp_noise
    temperature = bounded(
        temperature, config.temp_floor, config.temp_ceiling, tire.temperature, "tire temperature"
    )

    wear_rate = (throttle / 100) * config.wear_throttle_rate + (brake / 100) * config.wear_brake_rate
    wear = min(1.0, tire.wear + max(0.0, wear_rate * dt))
    wear = max(tire.wear, bounded(wear, 0.0, 1.0, tire.wear, "tire wear"))

    low, high = config.pressure_range
    pressure = tire.pressure + (rng.random() - 0.5) * config.pressure_noise
    pressure = bounded(pressure, low, high, tire.pressure, "tire pressure")

    return TireState(temperature=temperature, pressure=pressure, wear=wear)


def update_tires(
    tires: tuple[TireState, ...],
    throttle: float,
    brake: float,
    dt: float,
    config: TireConfig,
    rng: np.random.Generator,
) -> tuple[TireState, ...]:
    """Update all four tires (FL, FR, RL, RR)."""
    return tuple(update_tire(t, throttle, brake, dt, config, rng) for t in tires)


def update_fuel(fuel: float, throttle: float, dt: float, config: FuelConfig) -> float:
    """Burn fuel in proportion to throttle and time. Never below zero."""
    burned = max(0.0, (throttle / 100) * config.burn_rate * dt)
    return bounded(fuel - burned, 0.0, fuel, 0.0, "fuel")


def drift_setup(setup: CarSetup, rng: np.random.Generator, config: SetupConfig) -> CarSetup:
    """Occasionally nudge traction control, ABS and engine map by one click."""
    if rng.random() >= config.drift_probability:
        return setup

    def nudge() -> int:
        return 1 if rng.random() > 0.5 else -1

    return replace(
        setup,
        tc1=int(clamp(setup.tc1 + nudge(), 1, 10)),
        abs=int(clamp(setup.abs + nudge(), 1, 10)),
        engine_map=int(clamp(setup.engine_map + nudge(), 1, 5)),
    )
