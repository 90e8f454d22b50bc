"""Tests for tires, fuel, setup drift, weather and flags."""

import numpy as np
import pytest

from telesim.config import FlagConfig, FuelConfig, SetupConfig, TireConfig, WeatherConfig
from telesim.models import CarSetup, Flag, FlagState, RaceEnvironment, TireState
from telesim.models.vehicle import default_tires
from telesim.simulation import FlagManager
from telesim.simulation.ancillary import drift_setup, update_fuel, update_tire, update_tires


class TestTires:

    def test_throttle_heats_and_wears(self, rng):
        config = TireConfig(temp_noise=0.0)
        tire = TireState(temperature=60.0, pressure=20.0, wear=0.1)

        updated = update_tire(tire, throttle=100.0, brake=0.0, dt=1.0, config=config, rng=rng)

        assert updated.temperature == pytest.approx(64.0)
        assert updated.wear == pytest.approx(0.101)

    def test_braking_cools(self, rng):
        config = TireConfig(temp_noise=0.0)
        tire = TireState(temperature=60.0)

        updated = update_tire(tire, throttle=0.0, brake=100.0, dt=1.0, config=config, rng=rng)

        assert updated.temperature == pytest.approx(58.0)

    def test_long_run_bounds(self, rng):
        """Wear never decreases; temperature and pressure stay in range."""
        config = TireConfig()
        tires = default_tires()
        for _ in range(5000):
            throttle = float(rng.uniform(0, 100))
            brake = float(rng.uniform(0, 100))
            updated = update_tires(tires, throttle, brake, 0.1, config, rng)
            for before, after in zip(tires, updated):
                assert after.wear >= before.wear
                assert 0.0 <= after.wear <= 1.0
                assert config.temp_floor <= after.temperature <= config.temp_ceiling
                assert config.pressure_range[0] <= after.pressure <= config.pressure_range[1]
            tires = updated

        assert len(tires) == 4

    def test_wear_capped(self, rng):
        tire = TireState(wear=0.9999)

        updated = update_tire(tire, 100.0, 100.0, 10.0, TireConfig(), rng)

        assert updated.wear == 1.0


class TestFuel:

    def test_burn_proportional_to_throttle(self):
        config = FuelConfig(burn_rate=0.05)

        assert update_fuel(60.0, 100.0, 1.0, config) == pytest.approx(59.95)
        assert update_fuel(60.0, 50.0, 1.0, config) == pytest.approx(59.975)
        assert update_fuel(60.0, 0.0, 1.0, config) == 60.0

    def test_never_negative(self):
        assert update_fuel(0.01, 100.0, 10.0, FuelConfig()) == 0.0
        assert update_fuel(0.0, 100.0, 1.0, FuelConfig()) == 0.0


class TestSetupDrift:

    def test_no_drift(self, rng):
        setup = CarSetup()

        assert drift_setup(setup, rng, SetupConfig(drift_probability=0.0)) is setup

    def test_drift_moves_one_click(self, rng):
        setup = CarSetup(tc1=5, abs=3, engine_map=2)

        drifted = drift_setup(setup, rng, SetupConfig(drift_probability=1.0))

        assert abs(drifted.tc1 - setup.tc1) == 1
        assert abs(drifted.abs - setup.abs) == 1
        assert abs(drifted.engine_map - setup.engine_map) == 1
        assert drifted.brake_bias == setup.brake_bias

    def test_drift_stays_in_range(self, rng):
        setup = CarSetup()
        config = SetupConfig(drift_probability=1.0)
        for _ in range(500):
            setup = drift_setup(setup, rng, config)
            assert 1 <= setup.tc1 <= 10
            assert 1 <= setup.abs <= 10
            assert 1 <= setup.engine_map <= 5


class TestWeather:

    def test_bounds_and_rain_needs_clouds(self, rng):
        weather = WeatherConfig(cloud_step=0.05, rain_probability=0.2)
        env = RaceEnvironment()
        for _ in range(3000):
            env = env.evolve(rng, weather)

            assert 0.0 <= env.cloud_cover <= 1.0
            assert 0.0 <= env.rain_intensity <= 1.0
            assert weather.air_temp_range[0] <= env.air_temp <= weather.air_temp_range[1]
            assert weather.track_temp_range[0] <= env.track_temp <= weather.track_temp_range[1]
            if env.is_wet():
                assert env.cloud_cover > weather.rain_cloud_threshold

    def test_rain_starts_under_heavy_cloud(self, rng):
        weather = WeatherConfig(rain_probability=1.0)
        env = RaceEnvironment(cloud_cover=0.9)

        env = env.evolve(rng, weather)

        assert env.rain_intensity == pytest.approx(weather.rain_step)

    def test_flags_untouched(self, rng):
        env = RaceEnvironment(flags=FlagState.showing(Flag.YELLOW), flag_countdown=2.0)

        evolved = env.evolve(rng, WeatherConfig())

        assert evolved.flags.yellow
        assert evolved.flag_countdown == 2.0


class TestFlags:

    def test_flag_state(self):
        state = FlagState(yellow=True, red=True)

        assert state.active is Flag.RED
        assert state.any
        assert not FlagState().any

    def test_flag_lifecycle(self):
        """A flag stays out for its duration, then clears."""
        config = FlagConfig(activation_probability=1.0, duration=1.0)
        thrower = FlagManager(config, rng=np.random.default_rng(1))
        env, event = thrower.process_tick(RaceEnvironment(), 0.25, elapsed=10.0)

        assert event is not None
        assert event.elapsed == 10.0
        assert env.flags.active is event.flag
        assert env.flag_countdown == 1.0

        quiet = FlagManager(FlagConfig(activation_probability=0.0), rng=np.random.default_rng(1))
        for _ in range(4):
            env, event = quiet.process_tick(env, 0.25, elapsed=10.0)
            assert event is None
            assert env.flags.any

        assert env.flag_countdown == 0.0
        env, event = quiet.process_tick(env, 0.25, elapsed=11.25)

        assert event is None
        assert not env.flags.any

    def test_weights_select_flag(self):
        config = FlagConfig(activation_probability=1.0, weights={Flag.BLUE: 1.0, Flag.RED: 0.0})
        manager = FlagManager(config, rng=np.random.default_rng(3))

        for _ in range(20):
            env, event = manager.process_tick(RaceEnvironment(), 0.1, elapsed=0.0)
            assert event.flag is Flag.BLUE
            assert env.flags == FlagState(blue=True)

    def test_negative_weights_rejected(self):
        with pytest.raises(ValueError):
            FlagConfig(weights={Flag.YELLOW: -1.0})
