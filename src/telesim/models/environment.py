"""Shared race environment: weather and track flags."""

from enum import Enum
from typing import TYPE_CHECKING

import numpy as np
from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from telesim.config import WeatherConfig


class Flag(str, Enum):
    """Track flags shown to drivers."""

    YELLOW = "yellow"
    BLUE = "blue"
    RED = "red"
    BLACK = "black"


class FlagState(BaseModel):
    """Which flags are currently out."""

    model_config = ConfigDict(frozen=True)

    yellow: bool = False
    blue: bool = False
    red: bool = False
    black: bool = False

    @classmethod
    def showing(cls, flag: Flag) -> "FlagState":
        """Flag state with only the given flag out."""
        return cls(**{flag.value: True})

    @property
    def active(self) -> Flag | None:
        """The flag being shown, most severe first."""
        for flag in (Flag.RED, Flag.BLACK, Flag.YELLOW, Flag.BLUE):
            if getattr(self, flag.value):
                return flag
        return None

    @property
    def any(self) -> bool:
        return self.active is not None


class RaceEnvironment(BaseModel):
    """Conditions shared by every vehicle on track."""

    model_config = ConfigDict(frozen=True)

    air_temp: float = Field(default=22.1, description="Air temperature in Celsius")
    track_temp: float = Field(default=25.8, description="Track surface temperature in Celsius")
    cloud_cover: float = Field(default=0.2, ge=0.0, le=1.0, description="Cloud cover (0-1)")
    rain_intensity: float = Field(
        default=0.0,
        ge=0.0,
        le=1.0,
        description="Rain intensity (0 = none, 1 = heavy)",
    )
    flags: FlagState = Field(default_factory=FlagState, description="Flags currently shown")
    flag_countdown: float = Field(
        default=0.0,
        ge=0.0,
        description="Seconds left on the active flag window",
    )

    def is_wet(self) -> bool:
        return self.rain_intensity > 0.0

    def evolve(self, rng: np.random.Generator, weather: "WeatherConfig") -> "RaceEnvironment":
        """Generate next tick's weather from the current conditions.

        Cloud cover random-walks. Rain can only start once clouds pass the
        threshold; while raining it random-walks, and it stops outright when
        clouds thin out.

        Args:
            rng: Random number generator
            weather: Weather model parameters

        Returns:
            New RaceEnvironment with flags untouched
        """
        clouds = self.cloud_cover + (rng.random() - 0.5) * 2 * weather.cloud_step
        clouds = min(1.0, max(0.0, clouds))

        rain = 0.0
        if clouds > weather.rain_cloud_threshold:
            if self.rain_intensity > 0.0:
                rain = self.rain_intensity + (rng.random() - 0.5) * 2 * weather.rain_step
            elif rng.random() < weather.rain_probability:
                rain = weather.rain_step
            rain = min(1.0, max(0.0, rain))

        air = self.air_temp + (rng.random() - 0.5) * 2 * weather.air_temp_step
        track = self.track_temp + (rng.random() - 0.5) * 2 * weather.track_temp_step

        return self.model_copy(
            update={
                "cloud_cover": clouds,
                "rain_intensity": rain,
                "air_temp": min(weather.air_temp_range[1], max(weather.air_temp_range[0], air)),
                "track_temp": min(
                    weather.track_temp_range[1], max(weather.track_temp_range[0], track)
                ),
            }
        )
