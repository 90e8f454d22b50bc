"""Per-engine simulation context passed to every tick function."""

from dataclasses import dataclass

import numpy as np

from telesim.config import EngineConfig
from telesim.models.track import Track


@dataclass
class SimulationContext:
    """Static data and the random source shared by one engine instance."""

    track: Track
    config: EngineConfig
    rng: np.random.Generator

    @classmethod
    def from_config(
        cls,
        config: EngineConfig,
        rng: np.random.Generator | None = None,
    ) -> "SimulationContext":
        """Build the track and random source described by a config.

        Raises:
            InvalidTrackError: If the configured track is unusable
        """
        if rng is None:
            rng = np.random.default_rng(config.seed)
        return cls(track=config.track.build(), config=config, rng=rng)
