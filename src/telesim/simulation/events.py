"""Race control: timed flag events."""

import logging
from dataclasses import dataclass

import numpy as np

from telesim.config import FlagConfig
from telesim.models.environment import Flag, FlagState, RaceEnvironment

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FlagEvent:
    """A flag being shown."""

    flag: Flag
    elapsed: float
    duration: float
    description: str = ""


class FlagManager:
    """Shows and clears flags on a countdown.

    While a flag window is open the countdown runs down and the flag stays
    out. Once it has expired a new flag may be thrown with a small per-tick
    probability; otherwise every flag is cleared.
    """

    def __init__(self, config: FlagConfig, rng: np.random.Generator | None = None):
        """Initialize the flag manager.

        Args:
            config: Flag model parameters
            rng: Random number generator
        """
        self.config = config
        self.rng = rng if rng is not None else np.random.default_rng()
        self._flags = list(config.weights)
        weights = np.array([config.weights[f] for f in self._flags], dtype=float)
        self._probabilities = weights / weights.sum()

    def process_tick(
        self,
        environment: RaceEnvironment,
        dt: float,
        elapsed: float,
    ) -> tuple[RaceEnvironment, FlagEvent | None]:
        """Advance the flag countdown by one tick.

        Args:
            environment: Environment before the tick
            dt: Elapsed time in seconds
            elapsed: Session time at the end of the tick

        Returns:
            Updated environment and the flag thrown this tick, if any
        """
        if environment.flag_countdown > 0:
            countdown = max(0.0, environment.flag_countdown - dt)
            return environment.model_copy(update={"flag_countdown": countdown}), None

        if self.rng.random() < self.config.activation_probability:
            flag = self._flags[int(self.rng.choice(len(self._flags), p=self._probabilities))]
            event = FlagEvent(
                flag=flag,
                elapsed=elapsed,
                duration=self.config.duration,
                description=f"{flag.value} flag shown",
            )
            logger.debug("%s at %.1fs", event.description, elapsed)
            return (
                environment.model_copy(
                    update={"flags": FlagState.showing(flag), "flag_countdown": self.config.duration}
                ),
                event,
            )

        if environment.flags.any:
            logger.debug("Flags cleared at %.1fs", elapsed)
        return environment.model_copy(update={"flags": FlagState(), "flag_countdown": 0.0}), None
