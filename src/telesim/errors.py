"""Exception and warning types raised by the simulation engine."""


class TelesimError(Exception):
    """Base class for engine errors."""


class InvalidTrackError(TelesimError):
    """Track definition cannot be simulated (too few points, bad zones, ...)."""


class ConfigError(TelesimError):
    """Engine configuration is inconsistent (e.g. roster too large)."""


class DegenerateSegmentWarning(UserWarning):
    """A track segment has zero length and is passed through without distance."""


class NumericInstability(RuntimeWarning):
    """A non-finite intermediate value was replaced before reaching a snapshot."""
