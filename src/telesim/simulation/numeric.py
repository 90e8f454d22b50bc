"""Guards that keep non-finite and out-of-range values out of snapshots."""

import logging
import math
import warnings

from telesim.errors import NumericInstability

logger = logging.getLogger(__name__)


def clamp(value: float, low: float, high: float) -> float:
    """Clamp a value into [low, high]."""
    return max(low, min(high, value))


def finite_or(value: float, fallback: float, label: str = "value") -> float:
    """Return the value, or the fallback if it is NaN or infinite.

    Substitutions are reported as a NumericInstability warning and never
    raised.
    """
    if math.isfinite(value):
        return value
    message = f"non-finite {label} ({value}) replaced with {fallback}"
    logger.warning(message)
    warnings.warn(message, NumericInstability, stacklevel=2)
    return fallback


def bounded(value: float, low: float, high: float, fallback: float, label: str = "value") -> float:
    """Replace non-finite values, then clamp."""
    return clamp(finite_or(value, fallback, label), low, high)
