# Requires Python 3.10+
# Uses native type hints: list[x], tuple[x, y], X | None (PEP 585, PEP 604)
from __future__ import annotations

import math
import numbers
import warnings

from .config import RATE_WARNING_THRESHOLD
from .errors import ComputationError, InvalidPeriods, InvalidRate, InvalidValue, TvmWarning

__version__ = "0.1.0"


# =============================================================================
# Input Checks Shared by the Solvers
# =============================================================================

def check_rate(rate: float, minimum: float | None = -1.0, inclusive: bool = False) -> float:
    """
    Validate a periodic rate and return it as a float.

    Args:
        rate: Periodic rate as a fraction (0.005 = 0.5% per period)
        minimum: Lower bound, or None for any finite rate
        inclusive: Whether the lower bound itself is allowed

    Raises:
        InvalidRate: If rate is non-finite or outside the bound
    """
    rate = float(rate)
    if not math.isfinite(rate):
        raise InvalidRate(f"rate must be finite, got {rate}")
    if minimum is not None:
        if inclusive and rate < minimum:
            raise InvalidRate(f"rate must be >= {minimum}, got {rate}")
        if not inclusive and rate <= minimum:
            raise InvalidRate(f"rate must be > {minimum}, got {rate}")
    return rate


def check_value(value: float, name: str) -> float:
    value = float(value)
    if not math.isfinite(value):
        raise InvalidValue(f"{name} must be finite, got {value}")
    return value


def check_periods(periods: int | float, allow_fractional: bool = False) -> int | float:
    """
    Validate a period count.

    Whole-number floats (e.g. 10.0) are accepted as ints. Fractional counts
    are only accepted where allow_fractional is set.

    Raises:
        InvalidPeriods: If periods is negative, non-finite or non-integral
    """
    if isinstance(periods, bool) or not isinstance(periods, numbers.Real):
        raise InvalidPeriods(f"periods must be a number, got {periods!r}")
    if not math.isfinite(periods):
        raise InvalidPeriods(f"periods must be finite, got {periods}")
    if periods < 0:
        raise InvalidPeriods(f"periods must be non-negative, got {periods}")
    if allow_fractional:
        return float(periods)
    if isinstance(periods, numbers.Integral):
        return int(periods)
    if not float(periods).is_integer():
        raise InvalidPeriods(f"periods must be a whole number, got {periods}")
    return int(periods)


def warn_rate_magnitude(rate: float) -> None:
    """Advisory only: rates beyond +/-100% per period are usually a units mistake."""
    if abs(rate) > RATE_WARNING_THRESHOLD:
        warnings.warn(
            f"You provided a rate of {rate * 100:.4f}% per period. Are you sure?",
            TvmWarning,
            stacklevel=3,
        )


# =============================================================================
# Compounding
# =============================================================================

def growth_factor(rate: float, periods: float, continuous_compounding: bool = False) -> float:
    """
    Growth of one unit over periods: (1 + r)^n, or e^(r * n) when continuous.

    Float powers raise OverflowError rather than returning inf, so overflow is
    reported here as a ComputationError.

    Raises:
        ComputationError: If the factor does not fit in a float
    """
    try:
        if continuous_compounding:
            return math.exp(rate * periods)
        return (1.0 + rate) ** periods
    except OverflowError as e:
        raise ComputationError(
            f"growth factor overflowed for rate={rate}, periods={periods}"
            f"{' (continuous)' if continuous_compounding else ''}") from e
