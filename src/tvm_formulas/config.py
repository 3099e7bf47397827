"""
Tolerances, approximate comparison, and runtime settings.

Every floating-point comparison in the package goes through approx_equal()
with an explicit epsilon, so tests and invariant checks share one policy.

Settings are immutable and read from the environment on demand:

    TVM_FORMULAS_CHECK_INVARIANTS   "1", "true", "yes" or "on" to verify every
                                    payment solution and series as it is built
    TVM_FORMULAS_EPSILON            absolute tolerance used by those checks
"""
# Requires Python 3.10+
# Uses native type hints: list[x], tuple[x, y], X | None (PEP 585, PEP 604)
from __future__ import annotations

import math
import os
from dataclasses import dataclass
from typing import Final

import numpy as np

__version__ = "0.1.0"


# =============================================================================
# Tolerances
# =============================================================================

#: Absolute tolerance for money amounts and rates
DEFAULT_EPSILON: Final[float] = 1e-6

#: Relative tolerance, scaled by the larger magnitude of the two operands
#: Keeps comparisons of large balances (1e9+) from failing on float drift
DEFAULT_RELATIVE_TOLERANCE: Final[float] = 1e-9

#: Round-trip symmetry (pv -> fv -> pv, apr -> ear -> apr)
SYMMETRY_EPSILON: Final[float] = 1e-8

#: Fractional periods are rounded to this many decimals before ceil()
#: so that 5.00000000001 periods is reported as 5, not 6
PERIOD_ROUNDING_DECIMALS: Final[int] = 4

#: Rate magnitude above which an advisory warning is emitted
RATE_WARNING_THRESHOLD: Final[float] = 1.0

#: Compounding frequency above which an advisory warning is emitted
COMPOUNDING_WARNING_THRESHOLD: Final[int] = 366

_TRUE_STRINGS: Final[frozenset[str]] = frozenset({"1", "true", "yes", "on"})


# =============================================================================
# Approximate Comparison
# =============================================================================

def approx_equal(
        a: float,
        b: float,
        epsilon: float = DEFAULT_EPSILON,
        rel_tol: float = DEFAULT_RELATIVE_TOLERANCE
) -> bool:
    """
    Tolerance-based equality for floats.

    True when |a - b| <= max(epsilon, rel_tol * max(|a|, |b|)). Two infinities
    of the same sign compare equal; NaN never does.

    Args:
        a: First value
        b: Second value
        epsilon: Absolute tolerance
        rel_tol: Relative tolerance

    Returns:
        True if a and b agree within tolerance

    Example:
        >>> approx_equal(0.1 + 0.2, 0.3)
        True
        >>> approx_equal(1434.71, 1434.72, epsilon=0.005)
        False
    """
    if epsilon < 0 or rel_tol < 0:
        raise ValueError(f"tolerances must be non-negative, got epsilon={epsilon}, rel_tol={rel_tol}")
    if a == b:
        return True
    if not (math.isfinite(a) and math.isfinite(b)):
        return False
    return abs(a - b) <= max(epsilon, rel_tol * max(abs(a), abs(b)))


def arrays_approx_equal(
        a: np.ndarray,
        b: np.ndarray,
        epsilon: float = DEFAULT_EPSILON,
        rel_tol: float = DEFAULT_RELATIVE_TOLERANCE
) -> bool:
    """Element-wise approx_equal() over two arrays of the same shape."""
    a = np.asarray(a, dtype=float)
    b = np.asarray(b, dtype=float)
    if a.shape != b.shape:
        return False
    return bool(np.allclose(a, b, rtol=rel_tol, atol=epsilon))


def is_approx_zero(value: float, epsilon: float = DEFAULT_EPSILON) -> bool:
    return abs(value) <= epsilon


def same_sign_or_zero(a: float, b: float, epsilon: float = DEFAULT_EPSILON) -> bool:
    """True if a and b share a sign, or either one is within epsilon of zero."""
    if is_approx_zero(a, epsilon) or is_approx_zero(b, epsilon):
        return True
    return (a > 0) == (b > 0)


def round_fractional_periods(fractional_periods: float) -> int:
    """Whole period count: ceil of the fractional count after rounding noise away."""
    return int(math.ceil(round(fractional_periods, PERIOD_ROUNDING_DECIMALS)))


# =============================================================================
# Settings
# =============================================================================

@dataclass(frozen=True)
class Settings:
    """
    Runtime settings.

    Attributes:
        check_invariants: Verify payment solutions and series as they are built
        epsilon: Absolute tolerance used by those checks
    """
    check_invariants: bool = False
    epsilon: float = DEFAULT_EPSILON

    def __post_init__(self) -> None:
        if not math.isfinite(self.epsilon) or self.epsilon < 0:
            raise ValueError(f"epsilon must be a non-negative finite number, got {self.epsilon}")


def get_settings() -> Settings:
    """
    Build Settings from the environment.

    Read on every call; nothing is cached, so tests may patch os.environ.

    Raises:
        ValueError: If TVM_FORMULAS_EPSILON is not a valid float
    """
    flag = os.environ.get("TVM_FORMULAS_CHECK_INVARIANTS", "")
    raw_epsilon = os.environ.get("TVM_FORMULAS_EPSILON")
    epsilon = DEFAULT_EPSILON
    if raw_epsilon:
        try:
            epsilon = float(raw_epsilon)
        except ValueError as e:
            raise ValueError(f"TVM_FORMULAS_EPSILON must be a float, got {raw_epsilon!r}") from e
    return Settings(check_invariants=flag.strip().lower() in _TRUE_STRINGS, epsilon=epsilon)
