# Requires Python 3.10+
# Uses native type hints: list[x], tuple[x, y], X | None (PEP 585, PEP 604)
from __future__ import annotations

__version__ = "0.1.0"


# =============================================================================
# Error Taxonomy
# =============================================================================

class TvmError(ValueError):
    """
    Base class for every failure raised by tvm_formulas.

    Subclasses ValueError so callers that already catch ValueError around
    numeric routines keep working.
    """


class InvalidRate(TvmError):
    """Rate is non-finite, or at or below -100% where the formula needs (1 + r) > 0."""


class InvalidPeriods(TvmError):
    """Period count is negative, non-integral, or zero where the equation cannot close."""


class InvalidCompoundingPeriods(InvalidRate, InvalidPeriods):
    """Compounding periods per year below one in a rate conversion."""


class InvalidValue(TvmError):
    """Present value, future value, payment or cashflow is non-finite."""


class Unsatisfiable(TvmError):
    """The combination of values has no solution at the given rate sign."""


class NotApplicable(TvmError):
    """The operation does not support this solution shape."""


class ComputationError(TvmError):
    """An intermediate or final result is non-finite despite valid inputs."""


class InvariantViolation(TvmError, AssertionError):
    """A solution and its series disagree on a relationship that must hold."""


# =============================================================================
# Advisory Diagnostics
# =============================================================================

class TvmWarning(UserWarning):
    """
    Non-fatal advisory emitted alongside a valid result.

    Filter with warnings.simplefilter("ignore", TvmWarning), or promote to an
    error with warnings.simplefilter("error", TvmWarning).
    """
