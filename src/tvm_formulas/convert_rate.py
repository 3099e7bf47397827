# Requires Python 3.10+
# Uses native type hints: list[x], tuple[x, y], X | None (PEP 585, PEP 604)
from __future__ import annotations

import logging
import math
import numbers
import warnings
from dataclasses import dataclass
from enum import Enum

from .config import COMPOUNDING_WARNING_THRESHOLD, RATE_WARNING_THRESHOLD
from .errors import ComputationError, InvalidCompoundingPeriods, InvalidRate, TvmWarning
from .validation import growth_factor

__version__ = "0.1.0"

logger = logging.getLogger(__name__)


# =============================================================================
# Rate Conversions: APR, EPR, EAR
# =============================================================================
#
#   APR  annual percentage rate (nominal, ignores intra-year compounding)
#   EPR  effective periodic rate (applied once per compounding period)
#   EAR  effective annual rate (APR after intra-year compounding)
#
#   n    compounding periods per year
#
#   epr = apr / n                  apr = epr * n
#   ear = (1 + epr)^n - 1          epr = (1 + ear)^(1/n) - 1
#

class RateKind(Enum):
    APR = "APR"
    EPR = "EPR"
    EAR = "EAR"


def _check_inputs(rate: float, compounding_periods: int, kind: RateKind) -> tuple[float, int]:
    """
    Validate a conversion input and emit advisory warnings.

    Raises:
        InvalidCompoundingPeriods: If compounding_periods is not a whole number >= 1
        InvalidRate: If rate is non-finite, or an EAR at or below -100%
    """
    if isinstance(compounding_periods, bool) or not isinstance(compounding_periods, numbers.Real):
        raise InvalidCompoundingPeriods(
            f"compounding_periods must be a whole number, got {compounding_periods!r}")
    if not (math.isfinite(compounding_periods) and float(compounding_periods).is_integer()):
        raise InvalidCompoundingPeriods(
            f"compounding_periods must be a whole number, got {compounding_periods}")
    if compounding_periods < 1:
        raise InvalidCompoundingPeriods(
            f"compounding_periods must be at least 1, got {compounding_periods}")
    rate = float(rate)
    if not math.isfinite(rate):
        raise InvalidRate(f"rate must be finite, got {rate}")
    if kind is RateKind.EAR and rate <= -1.0:
        raise InvalidRate(
            f"EAR must be greater than -100% or the root is not real, got {rate}")
    if abs(rate) > RATE_WARNING_THRESHOLD:
        warnings.warn(f"You provided a rate of {rate * 100:.4f}%. Are you sure?", TvmWarning, stacklevel=3)
    if compounding_periods > COMPOUNDING_WARNING_THRESHOLD:
        warnings.warn(
            f"You provided more than {COMPOUNDING_WARNING_THRESHOLD} compounding periods "
            f"in a year ({int(compounding_periods)}). Are you sure?",
            TvmWarning,
            stacklevel=3,
        )
    return rate, int(compounding_periods)


def apr_to_epr(apr: float, compounding_periods: int) -> float:
    """
    Convert an annual percentage rate to the effective periodic rate.

    FORMULA:
    --------
        epr = apr / n

    Example:
        >>> round(apr_to_epr(0.034, 12), 10)
        0.0028333333
    """
    apr, n = _check_inputs(apr, compounding_periods, RateKind.APR)
    return apr / n


def apr_to_ear(apr: float, compounding_periods: int) -> float:
    """
    Convert an annual percentage rate to the effective annual rate.

    FORMULA:
    --------
        ear = (1 + apr/n)^n - 1

    When 1 + apr/n is zero or negative the power has no real value. In that
    case the rate is mirrored: ear = -((1 + |apr|/n)^n - 1), and a TvmWarning
    is emitted. Every other negative APR uses the formula directly, which
    keeps ear_to_apr(apr_to_ear(apr, n), n) == apr.

    Args:
        apr: Annual percentage rate as a fraction (0.034 = 3.4%)
        compounding_periods: Compounding periods per year, at least 1

    Returns:
        Effective annual rate as a fraction

    Example:
        >>> round(apr_to_ear(0.034, 12), 10)
        0.0345348694
    """
    apr, n = _check_inputs(apr, compounding_periods, RateKind.APR)
    base = 1.0 + apr / n
    if base <= 0.0:
        warnings.warn(
            f"APR {apr} with {n} compounding periods loses more than 100% per period; "
            "using the sign-mirrored rate",
            TvmWarning,
            stacklevel=2,
        )
        return -(growth_factor(abs(apr) / n, n) - 1.0)
    return growth_factor(apr / n, n) - 1.0


def ear_to_apr(ear: float, compounding_periods: int) -> float:
    """
    FORMULA:
    --------
        apr = ((1 + ear)^(1/n) - 1) * n
    """
    ear, n = _check_inputs(ear, compounding_periods, RateKind.EAR)
    return ((1.0 + ear) ** (1.0 / n) - 1.0) * n


def ear_to_epr(ear: float, compounding_periods: int) -> float:
    """
    FORMULA:
    --------
        epr = (1 + ear)^(1/n) - 1
    """
    ear, n = _check_inputs(ear, compounding_periods, RateKind.EAR)
    return (1.0 + ear) ** (1.0 / n) - 1.0


def epr_to_ear(epr: float, compounding_periods: int) -> float:
    """
    FORMULA:
    --------
        ear = (1 + epr)^n - 1
    """
    epr, n = _check_inputs(epr, compounding_periods, RateKind.EPR)
    return growth_factor(epr, n) - 1.0


def epr_to_apr(epr: float, compounding_periods: int) -> float:
    epr, n = _check_inputs(epr, compounding_periods, RateKind.EPR)
    return epr * n


def apr_to_ear_continuous(apr: float) -> float:
    """
    Effective annual rate under continuous compounding.

    FORMULA:
    --------
        ear = e^apr - 1
    """
    apr, _ = _check_inputs(apr, 1, RateKind.APR)
    try:
        return math.expm1(apr)
    except OverflowError as e:
        raise ComputationError(f"effective annual rate overflowed for continuous APR {apr}") from e


def ear_to_apr_continuous(ear: float) -> float:
    """
    Nominal rate that, compounded continuously, yields the given EAR.

    FORMULA:
    --------
        apr = ln(1 + ear)
    """
    ear, _ = _check_inputs(ear, 1, RateKind.EAR)
    return math.log1p(ear)


# =============================================================================
# Conversion Records
# =============================================================================

@dataclass(frozen=True)
class RateConversion:
    """
    One rate expressed as APR, EPR and EAR, with the formula behind each.

    The formula for the input rate itself is an empty string. Under continuous
    compounding there is no periodic rate, so epr is nan and compounding_periods
    is None.
    """
    input_kind: RateKind
    input_rate: float
    compounding_periods: int | None
    continuous_compounding: bool
    apr: float
    epr: float
    ear: float
    apr_formula: str
    epr_formula: str
    ear_formula: str

    def in_percent(self) -> dict[str, str]:
        return {
            "apr": f"{self.apr * 100:.4f}%",
            "epr": "NaN" if math.isnan(self.epr) else f"{self.epr * 100:.4f}%",
            "ear": f"{self.ear * 100:.4f}%",
        }


def convert_rate(rate: float, compounding_periods: int, kind: RateKind | str) -> RateConversion:
    """
    Express a rate as APR, EPR and EAR for the given compounding frequency.

    Args:
        rate: The input rate as a fraction
        compounding_periods: Compounding periods per year, at least 1
        kind: Which kind of rate the input is (RateKind or "APR"/"EPR"/"EAR")

    Returns:
        RateConversion with all three rates and their formulas

    Example:
        >>> conversion = convert_rate(0.034, 12, RateKind.APR)
        >>> conversion.epr_formula
        '0.034000 / 12'
    """
    kind = RateKind(kind.upper()) if isinstance(kind, str) else kind
    n = compounding_periods
    if kind is RateKind.APR:
        apr = float(rate)
        epr = apr_to_epr(apr, n)
        ear = apr_to_ear(apr, n)
        apr_formula = ""
        epr_formula = f"{apr:.6f} / {n}"
        ear_formula = f"(1 + ({apr:.6f} / {n}))^{n} - 1"
    elif kind is RateKind.EPR:
        epr = float(rate)
        apr = epr_to_apr(epr, n)
        ear = epr_to_ear(epr, n)
        apr_formula = f"{epr:.6f} * {n}"
        epr_formula = ""
        ear_formula = f"(1 + {epr:.6f})^{n} - 1"
    else:
        ear = float(rate)
        epr = ear_to_epr(ear, n)
        apr = ear_to_apr(ear, n)
        apr_formula = f"{epr:.6f} * {n}"
        epr_formula = f"(1 + {ear:.6f})^(1 / {n}) - 1"
        ear_formula = ""
    logger.debug("converted %s %s at n=%s: apr=%s epr=%s ear=%s", kind.value, rate, n, apr, epr, ear)
    return RateConversion(
        input_kind=kind,
        input_rate=float(rate),
        compounding_periods=int(n),
        continuous_compounding=False,
        apr=apr,
        epr=epr,
        ear=ear,
        apr_formula=apr_formula,
        epr_formula=epr_formula,
        ear_formula=ear_formula,
    )


def convert_rate_continuous(rate: float, kind: RateKind | str) -> RateConversion:
    """
    Express an APR or EAR under continuous compounding.

    Raises:
        ValueError: If kind is EPR, which has no continuous counterpart
    """
    kind = RateKind(kind.upper()) if isinstance(kind, str) else kind
    if kind is RateKind.EPR:
        raise ValueError("an effective periodic rate has no continuous-compounding form")
    if kind is RateKind.APR:
        apr = float(rate)
        ear = apr_to_ear_continuous(apr)
        apr_formula = ""
        ear_formula = f"e^{apr:.6f} - 1"
    else:
        ear = float(rate)
        apr = ear_to_apr_continuous(ear)
        apr_formula = f"ln(1 + {ear:.6f})"
        ear_formula = ""
    return RateConversion(
        input_kind=kind,
        input_rate=float(rate),
        compounding_periods=None,
        continuous_compounding=True,
        apr=apr,
        epr=math.nan,
        ear=ear,
        apr_formula=apr_formula,
        epr_formula="",
        ear_formula=ear_formula,
    )
