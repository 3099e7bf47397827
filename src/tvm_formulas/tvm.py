# Requires Python 3.10+
# Uses native type hints: list[x], tuple[x, y], X | None (PEP 585, PEP 604)
from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from .config import round_fractional_periods
from .errors import ComputationError, InvalidPeriods, InvalidRate, Unsatisfiable
from .series import TvmSeries, tvm_series
from .validation import check_periods, check_rate, check_value, growth_factor, warn_rate_magnitude
from .variables import TvmVariable

__version__ = "0.1.0"

logger = logging.getLogger(__name__)


# =============================================================================
# Time Value of Money: a single value compounding over time
# =============================================================================
#
#   fv = pv * (1 + r)^n              fv = pv * e^(r * n)        [continuous]
#   pv = fv / (1 + r)^n              pv = fv / e^(r * n)
#   r  = (fv / pv)^(1 / n) - 1       r  = ln(fv / pv) / n
#   n  = log(fv / pv, base 1 + r)    n  = ln(fv / pv) / r
#
# Present and future value carry the same sign: 100 grows to 110, -100 to -110.
#

def _format_periods(periods: float) -> str:
    return str(int(periods)) if float(periods).is_integer() else f"{periods:.6f}"


def _check_finite_result(value: float, name: str, **inputs: float) -> float:
    if not math.isfinite(value):
        details = ", ".join(f"{k}={v}" for k, v in inputs.items())
        raise ComputationError(f"{name} is not finite ({value}) for {details}")
    return value


# -----------------------------------------------------------------------------
# Scalar solvers (fractional periods allowed internally)
# -----------------------------------------------------------------------------

def _future_value(rate: float, periods: float, present_value: float, continuous_compounding: bool) -> float:
    rate = check_rate(rate, minimum=None if continuous_compounding else -1.0, inclusive=True)
    periods = check_periods(periods, allow_fractional=True)
    present_value = check_value(present_value, "present_value")
    warn_rate_magnitude(rate)
    future_value = present_value * growth_factor(rate, periods, continuous_compounding)
    return _check_finite_result(future_value, "future_value", rate=rate, periods=periods,
                                present_value=present_value)


def _present_value(rate: float, periods: float, future_value: float, continuous_compounding: bool) -> float:
    rate = check_rate(rate, minimum=None if continuous_compounding else -1.0)
    periods = check_periods(periods, allow_fractional=True)
    future_value = check_value(future_value, "future_value")
    warn_rate_magnitude(rate)
    growth = growth_factor(rate, periods, continuous_compounding)
    if growth == 0.0:
        raise ComputationError(
            f"present_value is not finite: growth underflowed to zero for rate={rate}, periods={periods}")
    present_value = future_value / growth
    return _check_finite_result(present_value, "present_value", rate=rate, periods=periods,
                                future_value=future_value)


def _rate(periods: int, present_value: float, future_value: float, continuous_compounding: bool) -> float:
    periods = check_periods(periods)
    present_value = check_value(present_value, "present_value")
    future_value = check_value(future_value, "future_value")

    if present_value == future_value:
        # Any rate works, including when both are zero
        logger.debug("rate: present and future value equal (%s), returning 0.0", present_value)
        return 0.0
    if periods == 0:
        raise InvalidPeriods(
            f"periods is zero but present value {present_value} differs from future value {future_value}")
    if present_value == 0.0:
        raise Unsatisfiable(
            f"present value is zero and future value is {future_value}, no rate can grow zero")
    if future_value == 0.0:
        if continuous_compounding:
            raise Unsatisfiable("future value is zero, unreachable under continuous compounding")
        logger.debug("rate: future value is zero, returning -1.0")
        return -1.0
    if (present_value > 0.0) != (future_value > 0.0):
        raise Unsatisfiable(
            f"present value {present_value} and future value {future_value} have opposite signs")

    if continuous_compounding:
        rate = math.log(future_value / present_value) / periods
    else:
        rate = (future_value / present_value) ** (1.0 / periods) - 1.0
    return _check_finite_result(rate, "rate", periods=periods, present_value=present_value,
                                future_value=future_value)


def _periods(rate: float, present_value: float, future_value: float, continuous_compounding: bool) -> float:
    rate = check_rate(rate, minimum=None if continuous_compounding else -1.0, inclusive=True)
    present_value = check_value(present_value, "present_value")
    future_value = check_value(future_value, "future_value")

    if present_value == future_value:
        logger.debug("periods: present and future value equal (%s), returning 0", present_value)
        return 0.0
    if not continuous_compounding and future_value == 0.0 and rate == -1.0:
        return 1.0

    warn_rate_magnitude(rate)
    if present_value == 0.0:
        raise Unsatisfiable(
            f"present value is zero and future value is {future_value}, no period count can grow zero")
    if future_value == 0.0:
        raise Unsatisfiable(
            f"future value is zero and the rate is {rate}, only a rate of -1.0 reaches zero")
    if (present_value > 0.0) != (future_value > 0.0):
        raise Unsatisfiable(
            f"present value {present_value} and future value {future_value} have opposite signs")
    if not continuous_compounding and rate == -1.0:
        raise Unsatisfiable(f"a rate of -1.0 reaches zero in one period, never {future_value}")
    if abs(future_value) > abs(present_value) and rate <= 0.0:
        raise Unsatisfiable(
            f"future value {future_value} is further from zero than present value {present_value} "
            f"but the rate {rate} is zero or negative")
    if abs(future_value) < abs(present_value) and rate >= 0.0:
        raise Unsatisfiable(
            f"future value {future_value} is closer to zero than present value {present_value} "
            f"but the rate {rate} is zero or positive")

    if continuous_compounding:
        fractional_periods = math.log(future_value / present_value) / rate
    else:
        fractional_periods = math.log(future_value / present_value) / math.log1p(rate)
    _check_finite_result(fractional_periods, "periods", rate=rate, present_value=present_value,
                         future_value=future_value)
    if fractional_periods < 0.0:
        raise ComputationError(f"periods came out negative ({fractional_periods})")
    return fractional_periods


# -----------------------------------------------------------------------------
# Public scalar API
# -----------------------------------------------------------------------------

def future_value(rate: float, periods: int, present_value: float, continuous_compounding: bool = False) -> float:
    """
    Value of present_value after growing at rate for periods.

    FORMULA:
    --------
        fv = pv * (1 + r)^n
        fv = pv * e^(r * n)      [continuous_compounding]

    Args:
        rate: Periodic rate as a fraction, >= -1.0 unless compounding continuously
        periods: Whole number of periods, >= 0
        present_value: Starting value
        continuous_compounding: Compound continuously instead of once per period

    Returns:
        Future value, with the same sign as present_value

    Raises:
        InvalidRate: If rate is non-finite or below -1.0
        InvalidPeriods: If periods is negative or fractional
        InvalidValue: If present_value is non-finite

    Example:
        >>> round(future_value(0.034, 5, 250_000), 4)
        295489.9418
    """
    return _future_value(rate, check_periods(periods), present_value, continuous_compounding)


def present_value(rate: float, periods: int, future_value: float, continuous_compounding: bool = False) -> float:
    """
    Starting value that grows to future_value at rate over periods.

    FORMULA:
    --------
        pv = fv / (1 + r)^n
        pv = fv / e^(r * n)      [continuous_compounding]

    Raises:
        InvalidRate: If rate is non-finite, or -1.0 or below with discrete compounding
    """
    return _present_value(rate, check_periods(periods), future_value, continuous_compounding)


def rate(periods: int, present_value: float, future_value: float, continuous_compounding: bool = False) -> float:
    """
    Periodic rate that grows present_value to future_value over periods.

    FORMULA:
    --------
        r = (fv / pv)^(1 / n) - 1
        r = ln(fv / pv) / n      [continuous_compounding]

    Special cases:
        - pv == fv (including both zero): any rate satisfies, returns 0.0
        - fv == 0, pv != 0: returns -1.0, a total loss in one period

    Raises:
        InvalidPeriods: If periods is zero and the values differ
        Unsatisfiable: If pv is zero and fv is not, or the signs differ

    Example:
        >>> round(rate(365, 10_000, 11_000), 6)
        0.000261
    """
    return _rate(periods, present_value, future_value, continuous_compounding)


def periods(rate: float, present_value: float, future_value: float, continuous_compounding: bool = False) -> float:
    """
    Fractional number of periods for present_value to reach future_value.

    Round up for a whole period count; periods_solution() does that and keeps
    the exact figure in fractional_periods.

    FORMULA:
    --------
        n = log(fv / pv, base 1 + r)
        n = ln(fv / pv) / r      [continuous_compounding]

    Special cases:
        - pv == fv: returns 0.0
        - fv == 0 and rate == -1.0: returns 1.0

    Raises:
        Unsatisfiable: If the values cannot be connected at this rate, e.g. fv
            further from zero than pv with a zero or negative rate

    Example:
        >>> round(periods(0.08, 5_000, 7_000), 2)
        4.37
    """
    return _periods(rate, present_value, future_value, continuous_compounding)


solve_future_value = future_value
solve_present_value = present_value
solve_rate = rate
solve_periods = periods


# =============================================================================
# Solutions
# =============================================================================

def _check_compounding_periods(compounding_periods: int) -> int:
    compounding_periods = check_periods(compounding_periods)
    if compounding_periods == 0:
        raise InvalidPeriods("compounding_periods must be at least 1, got 0")
    return compounding_periods


@dataclass(frozen=True)
class ScenarioList:
    """
    What-if table: one output value per input, e.g. present value by
    compounding frequency. An input of inf marks continuous compounding.
    """
    setup: str
    input_variable: TvmVariable
    output_variable: TvmVariable
    entries: tuple[tuple[float, float], ...]

    def inputs(self) -> np.ndarray:
        return np.array([entry[0] for entry in self.entries], dtype=float)

    def outputs(self) -> np.ndarray:
        return np.array([entry[1] for entry in self.entries], dtype=float)


@dataclass(frozen=True)
class TvmSolution:
    """
    Result of solving for one of rate, periods, present value or future value.

    periods is a whole number. When periods was the unknown, fractional_periods
    holds the exact result and periods is that value rounded up; otherwise the
    two agree.

    formula shows the calculation with the actual numbers; symbolic_formula
    shows it with variable names.
    """
    calculated_field: TvmVariable
    continuous_compounding: bool
    rate: float
    periods: int
    fractional_periods: float
    present_value: float
    future_value: float
    formula: str
    symbolic_formula: str

    def series(self) -> TvmSeries:
        """Period-by-period values. Built on every call."""
        return tvm_series(
            self.calculated_field,
            self.continuous_compounding,
            self.periods,
            self.fractional_periods,
            self.present_value,
            self.future_value,
            [self.rate] * self.periods,
        )

    def _rescaled(self, compounding_periods: int | None) -> tuple[float, float]:
        if compounding_periods is None:
            return self.rate, self.fractional_periods
        compounding_periods = _check_compounding_periods(compounding_periods)
        return (self.rate * self.fractional_periods) / compounding_periods, float(compounding_periods)

    def rate_solution(self, continuous_compounding: bool, compounding_periods: int | None = None) -> TvmSolution:
        """Solve the same problem for the rate, optionally over a different period count."""
        periods = self.periods if compounding_periods is None else compounding_periods
        return rate_solution(periods, self.present_value, self.future_value, continuous_compounding)

    def periods_solution(self, continuous_compounding: bool) -> TvmSolution:
        return periods_solution(self.rate, self.present_value, self.future_value, continuous_compounding)

    def present_value_solution(self, continuous_compounding: bool,
                               compounding_periods: int | None = None) -> TvmSolution:
        """
        Solve the same problem for the present value.

        With compounding_periods, the total rate over the whole horizon
        (rate * fractional_periods) is spread over that many periods.
        """
        rate, periods = self._rescaled(compounding_periods)
        return _present_value_solution(rate, periods, self.future_value, continuous_compounding)

    def future_value_solution(self, continuous_compounding: bool,
                              compounding_periods: int | None = None) -> TvmSolution:
        rate, periods = self._rescaled(compounding_periods)
        return _future_value_solution(rate, periods, self.present_value, continuous_compounding)

    def present_value_vary_compounding_periods(self, compounding_periods: Sequence[int],
                                               include_continuous_compounding: bool = False) -> ScenarioList:
        """
        Present value needed to reach this future value with the same total rate
        compounded at each frequency in compounding_periods.

        Example:
            >>> solution = future_value_solution(0.20, 1, 83.333)
            >>> scenarios = solution.present_value_vary_compounding_periods([1, 4, 12], True)
            >>> [round(float(v), 4) for v in scenarios.outputs()]
            [83.333, 82.2699, 82.0078, 81.8727]
        """
        rate_for_horizon = self.rate * self.fractional_periods
        entries = []
        for count in compounding_periods:
            count = _check_compounding_periods(count)
            value = _present_value(rate_for_horizon / count, count, self.future_value,
                                   self.continuous_compounding)
            entries.append((float(count), value))
        if include_continuous_compounding:
            entries.append((math.inf, _present_value(rate_for_horizon, 1, self.future_value, True)))
        setup = (f"Compare present values with different compounding periods where the rate is "
                 f"{rate_for_horizon:.6f} and the future value is {self.future_value:.4f}.")
        return ScenarioList(setup, TvmVariable.PERIODS, TvmVariable.PRESENT_VALUE, tuple(entries))

    def future_value_vary_compounding_periods(self, compounding_periods: Sequence[int],
                                              include_continuous_compounding: bool = False) -> ScenarioList:
        """
        Future value reached from this present value with the same total rate
        compounded at each frequency in compounding_periods.

        Example:
            >>> solution = future_value_solution(0.05, 4, 100)
            >>> scenarios = solution.future_value_vary_compounding_periods([1, 4, 12, 52, 365], True)
            >>> [round(float(v), 4) for v in scenarios.outputs()]
            [120.0, 121.5506, 121.9391, 122.0934, 122.1336, 122.1403]
        """
        rate_for_horizon = self.rate * self.fractional_periods
        entries = []
        for count in compounding_periods:
            count = _check_compounding_periods(count)
            value = _future_value(rate_for_horizon / count, count, self.present_value,
                                  self.continuous_compounding)
            entries.append((float(count), value))
        if include_continuous_compounding:
            entries.append((math.inf, _future_value(rate_for_horizon, 1, self.present_value, True)))
        setup = (f"Compare future values with different compounding periods where the rate is "
                 f"{rate_for_horizon:.6f} and the present value is {self.present_value:.4f}.")
        return ScenarioList(setup, TvmVariable.PERIODS, TvmVariable.FUTURE_VALUE, tuple(entries))


def _future_value_solution(rate: float, periods: float, present_value: float,
                           continuous_compounding: bool) -> TvmSolution:
    future_value = _future_value(rate, periods, present_value, continuous_compounding)
    n = _format_periods(periods)
    if continuous_compounding:
        formula = f"{future_value:.4f} = {present_value:.4f} * {math.e:.6f}^({rate:.6f} * {n})"
        symbolic_formula = "fv = pv * e^(rt)"
    else:
        formula = f"{future_value:.4f} = {present_value:.4f} * ({1.0 + rate:.6f} ^ {n})"
        symbolic_formula = "fv = pv * (1 + r)^n"
    return TvmSolution(TvmVariable.FUTURE_VALUE, continuous_compounding, float(rate),
                       round_fractional_periods(periods), float(periods), float(present_value),
                       future_value, formula, symbolic_formula)


def _present_value_solution(rate: float, periods: float, future_value: float,
                            continuous_compounding: bool) -> TvmSolution:
    present_value = _present_value(rate, periods, future_value, continuous_compounding)
    n = _format_periods(periods)
    if continuous_compounding:
        formula = f"{present_value:.4f} = {future_value:.4f} / {math.e:.6f}^({rate:.6f} * {n})"
        symbolic_formula = "pv = fv / e^(rt)"
    else:
        formula = f"{present_value:.4f} = {future_value:.4f} / ({1.0 + rate:.6f} ^ {n})"
        symbolic_formula = "pv = fv / (1 + r)^n"
    return TvmSolution(TvmVariable.PRESENT_VALUE, continuous_compounding, float(rate),
                       round_fractional_periods(periods), float(periods), present_value,
                       float(future_value), formula, symbolic_formula)


def future_value_solution(rate: float, periods: int, present_value: float,
                          continuous_compounding: bool = False) -> TvmSolution:
    """
    Solve for the future value and keep the inputs, formula and series.

    Example:
        >>> solution = future_value_solution(0.034, 10, 1000)
        >>> solution.formula
        '1397.0289 = 1000.0000 * (1.034000 ^ 10)'
    """
    return _future_value_solution(rate, check_periods(periods), present_value, continuous_compounding)


def present_value_solution(rate: float, periods: int, future_value: float,
                           continuous_compounding: bool = False) -> TvmSolution:
    return _present_value_solution(rate, check_periods(periods), future_value, continuous_compounding)


def rate_solution(periods: int, present_value: float, future_value: float,
                  continuous_compounding: bool = False) -> TvmSolution:
    """Solve for the periodic rate and keep the inputs, formula and series."""
    rate = _rate(periods, present_value, future_value, continuous_compounding)
    periods = check_periods(periods)
    if present_value == future_value:
        formula = f"{rate:.6f}"
        symbolic_formula = "r = any rate (pv = fv)"
    elif future_value == 0.0:
        formula = f"{rate:.6f}"
        symbolic_formula = "r = -1 (fv = 0)"
    elif continuous_compounding:
        formula = (f"{rate:.6f} = log({future_value:.4f} / {present_value:.4f}, "
                   f"base {math.e:.6f}) / {periods}")
        symbolic_formula = "r = log(fv / pv, base e) / t"
    else:
        formula = f"{rate:.6f} = (({future_value:.4f} / {present_value:.4f}) ^ (1 / {periods})) - 1"
        symbolic_formula = "r = ((fv / pv) ^ (1 / n)) - 1"
    return TvmSolution(TvmVariable.RATE, continuous_compounding, rate, periods, float(periods),
                       float(present_value), float(future_value), formula, symbolic_formula)


def periods_solution(rate: float, present_value: float, future_value: float,
                     continuous_compounding: bool = False) -> TvmSolution:
    """
    Solve for the number of periods.

    periods on the result is rounded up; fractional_periods keeps the exact
    value. The series ends on the true future value.

    Example:
        >>> solution = periods_solution(-0.06, 15_000, 12_000)
        >>> round(solution.fractional_periods, 2), solution.periods
        (3.61, 4)
    """
    fractional_periods = _periods(rate, present_value, future_value, continuous_compounding)
    if present_value == future_value:
        formula = f"{fractional_periods:.2f}"
        symbolic_formula = "n = 0 (pv = fv)"
    elif future_value == 0.0:
        formula = f"{fractional_periods:.2f}"
        symbolic_formula = "n = 1 (r = -1, fv = 0)"
    elif continuous_compounding:
        formula = (f"{fractional_periods:.2f} = log({future_value:.4f} / {present_value:.4f}, "
                   f"base {math.e:.6f}) / {rate:.6f}")
        symbolic_formula = "t = log(fv / pv, base e) / r"
    else:
        formula = (f"{fractional_periods:.2f} = log({future_value:.4f} / {present_value:.4f}, "
                   f"base {1.0 + rate:.6f})")
        symbolic_formula = "n = log(fv / pv, base (1 + r))"
    return TvmSolution(TvmVariable.PERIODS, continuous_compounding, float(rate),
                       round_fractional_periods(fractional_periods), fractional_periods,
                       float(present_value), float(future_value), formula, symbolic_formula)


# =============================================================================
# Varying Rates (one rate per period)
# =============================================================================

def _check_rates(rates: Sequence[float], minimum_inclusive: bool) -> np.ndarray:
    if len(rates) == 0:
        raise InvalidPeriods("rates must contain at least one period")
    checked = np.array([check_rate(r, minimum=-1.0, inclusive=minimum_inclusive) for r in rates], dtype=float)
    for r in checked:
        warn_rate_magnitude(float(r))
    return checked


def future_value_schedule(rates: Sequence[float], present_value: float) -> float:
    """
    Future value when each period has its own rate.

    FORMULA:
    --------
        fv = pv * (1 + r1) * (1 + r2) * ... * (1 + rn)

    Example:
        >>> round(future_value_schedule([0.02, 0.03, 0.04], 100), 4)
        109.2624
    """
    checked = _check_rates(rates, minimum_inclusive=True)
    present_value = check_value(present_value, "present_value")
    with np.errstate(over="ignore", under="ignore"):
        value = present_value * float(np.prod(1.0 + checked))
    return _check_finite_result(value, "future_value", present_value=present_value)


def present_value_schedule(rates: Sequence[float], future_value: float) -> float:
    """
    FORMULA:
    --------
        pv = fv / ((1 + r1) * (1 + r2) * ... * (1 + rn))

    Raises:
        InvalidRate: If any rate is -1.0 or below
    """
    checked = _check_rates(rates, minimum_inclusive=False)
    future_value = check_value(future_value, "future_value")
    with np.errstate(over="ignore", under="ignore"):
        growth = float(np.prod(1.0 + checked))
    if growth == 0.0:
        raise ComputationError(f"present_value is not finite: growth over {len(checked)} rates underflowed to zero")
    value = future_value / growth
    return _check_finite_result(value, "present_value", future_value=future_value)


@dataclass(frozen=True)
class TvmScheduleSolution:
    """Result of a varying-rate calculation; rates[k] applies to period k + 1."""
    calculated_field: TvmVariable
    rates: tuple[float, ...]
    periods: int
    present_value: float
    future_value: float
    formula: str
    symbolic_formula: str

    def series(self) -> TvmSeries:
        return tvm_series(self.calculated_field, False, self.periods, float(self.periods),
                          self.present_value, self.future_value, self.rates)


def _schedule_multipliers(rates: Sequence[float]) -> str:
    return " * ".join(f"{1.0 + r:.6f}" for r in rates)


def future_value_schedule_solution(rates: Sequence[float], present_value: float) -> TvmScheduleSolution:
    future_value = future_value_schedule(rates, present_value)
    formula = f"{future_value:.4f} = {float(present_value):.4f} * {_schedule_multipliers(rates)}"
    return TvmScheduleSolution(TvmVariable.FUTURE_VALUE, tuple(float(r) for r in rates), len(rates),
                               float(present_value), future_value, formula,
                               "fv = pv * (1 + r1) * (1 + r2) ... * (1 + rn)")


def present_value_schedule_solution(rates: Sequence[float], future_value: float) -> TvmScheduleSolution:
    present_value = present_value_schedule(rates, future_value)
    formula = f"{present_value:.4f} = {float(future_value):.4f} / ({_schedule_multipliers(rates)})"
    return TvmScheduleSolution(TvmVariable.PRESENT_VALUE, tuple(float(r) for r in rates), len(rates),
                               present_value, float(future_value), formula,
                               "pv = fv / ((1 + r1) * (1 + r2) ... * (1 + rn))")
