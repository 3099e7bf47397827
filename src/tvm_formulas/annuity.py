# Requires Python 3.10+
# Uses native type hints: list[x], tuple[x, y], X | None (PEP 585, PEP 604)
from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from .cashflows import CashflowSolution
from .errors import ComputationError, InvalidPeriods, InvalidValue
from .validation import check_periods, check_rate, check_value, growth_factor, warn_rate_magnitude
from .variables import CashflowVariable

__version__ = "0.1.0"

logger = logging.getLogger(__name__)


# =============================================================================
# Annuities: a constant cashflow c paid every period
# =============================================================================
#
# Accounting sign convention: the value of an annuity has the opposite sign of
# its cashflow. Receiving 500 per period is worth a negative present value from
# the payer's side, and vice versa.
#
#   pv     = -c * (1 - (1 + r)^-n) / r
#   fv     = -c * ((1 + r)^n - 1) / r
#   pv_due = pv * (1 + r)
#   fv_due = fv * (1 + r)
#   r == 0: pv = fv = -c * n
#

def _check_annuity_inputs(rate: float, periods: int, annuity: float) -> tuple[float, int, float]:
    rate = check_rate(rate)
    periods = check_periods(periods)
    annuity = check_value(annuity, "annuity")
    warn_rate_magnitude(rate)
    return rate, periods, annuity


def _timing_multiplier(rate: float, due_at_beginning: bool) -> float:
    return 1.0 + rate if due_at_beginning else 1.0


def present_value_annuity(rate: float, periods: int, annuity: float, due_at_beginning: bool = False) -> float:
    """
    Present value of a constant cashflow paid every period.

    FORMULA:
    --------
        pv = -c * (1 - (1 + r)^-n) / r
        pv = -c * (1 - (1 + r)^-n) / r * (1 + r)      [due_at_beginning]
        pv = -c * n                                   [r == 0]

    Args:
        rate: Periodic rate as a fraction, > -1.0
        periods: Number of payments, >= 0
        annuity: Cashflow per period
        due_at_beginning: Payments at the start of each period (annuity due)

    Returns:
        Present value, opposite in sign to annuity

    Raises:
        InvalidRate: If rate is non-finite or -1.0 or below
        InvalidPeriods: If periods is negative or fractional
        InvalidValue: If annuity is non-finite

    Example:
        >>> round(present_value_annuity(0.034, 1, 500), 5)
        -483.55899
    """
    rate, periods, annuity = _check_annuity_inputs(rate, periods, annuity)
    if rate == 0.0:
        return -annuity * periods
    value = -annuity * (1.0 - growth_factor(rate, -periods)) / rate * _timing_multiplier(rate, due_at_beginning)
    if not math.isfinite(value):
        raise ComputationError(f"present value of annuity is not finite for rate={rate}, periods={periods}")
    return value


def future_value_annuity(rate: float, periods: int, annuity: float, due_at_beginning: bool = False) -> float:
    """
    Future value of a constant cashflow paid every period.

    FORMULA:
    --------
        fv = -c * ((1 + r)^n - 1) / r
        fv = -c * ((1 + r)^n - 1) / r * (1 + r)       [due_at_beginning]
        fv = -c * n                                   [r == 0]

    Example:
        >>> round(future_value_annuity(0.034, 10, 500), 4)
        -5838.6602
    """
    rate, periods, annuity = _check_annuity_inputs(rate, periods, annuity)
    if rate == 0.0:
        return -annuity * periods
    value = -annuity * (growth_factor(rate, periods) - 1.0) / rate * _timing_multiplier(rate, due_at_beginning)
    if not math.isfinite(value):
        raise ComputationError(f"future value of annuity is not finite for rate={rate}, periods={periods}")
    return value


def present_value_annuity_solution(rate: float, periods: int, annuity: float,
                                   due_at_beginning: bool = False) -> CashflowSolution:
    """
    Solve for the present value of an annuity and keep the formula.

    The annuity is the only cashflow, so the solution's future_value is zero.
    """
    value = present_value_annuity(rate, periods, annuity, due_at_beginning)
    rate, periods, annuity = float(rate), int(periods), float(annuity)
    if rate == 0.0:
        formula = f"{value:.4f} = -({annuity:.4f}) * {periods}"
        symbolic_formula = "pv = -c * n"
    else:
        formula = f"{value:.4f} = -({annuity:.4f}) * (1 - ({1.0 + rate:.6f} ^ -{periods})) / {rate:.6f}"
        symbolic_formula = "pv = -c * (1 - (1 + r)^-n) / r"
        if due_at_beginning:
            formula += f" * {1.0 + rate:.6f}"
            symbolic_formula += " * (1 + r)"
    return CashflowSolution(CashflowVariable.PRESENT_VALUE_ANNUITY, rate, periods, value, 0.0,
                            due_at_beginning, annuity, formula, symbolic_formula)


def future_value_annuity_solution(rate: float, periods: int, annuity: float,
                                  due_at_beginning: bool = False) -> CashflowSolution:
    """
    Solve for the future value of an annuity and keep the formula.

    The annuity is the only cashflow, so the solution's present_value is zero.

    Example:
        >>> solution = future_value_annuity_solution(0.034, 10, 500)
        >>> solution.symbolic_formula
        'fv = -c * ((1 + r)^n - 1) / r'
    """
    value = future_value_annuity(rate, periods, annuity, due_at_beginning)
    rate, periods, annuity = float(rate), int(periods), float(annuity)
    if rate == 0.0:
        formula = f"{value:.4f} = -({annuity:.4f}) * {periods}"
        symbolic_formula = "fv = -c * n"
    else:
        formula = f"{value:.4f} = -({annuity:.4f}) * (({1.0 + rate:.6f} ^ {periods}) - 1) / {rate:.6f}"
        symbolic_formula = "fv = -c * ((1 + r)^n - 1) / r"
        if due_at_beginning:
            formula += f" * {1.0 + rate:.6f}"
            symbolic_formula += " * (1 + r)"
    return CashflowSolution(CashflowVariable.FUTURE_VALUE_ANNUITY, rate, periods, 0.0, value,
                            due_at_beginning, annuity, formula, symbolic_formula)


def present_value_annuity_due(rate: float, periods: int, annuity: float) -> float:
    return present_value_annuity(rate, periods, annuity, due_at_beginning=True)


def future_value_annuity_due(rate: float, periods: int, annuity: float) -> float:
    return future_value_annuity(rate, periods, annuity, due_at_beginning=True)


# =============================================================================
# Net Present Value
# =============================================================================

def net_present_value(rate: float, periods: int, initial_investment: float, cashflow: float) -> float:
    """
    Initial investment plus the discounted value of a constant cashflow.

    FORMULA:
    --------
        npv = c0 + c * (1 - (1 + r)^-n) / r

    The discounted cashflows carry the cashflow's own sign, so an outlay
    (c0 < 0) followed by receipts (c > 0) nets them against each other.

    Example:
        >>> net_present_value(0.034, 10, -1000, 500) > 0
        True
    """
    initial_investment = check_value(initial_investment, "initial_investment")
    return initial_investment - present_value_annuity(rate, periods, cashflow)


@dataclass(frozen=True)
class NetPresentValueSolution:
    """
    Net present value of an explicit cashflow schedule.

    rates[k] and cashflows[k] belong to period k + 1; cashflows do not include
    the initial investment.
    """
    rates: tuple[float, ...]
    cashflows: tuple[float, ...]
    initial_investment: float
    discounted_cashflows: tuple[float, ...]
    sum_of_cashflows: float
    sum_of_discounted_cashflows: float
    net_present_value: float

    @property
    def periods(self) -> int:
        return len(self.cashflows)


def _broadcast_schedule(rates: Sequence[float],
                        cashflows: Sequence[float]) -> tuple[np.ndarray, np.ndarray, float]:
    """
    Line up one rate per cashflow.

    cashflows[0] is the initial investment. Either rates or the remaining
    cashflows may be given as a single value to repeat; when both are single
    values there is exactly one period.
    """
    if len(cashflows) < 2:
        raise InvalidValue(
            "cashflows must hold the initial investment followed by at least one cashflow, "
            f"got {len(cashflows)} values")
    if len(rates) < 1:
        raise InvalidPeriods("rates must contain at least one rate")
    initial_investment = check_value(cashflows[0], "initial_investment")
    if initial_investment > 0.0:
        raise InvalidValue(f"initial investment (cashflows[0]) must be zero or negative, got {initial_investment}")
    flows = np.array([check_value(c, "cashflow") for c in cashflows[1:]], dtype=float)
    checked_rates = np.array([check_rate(r) for r in rates], dtype=float)

    if len(checked_rates) == 1:
        checked_rates = np.full(len(flows), checked_rates[0])
    elif len(flows) == 1:
        flows = np.full(len(checked_rates), flows[0])
    elif len(checked_rates) != len(flows):
        raise InvalidValue(
            f"rates ({len(checked_rates)}) and cashflows after the initial investment ({len(flows)}) "
            "must have the same length unless one is a single repeating value")
    for r in checked_rates:
        warn_rate_magnitude(float(r))
    return checked_rates, flows, initial_investment


def net_present_value_schedule_solution(rates: Sequence[float],
                                        cashflows: Sequence[float]) -> NetPresentValueSolution:
    """
    Net present value where each period has its own rate and cashflow.

    FORMULA:
    --------
        npv = c0 + sum(c_k / (1 + r_k)^k)    for k = 1..n

    Args:
        rates: Rate per period, or a single rate for every period
        cashflows: Initial investment (<= 0) followed by the cashflow per
            period, or by a single cashflow repeated for every rate

    Example:
        >>> solution = net_present_value_schedule_solution([0.034], [-1000, 500, 500])
        >>> round(solution.net_present_value, 2)
        -48.78
    """
    checked_rates, flows, initial_investment = _broadcast_schedule(rates, cashflows)
    exponents = np.arange(1, len(flows) + 1)
    with np.errstate(over="ignore", divide="ignore", invalid="ignore"):
        discounted = flows / (1.0 + checked_rates) ** exponents
    total_discounted = float(discounted.sum())
    npv = initial_investment + total_discounted
    if not math.isfinite(npv):
        raise ComputationError(f"net present value is not finite ({npv})")
    logger.debug("npv over %d periods: %s", len(flows), npv)
    return NetPresentValueSolution(
        rates=tuple(float(r) for r in checked_rates),
        cashflows=tuple(float(c) for c in flows),
        initial_investment=initial_investment,
        discounted_cashflows=tuple(float(d) for d in discounted),
        sum_of_cashflows=float(flows.sum()),
        sum_of_discounted_cashflows=total_discounted,
        net_present_value=npv,
    )


def net_present_value_schedule(rates: Sequence[float], cashflows: Sequence[float]) -> float:
    return net_present_value_schedule_solution(rates, cashflows).net_present_value
