# Requires Python 3.10+
# Uses native type hints: list[x], tuple[x, y], X | None (PEP 585, PEP 604)
from __future__ import annotations

import logging
import math
import sys

import numpy as np
from scipy.optimize import brentq

from .cashflows import CashflowSolution
from .config import approx_equal, get_settings
from .errors import ComputationError, InvalidPeriods, Unsatisfiable
from .invariants import check_payment_solution
from .validation import check_periods, check_rate, check_value, growth_factor, warn_rate_magnitude
from .variables import CashflowVariable

__version__ = "0.1.0"

logger = logging.getLogger(__name__)


# =============================================================================
# Payments: the constant cashflow that moves pv to fv over n periods
# =============================================================================
#
#   pmt = ((pv * (1 + r)^n) + fv) * -r / D
#   D   = (1 + r)^n - 1                    [payment at period end]
#   D   = ((1 + r)^n - 1) * (1 + r)        [payment at period start]
#
# pv, fv and pmt use the accounting sign convention: borrowing 100,000
# (pv > 0) is repaid with negative payments.
#

def payment(rate: float, periods: int, present_value: float, future_value: float = 0.0,
            due_at_beginning: bool = False) -> float:
    """
    Periodic payment for a loan or savings plan.

    FORMULA:
    --------
        pmt = ((pv * (1 + r)^n) + fv) * -r / ((1 + r)^n - 1)
        pmt = ((pv * (1 + r)^n) + fv) * -r / (((1 + r)^n - 1) * (1 + r))   [due_at_beginning]

    IMPLEMENTATION:
    ---------------
    Special cases, in order:
        1. periods == 0: pv must equal -fv (nothing left to pay), returns 0.0
        2. rate == 0: no compounding, pmt = (-pv - fv) / n
        3. otherwise the formula above; a zero or subnormal denominator is a
           ComputationError

    Args:
        rate: Periodic rate as a fraction, > -1.0
        periods: Number of payments, >= 0
        present_value: Amount at the start (positive when received)
        future_value: Amount remaining after the last payment
        due_at_beginning: Payments at the start of each period

    Returns:
        Payment per period

    Raises:
        InvalidRate: If rate is non-finite or -1.0 or below
        InvalidPeriods: If periods is negative or fractional, or zero while
            present_value and -future_value differ
        InvalidValue: If present_value or future_value is non-finite
        ComputationError: If the denominator degenerates or the result is not finite

    Example:
        >>> round(payment(0.01, 120, 100_000), 2)
        -1434.71
        >>> round(payment(0.01, 120, 100_000, due_at_beginning=True), 2)
        -1420.5
    """
    rate = check_rate(rate)
    periods = check_periods(periods)
    present_value = check_value(present_value, "present_value")
    future_value = check_value(future_value, "future_value")
    warn_rate_magnitude(rate)

    if periods == 0:
        if not approx_equal(present_value, -future_value):
            raise InvalidPeriods(
                f"periods is zero but present value {present_value} does not offset "
                f"future value {future_value}")
        return 0.0
    if rate == 0.0:
        return (-present_value - future_value) / periods

    growth = growth_factor(rate, periods)
    denominator = growth - 1.0
    if due_at_beginning:
        denominator *= 1.0 + rate
    if not math.isfinite(denominator) or abs(denominator) < sys.float_info.min:
        raise ComputationError(
            f"payment denominator degenerated to {denominator} for rate={rate}, periods={periods}")
    result = ((present_value * growth) + future_value) * -rate / denominator
    if not math.isfinite(result):
        raise ComputationError(f"payment is not finite for rate={rate}, periods={periods}")
    return result


solve_payment = payment


def payment_formula(rate: float, periods: int, present_value: float, future_value: float,
                    due_at_beginning: bool, payment: float) -> tuple[str, str]:
    """Numeric and symbolic formula text for a payment calculation."""
    rate_multiplier = 1.0 + rate
    if periods == 0:
        formula, symbolic = f"{0.0:.4f}", "0"
    elif rate == 0.0:
        if future_value == 0.0:
            formula, symbolic = f"{-present_value:.4f} / {periods}", "-pv / n"
        elif present_value == 0.0:
            formula, symbolic = f"{-future_value:.4f} / {periods}", "-fv / n"
        else:
            add_future_value = f" - {future_value:.4f}" if future_value > 0.0 else f" + {-future_value:.4f}"
            formula = f"({-present_value:.4f}{add_future_value}) / {periods}"
            symbolic = "(-pv - fv) / n"
    else:
        if future_value == 0.0:
            numerator = f"(({present_value:.4f} * {rate_multiplier:.6f}^{periods}) * {-rate:.6f})"
            symbolic_numerator = "((pv * (1 + r)^n) * -r)"
        elif present_value == 0.0:
            numerator = f"({future_value:.4f} * {-rate:.6f})"
            symbolic_numerator = "(fv * -r)"
        else:
            add_future_value = f" + {future_value:.4f}" if future_value > 0.0 else f" - {-future_value:.4f}"
            numerator = (f"((({present_value:.4f} * {rate_multiplier:.6f}^{periods}){add_future_value})"
                         f" * {-rate:.6f})")
            symbolic_numerator = "(((pv * (1 + r)^n) + fv) * -r)"
        denominator = f"({rate_multiplier:.6f}^{periods} - 1)"
        symbolic_denominator = "((1 + r)^n - 1)"
        if due_at_beginning:
            denominator = f"({denominator} * {rate_multiplier:.6f})"
            symbolic_denominator = f"({symbolic_denominator} * (1 + r))"
        formula = f"{numerator} / {denominator}"
        symbolic = f"{symbolic_numerator} / {symbolic_denominator}"
    return f"{payment:.4f} = {formula}", f"pmt = {symbolic}"


def payment_solution(rate: float, periods: int, present_value: float, future_value: float = 0.0,
                     due_at_beginning: bool = False) -> CashflowSolution:
    """
    Solve for the payment and keep the inputs, totals, formula and series.

    Example:
        >>> solution = payment_solution(0.01, 120, 100_000)
        >>> round(solution.sum_of_payments, 2), round(solution.sum_of_interest, 2)
        (-172165.14, -72165.14)
        >>> len(solution.series())
        120
    """
    result = payment(rate, periods, present_value, future_value, due_at_beginning)
    rate, periods = float(rate), check_periods(periods)
    present_value, future_value = float(present_value), float(future_value)
    formula, symbolic_formula = payment_formula(rate, periods, present_value, future_value,
                                                due_at_beginning, result)
    solution = CashflowSolution(CashflowVariable.PAYMENT, rate, periods, present_value, future_value,
                                due_at_beginning, result, formula, symbolic_formula)
    settings = get_settings()
    if settings.check_invariants:
        check_payment_solution(solution, epsilon=settings.epsilon)
    return solution


def payment_due_at_beginning(rate: float, periods: int, present_value: float,
                             future_value: float = 0.0) -> float:
    return payment(rate, periods, present_value, future_value, due_at_beginning=True)


# =============================================================================
# Number of Payments and Implied Rate
# =============================================================================

def payment_periods(rate: float, payment: float, present_value: float, future_value: float = 0.0,
                    due_at_beginning: bool = False) -> float:
    """
    Fractional number of payments needed to move present_value to future_value.

    FORMULA:
    --------
        n = ln((pmt * k - fv * r) / (pmt * k + pv * r)) / ln(1 + r)
        k = 1 (end of period) or 1 + r (due_at_beginning)
        n = -(pv + fv) / pmt                                   [r == 0]

    Raises:
        Unsatisfiable: If the payment never closes the gap, e.g. it does not
            even cover the interest

    Example:
        >>> round(payment_periods(0.01, -1434.7094840258, 100_000), 2)
        120.0
    """
    rate = check_rate(rate)
    payment = check_value(payment, "payment")
    present_value = check_value(present_value, "present_value")
    future_value = check_value(future_value, "future_value")
    warn_rate_magnitude(rate)

    if rate == 0.0:
        if payment == 0.0:
            if present_value + future_value == 0.0:
                return 0.0
            raise Unsatisfiable("payment is zero and the rate is zero, the balance never changes")
        periods = -(present_value + future_value) / payment
    else:
        k = 1.0 + rate if due_at_beginning else 1.0
        numerator = payment * k - future_value * rate
        denominator = payment * k + present_value * rate
        if denominator == 0.0 or numerator / denominator <= 0.0:
            raise Unsatisfiable(
                f"payment {payment} cannot move present value {present_value} to future value "
                f"{future_value} at rate {rate}")
        periods = math.log(numerator / denominator) / math.log1p(rate)
    if not math.isfinite(periods):
        raise ComputationError(f"number of payments is not finite ({periods})")
    if periods < 0.0:
        raise Unsatisfiable(
            f"payment {payment} moves the balance away from future value {future_value}")
    return periods


def _balance(rate: float, periods: int, payment: float, present_value: float, future_value: float,
             due_at_beginning: bool) -> float:
    """Zero exactly when payment moves present_value to future_value at rate."""
    if abs(rate) < 1e-12:
        return present_value + payment * periods + future_value
    growth = (1.0 + rate) ** periods
    k = 1.0 + rate if due_at_beginning else 1.0
    return present_value * growth + payment * k * (growth - 1.0) / rate + future_value


_RATE_GRID = np.array([-0.999, -0.9, -0.5, -0.2, -0.1, -0.05, -0.01, -0.001, 0.0,
                       0.001, 0.01, 0.05, 0.1, 0.2, 0.5, 1.0, 2.0, 5.0, 10.0])


def payment_rate(periods: int, payment: float, present_value: float, future_value: float = 0.0,
                 due_at_beginning: bool = False, tolerance: float = 1e-12,
                 max_iterations: int = 200) -> float:
    """
    Periodic rate implied by a payment stream (the spreadsheet RATE function).

    There is no closed form once payments are involved, so the rate is found
    iteratively.

    ALGORITHM:
    ----------
    1. Evaluate the balance equation
           pv * (1 + r)^n + pmt * k * ((1 + r)^n - 1) / r + fv
       on a fixed grid of candidate rates between -99.9% and 1000%
    2. Take the sign change nearest to a zero rate as the bracket
    3. Use Brent's method (scipy.optimize.brentq) to find the root inside it

    Args:
        periods: Number of payments, >= 1
        payment: Payment per period
        present_value: Amount at the start
        future_value: Amount remaining after the last payment
        due_at_beginning: Payments at the start of each period
        tolerance: Convergence tolerance passed to brentq as xtol
        max_iterations: Iteration cap passed to brentq as maxiter

    Returns:
        Periodic rate as a fraction

    Raises:
        InvalidPeriods: If periods is zero
        Unsatisfiable: If no rate in the grid range balances the cashflows

    Example:
        >>> round(payment_rate(120, -1434.7094840258, 100_000), 6)
        0.01
    """
    periods = check_periods(periods)
    payment = check_value(payment, "payment")
    present_value = check_value(present_value, "present_value")
    future_value = check_value(future_value, "future_value")
    if periods == 0:
        raise InvalidPeriods("periods must be at least 1 to solve for a rate")

    args = (periods, payment, present_value, future_value, due_at_beginning)
    # Steep grid rates overflow to inf on long terms; those points are skipped below
    with np.errstate(over="ignore", invalid="ignore"):
        values = np.array([_balance(r, *args) for r in _RATE_GRID])
    exact = np.flatnonzero(values == 0.0)
    if exact.size:
        return float(_RATE_GRID[exact[np.argmin(np.abs(_RATE_GRID[exact]))]])

    finite = np.isfinite(values)
    candidates = [
        (i, i + 1) for i in range(len(_RATE_GRID) - 1)
        if finite[i] and finite[i + 1] and np.sign(values[i]) != np.sign(values[i + 1])
    ]
    if not candidates:
        raise Unsatisfiable(
            f"no rate between {_RATE_GRID[0]} and {_RATE_GRID[-1]} balances payment {payment} "
            f"against present value {present_value} and future value {future_value} "
            f"over {periods} periods")
    lower, upper = min(candidates, key=lambda pair: min(abs(_RATE_GRID[pair[0]]), abs(_RATE_GRID[pair[1]])))
    logger.debug("payment_rate: bracket [%s, %s]", _RATE_GRID[lower], _RATE_GRID[upper])

    try:
        rate = brentq(
            _balance,
            _RATE_GRID[lower], _RATE_GRID[upper],
            args=args,
            xtol=tolerance,
            maxiter=max_iterations,
        )
    except (ValueError, RuntimeError) as e:
        raise ComputationError(
            f"could not converge on a rate in [{_RATE_GRID[lower]}, {_RATE_GRID[upper]}]: {e}"
        ) from e
    warn_rate_magnitude(rate)
    return float(rate)
