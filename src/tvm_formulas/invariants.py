"""
Cross-checks between a solution and the series derived from it.

These run in tests, or on every payment solution and series when
TVM_FORMULAS_CHECK_INVARIANTS is set. Each violated relationship raises
InvariantViolation naming the period and the values that disagree.

Payment series rules (future value zero):
    - principal + interest == payment in every period
    - running totals match the cumulative sums of their columns
    - principal sums to -present_value and everything remaining is zero at the end
    - after the first period, |principal| grows and |interest| shrinks for a
      positive rate; both shrink for a negative rate. The due-at-beginning
      first period (zero interest) is not compared against.
"""
# Requires Python 3.10+
# Uses native type hints: list[x], tuple[x, y], X | None (PEP 585, PEP 604)
from __future__ import annotations

import math
from typing import Any

import numpy as np

from .config import DEFAULT_EPSILON, approx_equal, round_fractional_periods, same_sign_or_zero
from .errors import InvariantViolation
from .series import CashflowSeries, TvmSeries
from .validation import growth_factor
from .variables import CashflowVariable, TvmVariable

__version__ = "0.1.0"


def _require(condition: bool, message: str) -> None:
    if not condition:
        raise InvariantViolation(message)


def _require_close(actual: float, expected: float, what: str, epsilon: float) -> None:
    _require(approx_equal(actual, expected, epsilon),
             f"{what}: expected {expected}, got {actual} (epsilon {epsilon})")


# =============================================================================
# Cashflow Solutions
# =============================================================================

def check_cashflow_solution(solution: Any, epsilon: float = DEFAULT_EPSILON) -> None:
    """Relationships every annuity or payment solution satisfies."""
    for name in ("rate", "present_value", "future_value", "payment", "sum_of_payments", "sum_of_interest"):
        value = getattr(solution, name)
        _require(math.isfinite(value), f"{name} is not finite: {value}")
    _require_close(solution.sum_of_payments, solution.payment * solution.periods,
                   "sum_of_payments vs payment * periods", epsilon)
    _require_close(solution.sum_of_interest,
                   solution.sum_of_payments + solution.present_value + solution.future_value,
                   "sum_of_interest vs sum_of_payments + present_value + future_value", epsilon)
    _require(len(solution.formula) > 0, "formula is empty")
    _require(len(solution.symbolic_formula) > 0, "symbolic_formula is empty")


def check_payment_solution(solution: Any, epsilon: float = DEFAULT_EPSILON) -> None:
    """
    Check a payment solution on its own.

    Beyond the shared cashflow relationships, with a future value of zero:
        - the payment has the opposite sign of the present value
        - total interest has the same sign as total payments for a positive
          rate (the opposite sign for a negative rate, where interest is a
          credit) and is smaller in magnitude
        - total interest is zero at a zero rate

    Raises:
        InvariantViolation: On the first relationship that does not hold
    """
    _require(solution.calculated_field is CashflowVariable.PAYMENT,
             f"expected a payment solution, got {solution.calculated_field}")
    check_cashflow_solution(solution, epsilon)

    if solution.future_value != 0.0 or solution.periods == 0:
        return
    rate = solution.rate
    present_value = solution.present_value
    payment = solution.payment
    if present_value == 0.0:
        _require(payment == 0.0, f"present and future value are zero but payment is {payment}")
    elif present_value > 0.0:
        _require(payment < 0.0, f"present value {present_value} is positive but payment {payment} is not negative")
    else:
        _require(payment > 0.0, f"present value {present_value} is negative but payment {payment} is not positive")

    sum_of_interest = solution.sum_of_interest
    sum_of_payments = solution.sum_of_payments
    if rate > 0.0:
        _require(same_sign_or_zero(sum_of_interest, sum_of_payments, epsilon),
                 f"sum_of_interest {sum_of_interest} and sum_of_payments {sum_of_payments} differ in sign")
        if not approx_equal(present_value, 0.0, epsilon):
            _require(abs(sum_of_interest) < abs(sum_of_payments),
                     f"|sum_of_interest| {abs(sum_of_interest)} is not below |sum_of_payments| {abs(sum_of_payments)}")
    elif rate < 0.0:
        _require(same_sign_or_zero(-sum_of_interest, sum_of_payments, epsilon),
                 f"sum_of_interest {sum_of_interest} is not a credit against sum_of_payments {sum_of_payments}")
    else:
        _require_close(sum_of_interest, 0.0, "sum_of_interest at a zero rate", epsilon)


# =============================================================================
# Payment Series
# =============================================================================

def check_payment_series(solution: Any, series: CashflowSeries, epsilon: float = DEFAULT_EPSILON) -> None:
    """
    Check an amortization series against the payment solution it came from.

    Raises:
        InvariantViolation: On the first relationship that does not hold
    """
    check_payment_solution(solution, epsilon)
    if solution.future_value != 0.0:
        _require(len(series) == 0, f"expected an empty series for a nonzero future value, got {len(series)} rows")
        return
    _require(len(series) == solution.periods,
             f"series has {len(series)} rows for {solution.periods} periods")
    if len(series) == 0:
        return

    rate = solution.rate
    payment = solution.payment
    present_value = solution.present_value
    due_at_beginning = solution.due_at_beginning

    principal = series.column("principal")
    interest = series.column("interest")
    _require(bool(np.all(series.column("period") == np.arange(1, len(series) + 1))),
             "period numbers are not 1..n in order")
    _require(bool(np.all(series.column("rate") == rate)), f"a row's rate differs from {rate}")
    _require(bool(np.all(series.column("payment") == payment)), f"a row's payment differs from {payment}")

    running_payments = np.cumsum(series.column("payment"))
    running_principal = np.cumsum(principal)
    running_interest = np.cumsum(interest)

    previous = None
    for i, entry in enumerate(series):
        label = f"period {entry.period}"
        _require_close(entry.principal + entry.interest, payment, f"{label} principal + interest", epsilon)
        _require_close(entry.payments_to_date, running_payments[i], f"{label} payments_to_date", epsilon)
        _require_close(entry.payments_remaining, solution.sum_of_payments - running_payments[i],
                       f"{label} payments_remaining", epsilon)
        _require_close(entry.principal_to_date, running_principal[i], f"{label} principal_to_date", epsilon)
        _require_close(entry.principal_remaining, -present_value - running_principal[i],
                       f"{label} principal_remaining", epsilon)
        _require_close(entry.interest_to_date, running_interest[i], f"{label} interest_to_date", epsilon)
        _require_close(entry.interest_remaining, solution.sum_of_interest - running_interest[i],
                       f"{label} interest_remaining", epsilon)
        _require(len(entry.formula) > 0 and len(entry.symbolic_formula) > 0, f"{label} formula is empty")

        if present_value == 0.0 or rate == 0.0 or (due_at_beginning and i == 0):
            _require(entry.interest == 0.0, f"{label} interest should be zero, got {entry.interest}")
        elif previous is not None and previous.interest != 0.0:
            if rate > 0.0:
                _require(abs(entry.principal) > abs(previous.principal) - epsilon,
                         f"{label} |principal| {abs(entry.principal)} did not grow from {abs(previous.principal)}")
                _require(abs(entry.interest) < abs(previous.interest) + epsilon,
                         f"{label} |interest| {abs(entry.interest)} did not shrink from {abs(previous.interest)}")
            else:
                _require(abs(entry.principal) < abs(previous.principal) + epsilon,
                         f"{label} |principal| {abs(entry.principal)} did not shrink from {abs(previous.principal)}")
                _require(abs(entry.interest) < abs(previous.interest) + epsilon,
                         f"{label} |interest| {abs(entry.interest)} did not shrink from {abs(previous.interest)}")
        previous = entry

    last = series[-1]
    _require_close(last.payments_to_date, solution.sum_of_payments, "final payments_to_date", epsilon)
    _require_close(last.interest_to_date, solution.sum_of_interest, "final interest_to_date", epsilon)
    _require_close(last.payments_remaining, 0.0, "final payments_remaining", epsilon)
    _require_close(last.principal_remaining, 0.0, "final principal_remaining", epsilon)
    _require_close(last.interest_remaining, 0.0, "final interest_remaining", epsilon)
    _require_close(float(principal.sum()), -present_value, "sum of principal vs -present_value", epsilon)


# =============================================================================
# Growth Solutions and Series
# =============================================================================

def check_tvm_solution(solution: Any, epsilon: float = DEFAULT_EPSILON) -> None:
    """fv == pv * (1 + r)^n (or e^(rn)) for the exact period count, plus field sanity."""
    for name in ("rate", "fractional_periods", "present_value", "future_value"):
        value = getattr(solution, name)
        _require(math.isfinite(value), f"{name} is not finite: {value}")
    _require(solution.periods == round_fractional_periods(solution.fractional_periods),
             f"periods {solution.periods} is not fractional_periods {solution.fractional_periods} rounded up")
    expected = solution.present_value * growth_factor(solution.rate, solution.fractional_periods,
                                                solution.continuous_compounding)
    _require_close(solution.future_value, expected, "future_value vs present_value grown over the periods", epsilon)
    _require(len(solution.formula) > 0, "formula is empty")
    _require(len(solution.symbolic_formula) > 0, "symbolic_formula is empty")


def check_tvm_series(solution: Any, series: TvmSeries, epsilon: float = DEFAULT_EPSILON) -> None:
    """
    Check a growth series against its solution.

    Works for TvmSolution and TvmScheduleSolution (which carries one rate per
    period).
    """
    _require(len(series) == solution.periods + 1,
             f"series has {len(series)} rows for {solution.periods} periods")
    rates = getattr(solution, "rates", None)
    if rates is None:
        rates = (solution.rate,) * solution.periods

    values = series.column("value")
    _require(bool(np.all(series.column("period") == np.arange(len(series)))), "period numbers are not 0..n in order")
    _require(series[0].rate == 0.0, f"period 0 rate should be 0, got {series[0].rate}")
    _require(bool(np.all(series.column("rate")[1:] == np.asarray(rates, dtype=float))),
             "a row's rate differs from the solution")
    _require_close(float(values[0]), solution.present_value, "period 0 value vs present_value", epsilon)
    _require_close(float(values[-1]), solution.future_value, "final value vs future_value", epsilon)
    for entry in series:
        _require(len(entry.formula) > 0 and len(entry.symbolic_formula) > 0,
                 f"period {entry.period} formula is empty")

    if solution.present_value == 0.0:
        return
    magnitudes = np.abs(values)
    steps = np.diff(magnitudes)
    for k, r in enumerate(rates):
        if r > 0.0:
            _require(steps[k] > -epsilon, f"period {k + 1} value did not grow at rate {r}")
        elif r < 0.0:
            _require(steps[k] < epsilon, f"period {k + 1} value did not shrink at rate {r}")
        else:
            _require(abs(steps[k]) <= epsilon, f"period {k + 1} value changed at a zero rate")


# =============================================================================
# Dispatch
# =============================================================================

def check(solution: Any, series: TvmSeries | CashflowSeries | None = None,
          epsilon: float = DEFAULT_EPSILON) -> None:
    """
    Run every check that applies to this solution (and series, if given).

    Raises:
        InvariantViolation: On the first relationship that does not hold
    """
    match solution.calculated_field:
        case CashflowVariable.PAYMENT:
            if series is None:
                check_payment_solution(solution, epsilon)
            else:
                check_payment_series(solution, series, epsilon)
        case CashflowVariable.PRESENT_VALUE_ANNUITY | CashflowVariable.FUTURE_VALUE_ANNUITY:
            check_cashflow_solution(solution, epsilon)
        case TvmVariable():
            if hasattr(solution, "fractional_periods"):
                check_tvm_solution(solution, epsilon)
            if series is not None:
                check_tvm_series(solution, series, epsilon)
        case other:
            raise InvariantViolation(f"unknown calculated field {other!r}")
