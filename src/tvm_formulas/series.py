"""
Period-by-period schedules derived from a solution.

A series is fully materialized and immutable: callers filter, summarize and
render it repeatedly. filter() always returns a new series of the same type.

Two shapes exist:

    TvmSeries        growth of a single value, periods 0..n, period 0 holds
                     the present value
    CashflowSeries   loan amortization, periods 1..n, one payment per period
                     split into principal and interest
"""
# Requires Python 3.10+
# Uses native type hints: list[x], tuple[x, y], X | None (PEP 585, PEP 604)
from __future__ import annotations

import math
from collections.abc import Callable, Iterable, Iterator, Sequence
from dataclasses import asdict, dataclass, fields
from typing import Any, Generic, TypeVar

import numpy as np

from .errors import NotApplicable
from .validation import growth_factor
from .variables import TvmVariable

__version__ = "0.1.0"


# =============================================================================
# Period Records
# =============================================================================

@dataclass(frozen=True)
class TvmPeriod:
    """One row of a growth series. period is 0-based; row 0 has rate 0."""
    period: int
    rate: float
    value: float
    formula: str
    symbolic_formula: str


@dataclass(frozen=True)
class CashflowPeriod:
    """
    One row of an amortization series. period is 1-based.

    Sign convention follows the solution: with a positive present value
    (money received) the payment, principal and interest are negative.
    """
    period: int
    rate: float
    due_at_beginning: bool
    payment: float
    payments_to_date: float
    payments_remaining: float
    principal: float
    principal_to_date: float
    principal_remaining: float
    interest: float
    interest_to_date: float
    interest_remaining: float
    formula: str
    symbolic_formula: str


# =============================================================================
# Series Containers
# =============================================================================

R = TypeVar("R", TvmPeriod, CashflowPeriod)


class _Series(Sequence, Generic[R]):
    _row_type: type

    def __init__(self, rows: Iterable[R]) -> None:
        self._rows: tuple[R, ...] = tuple(rows)

    def __len__(self) -> int:
        return len(self._rows)

    def __getitem__(self, index):
        if isinstance(index, slice):
            return type(self)(self._rows[index])
        return self._rows[index]

    def __iter__(self) -> Iterator[R]:
        return iter(self._rows)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, _Series):
            return NotImplemented
        return type(self) is type(other) and self._rows == other._rows

    def __repr__(self) -> str:
        return f"{type(self).__name__}({len(self._rows)} periods)"

    def filter(self, predicate: Callable[[R], bool]):
        """Return a new series holding only the rows for which predicate is true."""
        return type(self)(row for row in self._rows if predicate(row))

    def column(self, name: str) -> np.ndarray:
        """
        One field across all rows as a numpy array.

        Raises:
            KeyError: If name is not a field of the row type
        """
        names = [f.name for f in fields(self._row_type)]
        if name not in names:
            raise KeyError(f"{type(self).__name__} has no column {name!r}; expected one of {names}")
        values = [getattr(row, name) for row in self._rows]
        if name in ("formula", "symbolic_formula"):
            return np.array(values, dtype=object)
        if name == "due_at_beginning":
            return np.array(values, dtype=bool)
        return np.array(values, dtype=float)

    def to_dict(self) -> dict[str, list[Any]]:
        """Columns keyed by field name, for renderers."""
        columns: dict[str, list[Any]] = {f.name: [] for f in fields(self._row_type)}
        for row in self._rows:
            for key, value in asdict(row).items():
                columns[key].append(value)
        return columns


class TvmSeries(_Series[TvmPeriod]):
    _row_type = TvmPeriod


class CashflowSeries(_Series[CashflowPeriod]):
    _row_type = CashflowPeriod

    def summarize(self) -> dict[str, float]:
        """Totals over the rows present (a filtered series sums only its rows)."""
        return {
            "periods": len(self),
            "payments": float(self.column("payment").sum()),
            "principal": float(self.column("principal").sum()),
            "interest": float(self.column("interest").sum()),
        }


# =============================================================================
# Growth Series (single value compounding over time)
# =============================================================================

def _growth_row(period: int, rate: float, value: float, neighbor: float, multiplier: float,
                continuous_compounding: bool, backward: bool) -> TvmPeriod:
    if backward:
        if continuous_compounding:
            formula = f"{value:.4f} = {neighbor:.4f} / ({math.e:.6f} ^ {rate:.6f})"
            symbolic = "value = {next period value} / e^r"
        else:
            formula = f"{value:.4f} = {neighbor:.4f} / {multiplier:.6f}"
            symbolic = "value = {next period value} / (1 + r)"
    else:
        if continuous_compounding:
            formula = f"{value:.4f} = {neighbor:.4f} * ({math.e:.6f} ^ {rate:.6f})"
            symbolic = "value = {previous period value} * e^r"
        else:
            formula = f"{value:.4f} = {neighbor:.4f} * {multiplier:.6f}"
            symbolic = "value = {previous period value} * (1 + r)"
    return TvmPeriod(period, rate, value, formula, symbolic)


def tvm_series(
        calculated_field: TvmVariable,
        continuous_compounding: bool,
        periods: int,
        fractional_periods: float,
        present_value: float,
        future_value: float,
        rates: Sequence[float],
) -> TvmSeries:
    """
    Build the growth series for a solved time-value-of-money problem.

    IMPLEMENTATION:
    ---------------
    - Row 0 holds the present value with rate 0.
    - Present value solutions are rebuilt backward from the future value:
          value[k] = value[k+1] / (1 + r)
    - All other solutions are built forward from the present value:
          value[k] = value[k-1] * (1 + r)
    - With continuous compounding (1 + r) becomes e^r.
    - When the period count is fractional the final step covers only the
      fractional remainder. When the period count itself was solved for, the
      final row holds the true future value instead of compounding past it.

    Args:
        calculated_field: Which value the solution solved for
        continuous_compounding: e^r per period instead of (1 + r)
        periods: Whole number of periods (rows 1..periods)
        fractional_periods: Exact period count, <= periods
        present_value: Value at period 0
        future_value: Value at the final period
        rates: Rate in effect for each period 1..periods

    Returns:
        TvmSeries with periods + 1 rows
    """
    if len(rates) != periods:
        raise ValueError(f"rates must have one entry per period ({periods}), got {len(rates)}")

    step_lengths = np.ones(periods)
    if periods > 0 and fractional_periods < periods:
        step_lengths[-1] = fractional_periods - (periods - 1)
    multipliers = [growth_factor(rates[k], step_lengths[k], continuous_compounding) for k in range(periods)]

    if calculated_field is TvmVariable.PRESENT_VALUE:
        values = np.zeros(periods + 1)
        values[periods] = future_value
        for k in range(periods - 1, -1, -1):
            values[k] = values[k + 1] / multipliers[k]
        rows = []
        for k in range(periods + 1):
            rate = 0.0 if k == 0 else float(rates[k - 1])
            if k == periods:
                rows.append(TvmPeriod(k, rate, float(values[k]), f"{values[k]:.4f}", "value = fv"))
            else:
                row = _growth_row(k, float(rates[k]), float(values[k]), float(values[k + 1]),
                                  multipliers[k], continuous_compounding, backward=True)
                rows.append(TvmPeriod(k, rate, row.value, row.formula, row.symbolic_formula))
        return TvmSeries(rows)

    rows = [TvmPeriod(0, 0.0, present_value, f"{present_value:.4f}", "value = pv")]
    previous = present_value
    for k in range(1, periods + 1):
        rate = float(rates[k - 1])
        if k == periods and calculated_field is TvmVariable.PERIODS:
            rows.append(TvmPeriod(k, rate, future_value, f"{future_value:.4f}", "value = fv"))
            break
        value = previous * multipliers[k - 1]
        rows.append(_growth_row(k, rate, value, previous, multipliers[k - 1],
                                continuous_compounding, backward=False))
        previous = value
    return TvmSeries(rows)


# =============================================================================
# Amortization Series (loan paid down by a constant payment)
# =============================================================================

def amortization_series(
        rate: float,
        periods: int,
        present_value: float,
        future_value: float,
        payment: float,
        due_at_beginning: bool,
) -> CashflowSeries:
    """
    Split each payment of a loan into principal and interest.

    FORMULA:
    --------
        balance_before[k] = pv + principal_to_date[k-1]
        interest[k]       = -balance_before[k] * r
        principal[k]      = pmt - interest[k]

    With payments due at the beginning, the first payment is made at time zero
    before any interest accrues, so interest[1] = 0.

    Remaining columns are the solution totals less the running totals:
        payments_remaining  = pmt * n - payments_to_date
        principal_remaining = -(pv + principal_to_date)
        interest_remaining  = (pmt * n + pv + fv) - interest_to_date

    Raises:
        NotApplicable: If future_value is nonzero (the recurrence assumes the
            loan is driven to exactly zero)
    """
    if future_value != 0.0:
        raise NotApplicable(
            f"amortization series requires a future value of zero, got {future_value}")

    sum_of_payments = payment * periods
    sum_of_interest = sum_of_payments + present_value + future_value

    interest = np.zeros(periods)
    principal = np.zeros(periods)
    balance_before = np.zeros(periods)
    principal_to_date = 0.0
    for i in range(periods):
        balance_before[i] = present_value + principal_to_date
        if due_at_beginning and i == 0:
            interest[i] = 0.0
        else:
            interest[i] = -balance_before[i] * rate
        principal[i] = payment - interest[i]
        principal_to_date += principal[i]

    payments_to_date = np.cumsum(np.full(periods, payment))
    principal_to_date_col = np.cumsum(principal)
    interest_to_date = np.cumsum(interest)

    rows = []
    for i in range(periods):
        if due_at_beginning and i == 0:
            formula = "0"
            symbolic = "interest = 0"
        else:
            formula = f"{interest[i]:.4f} = -({balance_before[i]:.4f} * {rate:.6f})"
            symbolic = "interest = -(principal * rate)"
        rows.append(CashflowPeriod(
            period=i + 1,
            rate=rate,
            due_at_beginning=due_at_beginning,
            payment=payment,
            payments_to_date=float(payments_to_date[i]),
            payments_remaining=float(sum_of_payments - payments_to_date[i]),
            principal=float(principal[i]),
            principal_to_date=float(principal_to_date_col[i]),
            principal_remaining=float(-(present_value + principal_to_date_col[i])),
            interest=float(interest[i]),
            interest_to_date=float(interest_to_date[i]),
            interest_remaining=float(sum_of_interest - interest_to_date[i]),
            formula=formula,
            symbolic_formula=symbolic,
        ))
    return CashflowSeries(rows)
