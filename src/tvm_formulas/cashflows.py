# Requires Python 3.10+
# Uses native type hints: list[x], tuple[x, y], X | None (PEP 585, PEP 604)
from __future__ import annotations

from dataclasses import dataclass, field

from .config import get_settings
from .errors import NotApplicable
from .invariants import check_payment_series
from .series import CashflowSeries, amortization_series
from .variables import CashflowVariable

__version__ = "0.1.0"


# =============================================================================
# Annuity and Loan Solutions
# =============================================================================

@dataclass(frozen=True)
class CashflowSolution:
    """
    Result of an annuity or payment calculation.

    Sign convention: cashflows in opposite directions carry opposite signs. A
    loan of 100,000 received (present_value > 0) is repaid with negative
    payments.

    sum_of_payments and sum_of_interest are derived once at construction:
        sum_of_payments = payment * periods
        sum_of_interest = sum_of_payments + present_value + future_value

    When future_value is zero, sum_of_interest and sum_of_payments share a sign
    (or one is zero). That relationship is verified by
    invariants.check_payment_solution(), not here.
    """
    calculated_field: CashflowVariable
    rate: float
    periods: int
    present_value: float
    future_value: float
    due_at_beginning: bool
    payment: float
    formula: str
    symbolic_formula: str
    sum_of_payments: float = field(init=False)
    sum_of_interest: float = field(init=False)

    def __post_init__(self) -> None:
        sum_of_payments = self.payment * self.periods
        object.__setattr__(self, "sum_of_payments", sum_of_payments)
        object.__setattr__(self, "sum_of_interest", sum_of_payments + self.present_value + self.future_value)

    def series(self) -> CashflowSeries:
        """
        Amortization table, one row per payment. Built on every call.

        Raises:
            NotApplicable: If this is not a payment solution, or future_value
                is nonzero
            InvariantViolation: If invariant checking is enabled in settings
                and the series fails a check
        """
        if self.calculated_field is not CashflowVariable.PAYMENT:
            raise NotApplicable(f"an amortization series needs a payment solution, not {self.calculated_field}")
        series = amortization_series(self.rate, self.periods, self.present_value, self.future_value,
                                     self.payment, self.due_at_beginning)
        settings = get_settings()
        if settings.check_invariants:
            check_payment_series(self, series, epsilon=settings.epsilon)
        return series
