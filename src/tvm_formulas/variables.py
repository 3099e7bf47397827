# Requires Python 3.10+
# Uses native type hints: list[x], tuple[x, y], X | None (PEP 585, PEP 604)
from __future__ import annotations

from enum import Enum

__version__ = "0.1.0"


# =============================================================================
# Calculated-Field Tags
# =============================================================================

class TvmVariable(Enum):
    """Which value a TvmSolution solved for."""
    RATE = "Rate"
    PERIODS = "Periods"
    PRESENT_VALUE = "Present Value"
    FUTURE_VALUE = "Future Value"

    def __str__(self) -> str:
        return self.value


class CashflowVariable(Enum):
    """
    Which value a CashflowSolution solved for.

    Payment timing (ordinary vs. due at beginning) is carried separately on the
    solution as due_at_beginning.
    """
    PRESENT_VALUE_ANNUITY = "Present Value Annuity"
    FUTURE_VALUE_ANNUITY = "Future Value Annuity"
    PAYMENT = "Payment"

    def __str__(self) -> str:
        return self.value

    @property
    def is_annuity(self) -> bool:
        return self in (CashflowVariable.PRESENT_VALUE_ANNUITY, CashflowVariable.FUTURE_VALUE_ANNUITY)
