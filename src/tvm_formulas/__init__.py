# Requires Python 3.10+
"""
TVM Formulas: time value of money, annuities, loan payments and amortization.

Given any four of {rate, periods, present value, future value, payment}, solve
for the fifth and expand the result into a period-by-period schedule.
"""

from __future__ import annotations

__version__ = "0.1.0"

# Errors and diagnostics
from tvm_formulas.errors import (
    TvmError,
    InvalidRate,
    InvalidPeriods,
    InvalidCompoundingPeriods,
    InvalidValue,
    Unsatisfiable,
    NotApplicable,
    ComputationError,
    InvariantViolation,
    TvmWarning,
)

# Tolerances and settings
from tvm_formulas.config import (
    DEFAULT_EPSILON,
    DEFAULT_RELATIVE_TOLERANCE,
    SYMMETRY_EPSILON,
    approx_equal,
    arrays_approx_equal,
    same_sign_or_zero,
    Settings,
    get_settings,
)

# Calculated-field tags
from tvm_formulas.variables import (
    TvmVariable,
    CashflowVariable,
)

# Rate conversions
from tvm_formulas.convert_rate import (
    RateKind,
    RateConversion,
    apr_to_epr,
    apr_to_ear,
    ear_to_apr,
    ear_to_epr,
    epr_to_ear,
    epr_to_apr,
    apr_to_ear_continuous,
    ear_to_apr_continuous,
    convert_rate,
    convert_rate_continuous,
)

# Single value over time
from tvm_formulas.tvm import (
    TvmSolution,
    TvmScheduleSolution,
    ScenarioList,
    future_value,
    present_value,
    rate,
    periods,
    solve_future_value,
    solve_present_value,
    solve_rate,
    solve_periods,
    future_value_solution,
    present_value_solution,
    rate_solution,
    periods_solution,
    future_value_schedule,
    present_value_schedule,
    future_value_schedule_solution,
    present_value_schedule_solution,
)

# Annuities and net present value
from tvm_formulas.cashflows import CashflowSolution
from tvm_formulas.annuity import (
    NetPresentValueSolution,
    present_value_annuity,
    future_value_annuity,
    present_value_annuity_due,
    future_value_annuity_due,
    present_value_annuity_solution,
    future_value_annuity_solution,
    net_present_value,
    net_present_value_schedule,
    net_present_value_schedule_solution,
)

# Payments
from tvm_formulas.payments import (
    payment,
    solve_payment,
    payment_due_at_beginning,
    payment_solution,
    payment_formula,
    payment_periods,
    payment_rate,
)

# Series
from tvm_formulas.series import (
    TvmPeriod,
    CashflowPeriod,
    TvmSeries,
    CashflowSeries,
)

# Invariants
from tvm_formulas import invariants

__all__ = [
    "__version__",
    # Errors and diagnostics
    "TvmError",
    "InvalidRate",
    "InvalidPeriods",
    "InvalidCompoundingPeriods",
    "InvalidValue",
    "Unsatisfiable",
    "NotApplicable",
    "ComputationError",
    "InvariantViolation",
    "TvmWarning",
    # Tolerances and settings
    "DEFAULT_EPSILON",
    "DEFAULT_RELATIVE_TOLERANCE",
    "SYMMETRY_EPSILON",
    "approx_equal",
    "arrays_approx_equal",
    "same_sign_or_zero",
    "Settings",
    "get_settings",
    # Calculated-field tags
    "TvmVariable",
    "CashflowVariable",
    # Rate conversions
    "RateKind",
    "RateConversion",
    "apr_to_epr",
    "apr_to_ear",
    "ear_to_apr",
    "ear_to_epr",
    "epr_to_ear",
    "epr_to_apr",
    "apr_to_ear_continuous",
    "ear_to_apr_continuous",
    "convert_rate",
    "convert_rate_continuous",
    # Single value over time
    "TvmSolution",
    "TvmScheduleSolution",
    "ScenarioList",
    "future_value",
    "present_value",
    "rate",
    "periods",
    "solve_future_value",
    "solve_present_value",
    "solve_rate",
    "solve_periods",
    "future_value_solution",
    "present_value_solution",
    "rate_solution",
    "periods_solution",
    "future_value_schedule",
    "present_value_schedule",
    "future_value_schedule_solution",
    "present_value_schedule_solution",
    # Annuities and net present value
    "CashflowSolution",
    "NetPresentValueSolution",
    "present_value_annuity",
    "future_value_annuity",
    "present_value_annuity_due",
    "future_value_annuity_due",
    "present_value_annuity_solution",
    "future_value_annuity_solution",
    "net_present_value",
    "net_present_value_schedule",
    "net_present_value_schedule_solution",
    # Payments
    "payment",
    "solve_payment",
    "payment_due_at_beginning",
    "payment_solution",
    "payment_formula",
    "payment_periods",
    "payment_rate",
    # Series
    "TvmPeriod",
    "CashflowPeriod",
    "TvmSeries",
    "CashflowSeries",
    # Invariants
    "invariants",
]
