"""
Unit tests for annuity values and net present value.

Annuity values follow the accounting sign convention: the value has the
opposite sign of the cashflow. Net present value keeps the cashflow's own
sign and nets it against the initial investment.

Version: 0.1.0
Last Updated: 2026-10-19
Status: Active
"""

import math
import unittest

from tvm_formulas import invariants
from tvm_formulas.annuity import (
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
from tvm_formulas.errors import ComputationError, InvalidPeriods, InvalidRate, InvalidValue, NotApplicable
from tvm_formulas.tvm import future_value
from tvm_formulas.variables import CashflowVariable

# =============================================================================
# Test Parameters
# =============================================================================

DECIMAL_PLACES_FOR_ASSERTIONS: int = 10  # decimal places for assertAlmostEqual

# Module-level shared data (populated by setUpModule)
TEST_SCENARIOS: list[dict[str, int | float]] = []


# =============================================================================
# Module Setup/Teardown
# =============================================================================

def setUpModule():
    """Rate x term x cashflow grid, including a zero and a negative rate."""
    rates = [0.034, 0.005, 0.0, -0.02]
    terms = [1, 12, 60]
    annuities = [500.0, -250.0]
    # load_tests in test_suite also calls this; start from an empty list
    TEST_SCENARIOS.clear()
    for rate in rates:
        for periods in terms:
            for annuity in annuities:
                TEST_SCENARIOS.append({'rate': rate, 'periods': periods, 'annuity': annuity})

    if not TEST_SCENARIOS:
        raise RuntimeError("setUpModule failed: No test scenarios were created")


def tearDownModule():
    """Clean up module-level data."""
    TEST_SCENARIOS.clear()


# =============================================================================
# Annuity Values
# =============================================================================

class TestAnnuityValues(unittest.TestCase):

    def test_present_value_annuity(self):
        self.assertAlmostEqual(present_value_annuity(0.034, 1, 500), -483.55899, places=5)

    def test_future_value_annuity(self):
        self.assertAlmostEqual(future_value_annuity(0.034, 10, 500), -5838.6602, places=4)

    def test_zero_rate(self):
        self.assertEqual(present_value_annuity(0.0, 10, 500), -5000.0)
        self.assertEqual(future_value_annuity(0.0, 10, 500), -5000.0)
        self.assertEqual(present_value_annuity(0.0, 10, 500, due_at_beginning=True), -5000.0)

    def test_zero_periods(self):
        self.assertEqual(present_value_annuity(0.034, 0, 500), 0.0)
        self.assertEqual(future_value_annuity(0.034, 0, 500), 0.0)

    def test_due_is_one_period_more_growth(self):
        for scenario in TEST_SCENARIOS:
            rate, periods, annuity = scenario['rate'], scenario['periods'], scenario['annuity']
            with self.subTest(**scenario):
                self.assertAlmostEqual(present_value_annuity_due(rate, periods, annuity),
                                       present_value_annuity(rate, periods, annuity) * (1.0 + rate),
                                       places=DECIMAL_PLACES_FOR_ASSERTIONS)
                self.assertAlmostEqual(future_value_annuity_due(rate, periods, annuity),
                                       future_value_annuity(rate, periods, annuity) * (1.0 + rate),
                                       places=DECIMAL_PLACES_FOR_ASSERTIONS)

    def test_present_and_future_values_are_one_growth_apart(self):
        """fv_annuity == pv_annuity * (1 + r)^n"""
        for scenario in TEST_SCENARIOS:
            rate, periods, annuity = scenario['rate'], scenario['periods'], scenario['annuity']
            with self.subTest(**scenario):
                self.assertAlmostEqual(future_value(rate, periods, present_value_annuity(rate, periods, annuity)),
                                       future_value_annuity(rate, periods, annuity), places=8)

    def test_value_opposes_cashflow(self):
        for scenario in TEST_SCENARIOS:
            rate, periods, annuity = scenario['rate'], scenario['periods'], scenario['annuity']
            with self.subTest(**scenario):
                self.assertLess(present_value_annuity(rate, periods, annuity) * annuity, 0.0)

    def test_invalid_inputs(self):
        with self.assertRaises(InvalidRate):
            present_value_annuity(-1.0, 10, 500)
        with self.assertRaises(InvalidPeriods):
            future_value_annuity(0.034, 10.5, 500)
        with self.assertRaises(InvalidValue):
            present_value_annuity(0.034, 10, math.nan)

    def test_growth_overflow(self):
        with self.assertRaises(ComputationError):
            future_value_annuity(0.5, 5000, 100)
        with self.assertRaises(ComputationError):
            present_value_annuity(-0.5, 5000, 100)
        with self.assertRaises(ComputationError):
            present_value_annuity_solution(-0.5, 5000, 100, due_at_beginning=True)
        with self.assertRaises(ComputationError):
            net_present_value(-0.5, 5000, -100, 100)

    def test_value_not_finite(self):
        with self.assertRaises(ComputationError):
            future_value_annuity(1.0, 1000, 1e300)


class TestAnnuitySolutions(unittest.TestCase):

    def test_present_value_annuity_solution(self):
        solution = present_value_annuity_solution(0.034, 10, 500)
        self.assertIs(solution.calculated_field, CashflowVariable.PRESENT_VALUE_ANNUITY)
        self.assertTrue(solution.calculated_field.is_annuity)
        self.assertEqual(solution.future_value, 0.0)
        self.assertEqual(solution.payment, 500.0)
        self.assertEqual(solution.sum_of_payments, 5000.0)
        self.assertAlmostEqual(solution.sum_of_interest, 5000.0 + solution.present_value,
                               places=DECIMAL_PLACES_FOR_ASSERTIONS)
        self.assertEqual(solution.symbolic_formula, "pv = -c * (1 - (1 + r)^-n) / r")
        invariants.check(solution)

    def test_future_value_annuity_solution_due(self):
        solution = future_value_annuity_solution(0.034, 10, 500, due_at_beginning=True)
        self.assertIs(solution.calculated_field, CashflowVariable.FUTURE_VALUE_ANNUITY)
        self.assertTrue(solution.due_at_beginning)
        self.assertEqual(solution.present_value, 0.0)
        self.assertAlmostEqual(solution.future_value, -5838.6602 * 1.034, places=3)
        self.assertEqual(solution.symbolic_formula, "fv = -c * ((1 + r)^n - 1) / r * (1 + r)")
        self.assertTrue(solution.formula.endswith("* 1.034000"))
        invariants.check(solution)

    def test_zero_rate_formula(self):
        solution = future_value_annuity_solution(0.0, 10, 500)
        self.assertEqual(solution.formula, "-5000.0000 = -(500.0000) * 10")
        self.assertEqual(solution.symbolic_formula, "fv = -c * n")

    def test_annuity_solution_has_no_series(self):
        with self.assertRaises(NotApplicable):
            present_value_annuity_solution(0.034, 10, 500).series()


# =============================================================================
# Net Present Value
# =============================================================================

class TestNetPresentValue(unittest.TestCase):

    def test_constant_cashflow(self):
        npv = net_present_value(0.034, 10, -1000, 500)
        self.assertGreater(npv, 0.0)
        self.assertAlmostEqual(npv, -1000 - present_value_annuity(0.034, 10, 500),
                               places=DECIMAL_PLACES_FOR_ASSERTIONS)

    def test_schedule(self):
        solution = net_present_value_schedule_solution([0.034], [-1000, 500, 500])
        self.assertEqual(solution.periods, 2)
        self.assertEqual(solution.rates, (0.034, 0.034))
        self.assertAlmostEqual(solution.net_present_value, -48.78, places=2)
        self.assertEqual(solution.sum_of_cashflows, 1000.0)
        self.assertAlmostEqual(solution.discounted_cashflows[0], 500 / 1.034, places=DECIMAL_PLACES_FOR_ASSERTIONS)
        self.assertAlmostEqual(solution.discounted_cashflows[1], 500 / 1.034 ** 2,
                               places=DECIMAL_PLACES_FOR_ASSERTIONS)

    def test_schedule_matches_constant_cashflow(self):
        self.assertAlmostEqual(net_present_value_schedule([0.05], [-1000] + [200] * 6),
                               net_present_value(0.05, 6, -1000, 200), places=8)

    def test_single_cashflow_repeats_over_rates(self):
        solution = net_present_value_schedule_solution([0.03, 0.04], [-100, 60])
        self.assertEqual(solution.cashflows, (60.0, 60.0))
        self.assertAlmostEqual(solution.net_present_value, -100 + 60 / 1.03 + 60 / 1.04 ** 2,
                               places=DECIMAL_PLACES_FOR_ASSERTIONS)

    def test_schedule_errors(self):
        with self.assertRaises(InvalidValue):
            net_present_value_schedule([0.03, 0.04, 0.05], [-100, 10, 20])
        with self.assertRaises(InvalidValue):
            net_present_value_schedule([0.03], [100, 10])
        with self.assertRaises(InvalidValue):
            net_present_value_schedule([0.03], [-100])
        with self.assertRaises(InvalidPeriods):
            net_present_value_schedule([], [-100, 10])
        with self.assertRaises(InvalidRate):
            net_present_value_schedule([-1.0], [-100, 10])

    def test_schedule_not_finite(self):
        """Discounting at -90% over 400 periods underflows the divisor to zero."""
        with self.assertRaises(ComputationError):
            net_present_value_schedule([-0.9], [-100.0] + [1.0] * 400)


if __name__ == '__main__':
    unittest.main()
