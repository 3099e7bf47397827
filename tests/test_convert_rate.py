"""
Unit tests for rate conversions between APR, EPR and EAR.

Reference values are spreadsheet results at 12 compounding periods per year.
Every conversion is checked in both directions so that a pair of functions
cannot drift apart.

Version: 0.1.0
Last Updated: 2026-10-19
Status: Active

================================================================================
NOTATION
================================================================================

    APR = annual percentage rate (nominal)
    EPR = effective periodic rate = APR / n
    EAR = effective annual rate   = (1 + EPR)^n - 1
    n   = compounding periods per year

================================================================================
"""

import math
import unittest
import warnings

from tvm_formulas.config import SYMMETRY_EPSILON, approx_equal
from tvm_formulas.convert_rate import (
    RateKind,
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
from tvm_formulas.errors import (
    ComputationError,
    InvalidCompoundingPeriods,
    InvalidPeriods,
    InvalidRate,
    TvmWarning,
)

# =============================================================================
# Test Parameters
# =============================================================================

DECIMAL_PLACES_FOR_ASSERTIONS: int = 6  # spreadsheet references carry ~10 digits

# (apr, epr, ear) at 12 compounding periods
SPREADSHEET_RATES_12: list[tuple[float, float, float]] = [
    (0.034, 0.00283333333, 0.0345348693603),
    (-0.034, -0.002833333333, -0.03347513889),
    (1.0, 0.08333333333, 1.6130352902247),
    (-1.0, -0.083333333333, -0.64800437199),
    (2.1, 0.175, 5.9255520766347),
    (-2.1, -0.175, -0.90058603794),
]

# Module-level shared data (populated by setUpModule)
SYMMETRY_CASES: list[tuple[float, int]] = []


# =============================================================================
# Module Setup/Teardown
# =============================================================================

def setUpModule():
    """Build the rate x compounding-frequency grid for round-trip checks."""
    rates = [0.034, -0.034, 0.00283333333, -0.00283333333, 0.0345348693603, 0.0, 0.00001, 0.75]
    compounding = [1, 2, 3, 4, 6, 12, 24, 52, 365]
    SYMMETRY_CASES.clear()
    for rate in rates:
        for n in compounding:
            SYMMETRY_CASES.append((rate, n))

    if not SYMMETRY_CASES:
        raise RuntimeError("setUpModule failed: No symmetry cases were created")


def tearDownModule():
    """Clean up module-level data."""
    SYMMETRY_CASES.clear()


# =============================================================================
# Test Classes
# =============================================================================

class TestSpreadsheetReferenceValues(unittest.TestCase):
    """All six conversions agree with spreadsheet values at n = 12."""

    def test_all_conversions_match_reference(self):
        for apr, epr, ear in SPREADSHEET_RATES_12:
            with self.subTest(apr=apr):
                with warnings.catch_warnings():
                    warnings.simplefilter("ignore", TvmWarning)
                    self.assertAlmostEqual(apr_to_epr(apr, 12), epr, places=DECIMAL_PLACES_FOR_ASSERTIONS)
                    self.assertAlmostEqual(apr_to_ear(apr, 12), ear, places=DECIMAL_PLACES_FOR_ASSERTIONS)
                    self.assertAlmostEqual(epr_to_apr(epr, 12), apr, places=DECIMAL_PLACES_FOR_ASSERTIONS)
                    self.assertAlmostEqual(epr_to_ear(epr, 12), ear, places=DECIMAL_PLACES_FOR_ASSERTIONS)
                    self.assertAlmostEqual(ear_to_apr(ear, 12), apr, places=DECIMAL_PLACES_FOR_ASSERTIONS)
                    self.assertAlmostEqual(ear_to_epr(ear, 12), epr, places=DECIMAL_PLACES_FOR_ASSERTIONS)

    def test_single_compounding_period_is_identity(self):
        """With n = 1 the three rates coincide."""
        self.assertEqual(apr_to_epr(0.05, 1), 0.05)
        self.assertAlmostEqual(apr_to_ear(0.05, 1), 0.05, places=12)
        self.assertAlmostEqual(ear_to_apr(0.05, 1), 0.05, places=12)


class TestConversionSymmetry(unittest.TestCase):
    """Converting there and back returns the input."""

    def test_apr_round_trips(self):
        for rate, n in SYMMETRY_CASES:
            with self.subTest(rate=rate, n=n):
                self.assertTrue(approx_equal(epr_to_apr(apr_to_epr(rate, n), n), rate, SYMMETRY_EPSILON))
                self.assertTrue(approx_equal(ear_to_apr(apr_to_ear(rate, n), n), rate, SYMMETRY_EPSILON))

    def test_epr_round_trips(self):
        for rate, n in SYMMETRY_CASES:
            with self.subTest(rate=rate, n=n):
                self.assertTrue(approx_equal(apr_to_epr(epr_to_apr(rate, n), n), rate, SYMMETRY_EPSILON))
                self.assertTrue(approx_equal(ear_to_epr(epr_to_ear(rate, n), n), rate, SYMMETRY_EPSILON))

    def test_ear_round_trips(self):
        for rate, n in SYMMETRY_CASES:
            with self.subTest(rate=rate, n=n):
                self.assertTrue(approx_equal(apr_to_ear(ear_to_apr(rate, n), n), rate, SYMMETRY_EPSILON))
                self.assertTrue(approx_equal(epr_to_ear(ear_to_epr(rate, n), n), rate, SYMMETRY_EPSILON))

    def test_continuous_round_trip(self):
        for rate in (0.034, -0.034, 0.0, 0.5):
            with self.subTest(rate=rate):
                self.assertTrue(approx_equal(ear_to_apr_continuous(apr_to_ear_continuous(rate)), rate,
                                             SYMMETRY_EPSILON))


class TestContinuousCompounding(unittest.TestCase):

    def test_apr_to_ear_continuous(self):
        self.assertAlmostEqual(apr_to_ear_continuous(0.034), math.exp(0.034) - 1.0, places=12)
        self.assertAlmostEqual(apr_to_ear_continuous(-0.034), math.exp(-0.034) - 1.0, places=12)

    def test_continuous_is_limit_of_frequent_compounding(self):
        """EAR grows with n and stays below the continuous EAR."""
        continuous = apr_to_ear_continuous(0.034)
        previous = 0.0
        for n in (1, 4, 12, 52, 365):
            with self.subTest(n=n):
                ear = apr_to_ear(0.034, n)
                self.assertGreater(ear, previous)
                self.assertLess(ear, continuous)
                previous = ear
        self.assertAlmostEqual(apr_to_ear(0.034, 365), continuous, places=5)

    def test_ear_to_apr_continuous_rejects_total_loss(self):
        with self.assertRaises(InvalidRate):
            ear_to_apr_continuous(-1.0)


class TestConvertRateRecord(unittest.TestCase):
    """convert_rate() fills in every representation plus formulas."""

    def test_from_apr(self):
        conversion = convert_rate(0.034, 12, RateKind.APR)
        self.assertIs(conversion.input_kind, RateKind.APR)
        self.assertEqual(conversion.apr, 0.034)
        self.assertAlmostEqual(conversion.epr, 0.00283333333, places=10)
        self.assertAlmostEqual(conversion.ear, 0.0345348693603, places=10)
        self.assertEqual(conversion.apr_formula, "")
        self.assertEqual(conversion.epr_formula, "0.034000 / 12")
        self.assertEqual(conversion.ear_formula, "(1 + (0.034000 / 12))^12 - 1")
        self.assertFalse(conversion.continuous_compounding)
        self.assertEqual(conversion.compounding_periods, 12)

    def test_from_epr_string_kind(self):
        conversion = convert_rate(0.00283333333, 12, "epr")
        self.assertIs(conversion.input_kind, RateKind.EPR)
        self.assertAlmostEqual(conversion.apr, 0.034, places=8)
        self.assertEqual(conversion.epr_formula, "")
        self.assertEqual(conversion.apr_formula, "0.002833 * 12")

    def test_from_ear(self):
        conversion = convert_rate(0.0345348693603, 12, RateKind.EAR)
        self.assertAlmostEqual(conversion.apr, 0.034, places=10)
        self.assertAlmostEqual(conversion.epr, 0.00283333333, places=10)
        self.assertEqual(conversion.ear_formula, "")

    def test_in_percent(self):
        percent = convert_rate(0.034, 12, RateKind.APR).in_percent()
        self.assertEqual(percent["apr"], "3.4000%")
        self.assertEqual(percent["epr"], "0.2833%")
        self.assertEqual(percent["ear"], "3.4535%")

    def test_continuous_record(self):
        conversion = convert_rate_continuous(0.034, RateKind.APR)
        self.assertTrue(conversion.continuous_compounding)
        self.assertIsNone(conversion.compounding_periods)
        self.assertTrue(math.isnan(conversion.epr))
        self.assertAlmostEqual(conversion.ear, math.expm1(0.034), places=12)
        self.assertEqual(conversion.in_percent()["epr"], "NaN")

    def test_continuous_rejects_epr(self):
        with self.assertRaises(ValueError):
            convert_rate_continuous(0.034, RateKind.EPR)


class TestConversionErrorsAndWarnings(unittest.TestCase):

    def test_zero_compounding_periods(self):
        with self.assertRaises(InvalidCompoundingPeriods):
            apr_to_epr(0.034, 0)

    def test_compounding_error_is_both_rate_and_periods_error(self):
        with self.assertRaises(InvalidRate):
            apr_to_ear(0.034, -12)
        with self.assertRaises(InvalidPeriods):
            ear_to_epr(0.034, 0)

    def test_fractional_compounding_periods(self):
        with self.assertRaises(InvalidCompoundingPeriods):
            epr_to_ear(0.01, 2.5)

    def test_non_finite_rate(self):
        for bad in (math.nan, math.inf, -math.inf):
            with self.subTest(rate=bad):
                with self.assertRaises(InvalidRate):
                    apr_to_epr(bad, 12)

    def test_ear_at_total_loss(self):
        with self.assertRaises(InvalidRate):
            ear_to_epr(-1.0, 12)

    def test_large_rate_warns(self):
        with self.assertWarns(TvmWarning):
            apr_to_epr(1.5, 12)

    def test_many_compounding_periods_warns(self):
        with self.assertWarns(TvmWarning):
            apr_to_ear(0.034, 780)

    def test_ordinary_inputs_do_not_warn(self):
        with warnings.catch_warnings():
            warnings.simplefilter("error", TvmWarning)
            apr_to_ear(0.034, 12)
            ear_to_apr(0.0345, 365)

    def test_apr_beyond_total_loss_per_period_mirrors(self):
        """1 + apr/n <= 0 has no real power; the mirrored rate is returned with a warning."""
        with self.assertWarns(TvmWarning):
            ear = apr_to_ear(-24.0, 12)
        self.assertAlmostEqual(ear, -(3.0 ** 12 - 1.0), places=6)

    def test_effective_rate_overflow(self):
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", TvmWarning)
            with self.assertRaises(ComputationError):
                epr_to_ear(10.0, 400)
            with self.assertRaises(ComputationError):
                apr_to_ear_continuous(1000.0)


if __name__ == '__main__':
    unittest.main()
