"""
Unit tests for tolerances, approximate comparison and settings.

Version: 0.1.0
Last Updated: 2026-10-19
Status: Active
"""

import math
import os
import unittest
from unittest import mock

import numpy as np

from tvm_formulas.config import (
    DEFAULT_EPSILON,
    Settings,
    approx_equal,
    arrays_approx_equal,
    get_settings,
    is_approx_zero,
    round_fractional_periods,
    same_sign_or_zero,
)


# =============================================================================
# Approximate Comparison
# =============================================================================

class TestApproxEqual(unittest.TestCase):

    def test_absolute_tolerance(self):
        self.assertTrue(approx_equal(0.1 + 0.2, 0.3))
        self.assertTrue(approx_equal(1.0, 1.0 + DEFAULT_EPSILON / 2))
        self.assertFalse(approx_equal(1434.71, 1434.72, epsilon=0.005))
        self.assertTrue(approx_equal(1434.71, 1434.72, epsilon=0.02))

    def test_relative_tolerance_for_large_values(self):
        self.assertTrue(approx_equal(1e12, 1e12 + 1e-4))
        self.assertFalse(approx_equal(1e12, 1e12 + 1e4))

    def test_infinities_and_nan(self):
        self.assertTrue(approx_equal(math.inf, math.inf))
        self.assertFalse(approx_equal(math.inf, -math.inf))
        self.assertFalse(approx_equal(math.nan, math.nan))
        self.assertFalse(approx_equal(1.0, math.nan))

    def test_negative_tolerance_rejected(self):
        with self.assertRaises(ValueError):
            approx_equal(1.0, 1.0, epsilon=-1.0)

    def test_arrays(self):
        a = np.array([1.0, 2.0, 3.0])
        self.assertTrue(arrays_approx_equal(a, a + 1e-9))
        self.assertFalse(arrays_approx_equal(a, a + 1e-3))
        self.assertFalse(arrays_approx_equal(a, a[:2]))

    def test_signs(self):
        self.assertTrue(same_sign_or_zero(-5.0, -1.0))
        self.assertTrue(same_sign_or_zero(5.0, 0.0))
        self.assertTrue(same_sign_or_zero(-5.0, 1e-9))
        self.assertFalse(same_sign_or_zero(-5.0, 1.0))
        self.assertTrue(is_approx_zero(-1e-7))
        self.assertFalse(is_approx_zero(1e-3))


class TestRoundFractionalPeriods(unittest.TestCase):

    def test_rounds_up(self):
        self.assertEqual(round_fractional_periods(20.149), 21)
        self.assertEqual(round_fractional_periods(3.61), 4)

    def test_float_noise_does_not_add_a_period(self):
        self.assertEqual(round_fractional_periods(5.00000000001), 5)
        self.assertEqual(round_fractional_periods(4.99999999999), 5)
        self.assertEqual(round_fractional_periods(0.0), 0)


# =============================================================================
# Settings
# =============================================================================

class TestSettings(unittest.TestCase):

    def test_defaults(self):
        with mock.patch.dict(os.environ, {}, clear=True):
            settings = get_settings()
        self.assertEqual(settings, Settings())
        self.assertFalse(settings.check_invariants)
        self.assertEqual(settings.epsilon, DEFAULT_EPSILON)

    def test_environment_flags(self):
        for raw, expected in (("1", True), ("TRUE", True), (" yes ", True), ("on", True),
                              ("0", False), ("false", False), ("", False)):
            with self.subTest(raw=raw):
                with mock.patch.dict(os.environ, {"TVM_FORMULAS_CHECK_INVARIANTS": raw}):
                    self.assertEqual(get_settings().check_invariants, expected)

    def test_environment_epsilon(self):
        with mock.patch.dict(os.environ, {"TVM_FORMULAS_EPSILON": "1e-4"}):
            self.assertEqual(get_settings().epsilon, 1e-4)

    def test_bad_epsilon(self):
        with mock.patch.dict(os.environ, {"TVM_FORMULAS_EPSILON": "tiny"}):
            with self.assertRaises(ValueError):
                get_settings()
        with mock.patch.dict(os.environ, {"TVM_FORMULAS_EPSILON": "-1"}):
            with self.assertRaises(ValueError):
                get_settings()

    def test_settings_are_frozen(self):
        settings = Settings()
        with self.assertRaises(AttributeError):
            settings.epsilon = 1.0


if __name__ == '__main__':
    unittest.main()
