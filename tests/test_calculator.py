"""Tests for installment math."""
import math
import os
import sys
import unittest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from microloan.calculator import (
    compute_installment,
    total_interest,
    total_payable,
    amortization_schedule,
    monthly_rate,
)
from microloan.exceptions import InvalidCalculationInputError


class TestComputeInstallment(unittest.TestCase):

    def test_zero_rate_is_simple_division(self):
        for principal, term in [(1200, 12), (1000, 3), (99.5, 7), (100000, 1)]:
            self.assertEqual(compute_installment(principal, 0, term), principal / term)

    def test_known_amortized_value(self):
        """5000 at 5% over 12 months is about 428.04 a month."""
        emi = compute_installment(5000, 5, 12)
        self.assertAlmostEqual(emi, 428.04, delta=0.01)

    def test_single_month_repays_principal_plus_one_month_interest(self):
        emi = compute_installment(1000, 12, 1)
        self.assertAlmostEqual(emi, 1010.0, places=9)

    def test_payable_minus_interest_is_principal(self):
        for principal, rate, term in [(5000, 5, 12), (1, 100, 360), (75000, 18.5, 24), (250, 0, 5)]:
            emi = compute_installment(principal, rate, term)
            payable = total_payable(emi, term)
            interest = total_interest(emi, term, principal)
            self.assertAlmostEqual(payable - interest, principal, places=6)

    def test_invalid_inputs_raise(self):
        bad_inputs = [(0, 5, 12), (-100, 5, 12), (1000, 5, 0), (1000, 5, -3), (1000, -0.5, 12)]
        for args in bad_inputs:
            with self.assertRaises(InvalidCalculationInputError):
                compute_installment(*args)

    def test_invalid_input_error_is_value_error(self):
        with self.assertRaises(ValueError) as context:
            compute_installment(0, 5, 12)
        self.assertEqual(context.exception.details['principal'], 0)

    def test_no_rounding_is_applied(self):
        emi = compute_installment(1000, 0, 3)
        self.assertEqual(emi, 1000 / 3)

    def test_tiny_rate_matches_simple_division(self):
        for rate in (1e-14, 1e-12, 1e-300):
            emi = compute_installment(1200, rate, 12)
            self.assertTrue(math.isfinite(emi), rate)
            self.assertAlmostEqual(emi, 100.0, places=6)

    def test_long_term_tends_to_interest_only(self):
        """With (1+r)^n huge the installment is just the monthly interest."""
        emi = compute_installment(1000, 100, 10000)
        self.assertTrue(math.isfinite(emi))
        self.assertAlmostEqual(emi, 1000 * 100 / 1200, places=9)

        emi = compute_installment(5000, 5, 100000)
        self.assertTrue(math.isfinite(emi))
        self.assertAlmostEqual(emi, 5000 * monthly_rate(5), places=9)

    def test_monthly_rate(self):
        self.assertAlmostEqual(monthly_rate(12), 0.01)
        self.assertEqual(monthly_rate(0), 0)


class TestAmortizationSchedule(unittest.TestCase):

    def test_schedule_length_and_final_balance(self):
        rows = amortization_schedule(5000, 5, 12)
        self.assertEqual(len(rows), 12)
        self.assertEqual([r.period for r in rows], list(range(1, 13)))
        self.assertEqual(rows[-1].remaining_balance, 0.0)

    def test_principal_portions_sum_to_principal(self):
        rows = amortization_schedule(75000, 18.5, 24)
        self.assertAlmostEqual(sum(r.principal_portion for r in rows), 75000, places=6)

    def test_interest_decreases_over_time(self):
        rows = amortization_schedule(5000, 5, 12)
        interests = [r.interest_portion for r in rows]
        self.assertEqual(interests, sorted(interests, reverse=True))
        self.assertAlmostEqual(rows[0].interest_portion, 5000 * 0.05 / 12, places=9)

    def test_zero_rate_schedule_has_no_interest(self):
        rows = amortization_schedule(1200, 0, 12)
        for row in rows:
            self.assertEqual(row.interest_portion, 0)
            self.assertAlmostEqual(row.payment, 100.0)

    def test_tiny_rate_schedule_is_finite(self):
        rows = amortization_schedule(1200, 1e-14, 12)
        self.assertTrue(all(math.isfinite(r.payment) and math.isfinite(r.remaining_balance)
                            for r in rows))
        self.assertEqual(rows[-1].remaining_balance, 0.0)
        self.assertAlmostEqual(sum(r.principal_portion for r in rows), 1200, places=6)

    def test_long_term_schedule_is_finite(self):
        rows = amortization_schedule(1000, 100, 10000)
        self.assertEqual(len(rows), 10000)
        for row in rows:
            self.assertTrue(math.isfinite(row.payment))
            self.assertTrue(math.isfinite(row.remaining_balance))
        self.assertAlmostEqual(rows[0].interest_portion, 1000 * 100 / 1200, places=9)
        self.assertEqual(rows[-1].remaining_balance, 0.0)

    def test_invalid_schedule_inputs_raise(self):
        with self.assertRaises(InvalidCalculationInputError):
            amortization_schedule(1000, 5, 0)


if __name__ == '__main__':
    unittest.main()
