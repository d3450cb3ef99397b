"""Staffing arithmetic: the 1:8 rule and zone coverage."""

import unittest

from seva.config import CoverageStatus
from seva.core.exceptions import ValidationException
from seva.workforce.domain import StaffingCalculator, team_capacity_percent


class RequiredStaffTestCase(unittest.TestCase):

    def test_known_values(self):
        cases = {0: 0, 1: 1, 8: 1, 9: 2, 16: 2, 17: 3, 12000: 1500}
        for headcount, expected in cases.items():
            with self.subTest(headcount=headcount):
                self.assertEqual(StaffingCalculator.required_staff(headcount), expected)

    def test_matches_ceiling_division(self):
        for headcount in range(0, 500):
            self.assertEqual(StaffingCalculator.required_staff(headcount), -(-headcount // 8))

    def test_negative_headcount_rejected(self):
        with self.assertRaises(ValidationException):
            StaffingCalculator.required_staff(-1)


class CoverageTestCase(unittest.TestCase):

    def test_within_two_is_adequate(self):
        for assigned in (8, 9, 10, 11, 12):
            with self.subTest(assigned=assigned):
                self.assertEqual(StaffingCalculator.coverage(10, assigned).status, CoverageStatus.ADEQUATE)

    def test_understaffed_and_overstaffed(self):
        self.assertEqual(StaffingCalculator.coverage(10, 7).status, CoverageStatus.UNDERSTAFFED)
        self.assertEqual(StaffingCalculator.coverage(10, 14).status, CoverageStatus.OVERSTAFFED)

    def test_delta_is_assigned_minus_required(self):
        coverage = StaffingCalculator.coverage(1500, 1000)
        self.assertEqual(coverage.delta, -500)
        self.assertEqual(coverage.status, CoverageStatus.UNDERSTAFFED)

    def test_exact_match_for_large_zone(self):
        coverage = StaffingCalculator.coverage(StaffingCalculator.required_staff(12000), 1500)
        self.assertEqual(coverage.delta, 0)
        self.assertEqual(coverage.status, CoverageStatus.ADEQUATE)

    def test_assigned_staff_sums_shift_lists(self):
        self.assertEqual(StaffingCalculator.assigned_staff([["a", "b"], [], ["c"]]), 3)

    def test_shortfall_never_negative(self):
        self.assertEqual(StaffingCalculator.shortfall(5, 2), 3)
        self.assertEqual(StaffingCalculator.shortfall(5, 9), 0)


class TeamCapacityTestCase(unittest.TestCase):

    def test_percent_of_capacity(self):
        self.assertEqual(team_capacity_percent(3, 4), 75)

    def test_no_capacity(self):
        self.assertIsNone(team_capacity_percent(3, None))
        self.assertIsNone(team_capacity_percent(3, 0))
