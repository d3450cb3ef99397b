"""Issue SLA deadlines and task overdue checks."""

import datetime as dt
import unittest

from seva.config import SLAState
from seva.operations.domain import SLACalculator, is_overdue

REPORTED = dt.datetime(2025, 1, 14, 6, 0, tzinfo=dt.timezone.utc)


class SLAMinutesTestCase(unittest.TestCase):

    def test_severity_table(self):
        self.assertEqual(SLACalculator.sla_minutes("critical"), 60)
        self.assertEqual(SLACalculator.sla_minutes("high"), 120)
        self.assertEqual(SLACalculator.sla_minutes("medium"), 240)
        self.assertEqual(SLACalculator.sla_minutes("low"), 480)

    def test_deadline(self):
        self.assertEqual(SLACalculator.deadline(REPORTED, "high"), REPORTED + dt.timedelta(hours=2))


class SLAStatusTestCase(unittest.TestCase):

    def test_breached_after_deadline(self):
        now = REPORTED + dt.timedelta(minutes=121)
        self.assertEqual(SLACalculator.status("high", REPORTED, "open", now), SLAState.BREACHED)

    def test_breached_regardless_of_how_long_ago(self):
        now = REPORTED + dt.timedelta(days=30)
        result = SLACalculator.evaluate("low", REPORTED, "in-progress", now)
        self.assertEqual(result.status, SLAState.BREACHED)
        self.assertLess(result.minutes_remaining, 0)

    def test_exactly_at_deadline_is_not_breached(self):
        now = REPORTED + dt.timedelta(minutes=240)
        self.assertEqual(SLACalculator.status("medium", REPORTED, "open", now), SLAState.CRITICAL)

    def test_critical_inside_last_hour(self):
        now = REPORTED + dt.timedelta(minutes=200)
        self.assertEqual(SLACalculator.status("medium", REPORTED, "assigned", now), SLAState.CRITICAL)

    def test_on_track(self):
        now = REPORTED + dt.timedelta(minutes=10)
        result = SLACalculator.evaluate("low", REPORTED, "open", now)
        self.assertEqual(result.status, SLAState.ON_TRACK)
        self.assertEqual(result.minutes_remaining, 470)

    def test_resolved_and_closed_are_met(self):
        now = REPORTED + dt.timedelta(days=2)
        for status in ("resolved", "closed"):
            with self.subTest(status=status):
                self.assertEqual(SLACalculator.status("critical", REPORTED, status, now), SLAState.MET)


class OverdueTestCase(unittest.TestCase):

    def test_pending_past_due(self):
        self.assertTrue(is_overdue(REPORTED, "pending", REPORTED + dt.timedelta(seconds=1)))

    def test_finished_tasks_never_overdue(self):
        later = REPORTED + dt.timedelta(days=1)
        self.assertFalse(is_overdue(REPORTED, "completed", later))
        self.assertFalse(is_overdue(REPORTED, "verified", later))

    def test_not_yet_due(self):
        self.assertFalse(is_overdue(REPORTED, "in-progress", REPORTED - dt.timedelta(minutes=1)))
