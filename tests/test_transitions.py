"""Status transition tables and follow-up task rules."""

import unittest
from enum import Enum

from seva.config import (
    AdStatus,
    FacilityStatus,
    IssueSeverity,
    IssueStatus,
    NotificationStatus,
    TaskPriority,
    TaskStatus,
)
from seva.core.exceptions import InvalidTransitionException
from seva.core.transitions import check_exhaustive, ensure_transition, next_statuses
from seva.operations.domain import (
    FACILITY_TRANSITIONS,
    ISSUE_TRANSITIONS,
    TASK_TRANSITIONS,
    facility_task_for,
    issue_task_for,
)
from seva.outreach.domain import AD_TRANSITIONS, DELIVERY_TRANSITIONS


class TransitionTablesTestCase(unittest.TestCase):

    def test_tables_cover_every_status(self):
        for enum_cls, table in (
            (FacilityStatus, FACILITY_TRANSITIONS),
            (TaskStatus, TASK_TRANSITIONS),
            (IssueStatus, ISSUE_TRANSITIONS),
            (NotificationStatus, DELIVERY_TRANSITIONS),
            (AdStatus, AD_TRANSITIONS),
        ):
            with self.subTest(enum=enum_cls.__name__):
                self.assertEqual(set(table), set(enum_cls))

    def test_check_exhaustive_reports_missing_rows(self):
        class Light(str, Enum):
            RED = "red"
            GREEN = "green"

        with self.assertRaises(RuntimeError):
            check_exhaustive(Light, {Light.RED: frozenset({Light.GREEN})})

    def test_task_lifecycle_is_linear(self):
        self.assertEqual(next_statuses(TASK_TRANSITIONS, TaskStatus.PENDING), ["in-progress"])
        self.assertEqual(next_statuses(TASK_TRANSITIONS, TaskStatus.COMPLETED), ["verified"])
        self.assertEqual(next_statuses(TASK_TRANSITIONS, TaskStatus.VERIFIED), [])

    def test_task_cannot_skip_a_step(self):
        with self.assertRaises(InvalidTransitionException) as ctx:
            ensure_transition("Task", TASK_TRANSITIONS, TaskStatus.PENDING, TaskStatus.COMPLETED)
        self.assertEqual(ctx.exception.current, "pending")
        self.assertEqual(ctx.exception.requested, "completed")

    def test_issue_lifecycle(self):
        path = [IssueStatus.OPEN, IssueStatus.ASSIGNED, IssueStatus.IN_PROGRESS, IssueStatus.RESOLVED, IssueStatus.CLOSED]
        for current, requested in zip(path, path[1:]):
            self.assertIs(ensure_transition("Issue", ISSUE_TRANSITIONS, current, requested), requested)
        with self.assertRaises(InvalidTransitionException):
            ensure_transition("Issue", ISSUE_TRANSITIONS, IssueStatus.CLOSED, IssueStatus.OPEN)

    def test_facility_any_change_but_not_same(self):
        self.assertIs(
            ensure_transition("Facility", FACILITY_TRANSITIONS, FacilityStatus.OUT_OF_ORDER, FacilityStatus.AVAILABLE),
            FacilityStatus.AVAILABLE,
        )
        with self.assertRaises(InvalidTransitionException):
            ensure_transition("Facility", FACILITY_TRANSITIONS, FacilityStatus.FULL, FacilityStatus.FULL)

    def test_delivery_reports(self):
        self.assertEqual(next_statuses(DELIVERY_TRANSITIONS, NotificationStatus.PENDING), ["sent", "failed"])
        self.assertEqual(next_statuses(DELIVERY_TRANSITIONS, NotificationStatus.SENT), ["delivered", "failed"])
        self.assertEqual(next_statuses(DELIVERY_TRANSITIONS, NotificationStatus.DELIVERED), [])

    def test_ads(self):
        self.assertEqual(next_statuses(AD_TRANSITIONS, AdStatus.DRAFT), ["published", "expired"])
        self.assertEqual(next_statuses(AD_TRANSITIONS, AdStatus.EXPIRED), [])


class FollowUpTaskRulesTestCase(unittest.TestCase):

    def test_maintenance_task(self):
        template = facility_task_for(FacilityStatus.MAINTENANCE, "toilet", "T7")
        self.assertEqual(template.title, "Maintenance Required")
        self.assertEqual(template.priority, TaskPriority.HIGH)
        self.assertEqual(template.sla_minutes, 60)
        self.assertEqual(template.description, "toilet T7 requires maintenance")

    def test_full_task(self):
        template = facility_task_for(FacilityStatus.FULL, "bin", "B2")
        self.assertEqual(template.title, "Empty/Clean Required")
        self.assertEqual(template.priority, TaskPriority.MEDIUM)
        self.assertEqual(template.sla_minutes, 120)

    def test_other_statuses_create_nothing(self):
        for status in (FacilityStatus.AVAILABLE, FacilityStatus.OCCUPIED, FacilityStatus.OUT_OF_ORDER):
            self.assertIsNone(facility_task_for(status, "toilet", "T7"))

    def test_issue_tasks_only_for_high_and_critical(self):
        self.assertIsNone(issue_task_for(IssueSeverity.LOW, "cleanliness", "litter"))
        self.assertIsNone(issue_task_for(IssueSeverity.MEDIUM, "cleanliness", "litter"))

        critical = issue_task_for(IssueSeverity.CRITICAL, "safety", "crowd crush risk")
        self.assertEqual(critical.title, "CRITICAL: safety issue")
        self.assertEqual(critical.priority, TaskPriority.HIGH)
        self.assertEqual(critical.sla_minutes, 60)

        high = issue_task_for(IssueSeverity.HIGH, "maintenance", "tap broken")
        self.assertEqual(high.priority, TaskPriority.MEDIUM)
        self.assertEqual(high.sla_minutes, 120)
