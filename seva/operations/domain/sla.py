"""
SLA Calculations
================

Pure deadline and status functions for issues and tasks. SLA status is
derived at query time and never stored.
"""

import datetime as dt
from dataclasses import dataclass
from typing import Optional, Union

from seva.config import (
    ISSUE_SLA_MINUTES,
    SLA_CRITICAL_WINDOW_MINUTES,
    IssueSeverity,
    IssueStatus,
    SLAState,
    TaskStatus,
)

CLOSED_ISSUE_STATUSES = frozenset({IssueStatus.RESOLVED, IssueStatus.CLOSED})
FINISHED_TASK_STATUSES = frozenset({TaskStatus.COMPLETED, TaskStatus.VERIFIED})


@dataclass(frozen=True)
class SLAResult:
    deadline: dt.datetime
    status: SLAState
    minutes_remaining: int


class SLACalculator:
    """
    Domain service for issue SLA deadlines.

    Severity table: critical 60, high 120, medium 240, low 480 minutes.
    """

    @staticmethod
    def sla_minutes(severity: Union[IssueSeverity, str]) -> int:
        return ISSUE_SLA_MINUTES[IssueSeverity(severity)]

    @staticmethod
    def deadline(reported_at: dt.datetime, severity: Union[IssueSeverity, str]) -> dt.datetime:
        return reported_at + dt.timedelta(minutes=SLACalculator.sla_minutes(severity))

    @staticmethod
    def status(
        severity: Union[IssueSeverity, str],
        reported_at: dt.datetime,
        issue_status: Union[IssueStatus, str],
        now: Optional[dt.datetime] = None
    ) -> SLAState:
        """
        met: resolved or closed.
        breached: now is past the deadline, however long ago.
        critical: under an hour left.
        on-track: otherwise.
        """
        return SLACalculator.evaluate(severity, reported_at, issue_status, now).status

    @staticmethod
    def evaluate(
        severity: Union[IssueSeverity, str],
        reported_at: dt.datetime,
        issue_status: Union[IssueStatus, str],
        now: Optional[dt.datetime] = None
    ) -> SLAResult:
        now = now or dt.datetime.now(dt.timezone.utc)
        deadline = SLACalculator.deadline(reported_at, severity)
        remaining = deadline - now
        minutes_remaining = int(remaining.total_seconds() // 60)

        if IssueStatus(issue_status) in CLOSED_ISSUE_STATUSES:
            state = SLAState.MET
        elif now > deadline:
            state = SLAState.BREACHED
        elif remaining < dt.timedelta(minutes=SLA_CRITICAL_WINDOW_MINUTES):
            state = SLAState.CRITICAL
        else:
            state = SLAState.ON_TRACK

        return SLAResult(deadline=deadline, status=state, minutes_remaining=minutes_remaining)


def is_overdue(
    due_at: Optional[dt.datetime],
    task_status: Union[TaskStatus, str],
    now: Optional[dt.datetime] = None
) -> bool:
    """A task is overdue when its due time has passed and it is not finished."""
    if due_at is None or TaskStatus(task_status) in FINISHED_TASK_STATUSES:
        return False
    return due_at < (now or dt.datetime.now(dt.timezone.utc))
