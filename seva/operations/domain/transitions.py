"""
Status Transition Tables
========================

Closed transition tables for facility, task and issue statuses. Every
status of each enum must appear as a key; this is checked when the module
is imported.
"""

from typing import Dict, FrozenSet

from seva.config import FacilityStatus, IssueStatus, TaskStatus
from seva.core.transitions import check_exhaustive

# Any status may change to any other; re-selecting the current one is rejected.
FACILITY_TRANSITIONS: Dict[FacilityStatus, FrozenSet[FacilityStatus]] = {
    status: frozenset(s for s in FacilityStatus if s is not status)
    for status in FacilityStatus
}

TASK_TRANSITIONS: Dict[TaskStatus, FrozenSet[TaskStatus]] = {
    TaskStatus.PENDING: frozenset({TaskStatus.IN_PROGRESS}),
    TaskStatus.IN_PROGRESS: frozenset({TaskStatus.COMPLETED}),
    TaskStatus.COMPLETED: frozenset({TaskStatus.VERIFIED}),
    TaskStatus.VERIFIED: frozenset(),
}

ISSUE_TRANSITIONS: Dict[IssueStatus, FrozenSet[IssueStatus]] = {
    IssueStatus.OPEN: frozenset({IssueStatus.ASSIGNED}),
    IssueStatus.ASSIGNED: frozenset({IssueStatus.IN_PROGRESS}),
    IssueStatus.IN_PROGRESS: frozenset({IssueStatus.RESOLVED}),
    IssueStatus.RESOLVED: frozenset({IssueStatus.CLOSED}),
    IssueStatus.CLOSED: frozenset(),
}

check_exhaustive(FacilityStatus, FACILITY_TRANSITIONS)
check_exhaustive(TaskStatus, TASK_TRANSITIONS)
check_exhaustive(IssueStatus, ISSUE_TRANSITIONS)
