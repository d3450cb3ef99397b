"""
Operations Domain Layer
=======================

Status transition tables, SLA calculations and auto-task rules for
facilities, tasks and issues.
"""

from seva.operations.domain.rules import TaskTemplate, facility_task_for, issue_task_for
from seva.operations.domain.sla import SLACalculator, SLAResult, is_overdue
from seva.operations.domain.transitions import (
    FACILITY_TRANSITIONS,
    ISSUE_TRANSITIONS,
    TASK_TRANSITIONS,
)

__all__ = [
    "TaskTemplate",
    "facility_task_for",
    "issue_task_for",
    "SLACalculator",
    "SLAResult",
    "is_overdue",
    "FACILITY_TRANSITIONS",
    "ISSUE_TRANSITIONS",
    "TASK_TRANSITIONS",
]
