"""
Auto-task Rules
===============

Which status changes and issue severities create follow-up tasks, and with
what title, priority and deadline.
"""

from dataclasses import dataclass
from typing import Optional

from seva.config import FacilityStatus, IssueSeverity, TaskPriority
from seva.operations.domain.sla import SLACalculator


@dataclass(frozen=True)
class TaskTemplate:
    title: str
    description: str
    priority: TaskPriority
    sla_minutes: int


def facility_task_for(status: FacilityStatus, facility_type: str, code: str) -> Optional[TaskTemplate]:
    """
    Follow-up task for a facility entering `status`, if any.

    maintenance -> high priority, due in 60 minutes
    full        -> medium priority, due in 120 minutes
    """
    if status is FacilityStatus.MAINTENANCE:
        return TaskTemplate(
            title="Maintenance Required",
            description=f"{facility_type} {code} requires maintenance",
            priority=TaskPriority.HIGH,
            sla_minutes=60,
        )
    if status is FacilityStatus.FULL:
        return TaskTemplate(
            title="Empty/Clean Required",
            description=f"{facility_type} {code} requires cleaning/emptying",
            priority=TaskPriority.MEDIUM,
            sla_minutes=120,
        )
    return None


def issue_task_for(severity: IssueSeverity, category: str, description: str) -> Optional[TaskTemplate]:
    """Follow-up task for a newly reported high or critical issue."""
    if severity not in (IssueSeverity.HIGH, IssueSeverity.CRITICAL):
        return None
    return TaskTemplate(
        title=f"{severity.value.upper()}: {category} issue",
        description=description,
        priority=TaskPriority.HIGH if severity is IssueSeverity.CRITICAL else TaskPriority.MEDIUM,
        sla_minutes=SLACalculator.sla_minutes(severity),
    )
