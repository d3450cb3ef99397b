"""
Analytics Application Services
==============================

Dashboard summary and CSV exports over an optional date range. The range
applies to creation timestamps (issues: reported_at); `date_to` is
inclusive.
"""

import datetime as dt
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

from seva.analytics.application.dto import (
    AnalyticsSummary,
    IssueSummary,
    NotificationSummary,
    StaffSummary,
    TaskSummary,
)
from seva.config import (
    IssueCategory,
    IssueStatus,
    NotificationStatus,
    ShiftColor,
    TaskStatus,
)
from seva.core.exceptions import ValidationException
from seva.operations.domain import SLACalculator
from seva.shared.infrastructure.exports import to_csv
from seva.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


class IAnalyticsRepository(ABC):

    @abstractmethod
    async def task_status_counts(self, start=None, end=None) -> Dict[str, int]:
        pass

    @abstractmethod
    async def issue_category_counts(self, start=None, end=None) -> Dict[str, int]:
        pass

    @abstractmethod
    async def issue_status_counts(self, start=None, end=None) -> Dict[str, int]:
        pass

    @abstractmethod
    async def notification_status_counts(self, start=None, end=None) -> Dict[str, int]:
        pass

    @abstractmethod
    async def staff_counts(self) -> Dict[str, Any]:
        """{"active": int, "on_duty_by_shift": {shift: count}} for active staff."""

    @abstractmethod
    async def rows(self, dataset: str, start=None, end=None) -> List[Any]:
        pass


EXPORT_COLUMNS = {
    "tasks": [
        "id", "title", "zone", "facility_id", "priority", "status", "assignee_type",
        "assignee_id", "due_at", "sla_minutes", "created_at", "completed_at", "verified_at",
    ],
    "issues": [
        "id", "zone", "facility_id", "category", "severity", "status", "description",
        "reported_at", "resolved_at", "sla_deadline", "sla_status",
    ],
    "staff": [
        "id", "name", "phone", "email", "role", "shift", "zone", "on_duty", "is_active", "created_at",
    ],
    "notifications": [
        "id", "channel", "recipient_type", "recipients", "message", "template_id",
        "status", "scheduled_for", "created_at", "sent_at",
    ],
}


def date_bounds(
    date_from: Optional[dt.date],
    date_to: Optional[dt.date]
) -> Tuple[Optional[dt.datetime], Optional[dt.datetime]]:
    """UTC [start, end) datetimes for an inclusive date range."""
    if date_from and date_to and date_to < date_from:
        raise ValidationException("Invalid date range", {"date_to": "date_to must not be before date_from"})
    start = dt.datetime.combine(date_from, dt.time.min, dt.timezone.utc) if date_from else None
    end = (
        dt.datetime.combine(date_to + dt.timedelta(days=1), dt.time.min, dt.timezone.utc)
        if date_to else None
    )
    return start, end


def _percent(part: int, whole: int) -> int:
    return round(part / max(1, whole) * 100)


class AnalyticsService:
    """Read-only reporting."""

    def __init__(self, repository: IAnalyticsRepository):
        self._repo = repository

    async def summary(
        self,
        date_from: Optional[dt.date] = None,
        date_to: Optional[dt.date] = None
    ) -> AnalyticsSummary:
        start, end = date_bounds(date_from, date_to)

        task_counts = await self._repo.task_status_counts(start, end)
        by_status = {s.value: task_counts.get(s.value, 0) for s in TaskStatus}
        task_total = sum(by_status.values())
        finished = by_status[TaskStatus.COMPLETED.value] + by_status[TaskStatus.VERIFIED.value]

        category_counts = await self._repo.issue_category_counts(start, end)
        by_category = {c.value: category_counts.get(c.value, 0) for c in IssueCategory}
        issue_status = await self._repo.issue_status_counts(start, end)

        staff = await self._repo.staff_counts()
        by_shift = {s.value: staff["on_duty_by_shift"].get(s.value, 0) for s in ShiftColor}

        notification_counts = await self._repo.notification_status_counts(start, end)

        return AnalyticsSummary(
            date_from=date_from,
            date_to=date_to,
            tasks=TaskSummary(
                total=task_total,
                by_status=by_status,
                completion_rate=_percent(finished, task_total),
            ),
            issues=IssueSummary(
                total=sum(by_category.values()),
                by_category=by_category,
                open=issue_status.get(IssueStatus.OPEN.value, 0),
            ),
            staff=StaffSummary(
                active=staff["active"],
                on_duty=sum(by_shift.values()),
                on_duty_by_shift=by_shift,
            ),
            notifications=NotificationSummary(
                total=sum(notification_counts.values()),
                sent=notification_counts.get(NotificationStatus.SENT.value, 0)
                + notification_counts.get(NotificationStatus.DELIVERED.value, 0),
                pending=notification_counts.get(NotificationStatus.PENDING.value, 0),
                failed=notification_counts.get(NotificationStatus.FAILED.value, 0),
            ),
        )

    async def export_csv(
        self,
        dataset: str,
        date_from: Optional[dt.date] = None,
        date_to: Optional[dt.date] = None,
        now: Optional[dt.datetime] = None
    ) -> str:
        if dataset not in EXPORT_COLUMNS:
            raise ValidationException(
                "Unknown dataset", {"dataset": f"Expected one of {', '.join(EXPORT_COLUMNS)}"}
            )
        start, end = date_bounds(date_from, date_to)
        columns = EXPORT_COLUMNS[dataset]
        records = await self._repo.rows(dataset, start, end)

        rows = []
        for record in records:
            row = {column: getattr(record, column, None) for column in columns}
            if dataset == "issues":
                sla = SLACalculator.evaluate(record.severity, record.reported_at, record.status, now)
                row["sla_deadline"] = sla.deadline
                row["sla_status"] = sla.status
            rows.append(row)

        logger.info("Analytics export", extra={"dataset": dataset, "rows": len(rows)})
        return to_csv(columns, rows)
