"""
Analytics Repository
====================

Read-only aggregate queries across the operational tables.
"""

import datetime as dt
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from seva.analytics.application.services import IAnalyticsRepository
from seva.operations.infrastructure.models import IssueModel, TaskModel
from seva.outreach.infrastructure.models import NotificationModel
from seva.workforce.infrastructure.models import StaffModel

# Dataset name -> (model, timestamp column the date range applies to)
DATASETS = {
    "tasks": (TaskModel, TaskModel.created_at),
    "issues": (IssueModel, IssueModel.reported_at),
    "staff": (StaffModel, StaffModel.created_at),
    "notifications": (NotificationModel, NotificationModel.created_at),
}


def _in_range(column, start: Optional[dt.datetime], end: Optional[dt.datetime]) -> list:
    conditions = []
    if start is not None:
        conditions.append(column >= start)
    if end is not None:
        conditions.append(column < end)
    return conditions


class SQLAlchemyAnalyticsRepository(IAnalyticsRepository):
    """Aggregates for the analytics dashboard."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def _grouped_count(self, column, time_column, start, end) -> Dict[str, int]:
        stmt = (
            select(column, func.count())
            .where(*_in_range(time_column, start, end))
            .group_by(column)
        )
        result = await self._session.execute(stmt)
        return {key: count for key, count in result.all()}

    async def task_status_counts(self, start=None, end=None) -> Dict[str, int]:
        return await self._grouped_count(TaskModel.status, TaskModel.created_at, start, end)

    async def issue_category_counts(self, start=None, end=None) -> Dict[str, int]:
        return await self._grouped_count(IssueModel.category, IssueModel.reported_at, start, end)

    async def issue_status_counts(self, start=None, end=None) -> Dict[str, int]:
        return await self._grouped_count(IssueModel.status, IssueModel.reported_at, start, end)

    async def notification_status_counts(self, start=None, end=None) -> Dict[str, int]:
        return await self._grouped_count(NotificationModel.status, NotificationModel.created_at, start, end)

    async def staff_counts(self) -> Dict[str, Any]:
        active = await self._session.scalar(
            select(func.count()).select_from(StaffModel).where(StaffModel.is_active.is_(True))
        )
        result = await self._session.execute(
            select(StaffModel.shift, func.count())
            .where(StaffModel.is_active.is_(True), StaffModel.on_duty.is_(True))
            .group_by(StaffModel.shift)
        )
        by_shift = {shift: count for shift, count in result.all()}
        return {"active": int(active or 0), "on_duty_by_shift": by_shift}

    async def rows(self, dataset: str, start=None, end=None) -> List[Any]:
        model, time_column = DATASETS[dataset]
        stmt = select(model).where(*_in_range(time_column, start, end)).order_by(time_column.desc())
        result = await self._session.execute(stmt)
        return list(result.scalars().all())
