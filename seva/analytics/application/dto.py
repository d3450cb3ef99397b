"""
Analytics Application DTOs
==========================
"""

import datetime as dt
from typing import Dict, Literal, Optional

from pydantic import BaseModel, Field

DatasetStr = Literal["tasks", "issues", "staff", "notifications"]


class TaskSummary(BaseModel):
    total: int
    by_status: Dict[str, int]
    completion_rate: int = Field(..., description="Completed + verified as a rounded percentage")


class IssueSummary(BaseModel):
    total: int
    by_category: Dict[str, int]
    open: int


class StaffSummary(BaseModel):
    active: int
    on_duty: int
    on_duty_by_shift: Dict[str, int]


class NotificationSummary(BaseModel):
    total: int
    sent: int = Field(..., description="Sent or delivered")
    pending: int
    failed: int


class AnalyticsSummary(BaseModel):
    date_from: Optional[dt.date] = None
    date_to: Optional[dt.date] = None
    tasks: TaskSummary
    issues: IssueSummary
    staff: StaffSummary
    notifications: NotificationSummary
