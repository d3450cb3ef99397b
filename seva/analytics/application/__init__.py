"""
Analytics Application Layer
===========================
"""

from seva.analytics.application.dto import (
    AnalyticsSummary,
    IssueSummary,
    NotificationSummary,
    StaffSummary,
    TaskSummary,
)
from seva.analytics.application.services import (
    EXPORT_COLUMNS,
    AnalyticsService,
    IAnalyticsRepository,
    date_bounds,
)

__all__ = [
    "AnalyticsSummary",
    "IssueSummary",
    "NotificationSummary",
    "StaffSummary",
    "TaskSummary",
    "EXPORT_COLUMNS",
    "AnalyticsService",
    "IAnalyticsRepository",
    "date_bounds",
]
