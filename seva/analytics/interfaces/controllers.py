"""
Analytics Controllers (API Routes)
==================================
"""

import datetime as dt
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from seva.analytics.application import AnalyticsService, AnalyticsSummary
from seva.analytics.application.dto import DatasetStr
from seva.analytics.infrastructure import SQLAlchemyAnalyticsRepository
from seva.identity.interfaces.dependencies import require_user
from seva.infrastructure.database import get_session

router = APIRouter(prefix="/analytics", tags=["Analytics"], dependencies=[Depends(require_user)])


def get_analytics_service(session: AsyncSession = Depends(get_session)) -> AnalyticsService:
    return AnalyticsService(SQLAlchemyAnalyticsRepository(session))


@router.get(
    "/summary",
    response_model=AnalyticsSummary,
    summary="Dashboard summary",
    description="""
    Counts over an optional inclusive date range (by creation / report time):
    tasks by status and completion rate, issues by category and open count,
    on-duty staff by shift, and notifications sent (sent + delivered),
    pending and failed.
    """
)
async def analytics_summary(
    date_from: Optional[dt.date] = Query(None),
    date_to: Optional[dt.date] = Query(None),
    service: AnalyticsService = Depends(get_analytics_service),
) -> AnalyticsSummary:
    return await service.summary(date_from, date_to)


@router.get(
    "/export/{dataset}.csv",
    summary="Download a dataset as CSV",
    description="`dataset` is one of tasks, issues, staff, notifications."
)
async def export_dataset(
    dataset: DatasetStr,
    date_from: Optional[dt.date] = Query(None),
    date_to: Optional[dt.date] = Query(None),
    service: AnalyticsService = Depends(get_analytics_service),
) -> Response:
    body = await service.export_csv(dataset, date_from, date_to)
    stamp = dt.datetime.now(dt.timezone.utc).strftime("%Y%m%d%H%M%S")
    return Response(
        content=body,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{dataset}-{stamp}.csv"'}
    )


analytics_router = router
