"""
Outreach Controllers (API Routes)
=================================

FastAPI routes for notifications and ads.
"""

import json
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from seva.config import Collection
from seva.identity.domain import AuthUser
from seva.identity.interfaces.dependencies import require_user
from seva.infrastructure.database import get_session
from seva.outreach.application import (
    AdCreate,
    AdResponse,
    AdService,
    AdStatusUpdate,
    DeliveryStatusUpdate,
    NotificationCreate,
    NotificationResponse,
    NotificationService,
    NotificationTemplateResponse,
)
from seva.outreach.infrastructure import SQLAlchemyAdRepository, SQLAlchemyNotificationRepository
from seva.shared.api.dependencies import get_change_feed
from seva.shared.infrastructure.events import ChangeFeed
from seva.workforce.infrastructure import SQLAlchemyStaffRepository, SQLAlchemyTeamRepository

router = APIRouter(tags=["Outreach"], dependencies=[Depends(require_user)])


NOTIFICATION_CREATE_EXAMPLE = {
    "recipient_type": "zone",
    "recipient_ids": ["North", "Ghat-3"],
    "channel": "whatsapp",
    "template_id": "emergency-alert"
}


def get_notification_service(session: AsyncSession = Depends(get_session)) -> NotificationService:
    return NotificationService(
        SQLAlchemyNotificationRepository(session),
        SQLAlchemyStaffRepository(session),
        SQLAlchemyTeamRepository(session),
    )


def get_ad_service(session: AsyncSession = Depends(get_session)) -> AdService:
    return AdService(SQLAlchemyAdRepository(session))


# ========== Notifications ==========

@router.get(
    "/notifications/templates",
    response_model=List[NotificationTemplateResponse],
    summary="Message templates"
)
async def list_templates() -> List[NotificationTemplateResponse]:
    return [
        NotificationTemplateResponse(id=t.id, name=t.name, message=t.message)
        for t in NotificationService.templates()
    ]


@router.get("/notifications", response_model=List[NotificationResponse], summary="Notifications, newest first")
async def list_notifications(
    status: Optional[str] = Query(None),
    channel: Optional[str] = Query(None),
    service: NotificationService = Depends(get_notification_service),
) -> List[NotificationResponse]:
    return [NotificationResponse.model_validate(n) for n in await service.list(status, channel)]


@router.post(
    "/notifications",
    response_model=NotificationResponse,
    status_code=201,
    summary="Compose a notification",
    description=f"""
    Resolves recipients to phone numbers:
    - **individual**: staff ids
    - **team**: team ids -> member phones
    - **zone**: zone names -> phones of staff in those zones

    Inactive staff are skipped and numbers are de-duplicated. No resulting
    recipient returns 400. The record is queued with status `pending`;
    delivery is up to the channel provider.

    **Example Request**:
    ```json
    {json.dumps(NOTIFICATION_CREATE_EXAMPLE, indent=4)}
    ```
    """
)
async def compose_notification(
    payload: NotificationCreate,
    user: AuthUser = Depends(require_user),
    session: AsyncSession = Depends(get_session),
    service: NotificationService = Depends(get_notification_service),
    feed: ChangeFeed = Depends(get_change_feed),
) -> NotificationResponse:
    notification = await service.compose(payload, user.uid)
    await session.commit()
    feed.publish(Collection.NOTIFICATIONS.value)
    return NotificationResponse.model_validate(notification)


@router.get("/notifications/{notification_id}", response_model=NotificationResponse)
async def get_notification(
    notification_id: str,
    service: NotificationService = Depends(get_notification_service),
) -> NotificationResponse:
    return NotificationResponse.model_validate(await service.get(notification_id))


@router.patch(
    "/notifications/{notification_id}/delivery",
    response_model=NotificationResponse,
    summary="Record a delivery report",
    description="pending -> sent | failed, sent -> delivered | failed. Other changes return 409."
)
async def record_delivery(
    notification_id: str,
    payload: DeliveryStatusUpdate,
    session: AsyncSession = Depends(get_session),
    service: NotificationService = Depends(get_notification_service),
    feed: ChangeFeed = Depends(get_change_feed),
) -> NotificationResponse:
    notification = await service.record_delivery(notification_id, payload)
    await session.commit()
    feed.publish(Collection.NOTIFICATIONS.value)
    return NotificationResponse.model_validate(notification)


# ========== Ads ==========

@router.get("/ads", response_model=List[AdResponse])
async def list_ads(
    status: Optional[str] = Query(None),
    type: Optional[str] = Query(None),
    service: AdService = Depends(get_ad_service),
) -> List[AdResponse]:
    return [AdResponse.from_model(ad) for ad in await service.list(status, type)]


@router.post(
    "/ads",
    response_model=AdResponse,
    status_code=201,
    summary="Create an ad",
    description="""
    Validity defaults to now .. now + 7 days; `valid_to` must be after
    `valid_from`. Sponsored ads start as `draft` and need publishing;
    announcements and emergency notices are published immediately.
    """
)
async def create_ad(
    payload: AdCreate,
    user: AuthUser = Depends(require_user),
    session: AsyncSession = Depends(get_session),
    service: AdService = Depends(get_ad_service),
    feed: ChangeFeed = Depends(get_change_feed),
) -> AdResponse:
    ad = await service.create(payload, user.uid)
    await session.commit()
    feed.publish(Collection.ADS.value)
    return AdResponse.from_model(ad)


@router.get("/ads/{ad_id}", response_model=AdResponse)
async def get_ad(ad_id: str, service: AdService = Depends(get_ad_service)) -> AdResponse:
    return AdResponse.from_model(await service.get(ad_id))


@router.patch("/ads/{ad_id}/status", response_model=AdResponse, summary="Publish or expire an ad")
async def change_ad_status(
    ad_id: str,
    payload: AdStatusUpdate,
    user: AuthUser = Depends(require_user),
    session: AsyncSession = Depends(get_session),
    service: AdService = Depends(get_ad_service),
    feed: ChangeFeed = Depends(get_change_feed),
) -> AdResponse:
    ad = await service.change_status(ad_id, payload.status, user.uid)
    await session.commit()
    feed.publish(Collection.ADS.value)
    return AdResponse.from_model(ad)


outreach_router = router
