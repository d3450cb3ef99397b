"""
Outreach Infrastructure Repositories
====================================

SQLAlchemy repositories for notifications and ads. The notification
repository is also the queue other modules hand messages to.
"""

import datetime as dt
from typing import Any, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from seva.config import NotificationChannel, NotificationStatus, RecipientType
from seva.infrastructure.database import parse_uuid, utcnow
from seva.outreach.application.services import IAdRepository, INotificationRepository
from seva.outreach.infrastructure.models import AdModel, NotificationModel


class SQLAlchemyNotificationRepository(INotificationRepository):
    """SQLAlchemy implementation of the notification queue."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def enqueue(
        self,
        recipients: List[str],
        channel: NotificationChannel,
        message: str,
        created_by: str,
        recipient_type: RecipientType = RecipientType.INDIVIDUAL,
        recipient_ids: Optional[List[str]] = None,
        template_id: Optional[str] = None,
        scheduled_for: Optional[dt.datetime] = None,
    ) -> NotificationModel:
        model = NotificationModel(
            recipients=list(recipients),
            recipient_type=RecipientType(recipient_type).value,
            recipient_ids=list(recipient_ids or []),
            channel=NotificationChannel(channel).value,
            message=message,
            template_id=template_id,
            status=NotificationStatus.PENDING.value,
            scheduled_for=scheduled_for,
            created_by=created_by,
            created_at=utcnow(),
        )
        self._session.add(model)
        await self._session.flush()
        return model

    async def get(self, notification_id: str) -> Optional[NotificationModel]:
        notification_uuid = parse_uuid(notification_id)
        if notification_uuid is None:
            return None
        return await self._session.get(NotificationModel, notification_uuid)

    async def list(
        self,
        status: Optional[str] = None,
        channel: Optional[str] = None,
        limit: int = 100
    ) -> List[NotificationModel]:
        stmt = select(NotificationModel)
        if status:
            stmt = stmt.where(NotificationModel.status == status)
        if channel:
            stmt = stmt.where(NotificationModel.channel == channel)
        result = await self._session.execute(stmt.order_by(NotificationModel.created_at.desc()).limit(limit))
        return list(result.scalars().all())


class SQLAlchemyAdRepository(IAdRepository):
    """SQLAlchemy implementation of ad repository."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def get(self, ad_id: str) -> Optional[AdModel]:
        ad_uuid = parse_uuid(ad_id)
        if ad_uuid is None:
            return None
        return await self._session.get(AdModel, ad_uuid)

    async def create(self, **fields: Any) -> AdModel:
        model = AdModel(**fields)
        self._session.add(model)
        await self._session.flush()
        return model

    async def list(self, status: Optional[str] = None, ad_type: Optional[str] = None) -> List[AdModel]:
        stmt = select(AdModel)
        if status:
            stmt = stmt.where(AdModel.status == status)
        if ad_type:
            stmt = stmt.where(AdModel.type == ad_type)
        result = await self._session.execute(stmt.order_by(AdModel.created_at.desc()))
        return list(result.scalars().all())
