"""
Outreach Application Services
=============================

Notification composition and ad management.

Recipients are resolved through the workforce repositories; only active
staff with a phone number receive messages.
"""

import datetime as dt
from abc import ABC, abstractmethod
from typing import Any, List, Optional, Sequence

from seva.config import (
    AdStatus,
    AdType,
    NotificationChannel,
    NotificationStatus,
    RecipientType,
)
from seva.core.exceptions import ResourceNotFoundException, ValidationException
from seva.core.transitions import ensure_transition
from seva.outreach.application.dto import AdCreate, DeliveryStatusUpdate, NotificationCreate
from seva.outreach.domain import (
    AD_TRANSITIONS,
    DELIVERY_TRANSITIONS,
    NOTIFICATION_TEMPLATES,
    NotificationTemplate,
    get_template,
)
from seva.shared.infrastructure.logging import get_logger
from seva.workforce.application.services import INotificationQueue, IStaffRepository, ITeamRepository

logger = get_logger(__name__)

AD_DEFAULT_VALIDITY = dt.timedelta(days=7)


# ========== Repository Interfaces (Dependency Inversion) ==========

class INotificationRepository(INotificationQueue):

    @abstractmethod
    async def get(self, notification_id: str) -> Optional[Any]:
        pass

    @abstractmethod
    async def list(
        self,
        status: Optional[str] = None,
        channel: Optional[str] = None,
        limit: int = 100
    ) -> List[Any]:
        """Notifications newest first."""


class IAdRepository(ABC):

    @abstractmethod
    async def get(self, ad_id: str) -> Optional[Any]:
        pass

    @abstractmethod
    async def create(self, **fields: Any) -> Any:
        pass

    @abstractmethod
    async def list(self, status: Optional[str] = None, ad_type: Optional[str] = None) -> List[Any]:
        """Ads newest first."""


def _now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def _as_utc(value: dt.datetime) -> dt.datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=dt.timezone.utc)
    return value.astimezone(dt.timezone.utc)


# ========== Application Services ==========

class NotificationService:
    """Composes notifications and records delivery reports."""

    DELIVERY_TIMESTAMPS = {
        NotificationStatus.SENT: "sent_at",
        NotificationStatus.DELIVERED: "delivered_at",
        NotificationStatus.FAILED: "failed_at",
    }

    def __init__(
        self,
        notification_repository: INotificationRepository,
        staff_repository: IStaffRepository,
        team_repository: ITeamRepository
    ):
        self._notification_repo = notification_repository
        self._staff_repo = staff_repository
        self._team_repo = team_repository

    @staticmethod
    def templates() -> List[NotificationTemplate]:
        return list(NOTIFICATION_TEMPLATES)

    async def get(self, notification_id: str) -> Any:
        notification = await self._notification_repo.get(notification_id)
        if notification is None:
            raise ResourceNotFoundException("Notification", notification_id)
        return notification

    async def list(self, status: Optional[str] = None, channel: Optional[str] = None) -> List[Any]:
        return await self._notification_repo.list(status=status, channel=channel)

    async def resolve_recipients(self, recipient_type: RecipientType, recipient_ids: Sequence[str]) -> List[str]:
        """
        Phone numbers for the selected staff, teams or zones, de-duplicated
        in selection order.
        """
        ids = list(dict.fromkeys(recipient_ids))
        if recipient_type is RecipientType.INDIVIDUAL:
            staff = await self._staff_repo.get_many(ids)
            found = {str(s.id) for s in staff}
            unknown = [i for i in ids if i not in found]
            if unknown:
                raise ValidationException(
                    "Unknown staff members", {"recipient_ids": f"Not found: {', '.join(unknown)}"}
                )
            by_id = {str(s.id): s for s in staff}
            members = [by_id[i] for i in ids]
        elif recipient_type is RecipientType.TEAM:
            members = []
            for team_id in ids:
                team = await self._team_repo.get(team_id)
                if team is None or not team.is_active:
                    raise ValidationException(
                        "Unknown team", {"recipient_ids": f"Team '{team_id}' not found"}
                    )
                members.extend(await self._staff_repo.get_many(team.member_ids))
        else:
            members = await self._staff_repo.list_by_zones(ids)

        phones = [m.phone for m in members if m.is_active and m.phone]
        return list(dict.fromkeys(phones))

    async def compose(self, data: NotificationCreate, actor: str) -> Any:
        """
        Queue a notification with status pending.

        Raises:
            ValidationException: Unknown template, missing message, or no
                reachable recipients
        """
        template = None
        if data.template_id:
            template = get_template(data.template_id)
            if template is None:
                raise ValidationException(
                    "Unknown template", {"template_id": f"Template '{data.template_id}' not found"}
                )

        message = (data.message or "").strip() or (template.message if template else "")
        if not message:
            raise ValidationException("Message is required", {"message": "Message is required"})

        recipient_type = RecipientType(data.recipient_type)
        recipients = await self.resolve_recipients(recipient_type, data.recipient_ids)
        if not recipients:
            raise ValidationException(
                "Please select at least one recipient",
                {"recipient_ids": "No active staff with a phone number matched the selection"}
            )

        notification = await self._notification_repo.enqueue(
            recipients=recipients,
            channel=NotificationChannel(data.channel),
            message=message,
            created_by=actor,
            recipient_type=recipient_type,
            recipient_ids=list(dict.fromkeys(data.recipient_ids)),
            template_id=data.template_id,
            scheduled_for=_as_utc(data.scheduled_for) if data.scheduled_for else None,
        )
        logger.info(
            "Notification queued",
            extra={
                "notification_id": str(notification.id),
                "channel": data.channel,
                "recipient_type": recipient_type.value,
                "recipients": len(recipients),
            }
        )
        return notification

    async def record_delivery(self, notification_id: str, data: DeliveryStatusUpdate) -> Any:
        """
        Apply a provider delivery report.

        pending -> sent | failed, sent -> delivered | failed.
        """
        notification = await self.get(notification_id)
        requested = ensure_transition(
            "Notification",
            DELIVERY_TRANSITIONS,
            NotificationStatus(notification.status),
            NotificationStatus(data.status),
        )
        notification.status = requested.value
        setattr(notification, self.DELIVERY_TIMESTAMPS[requested], _now())
        if data.provider_response is not None:
            notification.provider_response = dict(data.provider_response)
        logger.info(
            "Notification delivery status recorded",
            extra={"notification_id": str(notification.id), "status": requested.value}
        )
        return notification


class AdService:
    """Ads with a validity window and an approval step for sponsored content."""

    def __init__(self, ad_repository: IAdRepository):
        self._ad_repo = ad_repository

    async def get(self, ad_id: str) -> Any:
        ad = await self._ad_repo.get(ad_id)
        if ad is None:
            raise ResourceNotFoundException("Ad", ad_id)
        return ad

    async def create(self, data: AdCreate, actor: str) -> Any:
        now = _now()
        valid_from = _as_utc(data.valid_from) if data.valid_from else now
        valid_to = _as_utc(data.valid_to) if data.valid_to else valid_from + AD_DEFAULT_VALIDITY
        if valid_to <= valid_from:
            raise ValidationException(
                "Invalid validity window", {"valid_to": "valid_to must be after valid_from"}
            )

        ad_type = AdType(data.type)
        status = AdStatus.DRAFT if ad_type is AdType.SPONSORED else AdStatus.PUBLISHED
        ad = await self._ad_repo.create(
            title=data.title.strip(),
            type=ad_type.value,
            description=data.description,
            location=data.location,
            contact=data.contact,
            valid_from=valid_from,
            valid_to=valid_to,
            status=status.value,
            created_by=actor,
            created_at=now,
            updated_at=now,
        )
        logger.info("Ad created", extra={"ad_id": str(ad.id), "type": ad_type.value, "status": status.value})
        return ad

    async def list(self, status: Optional[str] = None, ad_type: Optional[str] = None) -> List[Any]:
        return await self._ad_repo.list(status=status, ad_type=ad_type)

    async def change_status(self, ad_id: str, status: str, actor: str) -> Any:
        """
        draft -> published | expired, published -> expired.
        Publishing records the approver.
        """
        ad = await self.get(ad_id)
        requested = ensure_transition("Ad", AD_TRANSITIONS, AdStatus(ad.status), AdStatus(status))
        ad.status = requested.value
        ad.updated_at = _now()
        if requested is AdStatus.PUBLISHED:
            ad.approved_by = actor
        logger.info("Ad status changed", extra={"ad_id": str(ad.id), "status": requested.value})
        return ad
