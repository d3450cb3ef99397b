"""
Outreach Infrastructure Models
==============================

SQLAlchemy ORM models for notifications and ads.
"""

import datetime as dt
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import JSON, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from seva.config import AdStatus, AdType, NotificationChannel, NotificationStatus, RecipientType
from seva.infrastructure.database import Base, UTCDateTime, utcnow


class NotificationModel(Base):
    """
    Queued outbound message.

    Dispatch belongs to an external channel provider; this service only
    enqueues records and stores the delivery status it reports back.
    """
    __tablename__ = "notifications"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    recipients: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    recipient_type: Mapped[RecipientType] = mapped_column(String(20), nullable=False)
    recipient_ids: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    channel: Mapped[NotificationChannel] = mapped_column(String(20), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    template_id: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    status: Mapped[NotificationStatus] = mapped_column(
        String(20), nullable=False, default=NotificationStatus.PENDING, index=True
    )
    scheduled_for: Mapped[Optional[dt.datetime]] = mapped_column(UTCDateTime, nullable=True)
    provider_response: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)

    created_by: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[dt.datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
    sent_at: Mapped[Optional[dt.datetime]] = mapped_column(UTCDateTime, nullable=True)
    delivered_at: Mapped[Optional[dt.datetime]] = mapped_column(UTCDateTime, nullable=True)
    failed_at: Mapped[Optional[dt.datetime]] = mapped_column(UTCDateTime, nullable=True)


class AdModel(Base):
    """Announcement, sponsored message or emergency notice with a validity window."""
    __tablename__ = "ads"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[AdType] = mapped_column(String(20), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    contact: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    valid_from: Mapped[dt.datetime] = mapped_column(UTCDateTime, nullable=False)
    valid_to: Mapped[dt.datetime] = mapped_column(UTCDateTime, nullable=False)
    status: Mapped[AdStatus] = mapped_column(String(20), nullable=False, default=AdStatus.DRAFT, index=True)
    approved_by: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    created_by: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[dt.datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
    updated_at: Mapped[dt.datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
