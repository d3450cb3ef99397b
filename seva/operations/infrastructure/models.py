"""
Operations Infrastructure Models
================================

SQLAlchemy ORM models for facilities, tasks, issues and QR codes.
"""

import datetime as dt
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import JSON, Boolean, Float, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from seva.config import (
    AssigneeType,
    FacilityStatus,
    FacilityType,
    IssueCategory,
    IssueSeverity,
    IssueStatus,
    QRPlacementStatus,
    TaskPriority,
    TaskStatus,
)
from seva.infrastructure.database import Base, UTCDateTime, utcnow


class FacilityModel(Base):
    """
    Database model for a physical facility.

    `code_normalized` (lower-cased code) carries the uniqueness constraint so
    codes are unique regardless of case.
    """
    __tablename__ = "facilities"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    code: Mapped[str] = mapped_column(String(50), nullable=False)
    code_normalized: Mapped[str] = mapped_column(String(50), nullable=False, unique=True, index=True)
    type: Mapped[FacilityType] = mapped_column(String(50), nullable=False)
    zone: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    lat: Mapped[float] = mapped_column(Float, nullable=False)
    lng: Mapped[float] = mapped_column(Float, nullable=False)
    capacity: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    status: Mapped[FacilityStatus] = mapped_column(String(50), nullable=False, default=FacilityStatus.AVAILABLE)
    photos: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    qr_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    assigned_task_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_by: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[dt.datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
    last_updated: Mapped[dt.datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
    deleted_at: Mapped[Optional[dt.datetime]] = mapped_column(UTCDateTime, nullable=True)


class TaskModel(Base):
    """Database model for a unit of work. Status only moves forward."""
    __tablename__ = "tasks"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    facility_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True, index=True)
    issue_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    zone: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    assignee_type: Mapped[Optional[AssigneeType]] = mapped_column(String(20), nullable=True)
    assignee_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True, index=True)
    priority: Mapped[TaskPriority] = mapped_column(String(20), nullable=False, default=TaskPriority.MEDIUM)
    status: Mapped[TaskStatus] = mapped_column(String(20), nullable=False, default=TaskStatus.PENDING)
    due_at: Mapped[dt.datetime] = mapped_column(UTCDateTime, nullable=False)
    sla_minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=120)
    photos_before: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    photos_after: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    created_by: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[dt.datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
    updated_at: Mapped[dt.datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
    started_at: Mapped[Optional[dt.datetime]] = mapped_column(UTCDateTime, nullable=True)
    completed_at: Mapped[Optional[dt.datetime]] = mapped_column(UTCDateTime, nullable=True)
    verified_at: Mapped[Optional[dt.datetime]] = mapped_column(UTCDateTime, nullable=True)


class IssueModel(Base):
    """Database model for a reported problem."""
    __tablename__ = "issues"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    facility_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    zone: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    category: Mapped[IssueCategory] = mapped_column(String(50), nullable=False)
    severity: Mapped[IssueSeverity] = mapped_column(String(20), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    photos: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    reporter_anonymous: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    reporter_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    reporter_contact: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    status: Mapped[IssueStatus] = mapped_column(String(20), nullable=False, default=IssueStatus.OPEN)
    assignee_type: Mapped[Optional[AssigneeType]] = mapped_column(String(20), nullable=True)
    assignee_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    task_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)

    reported_at: Mapped[dt.datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
    updated_at: Mapped[dt.datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
    resolved_at: Mapped[Optional[dt.datetime]] = mapped_column(UTCDateTime, nullable=True)


class QRCodeModel(Base):
    """QR code printed for a facility. Regenerating bumps the version."""
    __tablename__ = "qrcodes"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    facility_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    type: Mapped[str] = mapped_column(String(20), nullable=False, default="public")
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    short_url: Mapped[str] = mapped_column(String(500), nullable=False)
    placement_status: Mapped[Optional[QRPlacementStatus]] = mapped_column(String(20), nullable=True)
    printed_by: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    printed_at: Mapped[Optional[dt.datetime]] = mapped_column(UTCDateTime, nullable=True)
    placed_by: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    placed_at: Mapped[Optional[dt.datetime]] = mapped_column(UTCDateTime, nullable=True)
    placement_photo_url: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)
    verified_by: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    verified_at: Mapped[Optional[dt.datetime]] = mapped_column(UTCDateTime, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    created_by: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[dt.datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
    updated_at: Mapped[dt.datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)


class QREventModel(Base):
    """Append-only placement history for QR codes."""
    __tablename__ = "qrcode_events"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    qr_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    action: Mapped[QRPlacementStatus] = mapped_column(String(20), nullable=False)
    performed_by: Mapped[str] = mapped_column(String(255), nullable=False)
    timestamp: Mapped[dt.datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
    details: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
