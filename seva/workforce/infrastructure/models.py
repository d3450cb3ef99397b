"""
Workforce Infrastructure Models
===============================

SQLAlchemy ORM models for the workforce module.

List-valued references (team ids, member ids, assigned staff ids) are JSON
columns; repositories always assign a new list so changes are persisted.
"""

import datetime as dt
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import JSON, Boolean, Date, Float, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from seva.config import (
    AuditAction,
    BulkUploadStatus,
    HeadcountSource,
    ShiftColor,
    StaffRole,
)
from seva.infrastructure.database import Base, UTCDateTime, utcnow


class StaffModel(Base):
    """
    Database model for a staff member.

    Maps to the 'staff' table. Staff are deactivated, never deleted.
    """
    __tablename__ = "staff"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    role: Mapped[StaffRole] = mapped_column(String(50), nullable=False, default=StaffRole.STAFF)
    team_ids: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    shift: Mapped[ShiftColor] = mapped_column(String(50), nullable=False, default=ShiftColor.RED)
    zone: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, index=True)
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    on_duty: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    created_by: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[dt.datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
    updated_at: Mapped[dt.datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
    last_seen_at: Mapped[Optional[dt.datetime]] = mapped_column(UTCDateTime, nullable=True)


class StaffAuditModel(Base):
    """Append-only change log for staff records ('staff-audit' collection)."""
    __tablename__ = "staff_audit"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    staff_id: Mapped[UUID] = mapped_column(Uuid, nullable=False, index=True)
    action: Mapped[AuditAction] = mapped_column(String(50), nullable=False)
    changes: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    performed_by: Mapped[str] = mapped_column(String(255), nullable=False)
    timestamp: Mapped[dt.datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)


class TeamModel(Base):
    """Database model for a team. Soft-deleted via is_active/deleted_at."""
    __tablename__ = "teams"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    leader_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    member_ids: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    zones: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    default_shift: Mapped[Optional[ShiftColor]] = mapped_column(String(50), nullable=True)
    capacity: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    created_by: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[dt.datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
    updated_at: Mapped[dt.datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
    deleted_at: Mapped[Optional[dt.datetime]] = mapped_column(UTCDateTime, nullable=True)


class ShiftModel(Base):
    """A zone's staffing window on a given date."""
    __tablename__ = "shifts"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    zone: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    color: Mapped[Optional[ShiftColor]] = mapped_column(String(50), nullable=True)
    start_time: Mapped[str] = mapped_column(String(5), nullable=False)
    end_time: Mapped[str] = mapped_column(String(5), nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False, index=True)
    assigned_staff_ids: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    required_staff: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_by: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[dt.datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)


class HeadcountModel(Base):
    """A crowd count observation for a zone."""
    __tablename__ = "headcounts"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    zone: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    count: Mapped[int] = mapped_column(Integer, nullable=False)
    source: Mapped[HeadcountSource] = mapped_column(String(50), nullable=False, default=HeadcountSource.MANUAL)
    confidence: Mapped[float] = mapped_column(Float, nullable=False, default=1.0)
    timestamp: Mapped[dt.datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow, index=True)
    recorded_by: Mapped[str] = mapped_column(String(255), nullable=False)


class BulkUploadModel(Base):
    """One staff spreadsheet import ('bulk-uploads' collection)."""
    __tablename__ = "bulk_uploads"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    file_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    total_rows: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    valid_rows: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    error_rows: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    success_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    column_mapping: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    errors: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    status: Mapped[BulkUploadStatus] = mapped_column(
        String(50), nullable=False, default=BulkUploadStatus.PROCESSING
    )

    created_by: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[dt.datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
    processed_at: Mapped[Optional[dt.datetime]] = mapped_column(UTCDateTime, nullable=True)
