"""
Workforce Application DTOs
==========================

Data Transfer Objects for staff, teams, shifts, headcounts and coverage.
"""

import datetime as dt
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ========== Type Aliases for Literals ==========
StaffRoleStr = Literal["admin", "manager", "supervisor", "staff"]
ShiftColorStr = Literal["red", "orange", "green"]
CoverageStatusStr = Literal["adequate", "understaffed", "overstaffed"]
HeadcountSourceStr = Literal["manual", "api", "estimated"]
AuditActionStr = Literal["create", "update", "deactivate", "activate"]
BulkUploadStatusStr = Literal["processing", "completed", "failed"]

TIME_OF_DAY_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


# ========== Staff ==========

class StaffCreate(BaseModel):
    """
    New staff member.

    `phone` accepts E.164 or a local 10-digit mobile (the default country
    code is prefixed). Field-level checks return 400 with per-field errors.
    """
    name: str
    phone: str
    email: Optional[str] = None
    role: str = "staff"
    shift: str = "red"
    zone: Optional[str] = None
    address: Optional[str] = None
    team_ids: List[str] = Field(default_factory=list)
    on_duty: bool = False


class StaffUpdate(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None
    shift: Optional[str] = None
    zone: Optional[str] = None
    address: Optional[str] = None
    team_ids: Optional[List[str]] = None
    on_duty: Optional[bool] = None


class StaffResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    phone: str
    email: Optional[str] = None
    role: StaffRoleStr
    team_ids: List[str]
    shift: ShiftColorStr
    zone: Optional[str] = None
    address: Optional[str] = None
    on_duty: bool
    is_active: bool
    created_by: str
    created_at: dt.datetime
    updated_at: dt.datetime

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, v):
        return str(v)


class StaffPage(BaseModel):
    items: List[StaffResponse]
    total: int = Field(..., description="Matches across all pages")
    page: int
    page_size: int
    pages: int


class StaffAuditResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    staff_id: str
    action: AuditActionStr
    changes: dict
    performed_by: str
    timestamp: dt.datetime

    @field_validator("id", "staff_id", mode="before")
    @classmethod
    def stringify_ids(cls, v):
        return str(v)


class StaffNotifyRequest(BaseModel):
    message: str = Field(..., min_length=1, max_length=1000)


class RowErrorResponse(BaseModel):
    row: int
    field: str
    error: str


class BulkUploadResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    file_name: str
    file_url: Optional[str] = None
    total_rows: int
    valid_rows: int
    error_rows: int
    success_count: int
    column_mapping: Dict[str, str]
    errors: List[RowErrorResponse]
    status: BulkUploadStatusStr
    created_by: str
    created_at: dt.datetime
    processed_at: Optional[dt.datetime] = None

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, v):
        return str(v)


# ========== Teams ==========

class TeamCreate(BaseModel):
    name: str
    description: Optional[str] = None
    leader_id: Optional[str] = None
    zones: List[str] = Field(default_factory=list)
    default_shift: Optional[ShiftColorStr] = None
    capacity: Optional[int] = Field(None, ge=1)


class TeamUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    leader_id: Optional[str] = None
    zones: Optional[List[str]] = None
    default_shift: Optional[ShiftColorStr] = None
    capacity: Optional[int] = Field(None, ge=1)


class TeamStats(BaseModel):
    total_members: int = Field(..., description="Active members")
    active_members: int = Field(..., description="Members currently on duty")
    active_tasks: int = Field(..., description="Pending or in-progress tasks assigned to the team")
    coverage_percent: Optional[int] = Field(None, description="Members as % of capacity")


class TeamResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: Optional[str] = None
    leader_id: Optional[str] = None
    member_ids: List[str]
    zones: List[str]
    default_shift: Optional[ShiftColorStr] = None
    capacity: Optional[int] = None
    is_active: bool
    created_by: str
    created_at: dt.datetime
    deleted_at: Optional[dt.datetime] = None
    stats: Optional[TeamStats] = None

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, v):
        return str(v)


class TeamMemberRequest(BaseModel):
    staff_id: str


class TeamNotifyRequest(BaseModel):
    message: str = Field(..., min_length=1, max_length=1000)
    channel: Literal["whatsapp", "sms", "email"] = "sms"


# ========== Shifts ==========

class ShiftCreate(BaseModel):
    zone: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    color: Optional[ShiftColorStr] = None
    start_time: str = Field(..., pattern=TIME_OF_DAY_PATTERN, description="HH:MM")
    end_time: str = Field(..., pattern=TIME_OF_DAY_PATTERN, description="HH:MM")
    date: dt.date
    required_staff: int = Field(0, ge=0)
    assigned_staff_ids: List[str] = Field(default_factory=list)


class ShiftAssignRequest(BaseModel):
    staff_ids: List[str]


class ShiftResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    zone: str
    name: str
    color: Optional[ShiftColorStr] = None
    start_time: str
    end_time: str
    date: dt.date
    assigned_staff_ids: List[str]
    required_staff: int
    created_by: str
    created_at: dt.datetime

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, v):
        return str(v)


# ========== Headcounts & Coverage ==========

class HeadcountCreate(BaseModel):
    zone: str = Field(..., min_length=1)
    count: int = Field(..., ge=0)
    source: HeadcountSourceStr = "manual"
    confidence: float = Field(1.0, ge=0.0, le=1.0)


class HeadcountResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    zone: str
    count: int
    source: HeadcountSourceStr
    confidence: float
    timestamp: dt.datetime
    recorded_by: str

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, v):
        return str(v)


class CoverageResponse(BaseModel):
    zone: str
    date: dt.date
    headcount: int
    headcount_at: dt.datetime
    required_staff: int
    assigned_staff: int
    delta: int
    status: CoverageStatusStr
