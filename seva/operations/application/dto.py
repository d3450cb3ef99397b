"""
Operations Application DTOs
===========================

Data Transfer Objects for facilities, tasks, issues and QR codes.
"""

import datetime as dt
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from seva.config import IssueStatus, TaskStatus
from seva.core import transitions
from seva.operations.domain import ISSUE_TRANSITIONS, TASK_TRANSITIONS, SLACalculator, is_overdue


# ========== Type Aliases for Literals ==========
FacilityTypeStr = Literal["toilet", "bin", "water", "helpdesk"]
FacilityStatusStr = Literal["available", "occupied", "maintenance", "full", "out-of-order"]
TaskPriorityStr = Literal["low", "medium", "high"]
TaskStatusStr = Literal["pending", "in-progress", "completed", "verified"]
AssigneeTypeStr = Literal["staff", "team"]
IssueSeverityStr = Literal["low", "medium", "high", "critical"]
IssueCategoryStr = Literal["cleanliness", "maintenance", "safety", "accessibility", "other"]
IssueStatusStr = Literal["open", "assigned", "in-progress", "resolved", "closed"]
SLAStateStr = Literal["met", "breached", "critical", "on-track"]
QRPlacementStr = Literal["printed", "placed", "verified"]


# ========== Facilities ==========

class FacilityCreate(BaseModel):
    code: str = Field(..., min_length=1, max_length=50)
    type: FacilityTypeStr
    zone: str = Field(..., min_length=1)
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)
    capacity: Optional[int] = Field(None, ge=0)
    status: FacilityStatusStr = "available"


class FacilityStatusUpdate(BaseModel):
    status: FacilityStatusStr


class FacilityResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    code: str
    type: FacilityTypeStr
    zone: str
    lat: float
    lng: float
    capacity: Optional[int] = None
    status: FacilityStatusStr
    photos: List[str] = Field(default_factory=list)
    qr_id: Optional[str] = None
    assigned_task_id: Optional[str] = None
    created_at: dt.datetime
    last_updated: dt.datetime

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, v):
        return str(v)


# ========== Tasks ==========

class Assignee(BaseModel):
    type: AssigneeTypeStr
    id: str = Field(..., min_length=1)


class TaskCreate(BaseModel):
    """
    New task. `sla_minutes` defaults to 120 and `due_at` to now + sla.
    """
    title: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    facility_id: Optional[str] = None
    zone: str = Field(..., min_length=1)
    assigned_to: Optional[Assignee] = None
    priority: TaskPriorityStr = "medium"
    due_at: Optional[dt.datetime] = None
    sla_minutes: int = Field(120, gt=0)


class TaskStatusUpdate(BaseModel):
    status: TaskStatusStr


class TaskResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    description: str
    facility_id: Optional[str] = None
    issue_id: Optional[str] = None
    zone: str
    assignee_type: Optional[AssigneeTypeStr] = None
    assignee_id: Optional[str] = None
    priority: TaskPriorityStr
    status: TaskStatusStr
    due_at: dt.datetime
    sla_minutes: int
    created_by: str
    created_at: dt.datetime
    started_at: Optional[dt.datetime] = None
    completed_at: Optional[dt.datetime] = None
    verified_at: Optional[dt.datetime] = None
    is_overdue: bool = False
    next_statuses: List[TaskStatusStr] = Field(default_factory=list)

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, v):
        return str(v)

    @classmethod
    def from_model(cls, task, now: Optional[dt.datetime] = None) -> "TaskResponse":
        response = cls.model_validate(task)
        response.is_overdue = is_overdue(task.due_at, task.status, now)
        response.next_statuses = transitions.next_statuses(TASK_TRANSITIONS, TaskStatus(task.status))
        return response


class FacilityDetail(FacilityResponse):
    tasks: List[TaskResponse] = Field(default_factory=list)


# ========== Issues ==========

class Reporter(BaseModel):
    anonymous: bool = False
    name: Optional[str] = None
    contact: Optional[str] = None


class IssueCreate(BaseModel):
    facility_id: Optional[str] = None
    zone: str = Field(..., min_length=1)
    category: IssueCategoryStr
    severity: IssueSeverityStr
    description: str = Field(..., min_length=1)
    reported_by: Reporter = Field(default_factory=Reporter)


class IssueStatusUpdate(BaseModel):
    status: IssueStatusStr
    assigned_to: Optional[Assignee] = None


class SLAInfo(BaseModel):
    sla_minutes: int
    deadline: dt.datetime
    status: SLAStateStr
    minutes_remaining: int


class IssueResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    facility_id: Optional[str] = None
    zone: str
    category: IssueCategoryStr
    severity: IssueSeverityStr
    description: str
    photos: List[str] = Field(default_factory=list)
    reporter_anonymous: bool
    reporter_name: Optional[str] = None
    reporter_contact: Optional[str] = None
    status: IssueStatusStr
    assignee_type: Optional[AssigneeTypeStr] = None
    assignee_id: Optional[str] = None
    task_id: Optional[str] = None
    reported_at: dt.datetime
    resolved_at: Optional[dt.datetime] = None
    sla: Optional[SLAInfo] = None
    next_statuses: List[IssueStatusStr] = Field(default_factory=list)

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, v):
        return str(v)

    @classmethod
    def from_model(cls, issue, now: Optional[dt.datetime] = None) -> "IssueResponse":
        response = cls.model_validate(issue)
        result = SLACalculator.evaluate(issue.severity, issue.reported_at, issue.status, now)
        response.sla = SLAInfo(
            sla_minutes=SLACalculator.sla_minutes(issue.severity),
            deadline=result.deadline,
            status=result.status.value,
            minutes_remaining=result.minutes_remaining,
        )
        response.next_statuses = transitions.next_statuses(ISSUE_TRANSITIONS, IssueStatus(issue.status))
        return response


class TriageResponse(BaseModel):
    """Open issues grouped by severity, most severe first."""
    critical: List[IssueResponse] = Field(default_factory=list)
    high: List[IssueResponse] = Field(default_factory=list)
    medium: List[IssueResponse] = Field(default_factory=list)
    low: List[IssueResponse] = Field(default_factory=list)
    counts: Dict[str, int] = Field(default_factory=dict)


# ========== QR codes ==========

class QRGenerateRequest(BaseModel):
    facility_ids: List[str] = Field(..., min_length=1)


class QRCodeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    facility_id: str
    type: str
    version: int
    short_url: str
    placement_status: Optional[QRPlacementStr] = None
    printed_by: Optional[str] = None
    printed_at: Optional[dt.datetime] = None
    placed_by: Optional[str] = None
    placed_at: Optional[dt.datetime] = None
    placement_photo_url: Optional[str] = None
    verified_by: Optional[str] = None
    verified_at: Optional[dt.datetime] = None
    is_active: bool
    created_at: dt.datetime

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, v):
        return str(v)


class QREventResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    qr_id: str
    action: QRPlacementStr
    performed_by: str
    timestamp: dt.datetime
    details: dict

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, v):
        return str(v)
