"""
Operations Application Layer
============================

Use-case services and DTOs for facilities, tasks, issues and QR codes.
"""

from seva.operations.application.dto import (
    Assignee,
    FacilityCreate,
    FacilityDetail,
    FacilityResponse,
    FacilityStatusUpdate,
    IssueCreate,
    IssueResponse,
    IssueStatusUpdate,
    QRCodeResponse,
    QREventResponse,
    QRGenerateRequest,
    Reporter,
    SLAInfo,
    TaskCreate,
    TaskResponse,
    TaskStatusUpdate,
    TriageResponse,
)
from seva.operations.application.services import (
    FacilityService,
    IFacilityRepository,
    IIssueRepository,
    IQRCodeRepository,
    IQREventRepository,
    ITaskRepository,
    IssueService,
    QRCodeService,
    TaskService,
)

__all__ = [
    "Assignee",
    "FacilityCreate",
    "FacilityDetail",
    "FacilityResponse",
    "FacilityStatusUpdate",
    "IssueCreate",
    "IssueResponse",
    "IssueStatusUpdate",
    "QRCodeResponse",
    "QREventResponse",
    "QRGenerateRequest",
    "Reporter",
    "SLAInfo",
    "TaskCreate",
    "TaskResponse",
    "TaskStatusUpdate",
    "TriageResponse",
    "FacilityService",
    "IFacilityRepository",
    "IIssueRepository",
    "IQRCodeRepository",
    "IQREventRepository",
    "ITaskRepository",
    "IssueService",
    "QRCodeService",
    "TaskService",
]
