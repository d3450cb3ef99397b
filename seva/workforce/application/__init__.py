"""
Workforce Application Layer
===========================

Contains:
- Services: StaffService, BulkUploadService, TeamService, ShiftService, CoverageService
- DTOs: Data transfer objects for API serialization
- Repository and collaborator interfaces

This layer depends on the domain layer and repository interfaces,
but not on concrete infrastructure implementations.
"""

from seva.workforce.application.dto import (
    BulkUploadResponse,
    CoverageResponse,
    HeadcountCreate,
    HeadcountResponse,
    RowErrorResponse,
    ShiftAssignRequest,
    ShiftCreate,
    ShiftResponse,
    StaffAuditResponse,
    StaffCreate,
    StaffNotifyRequest,
    StaffPage,
    StaffResponse,
    StaffUpdate,
    TeamCreate,
    TeamMemberRequest,
    TeamNotifyRequest,
    TeamResponse,
    TeamStats,
    TeamUpdate,
)
from seva.workforce.application.services import (
    BulkUploadService,
    CoverageService,
    IBulkUploadRepository,
    IHeadcountRepository,
    INotificationQueue,
    IShiftRepository,
    IStaffAuditRepository,
    IStaffRepository,
    ITeamRepository,
    ITeamTaskCounter,
    ShiftService,
    StaffService,
    TeamService,
)

__all__ = [
    # DTOs
    "BulkUploadResponse",
    "CoverageResponse",
    "HeadcountCreate",
    "HeadcountResponse",
    "RowErrorResponse",
    "ShiftAssignRequest",
    "ShiftCreate",
    "ShiftResponse",
    "StaffAuditResponse",
    "StaffCreate",
    "StaffNotifyRequest",
    "StaffPage",
    "StaffResponse",
    "StaffUpdate",
    "TeamCreate",
    "TeamMemberRequest",
    "TeamNotifyRequest",
    "TeamResponse",
    "TeamStats",
    "TeamUpdate",
    # Services
    "BulkUploadService",
    "CoverageService",
    "ShiftService",
    "StaffService",
    "TeamService",
    # Interfaces
    "IBulkUploadRepository",
    "IHeadcountRepository",
    "INotificationQueue",
    "IShiftRepository",
    "IStaffAuditRepository",
    "IStaffRepository",
    "ITeamRepository",
    "ITeamTaskCounter",
]
