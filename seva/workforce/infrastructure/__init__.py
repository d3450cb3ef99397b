"""
Workforce Infrastructure Layer
==============================

Infrastructure implementations for the workforce module:
- Models: SQLAlchemy ORM models
- Repositories: Data access layer
- Spreadsheets: CSV/XLSX roster reader (openpyxl)
"""

from seva.workforce.infrastructure.models import (
    BulkUploadModel,
    HeadcountModel,
    ShiftModel,
    StaffAuditModel,
    StaffModel,
    TeamModel,
)
from seva.workforce.infrastructure.repositories import (
    SQLAlchemyBulkUploadRepository,
    SQLAlchemyHeadcountRepository,
    SQLAlchemyShiftRepository,
    SQLAlchemyStaffAuditRepository,
    SQLAlchemyStaffRepository,
    SQLAlchemyTeamRepository,
)
from seva.workforce.infrastructure.spreadsheets import read_spreadsheet

__all__ = [
    "BulkUploadModel",
    "HeadcountModel",
    "ShiftModel",
    "StaffAuditModel",
    "StaffModel",
    "TeamModel",
    "SQLAlchemyBulkUploadRepository",
    "SQLAlchemyHeadcountRepository",
    "SQLAlchemyShiftRepository",
    "SQLAlchemyStaffAuditRepository",
    "SQLAlchemyStaffRepository",
    "SQLAlchemyTeamRepository",
    "read_spreadsheet",
]
