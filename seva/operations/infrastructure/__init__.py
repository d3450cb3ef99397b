"""
Operations Infrastructure Layer
===============================

Infrastructure implementations for the operations module:
- Models: SQLAlchemy ORM models
- Repositories: Data access layer
"""

from seva.operations.infrastructure.models import (
    FacilityModel,
    IssueModel,
    QRCodeModel,
    QREventModel,
    TaskModel,
)
from seva.operations.infrastructure.repositories import (
    SQLAlchemyFacilityRepository,
    SQLAlchemyIssueRepository,
    SQLAlchemyQRCodeRepository,
    SQLAlchemyQREventRepository,
    SQLAlchemyTaskRepository,
)

__all__ = [
    "FacilityModel",
    "IssueModel",
    "QRCodeModel",
    "QREventModel",
    "TaskModel",
    "SQLAlchemyFacilityRepository",
    "SQLAlchemyIssueRepository",
    "SQLAlchemyQRCodeRepository",
    "SQLAlchemyQREventRepository",
    "SQLAlchemyTaskRepository",
]
