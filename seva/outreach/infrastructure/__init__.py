"""
Outreach Infrastructure Layer
=============================

Infrastructure implementations for the outreach module:
- Models: SQLAlchemy ORM models
- Repositories: Data access layer (also the notification queue)
"""

from seva.outreach.infrastructure.models import AdModel, NotificationModel
from seva.outreach.infrastructure.repositories import (
    SQLAlchemyAdRepository,
    SQLAlchemyNotificationRepository,
)

__all__ = [
    "AdModel",
    "NotificationModel",
    "SQLAlchemyAdRepository",
    "SQLAlchemyNotificationRepository",
]
