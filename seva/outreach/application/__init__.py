"""
Outreach Application Layer
==========================

Use-case services and DTOs for notifications and ads.
"""

from seva.outreach.application.dto import (
    AdCreate,
    AdResponse,
    AdStatusUpdate,
    DeliveryStatusUpdate,
    NotificationCreate,
    NotificationResponse,
    NotificationTemplateResponse,
)
from seva.outreach.application.services import (
    AdService,
    IAdRepository,
    INotificationRepository,
    NotificationService,
)

__all__ = [
    "AdCreate",
    "AdResponse",
    "AdStatusUpdate",
    "DeliveryStatusUpdate",
    "NotificationCreate",
    "NotificationResponse",
    "NotificationTemplateResponse",
    "AdService",
    "IAdRepository",
    "INotificationRepository",
    "NotificationService",
]
