"""
Outreach Domain Layer
=====================

Message templates and the status tables for notifications and ads.
"""

from seva.outreach.domain.templates import (
    AD_TRANSITIONS,
    DELIVERY_TRANSITIONS,
    NOTIFICATION_TEMPLATES,
    NotificationTemplate,
    get_template,
)

__all__ = [
    "AD_TRANSITIONS",
    "DELIVERY_TRANSITIONS",
    "NOTIFICATION_TEMPLATES",
    "NotificationTemplate",
    "get_template",
]
