"""
Outreach Templates and Status Tables
====================================
"""

from dataclasses import dataclass
from typing import Dict, FrozenSet, Optional, Tuple

from seva.config import AdStatus, NotificationStatus
from seva.core.transitions import check_exhaustive


@dataclass(frozen=True)
class NotificationTemplate:
    id: str
    name: str
    message: str


NOTIFICATION_TEMPLATES: Tuple[NotificationTemplate, ...] = (
    NotificationTemplate(
        "shift-reminder",
        "Shift Reminder",
        "Your shift starts in 30 minutes. Please report to your assigned zone.",
    ),
    NotificationTemplate(
        "task-assigned",
        "Task Assigned",
        "A new task has been assigned to you. Please check your dashboard.",
    ),
    NotificationTemplate(
        "emergency-alert",
        "Emergency Alert",
        "URGENT: Emergency situation in your zone. Please respond immediately.",
    ),
    NotificationTemplate(
        "shift-end",
        "Shift End",
        "Your shift has ended. Thank you for your service today.",
    ),
)

_TEMPLATES_BY_ID = {t.id: t for t in NOTIFICATION_TEMPLATES}


def get_template(template_id: str) -> Optional[NotificationTemplate]:
    return _TEMPLATES_BY_ID.get(template_id)


# Delivery status as reported back by the channel provider.
DELIVERY_TRANSITIONS: Dict[NotificationStatus, FrozenSet[NotificationStatus]] = {
    NotificationStatus.PENDING: frozenset({NotificationStatus.SENT, NotificationStatus.FAILED}),
    NotificationStatus.SENT: frozenset({NotificationStatus.DELIVERED, NotificationStatus.FAILED}),
    NotificationStatus.DELIVERED: frozenset(),
    NotificationStatus.FAILED: frozenset(),
}

AD_TRANSITIONS: Dict[AdStatus, FrozenSet[AdStatus]] = {
    AdStatus.DRAFT: frozenset({AdStatus.PUBLISHED, AdStatus.EXPIRED}),
    AdStatus.PUBLISHED: frozenset({AdStatus.EXPIRED}),
    AdStatus.EXPIRED: frozenset(),
}

check_exhaustive(NotificationStatus, DELIVERY_TRANSITIONS)
check_exhaustive(AdStatus, AD_TRANSITIONS)
