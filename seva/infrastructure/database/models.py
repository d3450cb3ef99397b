"""
Model Registry
==============

Importing this module registers every table on `Base.metadata`.
"""

from seva.operations.infrastructure.models import (  # noqa: F401
    FacilityModel,
    IssueModel,
    QRCodeModel,
    QREventModel,
    TaskModel,
)
from seva.outreach.infrastructure.models import AdModel, NotificationModel  # noqa: F401
from seva.workforce.infrastructure.models import (  # noqa: F401
    BulkUploadModel,
    HeadcountModel,
    ShiftModel,
    StaffAuditModel,
    StaffModel,
    TeamModel,
)
