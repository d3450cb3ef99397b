"""Site application layer."""

from seva.site.application.dto import (
    ContactRequest,
    ContactResponse,
    LanguageStr,
    SiteContentResponse,
    StaffingDemoResponse,
)
from seva.site.application.services import IContentStore, IEmailRelay, SiteService

__all__ = [
    "ContactRequest",
    "ContactResponse",
    "LanguageStr",
    "SiteContentResponse",
    "StaffingDemoResponse",
    "IContentStore",
    "IEmailRelay",
    "SiteService",
]
