"""
Site Application Services
=========================
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List

from seva.core.exceptions import ResourceNotFoundException
from seva.shared.infrastructure.logging import get_logger
from seva.site.application.dto import ContactRequest, StaffingDemoResponse
from seva.workforce.domain import StaffingCalculator

logger = get_logger(__name__)


class IContentStore(ABC):

    @abstractmethod
    def languages(self) -> List[str]:
        pass

    @abstractmethod
    def get(self, language: str) -> Dict[str, Any]:
        """Full page copy for one language, or KeyError."""


class IEmailRelay(ABC):

    @abstractmethod
    async def send(self, template_params: Dict[str, str]) -> None:
        """Hand a form submission to the relay; raise EmailRelayException on failure."""


class SiteService:
    """Public website operations."""

    def __init__(self, content: IContentStore, relay: IEmailRelay):
        self._content = content
        self._relay = relay

    def content(self, language: str) -> Dict[str, Any]:
        try:
            return self._content.get(language)
        except KeyError:
            raise ResourceNotFoundException("Language", language)

    async def submit_contact(self, request: ContactRequest, language: str = "en") -> str:
        """
        Relay a pilot request. The relay is called once; its failure
        propagates as EmailRelayException.

        Returns the localized success message.
        """
        await self._relay.send({
            "name": request.name,
            "organization": request.organization,
            "email": request.email,
            "phone": request.phone,
            "dates": request.dates or "",
            "message": request.message or "",
        })
        logger.info(
            "Contact request relayed",
            extra={"organization": request.organization, "language": language}
        )
        return self.content(language)["contact"]["success"]

    def staffing_demo(self, headcount: int, language: str = "en") -> StaffingDemoResponse:
        required = StaffingCalculator.required_staff(headcount)
        template = self.content(language)["demo"]["output_template"]
        return StaffingDemoResponse(
            headcount=headcount,
            required_staff=required,
            message=template.format(n=f"{headcount:,}", staff=f"{required:,}"),
        )
