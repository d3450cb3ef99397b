"""
Site Controllers (API Routes)
=============================

Public routes behind the marketing website. None of them require sign-in.
"""

import json
from typing import List

from fastapi import APIRouter, Depends, Query

from seva.site.application import (
    ContactRequest,
    ContactResponse,
    IContentStore,
    IEmailRelay,
    SiteContentResponse,
    SiteService,
    StaffingDemoResponse,
)
from seva.shared.api.dependencies import get_content_store, get_email_relay

router = APIRouter(prefix="/site", tags=["Site"])


CONTACT_EXAMPLE = {
    "name": "Asha Verma",
    "organization": "Nagar Nigam Prayagraj",
    "email": "asha@example.org",
    "phone": "+919876543210",
    "dates": "Jan 14 - Feb 26",
    "message": "Interested in a pilot at three ghats."
}


def get_site_service(
    content: IContentStore = Depends(get_content_store),
    relay: IEmailRelay = Depends(get_email_relay),
) -> SiteService:
    return SiteService(content, relay)


@router.get("/languages", response_model=List[str], summary="Available content languages")
async def list_languages(content: IContentStore = Depends(get_content_store)) -> List[str]:
    return content.languages()


@router.get(
    "/content/{language}",
    response_model=SiteContentResponse,
    summary="Page copy for one language",
    description="`language` is `en` or `hi`. Any other value returns 404."
)
async def get_content(
    language: str,
    service: SiteService = Depends(get_site_service),
) -> SiteContentResponse:
    return SiteContentResponse(language=language, content=service.content(language))


@router.post(
    "/contact",
    response_model=ContactResponse,
    summary="Submit a pilot request",
    description=f"""
    Validates the form and forwards it to the email relay once. A relay
    failure returns 502 and the visitor may submit again.

    **Example Request**:
    ```json
    {json.dumps(CONTACT_EXAMPLE, indent=4)}
    ```
    """
)
async def submit_contact(
    payload: ContactRequest,
    lang: str = Query("en", description="Language of the confirmation message"),
    service: SiteService = Depends(get_site_service),
) -> ContactResponse:
    message = await service.submit_contact(payload, lang)
    return ContactResponse(success=True, message=message)


@router.get(
    "/demo/staffing",
    response_model=StaffingDemoResponse,
    summary="Staffing demo",
    description="Required staff for a headcount using the 1:8 rule, e.g. 12000 -> 1500."
)
async def staffing_demo(
    headcount: int = Query(..., ge=0, le=10_000_000),
    lang: str = Query("en"),
    service: SiteService = Depends(get_site_service),
) -> StaffingDemoResponse:
    return service.staffing_demo(headcount, lang)


site_router = router
