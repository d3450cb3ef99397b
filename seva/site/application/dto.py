"""
Site Application DTOs
=====================
"""

from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from seva.workforce.domain.validation import EMAIL_PATTERN

LanguageStr = Literal["en", "hi"]


class ContactRequest(BaseModel):
    """Pilot request submitted from the public contact form."""
    name: str = Field(..., min_length=2, max_length=120)
    organization: str = Field(..., min_length=1, max_length=200)
    email: str = Field(..., max_length=254)
    phone: str = Field(..., min_length=6, max_length=20)
    dates: Optional[str] = Field(None, max_length=120, description="Expected event dates, free text")
    message: Optional[str] = Field(None, max_length=4000)

    @field_validator("name", "organization", "phone")
    @classmethod
    def strip_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("This field is required")
        return v

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        v = v.strip()
        if not EMAIL_PATTERN.match(v):
            raise ValueError("Please enter a valid email address")
        return v


class ContactResponse(BaseModel):
    success: bool = True
    message: str


class SiteContentResponse(BaseModel):
    language: LanguageStr
    content: Dict[str, Any]


class StaffingDemoResponse(BaseModel):
    headcount: int
    required_staff: int
    message: str
