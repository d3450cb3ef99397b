"""
Outreach Application DTOs
=========================

Data Transfer Objects for notifications and ads.
"""

import datetime as dt
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ========== Type Aliases for Literals ==========
ChannelStr = Literal["whatsapp", "sms", "email"]
NotificationStatusStr = Literal["pending", "sent", "delivered", "failed"]
RecipientTypeStr = Literal["individual", "team", "zone"]
AdTypeStr = Literal["announcement", "sponsored", "emergency"]
AdStatusStr = Literal["draft", "published", "expired"]


# ========== Notifications ==========

class NotificationTemplateResponse(BaseModel):
    id: str
    name: str
    message: str


class NotificationCreate(BaseModel):
    """
    Compose a message.

    `recipient_ids` are staff ids (individual), team ids (team) or zone
    names (zone). `message` may be omitted when `template_id` is given.
    """
    recipient_type: RecipientTypeStr = "individual"
    recipient_ids: List[str] = Field(..., min_length=1)
    channel: ChannelStr = "sms"
    message: Optional[str] = Field(None, max_length=1000)
    template_id: Optional[str] = None
    scheduled_for: Optional[dt.datetime] = None


class DeliveryStatusUpdate(BaseModel):
    """Delivery report from the channel provider."""
    status: Literal["sent", "delivered", "failed"]
    provider_response: Optional[dict] = None


class NotificationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    recipients: List[str]
    recipient_type: RecipientTypeStr
    recipient_ids: List[str]
    channel: ChannelStr
    message: str
    template_id: Optional[str] = None
    status: NotificationStatusStr
    scheduled_for: Optional[dt.datetime] = None
    provider_response: Optional[dict] = None
    created_by: str
    created_at: dt.datetime
    sent_at: Optional[dt.datetime] = None
    delivered_at: Optional[dt.datetime] = None
    failed_at: Optional[dt.datetime] = None

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, v):
        return str(v)


# ========== Ads ==========

class AdCreate(BaseModel):
    """
    New ad. The validity window defaults to now .. now + 7 days.
    Sponsored ads start as drafts awaiting approval; others publish at once.
    """
    title: str = Field(..., min_length=1, max_length=255)
    type: AdTypeStr = "announcement"
    description: str = Field(..., min_length=1)
    location: Optional[str] = None
    contact: Optional[str] = None
    valid_from: Optional[dt.datetime] = None
    valid_to: Optional[dt.datetime] = None


class AdStatusUpdate(BaseModel):
    status: AdStatusStr


class AdResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    type: AdTypeStr
    description: str
    location: Optional[str] = None
    contact: Optional[str] = None
    valid_from: dt.datetime
    valid_to: dt.datetime
    status: AdStatusStr
    approved_by: Optional[str] = None
    created_by: str
    created_at: dt.datetime
    is_expired: bool = False

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, v):
        return str(v)

    @classmethod
    def from_model(cls, ad, now: Optional[dt.datetime] = None) -> "AdResponse":
        response = cls.model_validate(ad)
        response.is_expired = ad.valid_to < (now or dt.datetime.now(dt.timezone.utc))
        return response
