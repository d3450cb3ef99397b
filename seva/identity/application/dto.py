"""
Identity Application DTOs
=========================

Request/response models for the auth endpoints.
"""

from typing import Optional

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=3, description="Account email")
    password: str = Field(..., min_length=1, description="Account password")


class ResetPasswordRequest(BaseModel):
    email: str = Field(..., min_length=3, description="Account email")


class AuthUserResponse(BaseModel):
    """Signed-in user. `id_token` is the bearer token for admin routes."""
    uid: str
    email: str
    display_name: Optional[str] = None
    id_token: Optional[str] = None


class MessageResponse(BaseModel):
    message: str
