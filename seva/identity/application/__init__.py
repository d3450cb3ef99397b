"""
Identity Application Layer
==========================

Contains:
- Services: AuthService and the IIdentityProvider collaborator interface
- DTOs: auth request/response models
"""

from seva.identity.application.dto import (
    AuthUserResponse,
    LoginRequest,
    MessageResponse,
    ResetPasswordRequest,
)
from seva.identity.application.services import (
    AuthService,
    IIdentityProvider,
    friendly_auth_error,
)

__all__ = [
    # DTOs
    "AuthUserResponse",
    "LoginRequest",
    "MessageResponse",
    "ResetPasswordRequest",
    # Services
    "AuthService",
    "IIdentityProvider",
    "friendly_auth_error",
]
