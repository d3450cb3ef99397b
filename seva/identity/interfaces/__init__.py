"""
Identity Interfaces Layer
=========================

- Controllers: /auth routes
- Dependencies: bearer-token authentication for admin routes
"""

from seva.identity.interfaces.controllers import identity_router
from seva.identity.interfaces.dependencies import (
    get_identity_provider,
    require_user,
)

__all__ = ["identity_router", "get_identity_provider", "require_user"]
