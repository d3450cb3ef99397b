"""
Identity Domain Layer
=====================

Contains:
- AuthUser: the authenticated user
- AuthSession: explicit session with auth-state subscription
"""

from seva.identity.domain.entities import AuthSession, AuthUser

__all__ = ["AuthSession", "AuthUser"]
