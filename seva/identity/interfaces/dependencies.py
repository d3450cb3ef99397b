"""
Identity Dependencies
=====================

FastAPI dependencies shared by every admin router.
"""

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from seva.core.exceptions import AuthenticationException
from seva.identity.application import AuthService, IIdentityProvider
from seva.identity.domain import AuthSession, AuthUser

bearer_scheme = HTTPBearer(auto_error=False)


def get_identity_provider(request: Request) -> IIdentityProvider:
    return request.app.state.identity_provider


def get_auth_service(provider: IIdentityProvider = Depends(get_identity_provider)) -> AuthService:
    return AuthService(provider)


async def get_auth_session(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    auth_service: AuthService = Depends(get_auth_service),
) -> AuthSession:
    """Resolve the bearer token into a session; 401 when absent or rejected."""
    if credentials is None or not credentials.credentials:
        raise AuthenticationException("Authentication required.", "auth/missing-token")
    session = await auth_service.authenticate(credentials.credentials)
    request.state.auth_session = session
    return session


async def require_user(session: AuthSession = Depends(get_auth_session)) -> AuthUser:
    return session.current_user()
