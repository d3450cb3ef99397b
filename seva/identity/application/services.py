"""
Identity Application Services
=============================

Authentication use cases on top of the identity provider interface.

The provider is an external collaborator; this module owns no credential
or token logic beyond forwarding and translating its errors.
"""

from abc import ABC, abstractmethod
from typing import Optional

from seva.core.exceptions import AuthenticationException
from seva.identity.domain import AuthSession, AuthUser
from seva.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


# ========== Collaborator Interface ==========

class IIdentityProvider(ABC):
    """Interface for the managed identity provider."""

    @abstractmethod
    async def sign_in(self, email: str, password: str) -> AuthUser:
        """Exchange credentials for a signed-in user. Raises AuthenticationException."""

    @abstractmethod
    async def send_password_reset(self, email: str) -> None:
        """Ask the provider to email a password reset link."""

    @abstractmethod
    async def lookup(self, id_token: str) -> AuthUser:
        """Resolve a bearer token to its user. Raises AuthenticationException."""


# ========== Error translation ==========

INVALID_EMAIL_OR_PASSWORD = "Invalid email or password."
TOO_MANY_ATTEMPTS = "Too many failed attempts. Please try again later or reset your password."
ACCOUNT_DISABLED = "This account has been disabled. Please contact support."
GENERIC_LOGIN_FAILURE = "Invalid credentials. Please try again."


def friendly_auth_error(raw_error: Optional[str]) -> str:
    """Map a raw provider error code/message onto a user-facing sentence."""
    raw = (raw_error or "").lower()
    if any(code in raw for code in ("user-not-found", "wrong-password", "invalid-credential")):
        return INVALID_EMAIL_OR_PASSWORD
    if "too-many-requests" in raw:
        return TOO_MANY_ATTEMPTS
    if "user-disabled" in raw:
        return ACCOUNT_DISABLED
    return GENERIC_LOGIN_FAILURE


# ========== Application Services ==========

class AuthService:
    """Sign-in, sign-out and password reset against the identity provider."""

    def __init__(self, provider: IIdentityProvider):
        self._provider = provider

    async def login(self, session: AuthSession, email: str, password: str) -> AuthUser:
        try:
            user = await self._provider.sign_in(email.strip(), password)
        except AuthenticationException as e:
            logger.info("Sign-in rejected", extra={"raw_error": e.raw_error})
            raise AuthenticationException(friendly_auth_error(e.raw_error), e.raw_error) from e

        session.set_user(user)
        logger.info("User signed in", extra={"uid": user.uid})
        return user

    async def logout(self, session: AuthSession) -> None:
        user = session.current_user()
        session.clear()
        if user:
            logger.info("User signed out", extra={"uid": user.uid})

    async def reset_password(self, email: str) -> None:
        await self._provider.send_password_reset(email.strip())
        logger.info("Password reset requested")

    async def authenticate(self, id_token: str) -> AuthSession:
        """Build a session for a bearer token presented on a request."""
        user = await self._provider.lookup(id_token)
        return AuthSession(user)

    @staticmethod
    def current_user(session: AuthSession) -> Optional[AuthUser]:
        return session.current_user()
