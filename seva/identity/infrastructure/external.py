"""
Identity Provider Client
========================

REST client for a managed identity toolkit (email/password accounts).

Provider error codes are translated into the `auth/<code>` vocabulary that
AuthService understands. Requests are sent once; failures are not retried.
"""

from typing import Any, Dict, Optional

import httpx

from seva.config import settings
from seva.core.exceptions import AuthenticationException, ExternalServiceException
from seva.identity.application.services import IIdentityProvider
from seva.identity.domain import AuthUser
from seva.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)

# Toolkit REST error message -> auth error code
PROVIDER_ERROR_CODES = {
    "EMAIL_NOT_FOUND": "auth/user-not-found",
    "INVALID_PASSWORD": "auth/wrong-password",
    "INVALID_LOGIN_CREDENTIALS": "auth/invalid-credential",
    "INVALID_ID_TOKEN": "auth/invalid-id-token",
    "TOKEN_EXPIRED": "auth/id-token-expired",
    "USER_DISABLED": "auth/user-disabled",
    "USER_NOT_FOUND": "auth/user-not-found",
    "TOO_MANY_ATTEMPTS_TRY_LATER": "auth/too-many-requests",
}


def translate_provider_error(message: Optional[str]) -> str:
    """`TOO_MANY_ATTEMPTS_TRY_LATER : Access disabled...` -> `auth/too-many-requests`."""
    if not message:
        return "auth/unknown"
    code = message.split(":", 1)[0].strip()
    return PROVIDER_ERROR_CODES.get(code, f"auth/{code.lower().replace('_', '-')}")


class IdentityToolkitClient(IIdentityProvider):
    """
    Identity provider backed by the identity toolkit REST API.

    Handles:
    - signInWithPassword for login
    - sendOobCode (PASSWORD_RESET) for password reset emails
    - lookup for resolving bearer tokens
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None
    ):
        self._api_key = api_key or settings.identity_api_key
        self._base_url = (base_url or settings.identity_base_url).rstrip("/")
        self._timeout = timeout or settings.identity_timeout_seconds
        self._http_client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self._timeout)
        return self._http_client

    async def close(self) -> None:
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    async def _call(self, method: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        if not self._api_key:
            raise ExternalServiceException("Identity Provider", "identity_api_key is not configured")

        client = await self._get_client()
        try:
            response = await client.post(
                f"{self._base_url}/accounts:{method}",
                params={"key": self._api_key},
                json=payload
            )
        except httpx.HTTPError as e:
            logger.error("Identity provider unreachable", extra={"method": method, "error": str(e)})
            raise ExternalServiceException("Identity Provider", str(e)) from e

        if response.status_code == 200:
            return response.json()

        if response.status_code in (400, 401, 403):
            try:
                message = response.json().get("error", {}).get("message")
            except ValueError:
                message = None
            raw_error = translate_provider_error(message)
            raise AuthenticationException("Authentication failed", raw_error)

        logger.error(
            "Identity provider error",
            extra={"method": method, "status_code": response.status_code, "response": response.text[:500]}
        )
        raise ExternalServiceException(
            "Identity Provider",
            f"unexpected status {response.status_code}",
            {"method": method}
        )

    async def sign_in(self, email: str, password: str) -> AuthUser:
        data = await self._call(
            "signInWithPassword",
            {"email": email, "password": password, "returnSecureToken": True}
        )
        return AuthUser(
            uid=data["localId"],
            email=data.get("email", email),
            id_token=data["idToken"],
            display_name=data.get("displayName") or None,
            refresh_token=data.get("refreshToken"),
        )

    async def send_password_reset(self, email: str) -> None:
        await self._call("sendOobCode", {"requestType": "PASSWORD_RESET", "email": email})

    async def lookup(self, id_token: str) -> AuthUser:
        data = await self._call("lookup", {"idToken": id_token})
        users = data.get("users") or []
        if not users:
            raise AuthenticationException("Session expired. Please sign in again.", "auth/user-not-found")
        user = users[0]
        if user.get("disabled"):
            raise AuthenticationException(
                "This account has been disabled. Please contact support.", "auth/user-disabled"
            )
        return AuthUser(
            uid=user["localId"],
            email=user.get("email", ""),
            id_token=id_token,
            display_name=user.get("displayName") or None,
        )
