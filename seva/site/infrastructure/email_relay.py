"""
Email Relay Client
==================

Forwards contact-form submissions to a hosted email relay
(EmailJS-compatible `email/send` endpoint). The relay only reports
accept/reject; delivery outcome is not visible here. Requests are sent
once and never retried.
"""

from typing import Any, Dict, Optional

import httpx

from seva.config import settings
from seva.core.exceptions import EmailRelayException
from seva.shared.infrastructure.logging import get_logger
from seva.site.application.services import IEmailRelay

logger = get_logger(__name__)


class HttpEmailRelay(IEmailRelay):
    """Email relay over HTTP using httpx."""

    def __init__(
        self,
        url: Optional[str] = None,
        service_id: Optional[str] = None,
        template_id: Optional[str] = None,
        public_key: Optional[str] = None,
        timeout: Optional[float] = None
    ):
        self._url = url or settings.email_relay_url
        self._service_id = service_id or settings.email_relay_service_id
        self._template_id = template_id or settings.email_relay_template_id
        self._public_key = public_key or settings.email_relay_public_key
        self._timeout = timeout or settings.email_relay_timeout_seconds
        self._http_client: Optional[httpx.AsyncClient] = None

    @property
    def is_configured(self) -> bool:
        return bool(self._service_id and self._template_id and self._public_key)

    async def _get_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self._timeout)
        return self._http_client

    async def close(self) -> None:
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    async def send(self, template_params: Dict[str, str]) -> None:
        if not self.is_configured:
            raise EmailRelayException("email relay credentials are not configured")

        payload: Dict[str, Any] = {
            "service_id": self._service_id,
            "template_id": self._template_id,
            "user_id": self._public_key,
            "template_params": template_params,
        }
        client = await self._get_client()
        try:
            response = await client.post(self._url, json=payload)
        except httpx.HTTPError as e:
            logger.error("Email relay unreachable", extra={"error": str(e)})
            raise EmailRelayException(str(e)) from e

        if not response.is_success:
            logger.error(
                "Email relay rejected submission",
                extra={"status_code": response.status_code, "response": response.text[:500]}
            )
            raise EmailRelayException(
                f"unexpected status {response.status_code}",
                {"status_code": response.status_code}
            )
