"""
Blob Storage
============

Uploads user-selected files (bulk staff spreadsheets, QR placement photos)
and returns a public download URL.

The HTTP implementation targets a Firebase-style storage REST API:
`POST {base}/{bucket}/o?name=<path>` with the raw bytes, after which the
object is downloadable at `{base}/{bucket}/o/<quoted path>?alt=media`.
"""

from abc import ABC, abstractmethod
from typing import Optional
from urllib.parse import quote

import httpx

from seva.config import settings
from seva.core.exceptions import StorageException
from seva.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


class IBlobStorage(ABC):
    """Interface for the blob storage collaborator."""

    @abstractmethod
    async def upload(self, path: str, content: bytes, content_type: str) -> str:
        """Store `content` at `path` and return its download URL."""


class HttpBlobStorage(IBlobStorage):
    """Blob storage over the storage REST API using httpx."""

    def __init__(
        self,
        bucket: Optional[str] = None,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        timeout: float = 30.0
    ):
        self._bucket = bucket or settings.storage_bucket
        self._base_url = (base_url or settings.storage_base_url).rstrip("/")
        self._token = token or settings.storage_token
        self._timeout = timeout
        self._http_client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self._timeout)
        return self._http_client

    async def close(self) -> None:
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    def download_url(self, path: str, download_token: Optional[str] = None) -> str:
        url = f"{self._base_url}/{self._bucket}/o/{quote(path, safe='')}?alt=media"
        if download_token:
            url += f"&token={download_token}"
        return url

    async def upload(self, path: str, content: bytes, content_type: str) -> str:
        if not self._bucket:
            raise StorageException("storage_bucket is not configured")

        headers = {"Content-Type": content_type}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"

        client = await self._get_client()
        try:
            response = await client.post(
                f"{self._base_url}/{self._bucket}/o",
                params={"name": path},
                content=content,
                headers=headers
            )
        except httpx.HTTPError as e:
            logger.error("Blob upload failed", extra={"path": path, "error": str(e)})
            raise StorageException(str(e), {"path": path}) from e

        if response.status_code not in (200, 201):
            logger.error(
                "Blob upload rejected",
                extra={"path": path, "status_code": response.status_code, "response": response.text[:500]}
            )
            raise StorageException(f"upload rejected with status {response.status_code}", {"path": path})

        metadata = response.json()
        url = self.download_url(path, metadata.get("downloadTokens"))
        logger.info("Blob uploaded", extra={"path": path, "size_bytes": len(content)})
        return url


__all__ = ["IBlobStorage", "HttpBlobStorage"]
