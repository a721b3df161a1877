"""HTTP object storage adapter (S3/R2 public buckets, presigning proxies).

Objects live at ``{base_url}/{key}``.  Reads are ``GET``, writes are ``PUT``
with the object body.  The ``httpx.AsyncClient`` is injected for
testability and connection pooling.
"""

from __future__ import annotations

from urllib.parse import quote

import httpx
import structlog

from src.interfaces.storage_provider import IStorageProvider
from src.utils.errors import StorageError, StorageObjectNotFoundError

logger = structlog.get_logger(logger_name=__name__)


class HTTPStorageProvider(IStorageProvider):
    """Object storage reached over plain HTTP.

    Parameters
    ----------
    base_url:
        Bucket or proxy root, e.g. ``https://files.example.com/uploads``.
    http_client:
        Shared async client.
    auth_token:
        Optional bearer token sent with every request.
    """

    def __init__(
        self,
        base_url: str,
        http_client: httpx.AsyncClient,
        auth_token: str = "",
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = http_client
        self._headers = {"Authorization": f"Bearer {auth_token}"} if auth_token else {}

    def _url_for(self, key: str) -> str:
        return f"{self._base_url}/{quote(key.lstrip('/'))}"

    async def get_object(self, key: str) -> bytes:
        try:
            response = await self._client.get(self._url_for(key), headers=self._headers)
        except httpx.HTTPError as exc:
            raise StorageError(f"GET {key} failed: {exc}", provider_name=self.get_provider_name()) from exc

        if response.status_code == 404:
            raise StorageObjectNotFoundError(key, provider_name=self.get_provider_name())
        if response.status_code >= 400:
            raise StorageError(
                f"GET {key} returned HTTP {response.status_code}",
                provider_name=self.get_provider_name(),
            )
        logger.debug("storage_object_fetched", key=key, size=len(response.content))
        return response.content

    async def put_object(self, key: str, data: bytes, content_type: str | None = None) -> None:
        headers = dict(self._headers)
        if content_type:
            headers["Content-Type"] = content_type
        try:
            response = await self._client.put(self._url_for(key), content=data, headers=headers)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise StorageError(f"PUT {key} failed: {exc}", provider_name=self.get_provider_name()) from exc
        logger.info("storage_object_uploaded", key=key, size=len(data))

    def get_provider_name(self) -> str:
        return "http_storage"
