"""Unit tests for object-storage adapters: local filesystem and HTTP."""

from __future__ import annotations

from pathlib import Path

import httpx
import pytest

from src.providers.storage.http_storage_provider import HTTPStorageProvider
from src.providers.storage.local_storage_provider import LocalStorageProvider
from src.utils.errors import StorageError, StorageObjectNotFoundError


class TestLocalStorageProvider:
    @pytest.mark.asyncio
    async def test_put_then_get(self, tmp_path: Path) -> None:
        storage = LocalStorageProvider(tmp_path)

        await storage.put_object("user-1/doc-1/notes.txt", b"hello")

        assert await storage.get_object("user-1/doc-1/notes.txt") == b"hello"
        assert (tmp_path / "user-1" / "doc-1" / "notes.txt").read_bytes() == b"hello"

    @pytest.mark.asyncio
    async def test_missing_key(self, tmp_path: Path) -> None:
        storage = LocalStorageProvider(tmp_path)

        with pytest.raises(StorageObjectNotFoundError) as exc_info:
            await storage.get_object("nope.pdf")

        assert exc_info.value.key == "nope.pdf"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("key", ["../outside.txt", "a/../../outside.txt"])
    async def test_keys_cannot_escape_root(self, tmp_path: Path, key: str) -> None:
        storage = LocalStorageProvider(tmp_path / "root")

        with pytest.raises(StorageError):
            await storage.put_object(key, b"x")

    def test_provider_name(self, tmp_path: Path) -> None:
        assert LocalStorageProvider(tmp_path).get_provider_name() == "local_storage"


class TestHTTPStorageProvider:
    @staticmethod
    def _provider(handler, auth_token: str = "") -> HTTPStorageProvider:
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return HTTPStorageProvider("https://files.example.com/bucket/", client, auth_token=auth_token)

    @pytest.mark.asyncio
    async def test_get_object(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, content=b"%PDF-1.7")

        data = await self._provider(handler, auth_token="secret").get_object("user 1/doc.pdf")

        assert data == b"%PDF-1.7"
        assert str(seen[0].url) == "https://files.example.com/bucket/user%201/doc.pdf"
        assert seen[0].headers["Authorization"] == "Bearer secret"

    @pytest.mark.asyncio
    async def test_404_is_not_found(self) -> None:
        provider = self._provider(lambda request: httpx.Response(404))

        with pytest.raises(StorageObjectNotFoundError):
            await provider.get_object("missing.pdf")

    @pytest.mark.asyncio
    async def test_server_error(self) -> None:
        provider = self._provider(lambda request: httpx.Response(503))

        with pytest.raises(StorageError) as exc_info:
            await provider.get_object("doc.pdf")

        assert not isinstance(exc_info.value, StorageObjectNotFoundError)

    @pytest.mark.asyncio
    async def test_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(StorageError):
            await self._provider(handler).get_object("doc.pdf")

    @pytest.mark.asyncio
    async def test_put_object(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(201)

        await self._provider(handler).put_object("k/doc.txt", b"body", content_type="text/plain")

        assert seen[0].method == "PUT"
        assert seen[0].content == b"body"
        assert seen[0].headers["Content-Type"] == "text/plain"

    @pytest.mark.asyncio
    async def test_put_failure(self) -> None:
        provider = self._provider(lambda request: httpx.Response(403))

        with pytest.raises(StorageError):
            await provider.put_object("k", b"body")
