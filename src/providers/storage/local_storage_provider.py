"""Filesystem-backed object storage.

Keys map to files under a root directory.  Keys that would resolve outside
the root (``..`` segments, absolute paths) are rejected.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import structlog

from src.interfaces.storage_provider import IStorageProvider
from src.utils.errors import StorageError, StorageObjectNotFoundError

logger = structlog.get_logger(logger_name=__name__)


class LocalStorageProvider(IStorageProvider):
    """Stores objects as files under ``root``."""

    def __init__(self, root: str | Path) -> None:
        self._root = Path(root).resolve()

    def _path_for(self, key: str) -> Path:
        path = (self._root / key).resolve()
        if not path.is_relative_to(self._root):
            raise StorageError(f"Key escapes storage root: {key}", provider_name=self.get_provider_name())
        return path

    async def get_object(self, key: str) -> bytes:
        path = self._path_for(key)
        try:
            data = await asyncio.to_thread(path.read_bytes)
        except FileNotFoundError as exc:
            raise StorageObjectNotFoundError(key, provider_name=self.get_provider_name()) from exc
        except OSError as exc:
            raise StorageError(f"Cannot read {key}: {exc}", provider_name=self.get_provider_name()) from exc
        logger.debug("storage_object_read", key=key, size=len(data))
        return data

    async def put_object(self, key: str, data: bytes, content_type: str | None = None) -> None:
        path = self._path_for(key)
        try:
            await asyncio.to_thread(path.parent.mkdir, parents=True, exist_ok=True)
            await asyncio.to_thread(path.write_bytes, data)
        except OSError as exc:
            raise StorageError(f"Cannot write {key}: {exc}", provider_name=self.get_provider_name()) from exc
        logger.info("storage_object_written", key=key, size=len(data))

    def get_provider_name(self) -> str:
        return "local_storage"
