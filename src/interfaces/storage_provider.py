"""Abstract base class for object storage holding uploaded document bytes."""

from __future__ import annotations

from abc import ABC, abstractmethod


# Concrete implementations: LocalStorageProvider, HTTPStorageProvider
# Located in: src/providers/storage/
class IStorageProvider(ABC):
    """Contract for reading and writing raw document bytes by key."""

    @abstractmethod
    async def get_object(self, key: str) -> bytes:
        """Return the bytes stored under *key*.

        Raises
        ------
        src.utils.errors.StorageObjectNotFoundError
            If no object exists under *key*.
        src.utils.errors.StorageError
            For any other read failure.
        """

    @abstractmethod
    async def put_object(self, key: str, data: bytes, content_type: str | None = None) -> None:
        """Store *data* under *key*, overwriting any existing object."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier, e.g. ``"local_storage"``."""
