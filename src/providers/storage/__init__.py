"""Object storage adapters (IStorageProvider implementations)."""

from src.providers.storage.http_storage_provider import HTTPStorageProvider
from src.providers.storage.local_storage_provider import LocalStorageProvider

__all__ = ["HTTPStorageProvider", "LocalStorageProvider"]
