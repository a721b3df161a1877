"""Shared pytest fixtures for the Lectern test suite."""

from __future__ import annotations

from pathlib import Path
from typing import Callable
from unittest.mock import AsyncMock, MagicMock

import fitz  # PyMuPDF
import pytest

from src.interfaces.llm_provider import ILLMProvider
from src.models.document import Document
from src.providers.document_store.sqlite_document_store import SQLiteDocumentStore
from src.providers.storage.local_storage_provider import LocalStorageProvider

OWNER_ID = "user-1"


# ---------------------------------------------------------------------------
# Provider fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_llm_provider() -> MagicMock:
    """Return a mock ILLMProvider with async complete and vision_extract."""
    provider = MagicMock(spec=ILLMProvider)
    provider.complete = AsyncMock(return_value="[]")
    provider.vision_extract = AsyncMock(return_value="NO_TEXT_FOUND")
    provider.supports_vision.return_value = True
    provider.get_provider_name.return_value = "mock-llm"
    provider.is_available.return_value = True
    return provider


@pytest.fixture
async def document_store(tmp_path: Path) -> SQLiteDocumentStore:
    """Return an initialized SQLite store in a temp directory."""
    store = SQLiteDocumentStore(db_path=tmp_path / "lectern.db")
    await store.initialize()
    return store


@pytest.fixture
def storage(tmp_path: Path) -> LocalStorageProvider:
    return LocalStorageProvider(root=tmp_path / "uploads")


@pytest.fixture
def make_document(
    document_store: SQLiteDocumentStore,
    storage: LocalStorageProvider,
) -> Callable:
    """Factory: store *data* and register a document for it."""

    async def _make(
        data: bytes,
        media_type: str = "text/plain",
        name: str = "notes.txt",
        owner_id: str = OWNER_ID,
        document_id: str = "doc-1",
        upload: bool = True,
    ) -> Document:
        key = f"{owner_id}/{document_id}/{name}"
        if upload:
            await storage.put_object(key, data, content_type=media_type)
        return await document_store.create_document(
            Document(
                id=document_id,
                owner_id=owner_id,
                storage_key=key,
                name=name,
                media_type=media_type,
            )
        )

    return _make


# ---------------------------------------------------------------------------
# PDF builder
# ---------------------------------------------------------------------------


@pytest.fixture
def make_pdf() -> Callable[..., bytes]:
    """Factory: build an in-memory PDF with one page per text (blank if empty)."""

    def _make(*page_texts: str) -> bytes:
        doc = fitz.open()
        try:
            for text in page_texts:
                page = doc.new_page()
                if text:
                    page.insert_text((72, 72), text, fontsize=11)
            return doc.tobytes()
        finally:
            doc.close()

    return _make
