"""Public interface definitions for all external service providers.

Every external API or service Lectern touches is accessed through the
abstract base classes defined here.  Concrete adapters live in
``src/providers/`` and are wired together in ``src/main.py``; tests inject
mocks built with ``MagicMock(spec=...)``.

    Interface          →  Concrete implementations (in src/providers/)
    ─────────────────────────────────────────────────────────────────
    ILLMProvider       →  OpenAILLMProvider, AnthropicLLMProvider,
                          OllamaLLMProvider
    IStorageProvider   →  LocalStorageProvider, HTTPStorageProvider
    IDocumentStore     →  SQLiteDocumentStore
    INarrationProvider →  OpenAINarrationProvider
    IAudioStorage      →  LocalAudioStorage
"""

from src.interfaces.document_store import IDocumentStore
from src.interfaces.llm_provider import ILLMProvider
from src.interfaces.narration_provider import IAudioStorage, INarrationProvider
from src.interfaces.storage_provider import IStorageProvider

__all__ = [
    "IAudioStorage",
    "IDocumentStore",
    "ILLMProvider",
    "INarrationProvider",
    "IStorageProvider",
]
