"""Abstract base classes for speech synthesis and audio file storage."""

from __future__ import annotations

from abc import ABC, abstractmethod


# Concrete implementation: OpenAINarrationProvider (src/providers/narration/)
class INarrationProvider(ABC):
    """Contract for text-to-speech services."""

    @abstractmethod
    async def synthesize(self, text: str) -> bytes:
        """Return encoded audio for *text*.

        Raises
        ------
        src.utils.errors.NarrationError
            If synthesis fails or produces no audio.
        """

    @property
    @abstractmethod
    def file_extension(self) -> str:
        """Extension (without dot) matching the encoding :meth:`synthesize` returns."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier, e.g. ``"openai_tts"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if credentials are present (no network call)."""


# Concrete implementation: LocalAudioStorage (src/providers/audio/)
class IAudioStorage(ABC):
    """Contract for persisting synthesized audio and resolving its public URL."""

    @abstractmethod
    async def save(self, data: bytes, filename: str, owner_id: str) -> str:
        """Persist *data* as *filename* and return the URL clients fetch it from."""

    @abstractmethod
    def url_for(self, filename: str) -> str:
        """Return the public URL for *filename* whether or not it exists yet."""

    @abstractmethod
    def path_for(self, filename: str) -> str | None:
        """Return a local filesystem path for serving *filename*, or ``None``."""
