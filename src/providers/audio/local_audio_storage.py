"""Local directory storage for synthesized narration audio.

Files are written flat into ``audio_dir`` and served by the API under
``/api/audio/{filename}``.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import structlog

from src.interfaces.narration_provider import IAudioStorage
from src.utils.errors import StorageError

logger = structlog.get_logger(logger_name=__name__)

AUDIO_URL_PREFIX = "/api/audio"


class LocalAudioStorage(IAudioStorage):
    """Writes audio files to a local directory."""

    def __init__(self, audio_dir: str | Path, url_prefix: str = AUDIO_URL_PREFIX) -> None:
        self._dir = Path(audio_dir)
        self._prefix = url_prefix.rstrip("/")

    @staticmethod
    def _check_name(filename: str) -> None:
        if not filename or "/" in filename or "\\" in filename or filename.startswith("."):
            raise StorageError(f"Invalid audio filename: {filename!r}", provider_name="local_audio")

    def url_for(self, filename: str) -> str:
        return f"{self._prefix}/{filename}"

    def path_for(self, filename: str) -> str | None:
        try:
            self._check_name(filename)
        except StorageError:
            return None
        path = self._dir / filename
        return str(path) if path.is_file() else None

    async def save(self, data: bytes, filename: str, owner_id: str) -> str:
        self._check_name(filename)
        path = self._dir / filename
        try:
            await asyncio.to_thread(self._dir.mkdir, parents=True, exist_ok=True)
            await asyncio.to_thread(path.write_bytes, data)
        except OSError as exc:
            raise StorageError(f"Cannot write audio {filename}: {exc}", provider_name="local_audio") from exc
        logger.info("audio_saved", filename=filename, owner_id=owner_id, size=len(data))
        return self.url_for(filename)
