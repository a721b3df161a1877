"""Audio storage adapters (IAudioStorage implementations)."""

from src.providers.audio.local_audio_storage import AUDIO_URL_PREFIX, LocalAudioStorage

__all__ = ["AUDIO_URL_PREFIX", "LocalAudioStorage"]
