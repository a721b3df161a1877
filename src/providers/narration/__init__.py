"""Narration adapters (INarrationProvider implementations)."""

from src.providers.narration.openai_narration_provider import OpenAINarrationProvider

__all__ = ["OpenAINarrationProvider"]
