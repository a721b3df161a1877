"""Ollama LLM provider adapter.

Talks to a local Ollama server through its OpenAI-compatible ``/v1``
endpoint, so the ``openai`` client is reused with a different base URL.
Reachability is checked against Ollama's native ``/api/tags`` with httpx.
"""

from __future__ import annotations

import base64

import httpx
import openai
import structlog

from src.config.settings import Settings
from src.interfaces.llm_provider import ILLMProvider
from src.utils.errors import LLMError

logger = structlog.get_logger(logger_name=__name__)


class OllamaLLMProvider(ILLMProvider):
    """LLM provider backed by a local Ollama server (``llama3.1`` / ``llava``)."""

    def __init__(
        self,
        settings: Settings,
        text_model: str = "llama3.1",
        vision_model: str = "llava",
    ) -> None:
        self._base_url = settings.ollama_base_url.rstrip("/")
        self._client = openai.AsyncOpenAI(base_url=f"{self._base_url}/v1", api_key="ollama")
        self._text_model = text_model
        self._vision_model = vision_model

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.3,
        max_tokens: int = 4000,
    ) -> str:
        return await self._chat(
            self._text_model,
            [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            temperature=temperature,
            max_tokens=max_tokens,
        )

    async def vision_extract(self, image_bytes: bytes, prompt: str) -> str:
        data_uri = "data:image/png;base64," + base64.b64encode(image_bytes).decode("ascii")
        return await self._chat(
            self._vision_model,
            [
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": prompt},
                        {"type": "image_url", "image_url": {"url": data_uri}},
                    ],
                }
            ],
            max_tokens=4000,
        )

    async def _chat(self, model: str, messages: list[dict], **kwargs) -> str:
        try:
            response = await self._client.chat.completions.create(
                model=model,
                messages=messages,
                **kwargs,
            )
        except openai.APIError as exc:
            raise LLMError(
                message=f"Ollama API error: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        content = response.choices[0].message.content
        if content is None:
            raise LLMError(
                message="Ollama returned empty response",
                provider_name=self.get_provider_name(),
            )
        logger.info("ollama_completion", model=model)
        return content

    def supports_vision(self) -> bool:
        return True

    def is_available(self) -> bool:
        return bool(self._base_url)

    async def validate_credentials(self) -> bool:
        """Check the server is up by listing installed models."""
        if not self.is_available():
            return False
        try:
            async with httpx.AsyncClient(timeout=5.0) as client:
                response = await client.get(f"{self._base_url}/api/tags")
                return response.status_code == 200
        except httpx.HTTPError:
            return False

    def get_provider_name(self) -> str:
        return "ollama"
