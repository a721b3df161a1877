"""Application settings loaded from environment variables via pydantic-settings.

Two sources are read, in priority order:

1. Environment variables, e.g. ``OPENAI_API_KEY=sk-abc123``.
2. A ``.env`` file in the working directory (local development).

Field ``openai_api_key`` maps to env var ``OPENAI_API_KEY``.  Defaults
apply when neither source sets a field.  Pipeline tunables (page caps,
retry budget, chunk size) live in ``config/config.yaml`` instead; see
:func:`src.config.loader.load_config`.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Lectern application settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # === LLM Providers ===
    # Empty string = "not configured"; provider selection in main.py skips it.
    openai_api_key: str = ""
    openai_base_url: str = ""  # OpenAI-compatible APIs (TogetherAI, vLLM, ...)
    openai_text_model: str = ""
    openai_vision_model: str = ""
    anthropic_api_key: str = ""
    ollama_base_url: str = "http://localhost:11434"

    # === Narration ===
    openai_tts_model: str = "tts-1"
    openai_tts_voice: str = "alloy"

    # === Persistence ===
    database_path: str = "data/lectern.db"

    # === Object storage ===
    storage_backend: str = "local"  # "local" or "http"
    storage_dir: str = "data/uploads"
    storage_base_url: str = ""
    storage_auth_token: str = ""

    # === Audio ===
    audio_dir: str = "data/audio"

    # === App Config ===
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    app_env: str = "development"
    log_level: str = "INFO"
    pipeline_timeout_seconds: float = 300.0

    def get_available_llm_providers(self) -> list[str]:
        """Return LLM provider names with non-empty credentials, in priority order."""
        providers: list[str] = []
        if self.anthropic_api_key:
            providers.append("anthropic")
        if self.openai_api_key:
            providers.append("openai")
        if self.ollama_base_url:
            providers.append("ollama")
        return providers
