"""Unit tests for Settings and the YAML config loader."""

from __future__ import annotations

from pathlib import Path

from src.config.loader import load_config
from src.config.settings import Settings


def _settings(**overrides) -> Settings:
    values = {
        "anthropic_api_key": "",
        "openai_api_key": "",
        "ollama_base_url": "http://localhost:11434",
        "storage_backend": "local",
        "log_level": "INFO",
    }
    values.update(overrides)
    return Settings(**values)


class TestSettings:
    def test_provider_priority(self) -> None:
        settings = _settings(anthropic_api_key="a", openai_api_key="o")

        assert settings.get_available_llm_providers() == ["anthropic", "openai", "ollama"]

    def test_only_ollama(self) -> None:
        assert _settings().get_available_llm_providers() == ["ollama"]

    def test_defaults(self) -> None:
        settings = _settings()

        assert settings.openai_tts_model == "tts-1"
        assert settings.pipeline_timeout_seconds == 300.0


class TestLoadConfig:
    def test_yaml_values_and_env_overrides(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            "chunking:\n  max_words: 250\nlogging:\n  level: WARNING\n  format: json\n",
            encoding="utf-8",
        )

        config = load_config(str(config_file), settings=_settings(log_level="DEBUG"))

        assert config["chunking"]["max_words"] == 250
        assert config["logging"] == {"level": "DEBUG", "format": "json"}
        assert config["storage"]["backend"] == "local"
        assert config["llm"]["available_providers"] == ["ollama"]

    def test_missing_file_yields_overrides_only(self, tmp_path: Path) -> None:
        config = load_config(str(tmp_path / "absent.yaml"), settings=_settings(pipeline_timeout_seconds=42.0))

        assert config["app"]["pipeline_timeout_seconds"] == 42.0
        assert "generation" not in config

    def test_repository_config_has_pipeline_tunables(self) -> None:
        root = Path(__file__).resolve().parents[2]

        config = load_config(str(root / "config" / "config.yaml"), settings=_settings())

        assert config["generation"]["max_attempts"] == 5
        assert config["generation"]["backoff_seconds"] == 2.0
        assert config["extraction"]["fast_timeout_seconds"] == 30
        assert config["extraction"]["extract_image_text"] is False
        assert config["flashcards"]["card_count"] == 16
        assert config["quiz"]["question_count"] == 5
