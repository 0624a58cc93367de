"""Configuration management - environment settings plus YAML story rules."""

from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment and .env."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Server
    host: str = Field(default="0.0.0.0", description="Bind host")
    port: int = Field(default=8000, description="Bind port")
    log_level: str = Field(default="INFO", description="Root log level")
    reload: bool = Field(default=False, description="Restart on code changes (development only)")

    # Provider (OpenAI-compatible)
    llm_base_url: str | None = Field(default=None, description="OpenAI-compatible API base URL")
    llm_api_key: str = Field(default="", description="Server-side API key for the provider")
    allow_client_api_keys: bool = Field(
        default=True,
        description="Accept a caller-supplied key in the X-API-Key header",
    )

    # Story text
    story_model: str = Field(default="gpt-4o-mini", description="Model for story text")
    story_temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    story_max_tokens: int = Field(default=2048, gt=0)

    # Narration
    narration_model: str = Field(default="gpt-4o-mini-audio-preview", description="Audio-capable chat model")
    default_voice: str = Field(default="coral", description="Narration voice when the request names none")
    narration_max_characters: int = Field(default=1500, gt=0, description="Hard cap on narrated text")
    narration_sample_rate_hz: int = Field(default=24000, gt=0, description="Sample rate of provider PCM")

    # Illustration
    illustration_enabled: bool = Field(default=True, description="Request an illustration per story")
    image_model: str = Field(default="gpt-image-1", description="Image generation model")
    image_size: str = Field(default="1536x1024", description="Requested illustration size")

    # Transcription
    transcription_model: str = Field(default="gpt-4o-mini-transcribe", description="Speech-to-text model")

    # Per-call timeouts (seconds)
    text_timeout_seconds: float = Field(default=60.0, gt=0)
    narration_timeout_seconds: float = Field(default=30.0, gt=0)
    illustration_timeout_seconds: float = Field(default=45.0, gt=0)
    transcription_timeout_seconds: float = Field(default=30.0, gt=0)

    # Rules
    config_dir: Path | None = Field(default=None, description="Directory holding story_rules.yaml")


def load_yaml_config(config_path: Path) -> dict[str, Any]:
    """Load YAML config file."""
    if not config_path.exists():
        return {}
    with config_path.open() as f:
        return yaml.safe_load(f) or {}


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance."""
    return Settings()


@lru_cache
def get_story_rules(config_dir_str: str = "") -> dict[str, Any]:
    """Load story rules (refusal phrases, prompt styling) from config."""
    if not config_dir_str:
        config_dir = Path(__file__).parent.parent.parent / "config"
    else:
        config_dir = Path(config_dir_str)
    return load_yaml_config(config_dir / "story_rules.yaml")
