"""Configuration loading and validation."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field

from ..constants import limits

# Load .env file
load_dotenv()


class GenerationSettings(BaseModel):
    """Generation service settings."""

    api_key: str | None = None
    api_key_env: str = "GEMINI_API_KEY"
    text_model: str = limits.DEFAULT_TEXT_MODEL
    image_model: str = limits.DEFAULT_IMAGE_MODEL

    def get_api_key(self) -> str | None:
        """Get API key from config or environment."""
        if self.api_key:
            return self.api_key
        return os.getenv(self.api_key_env)


class RetrySettings(BaseModel):
    """Backoff policy and per-operation attempt budgets."""

    initial_delay_ms: int = limits.INITIAL_RETRY_DELAY_MS
    multiplier: float = limits.BACKOFF_MULTIPLIER
    content_attempts: int = limits.TEXT_RETRIES
    persona_attempts: int = limits.PERSONA_RETRIES
    subtopic_attempts: int = limits.SUBTOPIC_RETRIES
    trend_attempts: int = limits.TREND_RETRIES
    news_attempts: int = limits.NEWS_RETRIES
    image_attempts: int = limits.IMAGE_RETRIES


class TimeoutSettings(BaseModel):
    """Per-call deadlines in milliseconds."""

    text_ms: int = limits.TEXT_TIMEOUT_MS
    search_ms: int = limits.SEARCH_TIMEOUT_MS
    batch_ms: int = limits.BATCH_TIMEOUT_MS
    image_ms: int = limits.IMAGE_TIMEOUT_MS


class NewsSettings(BaseModel):
    """News cache gate windows."""

    refresh_window_ms: int = limits.NEWS_REFRESH_WINDOW_MS
    in_progress_timeout_ms: int = limits.NEWS_IN_PROGRESS_TIMEOUT_MS
    batch_size: int = limits.NEWS_BATCH_SIZE
    cache_read_limit: int = limits.NEWS_CACHE_READ_LIMIT


class CheckpointSettings(BaseModel):
    """Local checkpoint persistence."""

    state_dir: Path = Path(".trendme") / "checkpoints"
    stale_after_ms: int = limits.CHECKPOINT_STALE_MS


class StorageSettings(BaseModel):
    """Document and blob storage backends."""

    data_dir: Path = Path(".trendme") / "data"
    blob_backend: Literal["local", "cloudinary"] = "local"
    blob_dir: Path = Path(".trendme") / "blobs"
    cloudinary_cloud_name_env: str = "CLOUDINARY_CLOUD_NAME"
    cloudinary_api_key_env: str = "CLOUDINARY_API_KEY"
    cloudinary_api_secret_env: str = "CLOUDINARY_API_SECRET"

    def get_cloudinary_credentials(self) -> tuple[str | None, str | None, str | None]:
        """Get Cloudinary credentials from environment."""
        return (
            os.getenv(self.cloudinary_cloud_name_env),
            os.getenv(self.cloudinary_api_key_env),
            os.getenv(self.cloudinary_api_secret_env),
        )


class ImageSettings(BaseModel):
    """Image grid behaviour."""

    # Error kinds that still abort the step after the retry budget is spent.
    propagate_kinds: list[str] = Field(default_factory=lambda: ["timeout"])
    placeholder_size: int = 512


class TrendmeConfig(BaseModel):
    """Full application configuration."""

    generation: GenerationSettings = Field(default_factory=GenerationSettings)
    retry: RetrySettings = Field(default_factory=RetrySettings)
    timeouts: TimeoutSettings = Field(default_factory=TimeoutSettings)
    news: NewsSettings = Field(default_factory=NewsSettings)
    checkpoints: CheckpointSettings = Field(default_factory=CheckpointSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    images: ImageSettings = Field(default_factory=ImageSettings)


def load_config(config_path: Path | None = None) -> TrendmeConfig:
    """Load configuration from YAML file."""
    if config_path is None:
        env_path = os.getenv("TRENDME_CONFIG")
        config_path = Path(env_path) if env_path else Path("config") / "trendme.yaml"

    if not config_path.exists():
        # Return default config if file doesn't exist
        return TrendmeConfig()

    with open(config_path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    return TrendmeConfig(**data)
