"""Tests for configuration loading."""

from pathlib import Path

from trendme.constants import limits
from trendme.providers.config import GenerationSettings, TrendmeConfig, load_config


class TestLoadConfig:
    """Tests for load_config."""

    def test_missing_file_gives_defaults(self, tmp_path):
        config = load_config(tmp_path / "nope.yaml")
        assert config == TrendmeConfig()
        assert config.retry.content_attempts == limits.TEXT_RETRIES
        assert config.news.refresh_window_ms == limits.NEWS_REFRESH_WINDOW_MS

    def test_partial_file_overrides(self, tmp_path):
        path = tmp_path / "trendme.yaml"
        path.write_text(
            "retry:\n  image_attempts: 5\nstorage:\n  blob_backend: cloudinary\n",
            encoding="utf-8",
        )

        config = load_config(path)

        assert config.retry.image_attempts == 5
        assert config.retry.persona_attempts == limits.PERSONA_RETRIES
        assert config.storage.blob_backend == "cloudinary"

    def test_env_var_points_to_file(self, tmp_path, monkeypatch):
        path = tmp_path / "custom.yaml"
        path.write_text("timeouts:\n  image_ms: 1000\n", encoding="utf-8")
        monkeypatch.setenv("TRENDME_CONFIG", str(path))

        assert load_config().timeouts.image_ms == 1000

    def test_shipped_config_is_valid(self):
        shipped = Path(__file__).resolve().parents[2] / "config" / "trendme.yaml"
        assert load_config(shipped).generation.image_model == limits.DEFAULT_IMAGE_MODEL


class TestApiKey:
    """Tests for API key resolution."""

    def test_explicit_key_wins(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "from-env")
        assert GenerationSettings(api_key="explicit").get_api_key() == "explicit"

    def test_key_from_env(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "from-env")
        assert GenerationSettings().get_api_key() == "from-env"

    def test_custom_env_name(self, monkeypatch):
        monkeypatch.setenv("MY_KEY", "custom")
        assert GenerationSettings(api_key_env="MY_KEY").get_api_key() == "custom"
