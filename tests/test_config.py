"""
Tests for runtime settings

Tests for storyframe_services/config.py
"""

import pytest
from pydantic import ValidationError

from storyframe_core_schemas import AspectRatio
from storyframe_services import Settings


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self, monkeypatch):
        for name in ("IMAGE_MODEL", "MAX_ATTEMPTS", "RETRY_DELAY", "DEFAULT_BATCH_SIZE"):
            monkeypatch.delenv(f"STORYFRAME_{name}", raising=False)

        settings = Settings()

        assert settings.image_model == "gemini-2.5-flash-image"
        assert settings.max_attempts == 3
        assert settings.retry_delay == 5.0
        assert settings.default_batch_size == 10

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("STORYFRAME_IMAGE_MODEL", "gemini-test-image")
        monkeypatch.setenv("STORYFRAME_MAX_ATTEMPTS", "5")
        monkeypatch.setenv("STORYFRAME_RETRY_DELAY", "0.5")
        monkeypatch.setenv("STORYFRAME_DEFAULT_BATCH_SIZE", "3")
        monkeypatch.setenv("STORYFRAME_DEFAULT_ASPECT_RATIO", "9:16")
        monkeypatch.setenv("STORYFRAME_LOG_LEVEL", "DEBUG")

        settings = Settings()

        assert settings.image_model == "gemini-test-image"
        assert settings.max_attempts == 5
        assert settings.retry_delay == 0.5
        assert settings.default_batch_size == 3
        assert settings.default_aspect_ratio is AspectRatio.PORTRAIT
        assert settings.log_level == "DEBUG"

    def test_invalid_override(self, monkeypatch):
        monkeypatch.setenv("STORYFRAME_MAX_ATTEMPTS", "0")

        with pytest.raises(ValidationError):
            Settings()

    def test_api_key_is_not_a_setting(self, monkeypatch):
        monkeypatch.setenv("GOOGLE_API_KEY", "secret")

        assert "secret" not in Settings().model_dump_json()
