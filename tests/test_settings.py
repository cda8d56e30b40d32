"""Tests for Application Settings.

Tests environment-based configuration and validation.
"""

import pytest
from pydantic import ValidationError

from fivestep.config.constants import CURRICULUM
from fivestep.config.settings import Settings, get_settings


class TestSettingsDefaults:
    """Tests for default settings values."""

    @pytest.fixture(autouse=True)
    def clear_cache(self):
        """Clear settings cache before each test."""
        get_settings.cache_clear()
        yield
        get_settings.cache_clear()

    def test_api_defaults(self):
        settings = Settings(_env_file=None)
        assert settings.api_host == "0.0.0.0"
        assert settings.api_port == 8081

    def test_curriculum_defaults(self):
        settings = Settings(_env_file=None)
        assert settings.min_chunk_words == CURRICULUM.MIN_CHUNK_WORDS == 10
        assert settings.synthesis_max_attempts == 2
        assert settings.quota_retry_delay_s == 1.5

    def test_voice_defaults(self):
        settings = Settings(_env_file=None)
        assert settings.synthesis_voice == "Kore"
        assert settings.fallback_voice_rate == "-10%"
        assert settings.fallback_voice_sample_rate == 24000

    def test_env_overrides(self):
        """conftest sets mock engines through the environment."""
        settings = Settings(_env_file=None)
        assert settings.synthesis_engine == "mock"
        assert settings.feedback_engine == "mock"
        assert settings.max_concurrent_sessions == 5

    def test_env_variable(self, monkeypatch):
        monkeypatch.setenv("MIN_CHUNK_WORDS", "4")
        assert Settings(_env_file=None).min_chunk_words == 4

    def test_get_settings_cached(self):
        assert get_settings() is get_settings()


class TestSettingsValidation:
    """Tests for field and conditional validation."""

    def test_port_range(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, api_port=80)

    def test_min_chunk_words_positive(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, min_chunk_words=0)

    def test_unknown_engine(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, synthesis_engine="kyutai")

    def test_production_requires_gemini_key(self):
        with pytest.raises(ValueError, match="gemini_api_key is required"):
            Settings(
                _env_file=None,
                environment="production",
                synthesis_engine="gemini",
                feedback_engine="mock",
                gemini_api_key=None,
            )

    def test_production_requires_anthropic_key(self):
        with pytest.raises(ValueError, match="anthropic_api_key is required"):
            Settings(
                _env_file=None,
                environment="production",
                synthesis_engine="mock",
                feedback_engine="anthropic",
                anthropic_api_key=None,
            )

    def test_production_with_mock_engines(self):
        settings = Settings(
            _env_file=None,
            environment="production",
            synthesis_engine="mock",
            feedback_engine="mock",
        )
        assert settings.environment == "production"

    def test_development_allows_missing_keys(self):
        settings = Settings(
            _env_file=None,
            synthesis_engine="gemini",
            feedback_engine="gemini",
            gemini_api_key=None,
        )
        assert settings.gemini_api_key is None
