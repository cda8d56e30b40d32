"""Application Settings - Environment-based configuration.

Uses Pydantic Settings for validation and type coercion.

Required variables fail startup if missing.
Conditional variables are required only when their parent feature is enabled.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from fivestep.config.constants import CURRICULUM


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # API Configuration
    api_host: str = Field(default="0.0.0.0", description="API bind host")
    api_port: int = Field(default=8081, ge=1024, le=65535, description="API port")
    log_level: Literal["DEBUG", "INFO", "WARN", "ERROR"] = Field(
        default="INFO", description="Logging level"
    )
    environment: Literal["development", "staging", "production"] = Field(
        default="development", description="Environment name"
    )

    # Session Configuration
    max_concurrent_sessions: int = Field(
        default=10,
        ge=1,
        le=CURRICULUM.MAX_CONCURRENT_SESSIONS,
        description="Maximum concurrent learner sessions",
    )
    min_chunk_words: int = Field(
        default=CURRICULUM.MIN_CHUNK_WORDS,
        ge=1,
        le=100,
        description="Minimum words per learning chunk",
    )

    # Feedback (text model) Configuration
    feedback_engine: Literal["mock", "gemini", "anthropic"] = Field(
        default="gemini", description="Text feedback backend"
    )
    feedback_model: str = Field(
        default="gemini-2.5-flash", description="Gemini model used for feedback"
    )
    anthropic_api_key: str | None = Field(
        default=None, description="Anthropic API key (feedback_engine=anthropic)"
    )
    anthropic_model: str = Field(
        default="claude-3-5-sonnet-20241022",
        description="Claude model used for feedback",
    )

    # Synthesis Configuration
    synthesis_engine: Literal["mock", "gemini"] = Field(
        default="gemini", description="HD speech synthesis backend"
    )
    synthesis_model: str = Field(
        default="gemini-2.5-flash-preview-tts",
        description="Gemini TTS model",
    )
    synthesis_voice: str = Field(
        default="Kore", description="Prebuilt Gemini voice name"
    )
    synthesis_max_attempts: int = Field(
        default=CURRICULUM.SYNTHESIS_MAX_ATTEMPTS,
        ge=1,
        le=5,
        description="Synthesis attempts before falling back",
    )
    quota_retry_delay_s: float = Field(
        default=CURRICULUM.QUOTA_RETRY_DELAY_S,
        ge=0.0,
        le=30.0,
        description="Fixed wait between attempts after a quota failure",
    )

    # Shared Google credentials
    gemini_api_key: str | None = Field(
        default=None, description="Gemini API key (feedback and synthesis)"
    )

    # Fallback voice Configuration
    fallback_voice_rate: str = Field(
        default=CURRICULUM.FALLBACK_VOICE_RATE,
        description="Speech rate adjustment for the fallback voice",
    )
    fallback_voice_sample_rate: int = Field(
        default=CURRICULUM.PCM_SAMPLE_RATE,
        ge=8000,
        le=48000,
        description="Sample rate fallback speech is rendered at",
    )

    # Observability
    metrics_enabled: bool = Field(default=True, description="Enable Prometheus metrics")

    def model_post_init(self, __context) -> None:
        """Validate conditional requirements after model creation."""
        if self.environment != "production":
            return

        if "gemini" in (self.feedback_engine, self.synthesis_engine) and not self.gemini_api_key:
            raise ValueError(
                "gemini_api_key is required when a gemini engine is selected "
                "in production environment"
            )

        if self.feedback_engine == "anthropic" and not self.anthropic_api_key:
            raise ValueError(
                "anthropic_api_key is required when feedback_engine=anthropic "
                "in production environment"
            )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
