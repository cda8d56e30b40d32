"""Feedback module - Tutor text generation.

Supports multiple engines:
- gemini: Google Gemini via google-genai
- anthropic: Anthropic Claude API
- mock: Canned answers for tests and offline development
"""

from __future__ import annotations

from fivestep.config.settings import Settings, get_settings
from fivestep.exceptions import InvalidConfigError, MissingConfigError
from fivestep.feedback.base import FeedbackClient
from fivestep.feedback.mock_client import MockFeedbackClient
from fivestep.feedback.tutor import TutorFeedback


def create_feedback_client(
    engine: str | None = None,
    settings: Settings | None = None,
) -> FeedbackClient:
    """Create a feedback client based on configuration.

    Args:
        engine: Override engine selection ("mock", "gemini" or "anthropic").
                If None, uses FEEDBACK_ENGINE from settings.
        settings: Settings to read credentials from

    Raises:
        InvalidConfigError: If engine is unknown
        MissingConfigError: If the engine's API key is not set
    """
    settings = settings or get_settings()
    engine = engine or settings.feedback_engine

    if engine == "mock":
        return MockFeedbackClient()
    elif engine == "gemini":
        if not settings.gemini_api_key:
            raise MissingConfigError("GEMINI_API_KEY", "required for gemini feedback")
        from fivestep.feedback.gemini_client import (
            GeminiFeedbackClient,
            GeminiFeedbackConfig,
        )

        return GeminiFeedbackClient(
            GeminiFeedbackConfig(
                api_key=settings.gemini_api_key,
                model=settings.feedback_model,
            )
        )
    elif engine == "anthropic":
        if not settings.anthropic_api_key:
            raise MissingConfigError("ANTHROPIC_API_KEY", "required for anthropic feedback")
        from fivestep.feedback.anthropic_client import (
            AnthropicFeedbackClient,
            AnthropicFeedbackConfig,
        )

        return AnthropicFeedbackClient(
            AnthropicFeedbackConfig(
                api_key=settings.anthropic_api_key,
                model=settings.anthropic_model,
            )
        )
    else:
        raise InvalidConfigError(
            "feedback_engine", engine, "unknown engine, available: mock, gemini, anthropic"
        )


__all__ = [
    "FeedbackClient",
    "MockFeedbackClient",
    "TutorFeedback",
    "create_feedback_client",
    # GeminiFeedbackClient, AnthropicFeedbackClient - imported when selected
]
