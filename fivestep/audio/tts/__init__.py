"""HD speech synthesis.

Provides the synthesis gateway, its cache, and config-based backend
selection.

Usage:
    from fivestep.audio.tts import create_speech_gateway

    gateway = await create_speech_gateway()
    artifact = await gateway.synthesize_with_fallback("Hello there.")
"""

from __future__ import annotations

from fivestep.audio.tts.backends.interface import SynthesisBackend
from fivestep.audio.tts.backends.mock_backend import MockBackend
from fivestep.audio.tts.cache import SpeechCache, normalize_text
from fivestep.audio.tts.gateway import SpeechSynthesisGateway, classify_synthesis_error
from fivestep.config.settings import Settings, get_settings
from fivestep.exceptions import InvalidConfigError, MissingConfigError


def create_synthesis_backend(
    engine: str | None = None,
    settings: Settings | None = None,
) -> SynthesisBackend:
    """Create a backend instance by name.

    Args:
        engine: Override engine selection ("mock" or "gemini").
                If None, uses SYNTHESIS_ENGINE from settings.
        settings: Settings to read credentials from

    Raises:
        InvalidConfigError: If engine is unknown
        MissingConfigError: If the engine needs an API key that is not set
    """
    settings = settings or get_settings()
    engine = engine or settings.synthesis_engine

    if engine == "mock":
        return MockBackend()

    elif engine == "gemini":
        if not settings.gemini_api_key:
            raise MissingConfigError("GEMINI_API_KEY", "required for gemini synthesis")

        from fivestep.audio.tts.backends.gemini_backend import (
            GeminiBackend,
            GeminiTTSConfig,
        )

        return GeminiBackend(
            GeminiTTSConfig(
                api_key=settings.gemini_api_key,
                model=settings.synthesis_model,
                voice=settings.synthesis_voice,
            )
        )

    else:
        raise InvalidConfigError(
            "synthesis_engine", engine, "unknown engine, available: gemini, mock"
        )


async def create_speech_gateway(
    cache: SpeechCache | None = None,
    engine: str | None = None,
    settings: Settings | None = None,
) -> SpeechSynthesisGateway:
    """Create and initialize a synthesis gateway from settings."""
    settings = settings or get_settings()
    backend = create_synthesis_backend(engine, settings)
    await backend.init()
    return SpeechSynthesisGateway(
        backend,
        cache=cache,
        max_attempts=settings.synthesis_max_attempts,
        quota_retry_delay_s=settings.quota_retry_delay_s,
    )


__all__ = [
    "SpeechCache",
    "SpeechSynthesisGateway",
    "SynthesisBackend",
    "MockBackend",
    "classify_synthesis_error",
    "create_speech_gateway",
    "create_synthesis_backend",
    "normalize_text",
]
