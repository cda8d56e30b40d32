"""Gemini Synthesis Backend - HD speech via Gemini TTS models.

Uses the google-genai client. The model returns raw 16-bit PCM,
mono, 24 kHz as inline data on the first candidate part.
"""

from __future__ import annotations

import time
from dataclasses import dataclass

from google import genai
from google.genai import types

from fivestep.audio.tts.backends.interface import (
    SynthesisBackend,
    TTSHealthStatus,
    TTSRequest,
    TTSResult,
)
from fivestep.config.constants import CURRICULUM
from fivestep.observability.logging import get_logger

logger = get_logger(__name__)


@dataclass
class GeminiTTSConfig:
    """Configuration for the Gemini TTS backend."""

    api_key: str
    model: str = "gemini-2.5-flash-preview-tts"
    voice: str = "Kore"  # Balanced prebuilt voice
    sample_rate: int = CURRICULUM.PCM_SAMPLE_RATE


class GeminiBackend(SynthesisBackend):
    """Gemini TTS backend.

    Provider errors (google.genai.errors.APIError and friends) propagate
    unchanged; the gateway classifies them.
    """

    def __init__(self, config: GeminiTTSConfig) -> None:
        self._config = config
        self._client: genai.Client | None = None
        self._last_error: str | None = None

    @property
    def name(self) -> str:
        """Backend name identifier."""
        return "gemini"

    async def init(self) -> None:
        """Create the API client."""
        if self._client is None:
            self._client = genai.Client(api_key=self._config.api_key)
            logger.info(
                "gemini_tts_initialized",
                model=self._config.model,
                voice=self._config.voice,
            )

    async def synthesize(self, request: TTSRequest) -> TTSResult:
        """Synthesize PCM audio for one piece of text."""
        if self._client is None:
            await self.init()

        voice = request.voice_id or self._config.voice
        start = time.perf_counter()

        try:
            response = await self._client.aio.models.generate_content(
                model=self._config.model,
                contents=request.text,
                config=types.GenerateContentConfig(
                    response_modalities=["AUDIO"],
                    speech_config=types.SpeechConfig(
                        voice_config=types.VoiceConfig(
                            prebuilt_voice_config=types.PrebuiltVoiceConfig(
                                voice_name=voice,
                            )
                        ),
                    ),
                ),
            )
        except Exception as e:
            self._last_error = str(e)
            raise

        audio = _extract_audio(response)
        self._last_error = None

        return TTSResult(
            audio=audio,
            sample_rate=self._config.sample_rate,
            latency_ms=(time.perf_counter() - start) * 1000,
        )

    async def health(self) -> TTSHealthStatus:
        """Healthy once the client exists and the last call succeeded."""
        return TTSHealthStatus(
            ok=self._client is not None and self._last_error is None,
            backend=self.name,
            last_error=self._last_error if self._client else "Not initialized",
        )


def _extract_audio(response: types.GenerateContentResponse) -> bytes:
    """Pull inline audio bytes out of the first candidate part.

    Returns empty bytes when the response carries no audio; the gateway
    treats that as a failed synthesis.
    """
    if not response.candidates:
        return b""
    content = response.candidates[0].content
    if content is None or not content.parts:
        return b""
    inline = content.parts[0].inline_data
    if inline is None or inline.data is None:
        return b""
    return inline.data
