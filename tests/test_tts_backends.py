"""Tests for synthesis backends and backend selection."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from fivestep.audio.tts import (
    SpeechSynthesisGateway,
    create_speech_gateway,
    create_synthesis_backend,
)
from fivestep.audio.tts.backends.interface import TTSRequest
from fivestep.audio.tts.backends.mock_backend import MockBackend
from fivestep.config.settings import Settings
from fivestep.exceptions import InvalidConfigError, MissingConfigError


def audio_response(data: bytes | None) -> SimpleNamespace:
    part = SimpleNamespace(inline_data=SimpleNamespace(data=data))
    return SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=[part]))])


class TestMockBackend:
    """Tests for MockBackend."""

    @pytest.mark.asyncio
    async def test_silence_sized_to_text(self):
        backend = MockBackend(sample_rate=1000, chars_per_second=10.0)
        result = await backend.synthesize(TTSRequest(text="0123456789"))

        assert result.audio == b"\x00\x00" * 1000
        assert result.sample_rate == 1000

    @pytest.mark.asyncio
    async def test_never_empty(self):
        result = await MockBackend().synthesize(TTSRequest(text=""))
        assert len(result.audio) == 2

    @pytest.mark.asyncio
    async def test_records_requests(self):
        backend = MockBackend()
        await backend.synthesize(TTSRequest(text="hi", voice_id="Kore"))
        assert backend.requests == [TTSRequest(text="hi", voice_id="Kore")]

    @pytest.mark.asyncio
    async def test_health_after_init(self):
        backend = MockBackend()
        assert not (await backend.health()).ok
        await backend.init()
        status = await backend.health()
        assert status.ok
        assert status.backend == "mock"


class TestGeminiBackend:
    """Tests for GeminiBackend with a patched client."""

    @pytest.fixture
    def sdk(self):
        sdk = MagicMock()
        sdk.aio.models.generate_content = AsyncMock(return_value=audio_response(b"\x01\x02"))
        return sdk

    @pytest.mark.asyncio
    async def test_synthesize(self, sdk):
        from fivestep.audio.tts.backends.gemini_backend import GeminiBackend, GeminiTTSConfig

        with patch("fivestep.audio.tts.backends.gemini_backend.genai.Client", return_value=sdk):
            backend = GeminiBackend(GeminiTTSConfig(api_key="k", voice="Puck"))
            await backend.init()
            result = await backend.synthesize(TTSRequest(text="Hello."))

        assert result.audio == b"\x01\x02"
        assert result.sample_rate == 24000
        kwargs = sdk.aio.models.generate_content.await_args.kwargs
        assert kwargs["contents"] == "Hello."
        assert kwargs["config"].response_modalities == ["AUDIO"]
        voice = kwargs["config"].speech_config.voice_config.prebuilt_voice_config
        assert voice.voice_name == "Puck"
        assert (await backend.health()).ok

    @pytest.mark.asyncio
    async def test_missing_audio_returns_empty(self, sdk):
        from fivestep.audio.tts.backends.gemini_backend import GeminiBackend, GeminiTTSConfig

        sdk.aio.models.generate_content = AsyncMock(
            return_value=SimpleNamespace(candidates=[])
        )
        with patch("fivestep.audio.tts.backends.gemini_backend.genai.Client", return_value=sdk):
            backend = GeminiBackend(GeminiTTSConfig(api_key="k"))
            result = await backend.synthesize(TTSRequest(text="Hello."))

        assert result.audio == b""

    @pytest.mark.asyncio
    async def test_provider_errors_propagate(self, sdk):
        from fivestep.audio.tts.backends.gemini_backend import GeminiBackend, GeminiTTSConfig

        sdk.aio.models.generate_content = AsyncMock(side_effect=RuntimeError("429"))
        with patch("fivestep.audio.tts.backends.gemini_backend.genai.Client", return_value=sdk):
            backend = GeminiBackend(GeminiTTSConfig(api_key="k"))
            with pytest.raises(RuntimeError):
                await backend.synthesize(TTSRequest(text="Hello."))

        status = await backend.health()
        assert not status.ok
        assert status.last_error == "429"


class TestBackendSelection:
    def test_mock(self, test_settings):
        assert isinstance(create_synthesis_backend(settings=test_settings), MockBackend)

    def test_gemini_requires_key(self):
        with pytest.raises(MissingConfigError):
            create_synthesis_backend("gemini", Settings(gemini_api_key=None))

    def test_gemini(self):
        backend = create_synthesis_backend("gemini", Settings(gemini_api_key="k"))
        assert backend.name == "gemini"

    def test_unknown(self, test_settings):
        with pytest.raises(InvalidConfigError, match="synthesis_engine"):
            create_synthesis_backend("kyutai", test_settings)

    @pytest.mark.asyncio
    async def test_create_speech_gateway(self, test_settings, speech_cache):
        gateway = await create_speech_gateway(cache=speech_cache, settings=test_settings)

        assert isinstance(gateway, SpeechSynthesisGateway)
        assert gateway.cache is speech_cache
        assert gateway.retry_config.max_attempts == 2
        assert gateway.retry_config.initial_delay_s == 0.0
        assert (await gateway.backend.health()).ok
