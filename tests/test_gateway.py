"""Tests for the speech synthesis gateway.

Tests cover:
- Cache-first synthesis
- Quota classification
- Bounded quota retry with a fixed delay
- Fallback artifacts (never cached)
"""

from unittest.mock import AsyncMock, patch

import pytest

from fivestep.audio.artifacts import FallbackArtifact, HDArtifact
from fivestep.audio.tts.backends.interface import TTSResult
from fivestep.audio.tts.backends.mock_backend import MockBackend
from fivestep.audio.tts.cache import SpeechCache
from fivestep.audio.tts.gateway import (
    ERROR_KIND_FAILED,
    ERROR_KIND_QUOTA,
    SpeechSynthesisGateway,
    classify_synthesis_error,
)
from fivestep.exceptions import QuotaExceededError, SynthesisFailedError

PCM = b"\x10\x00\x20\x00"


class ProviderError(Exception):
    """Stand-in for a provider SDK error carrying a status code."""

    def __init__(self, message: str, code: int | None = None, status: str | None = None):
        super().__init__(message)
        self.code = code
        self.status = status


def scripted_backend(*outcomes) -> MockBackend:
    """MockBackend whose synthesize() follows a script of results/exceptions."""
    backend = MockBackend()
    results = [
        outcome if isinstance(outcome, Exception) else TTSResult(audio=outcome)
        for outcome in outcomes
    ]
    backend.synthesize = AsyncMock(side_effect=results)
    return backend


class TestClassifySynthesisError:
    """Tests for quota classification."""

    def test_status_code_429(self):
        assert classify_synthesis_error(ProviderError("slow down", code=429)) == ERROR_KIND_QUOTA

    def test_resource_exhausted_status(self):
        err = ProviderError("limit", status="RESOURCE_EXHAUSTED")
        assert classify_synthesis_error(err) == ERROR_KIND_QUOTA

    @pytest.mark.parametrize(
        "message",
        ["429 Too Many Requests", "You exceeded your current quota", "Resource exhausted", "rate limit hit"],
    )
    def test_message_markers(self, message):
        assert classify_synthesis_error(RuntimeError(message)) == ERROR_KIND_QUOTA

    def test_marker_in_cause_chain(self):
        try:
            try:
                raise ProviderError("quota exceeded")
            except ProviderError as inner:
                raise RuntimeError("request failed") from inner
        except RuntimeError as outer:
            assert classify_synthesis_error(outer) == ERROR_KIND_QUOTA

    def test_other_errors_are_failures(self):
        assert classify_synthesis_error(ProviderError("bad request", code=400)) == ERROR_KIND_FAILED
        assert classify_synthesis_error(ConnectionError("reset")) == ERROR_KIND_FAILED

    def test_number_inside_other_number_is_not_quota(self):
        assert classify_synthesis_error(RuntimeError("error 14290")) == ERROR_KIND_FAILED


class TestSynthesize:
    """Tests for single-attempt synthesize()."""

    @pytest.mark.asyncio
    async def test_returns_backend_audio_and_caches(self):
        backend = scripted_backend(PCM)
        cache = SpeechCache()
        gateway = SpeechSynthesisGateway(backend, cache)

        audio = await gateway.synthesize("  Hello there.  ")

        assert audio == PCM
        assert cache.get("Hello there.") == PCM
        backend.synthesize.assert_awaited_once()
        assert backend.synthesize.await_args.args[0].text == "Hello there."

    @pytest.mark.asyncio
    async def test_cache_idempotence(self, mock_backend):
        gateway = SpeechSynthesisGateway(mock_backend, SpeechCache())

        first = await gateway.synthesize("Hello there.")
        second = await gateway.synthesize("Hello there. ")

        assert first == second
        assert len(mock_backend.requests) == 1

    @pytest.mark.asyncio
    async def test_shared_cache_across_gateways(self, speech_cache):
        first_backend = MockBackend()
        second_backend = MockBackend()
        await SpeechSynthesisGateway(first_backend, speech_cache).synthesize("Shared text.")
        await SpeechSynthesisGateway(second_backend, speech_cache).synthesize("Shared text.")

        assert len(first_backend.requests) == 1
        assert second_backend.requests == []

    @pytest.mark.asyncio
    async def test_quota_failure_raises_quota_error(self):
        gateway = SpeechSynthesisGateway(scripted_backend(ProviderError("limit", code=429)))

        with pytest.raises(QuotaExceededError) as exc_info:
            await gateway.synthesize("Hello.")

        assert exc_info.value.recoverable is True
        assert isinstance(exc_info.value.__cause__, ProviderError)

    @pytest.mark.asyncio
    async def test_other_failure_raises_failed_error(self):
        gateway = SpeechSynthesisGateway(scripted_backend(ConnectionError("reset")))

        with pytest.raises(SynthesisFailedError):
            await gateway.synthesize("Hello.")

    @pytest.mark.asyncio
    async def test_empty_audio_is_failure_and_not_cached(self):
        cache = SpeechCache()
        gateway = SpeechSynthesisGateway(scripted_backend(b""), cache)

        with pytest.raises(SynthesisFailedError):
            await gateway.synthesize("Hello.")

        assert "Hello." not in cache


class TestSynthesizeWithFallback:
    """Tests for the retry/fallback policy."""

    @pytest.mark.asyncio
    async def test_success_returns_hd_artifact(self):
        gateway = SpeechSynthesisGateway(scripted_backend(PCM))

        artifact = await gateway.synthesize_with_fallback("Hello.")

        assert isinstance(artifact, HDArtifact)
        assert artifact.audio == PCM
        assert artifact.sample_rate == 24000

    @pytest.mark.asyncio
    async def test_quota_retried_once_after_fixed_delay(self):
        backend = scripted_backend(ProviderError("quota", code=429), PCM)
        gateway = SpeechSynthesisGateway(backend)

        with patch("fivestep.utils.retry.asyncio.sleep", new_callable=AsyncMock) as sleep:
            artifact = await gateway.synthesize_with_fallback("Hello.")

        assert isinstance(artifact, HDArtifact)
        assert backend.synthesize.await_count == 2
        sleep.assert_awaited_once_with(1.5)

    @pytest.mark.asyncio
    async def test_quota_exhaustion_falls_back_after_two_attempts(self):
        backend = scripted_backend(
            ProviderError("quota", code=429),
            ProviderError("quota", code=429),
            PCM,
        )
        cache = SpeechCache()
        gateway = SpeechSynthesisGateway(backend, cache)

        with patch("fivestep.utils.retry.asyncio.sleep", new_callable=AsyncMock) as sleep:
            artifact = await gateway.synthesize_with_fallback("Hello.")

        assert artifact == FallbackArtifact(source_text="Hello.")
        assert backend.synthesize.await_count == 2
        assert sleep.await_count == 1
        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_non_quota_failure_falls_back_without_retry(self):
        backend = scripted_backend(ConnectionError("reset"), PCM)
        gateway = SpeechSynthesisGateway(backend)

        with patch("fivestep.utils.retry.asyncio.sleep", new_callable=AsyncMock) as sleep:
            artifact = await gateway.synthesize_with_fallback("Hello.")

        assert isinstance(artifact, FallbackArtifact)
        assert backend.synthesize.await_count == 1
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_cached_text_skips_backend(self):
        backend = scripted_backend(ConnectionError("down"))
        cache = SpeechCache()
        cache.put("Hello.", PCM)
        gateway = SpeechSynthesisGateway(backend, cache)

        artifact = await gateway.synthesize_with_fallback("Hello.")

        assert isinstance(artifact, HDArtifact)
        backend.synthesize.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_fallback_keeps_original_text(self):
        gateway = SpeechSynthesisGateway(scripted_backend(ConnectionError("down")))

        artifact = await gateway.synthesize_with_fallback("  Hello.  ")

        assert artifact.source_text == "  Hello.  "

    def test_retry_config_is_fixed_delay(self):
        gateway = SpeechSynthesisGateway(MockBackend())
        config = gateway.retry_config
        assert config.max_attempts == 2
        assert config.initial_delay_s == 1.5
        assert config.backoff_factor == 1.0
        assert config.jitter is False
