"""Speech Synthesis Gateway - Cached, quota-aware HD synthesis.

Single entry point the orchestrator uses to obtain speech for a chunk.

Policy:
1. Normalize text (trim). Cached audio is returned without a backend call.
2. Otherwise call the backend once; cache and return confirmed audio.
3. Classify failures: rate/quota exhaustion raises QuotaExceededError,
   everything else raises SynthesisFailedError.

synthesize_with_fallback() wraps this in a bounded retry (quota failures
only, fixed delay) and returns a FallbackArtifact instead of raising, so
a provider outage never stalls the learner.
"""

from __future__ import annotations

import time

from fivestep.audio.artifacts import FallbackArtifact, HDArtifact
from fivestep.audio.tts.backends.interface import SynthesisBackend, TTSRequest
from fivestep.audio.tts.cache import SpeechCache, normalize_text
from fivestep.config.constants import CURRICULUM
from fivestep.exceptions import (
    QuotaExceededError,
    SynthesisError,
    SynthesisFailedError,
)
from fivestep.observability.logging import SynthesisLogger
from fivestep.observability.metrics import (
    record_synthesis_failure,
    record_synthesis_fallback,
    record_synthesis_request,
    update_cache_entries,
)
from fivestep.utils.errors import is_quota_error
from fivestep.utils.retry import RetryConfig, RetryExhausted, with_retry

ERROR_KIND_QUOTA = "quota"
ERROR_KIND_FAILED = "failed"


def classify_synthesis_error(exc: BaseException) -> str:
    """Return ERROR_KIND_QUOTA for rate/quota exhaustion, else ERROR_KIND_FAILED."""
    if is_quota_error(exc):
        return ERROR_KIND_QUOTA
    return ERROR_KIND_FAILED


class SpeechSynthesisGateway:
    """Cache-first, quota-aware access to an HD synthesis backend.

    Usage:
        gateway = SpeechSynthesisGateway(backend, SpeechCache())

        audio = await gateway.synthesize("Hello there.")      # may raise
        artifact = await gateway.synthesize_with_fallback(chunk)  # never raises
    """

    def __init__(
        self,
        backend: SynthesisBackend,
        cache: SpeechCache | None = None,
        max_attempts: int = CURRICULUM.SYNTHESIS_MAX_ATTEMPTS,
        quota_retry_delay_s: float = CURRICULUM.QUOTA_RETRY_DELAY_S,
        voice_id: str | None = None,
    ) -> None:
        self._backend = backend
        self._cache = cache if cache is not None else SpeechCache()
        self._retry_config = RetryConfig(
            max_attempts=max_attempts,
            initial_delay_s=quota_retry_delay_s,
            max_delay_s=quota_retry_delay_s,
            backoff_factor=1.0,
            jitter=False,
        )
        self._voice_id = voice_id
        self._log = SynthesisLogger(backend.name)

    @property
    def backend(self) -> SynthesisBackend:
        """Underlying synthesis backend."""
        return self._backend

    @property
    def cache(self) -> SpeechCache:
        """Speech cache shared with other gateways of this process."""
        return self._cache

    @property
    def retry_config(self) -> RetryConfig:
        """Retry policy applied by synthesize_with_fallback()."""
        return self._retry_config

    async def synthesize(self, text: str) -> bytes:
        """Return HD PCM audio for text (single backend attempt).

        Raises:
            QuotaExceededError: Provider signalled rate/quota exhaustion
            SynthesisFailedError: Any other failure, including empty audio
        """
        key = normalize_text(text)

        cached = self._cache.get(key)
        if cached is not None:
            self._log.cache_hit(len(key))
            record_synthesis_request("cache")
            return cached

        start = time.perf_counter()
        try:
            result = await self._backend.synthesize(
                TTSRequest(text=key, voice_id=self._voice_id)
            )
        except Exception as e:
            kind = classify_synthesis_error(e)
            self._log.failed(kind, str(e))
            record_synthesis_failure(kind)
            if kind == ERROR_KIND_QUOTA:
                raise QuotaExceededError(str(e), backend=self._backend.name) from e
            raise SynthesisFailedError(
                str(e) or type(e).__name__,
                text_length=len(key),
                backend=self._backend.name,
            ) from e

        if not result.audio:
            self._log.failed(ERROR_KIND_FAILED, "empty audio")
            record_synthesis_failure(ERROR_KIND_FAILED)
            raise SynthesisFailedError(
                "backend returned no audio",
                text_length=len(key),
                backend=self._backend.name,
            )

        latency_ms = (time.perf_counter() - start) * 1000
        self._cache.put(key, result.audio)
        update_cache_entries(len(self._cache))
        record_synthesis_request("backend", latency_ms)
        self._log.synthesized(len(key), len(result.audio), latency_ms)

        return result.audio

    async def synthesize_with_fallback(
        self,
        text: str,
        session_id: str | None = None,
    ) -> HDArtifact | FallbackArtifact:
        """Return an HD artifact, or a fallback marker carrying the text.

        Only QuotaExceededError is retried, after a fixed delay. Synthesis
        errors never propagate to the caller.
        """
        try:
            audio = await with_retry(
                lambda: self.synthesize(text),
                config=self._retry_config,
                operation_name="synthesize",
                session_id=session_id,
                retry_on=lambda e: isinstance(e, QuotaExceededError),
            )
        except (SynthesisError, RetryExhausted) as e:
            reason = str(e.last_error) if isinstance(e, RetryExhausted) else str(e)
            self._log.fallback(len(text), reason)
            record_synthesis_fallback()
            return FallbackArtifact(source_text=text)

        return HDArtifact(audio=audio)
