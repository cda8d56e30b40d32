"""Mock Synthesis Backend - For testing and development.

Generates silence sized to the text length.
Does not require any external services.
"""

from __future__ import annotations

from fivestep.audio.tts.backends.interface import (
    SynthesisBackend,
    TTSHealthStatus,
    TTSRequest,
    TTSResult,
)
from fivestep.config.constants import CURRICULUM


class MockBackend(SynthesisBackend):
    """Mock synthesis backend for testing.

    Records every request so tests can count backend calls.
    """

    def __init__(
        self,
        sample_rate: int = CURRICULUM.PCM_SAMPLE_RATE,
        chars_per_second: float = 15.0,
    ) -> None:
        """Initialize mock backend.

        Args:
            sample_rate: Audio sample rate
            chars_per_second: Simulated speech rate
        """
        self._sample_rate = sample_rate
        self._chars_per_second = chars_per_second
        self._initialized = False
        self.requests: list[TTSRequest] = []

    @property
    def name(self) -> str:
        """Backend name identifier."""
        return "mock"

    async def init(self) -> None:
        """Initialize mock backend (no-op)."""
        self._initialized = True

    async def synthesize(self, request: TTSRequest) -> TTSResult:
        """Generate silence for text.

        Args:
            request: Synthesis request

        Returns:
            Complete audio result (at least one sample of silence)
        """
        self.requests.append(request)

        duration_s = len(request.text) / self._chars_per_second
        samples = max(1, int(duration_s * self._sample_rate))
        audio = b"\x00\x00" * samples  # 16-bit silence

        return TTSResult(
            audio=audio,
            sample_rate=self._sample_rate,
            latency_ms=0.0,
        )

    async def health(self) -> TTSHealthStatus:
        """Always healthy once initialized."""
        return TTSHealthStatus(
            ok=self._initialized,
            backend=self.name,
            last_error=None if self._initialized else "Not initialized",
        )
