"""SynthesisBackend Interface - Canonical HD speech backend abstraction.

All HD synthesis backends must implement this interface.
The gateway is blind to which backend is used.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from fivestep.config.constants import CURRICULUM


@dataclass
class TTSRequest:
    """Request for speech synthesis."""

    text: str
    voice_id: str | None = None


@dataclass
class TTSResult:
    """Result from speech synthesis."""

    audio: bytes = field(repr=False)  # Raw PCM audio (16-bit signed, mono)
    sample_rate: int = CURRICULUM.PCM_SAMPLE_RATE
    latency_ms: float = 0.0


@dataclass
class TTSHealthStatus:
    """Health status of a synthesis backend."""

    ok: bool
    backend: str
    last_error: str | None = None


class SynthesisBackend(ABC):
    """Canonical interface for HD synthesis backends.

    Backends raise whatever their provider raises; the gateway is
    responsible for classifying failures.

    Usage:
        backend = GeminiBackend(config)
        await backend.init()

        result = await backend.synthesize(TTSRequest(text="Hello"))

        status = await backend.health()
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Backend name identifier (e.g., "gemini", "mock")."""
        ...

    @abstractmethod
    async def init(self) -> None:
        """Initialize the backend.

        Called once before any synthesis.
        """
        ...

    @abstractmethod
    async def synthesize(self, request: TTSRequest) -> TTSResult:
        """Synthesize audio from text (one-shot).

        Args:
            request: Synthesis request

        Returns:
            Complete PCM audio
        """
        ...

    @abstractmethod
    async def health(self) -> TTSHealthStatus:
        """Check backend health."""
        ...

    async def shutdown(self) -> None:
        """Release backend resources. Default is a no-op."""
        return None
