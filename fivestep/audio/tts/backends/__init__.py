"""HD synthesis backends.

Backends are created via create_synthesis_backend(); the Gemini backend is
imported only when selected.
"""

from fivestep.audio.tts.backends.interface import (
    SynthesisBackend,
    TTSHealthStatus,
    TTSRequest,
    TTSResult,
)
from fivestep.audio.tts.backends.mock_backend import MockBackend

__all__ = [
    "SynthesisBackend",
    "TTSHealthStatus",
    "TTSRequest",
    "TTSResult",
    "MockBackend",
]
