"""Curriculum Constants - Authoritative thresholds and contracts.

These constants define the behavioral contracts of the five-step
curriculum, the synthesis gateway and the PCM audio format.
"""

from dataclasses import dataclass
from typing import Final


@dataclass(frozen=True)
class CurriculumConstants:
    """Immutable curriculum and audio contract values.

    All timing values in seconds unless otherwise noted.
    """

    # Chunking
    MIN_CHUNK_WORDS: Final[int] = 10  # Minimum words per learning chunk

    # Synthesis gateway policy
    SYNTHESIS_MAX_ATTEMPTS: Final[int] = 2  # Attempts before falling back
    QUOTA_RETRY_DELAY_S: Final[float] = 1.5  # Fixed wait after a quota failure

    # HD audio format (provider output)
    PCM_SAMPLE_RATE: Final[int] = 24000
    PCM_CHANNELS: Final[int] = 1  # Mono audio
    PCM_SAMPLE_WIDTH_BYTES: Final[int] = 2  # 16-bit signed
    PCM_NORMALIZER: Final[float] = 32768.0

    # Fallback voice
    FALLBACK_VOICE_RATE: Final[str] = "-10%"  # Natural voices sound better slightly slower

    # Feedback defaults
    DEFAULT_GRAMMAR_FOCUS: Final[str] = "Simple Past Tense"  # Model answered with nothing
    FALLBACK_GRAMMAR_FOCUS: Final[str] = "Daily Expression"  # Model call failed

    # Session defaults
    MAX_CONCURRENT_SESSIONS: Final[int] = 100


# Singleton instance for import convenience
CURRICULUM = CurriculumConstants()
