"""Audio Artifacts - Outcome of a synthesis attempt.

An artifact is exactly one of:
- HDArtifact: PCM bytes from the HD synthesis provider
- FallbackArtifact: no bytes; the source text must be spoken locally
- FailedArtifact: nothing can be rendered
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Union

from fivestep.config.constants import CURRICULUM


class ArtifactKind(Enum):
    """Which variant an artifact is."""

    HD = "hd"
    FALLBACK = "fallback"
    FAILED = "failed"


@dataclass(frozen=True)
class HDArtifact:
    """Synthesized audio (16-bit signed PCM, mono)."""

    kind: ClassVar[ArtifactKind] = ArtifactKind.HD

    audio: bytes = field(repr=False)
    sample_rate: int = CURRICULUM.PCM_SAMPLE_RATE

    @property
    def duration_ms(self) -> int:
        """Playback duration derived from the PCM length."""
        samples = len(self.audio) // CURRICULUM.PCM_SAMPLE_WIDTH_BYTES
        return int(samples * 1000 / self.sample_rate)


@dataclass(frozen=True)
class FallbackArtifact:
    """HD synthesis was unavailable; speak source_text with a local voice."""

    kind: ClassVar[ArtifactKind] = ArtifactKind.FALLBACK

    source_text: str


@dataclass(frozen=True)
class FailedArtifact:
    """Nothing can be rendered for this entry."""

    kind: ClassVar[ArtifactKind] = ArtifactKind.FAILED

    reason: str = ""


AudioArtifact = Union[HDArtifact, FallbackArtifact, FailedArtifact]
