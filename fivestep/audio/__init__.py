"""Audio: artifacts, HD synthesis (tts) and local playback (playback)."""

from fivestep.audio.artifacts import (
    ArtifactKind,
    AudioArtifact,
    FailedArtifact,
    FallbackArtifact,
    HDArtifact,
)

__all__ = [
    "ArtifactKind",
    "AudioArtifact",
    "FailedArtifact",
    "FallbackArtifact",
    "HDArtifact",
]
