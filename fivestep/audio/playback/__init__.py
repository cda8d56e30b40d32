"""Audio playback: PCM rendering, backup voices and manual HD retry."""

from fivestep.audio.playback.engine import AudioPlaybackEngine, decode_pcm16
from fivestep.audio.playback.local_voice import LocalVoiceSynthesizer
from fivestep.audio.playback.output import AudioOutput, SoundDeviceOutput
from fivestep.audio.playback.voices import (
    VOICE_TIERS,
    FallbackVoiceSelector,
    VoiceInfo,
    list_edge_voices,
    normalize_locale,
)

__all__ = [
    "AudioOutput",
    "AudioPlaybackEngine",
    "FallbackVoiceSelector",
    "LocalVoiceSynthesizer",
    "SoundDeviceOutput",
    "VOICE_TIERS",
    "VoiceInfo",
    "decode_pcm16",
    "list_edge_voices",
    "normalize_locale",
]
