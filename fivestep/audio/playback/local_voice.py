"""Local Voice - Backup speech for FallbackArtifacts.

Uses Microsoft Edge's TTS service through edge-tts:
- No API key required
- Large catalogue of neural ("Natural") voices
- Works on CPU

Quality is below the HD provider, which is why entries rendered this way
are labelled "(Backup)" and can be retried for HD audio.
"""

from __future__ import annotations

import io

from fivestep.audio.playback.voices import VoiceInfo
from fivestep.config.constants import CURRICULUM
from fivestep.exceptions import PlaybackError
from fivestep.observability.logging import get_logger

logger = get_logger(__name__)


class LocalVoiceSynthesizer:
    """Render fallback text to 16-bit PCM with an Edge voice.

    Usage:
        synth = LocalVoiceSynthesizer(rate="-10%")
        pcm = await synth.synthesize("Hello there.", voice)
    """

    def __init__(
        self,
        rate: str = CURRICULUM.FALLBACK_VOICE_RATE,
        pitch: str = "+0Hz",
        sample_rate: int = CURRICULUM.PCM_SAMPLE_RATE,
    ) -> None:
        """Initialize the local voice.

        Args:
            rate: Speech rate adjustment (e.g., "+10%", "-20%")
            pitch: Pitch adjustment (e.g., "+5Hz", "-10Hz")
            sample_rate: Sample rate of the returned PCM
        """
        self._rate = rate
        self._pitch = pitch
        self._sample_rate = sample_rate

    @property
    def sample_rate(self) -> int:
        return self._sample_rate

    async def synthesize(self, text: str, voice: VoiceInfo) -> bytes:
        """Speak text with voice and return mono 16-bit PCM.

        Raises:
            PlaybackError: If the service returns no audio
        """
        import edge_tts

        communicate = edge_tts.Communicate(
            text=text.strip(),
            voice=voice.voice_id or voice.name,
            rate=self._rate,
            pitch=self._pitch,
        )

        mp3 = bytearray()
        async for chunk in communicate.stream():
            if chunk["type"] == "audio":
                mp3.extend(chunk["data"])

        if not mp3:
            raise PlaybackError(f"local voice {voice.voice_id or voice.name} returned no audio")

        return self._mp3_to_pcm(bytes(mp3))

    def _mp3_to_pcm(self, mp3_data: bytes) -> bytes:
        """Convert MP3 audio to 16-bit mono PCM at the target sample rate."""
        from pydub import AudioSegment

        audio = AudioSegment.from_mp3(io.BytesIO(mp3_data))
        audio = audio.set_frame_rate(self._sample_rate)
        audio = audio.set_channels(1)
        audio = audio.set_sample_width(2)  # 16-bit
        return audio.raw_data
