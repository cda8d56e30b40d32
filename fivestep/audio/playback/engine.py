"""Audio Playback Engine - Renders artifacts and retries backup audio.

Responsibilities:
- Decode HD PCM (16-bit signed LE, mono, 24kHz) and play it
- Speak FallbackArtifacts with the best available local voice
- Keep at most one source playing
- Manual retry: replace a backup entry's audio with HD audio in place
"""

from __future__ import annotations

import dataclasses
from typing import Awaitable, Callable

import numpy as np

from fivestep.audio.artifacts import (
    AudioArtifact,
    FailedArtifact,
    FallbackArtifact,
    HDArtifact,
)
from fivestep.audio.playback.local_voice import LocalVoiceSynthesizer
from fivestep.audio.playback.output import AudioOutput
from fivestep.audio.playback.voices import (
    FallbackVoiceSelector,
    VoiceInfo,
    list_edge_voices,
)
from fivestep.audio.tts.gateway import SpeechSynthesisGateway
from fivestep.config.constants import CURRICULUM
from fivestep.exceptions import (
    FallbackVoiceUnavailableError,
    PlaybackError,
    SynthesisError,
)
from fivestep.observability.logging import SynthesisLogger, get_logger
from fivestep.observability.metrics import record_manual_retry
from fivestep.orchestrator.messages import (
    AudioPayload,
    LogEntry,
    MessageLog,
    strip_backup_suffix,
)

logger = get_logger(__name__)

VoiceProvider = Callable[[], Awaitable[list[VoiceInfo]]]


def decode_pcm16(audio: bytes) -> np.ndarray:
    """Decode 16-bit signed little-endian PCM to float32 in [-1, 1).

    A trailing odd byte is dropped.
    """
    usable = len(audio) - (len(audio) % CURRICULUM.PCM_SAMPLE_WIDTH_BYTES)
    samples = np.frombuffer(audio[:usable], dtype="<i2")
    return (samples.astype(np.float32) / CURRICULUM.PCM_NORMALIZER).astype(np.float32)


class AudioPlaybackEngine:
    """Plays audio artifacts through a single exclusive output.

    Usage:
        async with AudioPlaybackEngine(gateway, output=SoundDeviceOutput()) as engine:
            await engine.play(artifact)
            ok = await engine.retry_hd(log, entry_id)
    """

    def __init__(
        self,
        gateway: SpeechSynthesisGateway,
        selector: FallbackVoiceSelector | None = None,
        output: AudioOutput | None = None,
        local_voice: LocalVoiceSynthesizer | None = None,
        voice_provider: VoiceProvider = list_edge_voices,
        session_id: str | None = None,
    ) -> None:
        self._gateway = gateway
        self._selector = selector or FallbackVoiceSelector()
        self._output = output
        self._local_voice = local_voice or LocalVoiceSynthesizer()
        self._voice_provider = voice_provider
        self._voices: list[VoiceInfo] | None = None
        self._session_id = session_id
        self._log = SynthesisLogger(gateway.backend.name, session_id)

        self._retrying: set[str] = set()
        self._play_generation = 0
        self._closed = False

    @property
    def is_playing(self) -> bool:
        return self._output is not None and self._output.is_active

    @property
    def retrying(self) -> frozenset[str]:
        """Entry ids with a manual retry in flight."""
        return frozenset(self._retrying)

    async def available_voices(self) -> list[VoiceInfo]:
        """Local voices, listed once and reused."""
        if self._voices is None:
            self._voices = list(await self._voice_provider())
        return self._voices

    async def select_fallback_voice(self) -> VoiceInfo:
        """Best local voice for fallback speech.

        Raises:
            FallbackVoiceUnavailableError: Listing failed or no voice matches
        """
        try:
            voices = await self.available_voices()
        except Exception as e:
            logger.warning("fallback_voice_listing_failed", error=str(e))
            raise FallbackVoiceUnavailableError() from e
        voice = self._selector.select(voices)
        if voice is None:
            raise FallbackVoiceUnavailableError(available_voices=len(voices))
        return voice

    async def play(self, artifact: AudioArtifact) -> None:
        """Stop the current source and play artifact.

        Raises:
            PlaybackError: Failed artifact, closed engine, no output, or a
                local voice that could not render the fallback
            FallbackVoiceUnavailableError: Fallback with no usable voice
        """
        self.stop()
        self._play_generation += 1
        generation = self._play_generation

        if self._closed:
            raise PlaybackError("playback engine is closed")
        if self._output is None:
            raise PlaybackError("no audio output configured")

        if isinstance(artifact, HDArtifact):
            samples = decode_pcm16(artifact.audio)
            sample_rate = artifact.sample_rate
        elif isinstance(artifact, FallbackArtifact):
            voice = await self.select_fallback_voice()
            try:
                pcm = await self._local_voice.synthesize(artifact.source_text, voice)
            except Exception as e:
                logger.warning("fallback_render_failed", voice=voice.name, error=str(e))
                raise PlaybackError(f"local voice could not render audio: {e}") from e
            samples = decode_pcm16(pcm)
            sample_rate = self._local_voice.sample_rate
        elif isinstance(artifact, FailedArtifact):
            raise PlaybackError(artifact.reason or "audio generation failed")
        else:
            raise PlaybackError(f"unsupported artifact: {type(artifact).__name__}")

        # A newer play() or stop() superseded this one while rendering
        if generation != self._play_generation or self._closed:
            return

        if samples.size == 0:
            logger.debug("playback_skipped_empty", kind=artifact.kind.value)
            return

        self._output.play(samples, sample_rate)
        logger.debug(
            "playback_started",
            kind=artifact.kind.value,
            samples=int(samples.size),
            sample_rate=sample_rate,
        )

    def stop(self) -> None:
        """Stop the current source, if any."""
        self._play_generation += 1
        if self._output is not None:
            self._output.stop()

    async def retry_hd(self, log: MessageLog, entry_id: str) -> bool:
        """Try once to replace a backup entry's audio with HD audio.

        Returns True if the entry now holds HD audio. A second retry for an
        entry whose retry is still running returns False immediately.

        Raises:
            PlaybackError: If the entry is unknown or not backup audio
        """
        entry = log.get(entry_id)
        if entry is None:
            raise PlaybackError("unknown log entry", entry_id=entry_id)
        payload = entry.payload
        if not isinstance(payload, AudioPayload) or not isinstance(
            payload.artifact, FallbackArtifact
        ):
            raise PlaybackError("only backup audio can be retried", entry_id=entry_id)

        if entry_id in self._retrying:
            self._log.manual_retry(entry_id, "in_flight")
            record_manual_retry("in_flight")
            return False

        self._retrying.add(entry_id)
        try:
            try:
                audio = await self._gateway.synthesize(payload.artifact.source_text)
            except SynthesisError as e:
                self._log.manual_retry(entry_id, "failed", str(e))
                record_manual_retry("failed")
                return False

            hd = HDArtifact(audio=audio)

            def swap(old: LogEntry) -> LogEntry:
                return dataclasses.replace(
                    old,
                    payload=AudioPayload(hd),
                    label=strip_backup_suffix(old.label),
                )

            log.update_in_place(entry_id, swap)
            self._log.manual_retry(entry_id, "succeeded")
            record_manual_retry("succeeded")
            return True
        finally:
            self._retrying.discard(entry_id)

    async def close(self) -> None:
        """Stop playback and release the output."""
        if self._closed:
            return
        self._closed = True
        self.stop()
        if self._output is not None:
            self._output.close()

    async def __aenter__(self) -> "AudioPlaybackEngine":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
