"""Audio Output - Exclusive sound output device.

Wraps sounddevice so the playback engine can be tested without hardware.
"""

from __future__ import annotations

from typing import Protocol

import numpy as np


class AudioOutput(Protocol):
    """An output that plays one float32 buffer at a time."""

    def play(self, samples: np.ndarray, sample_rate: int) -> None:
        """Start playing samples (non-blocking)."""
        ...

    def stop(self) -> None:
        """Stop whatever is playing."""
        ...

    @property
    def is_active(self) -> bool:
        """Whether a buffer is still playing."""
        ...

    def close(self) -> None:
        """Release the output stream."""
        ...


class SoundDeviceOutput:
    """AudioOutput backed by the default sounddevice output device."""

    def __init__(self, device: int | str | None = None) -> None:
        import sounddevice as sd

        self._sd = sd
        self._device = device
        self._active = False

    def play(self, samples: np.ndarray, sample_rate: int) -> None:
        self._sd.play(samples, samplerate=sample_rate, device=self._device)
        self._active = True

    def stop(self) -> None:
        if self._active:
            self._sd.stop()
        self._active = False

    @property
    def is_active(self) -> bool:
        if not self._active:
            return False
        stream = self._sd.get_stream()
        self._active = bool(stream is not None and stream.active)
        return self._active

    def close(self) -> None:
        self.stop()
