"""Message Log - Ordered record of what the learner and tutor said.

Entries are append-only. The single in-place change is swapping a
FallbackArtifact for an HDArtifact after a successful manual retry,
done through update_in_place() so the entry keeps its id and position.
"""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterator, Protocol, Union

from fivestep.audio.artifacts import AudioArtifact, FallbackArtifact

BACKUP_SUFFIX = " (Backup)"

SUPPORTED_RECORDING_MIME_TYPES = (
    "audio/webm;codecs=opus",
    "audio/webm",
    "audio/mp4",
    "audio/ogg",
    "audio/aac",
)


class Sender(Enum):
    LEARNER = "learner"
    SYSTEM = "system"


@dataclass(frozen=True)
class TextPayload:
    text: str


@dataclass(frozen=True)
class AudioPayload:
    artifact: AudioArtifact


@dataclass(frozen=True)
class RecordingPayload:
    """Learner recording; opaque bytes as captured."""

    data: bytes = field(repr=False)
    mime_type: str

    @property
    def size_bytes(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class DividerPayload:
    title: str


Payload = Union[TextPayload, AudioPayload, RecordingPayload, DividerPayload]


def _new_entry_id() -> str:
    return uuid.uuid4().hex[:12]


@dataclass(frozen=True)
class LogEntry:
    """One line of the conversation."""

    sender: Sender
    payload: Payload
    auto_play: bool = False
    label: str | None = None
    entry_id: str = field(default_factory=_new_entry_id)
    created_at: float = field(default_factory=time.time)

    @property
    def is_backup_audio(self) -> bool:
        return isinstance(self.payload, AudioPayload) and isinstance(
            self.payload.artifact, FallbackArtifact
        )


def audio_label(base: str, artifact: AudioArtifact) -> str:
    """Label for an audio entry; fallback audio is marked as backup."""
    if isinstance(artifact, FallbackArtifact):
        return base + BACKUP_SUFFIX
    return base


def strip_backup_suffix(label: str | None) -> str | None:
    if label and label.endswith(BACKUP_SUFFIX):
        return label[: -len(BACKUP_SUFFIX)]
    return label


EntryMutation = Callable[[LogEntry], LogEntry]


class MessageLog(Protocol):
    """Sink for conversation entries."""

    def append(self, entry: LogEntry) -> LogEntry: ...

    def update_in_place(self, entry_id: str, mutation: EntryMutation) -> LogEntry: ...

    def get(self, entry_id: str) -> LogEntry | None: ...

    def last(self) -> LogEntry | None: ...

    def entries(self) -> list[LogEntry]: ...

    def __len__(self) -> int: ...


class InMemoryMessageLog:
    """List-backed MessageLog.

    Usage:
        log = InMemoryMessageLog()
        log.append(LogEntry(Sender.SYSTEM, TextPayload("Welcome!")))
        for entry in log:
            ...
    """

    def __init__(self) -> None:
        self._entries: list[LogEntry] = []
        self._positions: dict[str, int] = {}

    def append(self, entry: LogEntry) -> LogEntry:
        if entry.entry_id in self._positions:
            raise ValueError(f"Duplicate entry id: {entry.entry_id}")
        self._positions[entry.entry_id] = len(self._entries)
        self._entries.append(entry)
        return entry

    def update_in_place(self, entry_id: str, mutation: EntryMutation) -> LogEntry:
        """Replace an entry with mutation(entry), keeping its position.

        Raises:
            KeyError: If entry_id is unknown
            ValueError: If the mutation changes the entry id
        """
        position = self._positions[entry_id]
        updated = mutation(self._entries[position])
        if updated.entry_id != entry_id:
            raise ValueError("update_in_place must preserve entry_id")
        self._entries[position] = updated
        return updated

    def get(self, entry_id: str) -> LogEntry | None:
        position = self._positions.get(entry_id)
        if position is None:
            return None
        return self._entries[position]

    def last(self) -> LogEntry | None:
        return self._entries[-1] if self._entries else None

    def entries(self) -> list[LogEntry]:
        return list(self._entries)

    def since(self, count: int) -> list[LogEntry]:
        """Entries appended after the first `count`."""
        return self._entries[count:]

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[LogEntry]:
        return iter(list(self._entries))
