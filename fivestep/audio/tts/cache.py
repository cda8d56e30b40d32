"""Speech Cache - Content-addressed store of synthesized audio.

Maps normalized (trimmed) source text to HD PCM bytes. Entries are never
evicted: a learner run produces tens of chunks, and a process lifetime
stays small enough to keep them all.

Only confirmed HD audio is stored. Fallback outcomes never reach the cache,
so a later manual retry still performs a fresh fetch.
"""

from __future__ import annotations

from dataclasses import dataclass


def normalize_text(text: str) -> str:
    """Cache key for a piece of source text."""
    return text.strip()


@dataclass
class CacheStats:
    """Hit/miss counters for a cache instance."""

    hits: int = 0
    misses: int = 0

    @property
    def hit_rate(self) -> float:
        """Fraction of lookups served from cache."""
        total = self.hits + self.misses
        if total == 0:
            return 0.0
        return self.hits / total


class SpeechCache:
    """In-memory speech cache.

    Usage:
        cache = SpeechCache()
        audio = cache.get(text)
        if audio is None:
            audio = await backend.synthesize(...)
            cache.put(text, audio)
    """

    def __init__(self) -> None:
        self._entries: dict[str, bytes] = {}
        self._stats = CacheStats()

    def get(self, text: str) -> bytes | None:
        """Return cached audio for text, or None."""
        audio = self._entries.get(normalize_text(text))
        if audio is None:
            self._stats.misses += 1
        else:
            self._stats.hits += 1
        return audio

    def put(self, text: str, audio: bytes) -> None:
        """Store HD audio for text.

        Raises:
            ValueError: If audio is empty
        """
        if not audio:
            raise ValueError("Refusing to cache empty audio")
        self._entries[normalize_text(text)] = audio

    def __contains__(self, text: object) -> bool:
        return isinstance(text, str) and normalize_text(text) in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def stats(self) -> CacheStats:
        """Lookup statistics."""
        return self._stats
