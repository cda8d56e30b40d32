"""Fallback Voice Selection - Ranks alternate voices for Backup speech.

Used by the playback engine when HD synthesis produced a FallbackArtifact.

Priority (first match wins):
1. "Natural" voices targeting US English (Edge neural voices)
2. The online "Google US English" voice
3. Premium/Enhanced/Siri voices for any English locale
4. Any exact en-US voice
5. Any English voice
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterable

from fivestep.observability.logging import get_logger

logger = get_logger(__name__)

PREMIUM_MARKERS = ("Premium", "Enhanced", "Siri")


def normalize_locale(locale: str) -> str:
    """en_US / EN-us -> en-US."""
    parts = locale.replace("_", "-").split("-")
    if len(parts) >= 2:
        return "-".join([parts[0].lower(), parts[1].upper(), *parts[2:]])
    return parts[0].lower()


@dataclass(frozen=True)
class VoiceInfo:
    """A voice the local speech path can use."""

    name: str  # Human-readable name, carries quality markers
    locale: str  # BCP-47 style, e.g. "en-US"
    voice_id: str = ""  # Identifier the synthesizer needs

    @property
    def normalized_locale(self) -> str:
        return normalize_locale(self.locale)


VoiceRule = Callable[[VoiceInfo], bool]

VOICE_TIERS: list[tuple[str, VoiceRule]] = [
    (
        "natural_us",
        lambda v: "Natural" in v.name and v.normalized_locale.startswith("en-US"),
    ),
    (
        "google_us",
        lambda v: "Google US English" in v.name,
    ),
    (
        "premium_english",
        lambda v: any(m in v.name for m in PREMIUM_MARKERS)
        and v.normalized_locale.startswith("en"),
    ),
    (
        "exact_us",
        lambda v: v.normalized_locale == "en-US",
    ),
    (
        "any_english",
        lambda v: v.normalized_locale.startswith("en"),
    ),
]


class FallbackVoiceSelector:
    """Deterministic fallback voice ranking.

    Usage:
        selector = FallbackVoiceSelector()
        voice = selector.select(await list_edge_voices())
        if voice is None:
            ...  # cannot render fallback speech
    """

    def __init__(self, tiers: list[tuple[str, VoiceRule]] | None = None) -> None:
        self._tiers = tiers or VOICE_TIERS

    def tier_of(self, voice: VoiceInfo) -> int | None:
        """Index of the first tier the voice satisfies, or None."""
        for index, (_, rule) in enumerate(self._tiers):
            if rule(voice):
                return index
        return None

    def rank(self, voices: Iterable[VoiceInfo]) -> list[VoiceInfo]:
        """All eligible voices, best tier first; input order within a tier."""
        ranked = []
        for position, voice in enumerate(voices):
            tier = self.tier_of(voice)
            if tier is not None:
                ranked.append((tier, position, voice))
        ranked.sort(key=lambda item: (item[0], item[1]))
        return [voice for _, _, voice in ranked]

    def select(self, voices: Iterable[VoiceInfo]) -> VoiceInfo | None:
        """Best voice, or None if nothing English is available."""
        ranked = self.rank(voices)
        if not ranked:
            return None
        best = ranked[0]
        logger.debug(
            "fallback_voice_selected",
            voice=best.name,
            locale=best.locale,
            tier=self._tiers[self.tier_of(best)][0],
        )
        return best


def voice_from_edge(entry: dict[str, Any]) -> VoiceInfo:
    """Convert an edge-tts voice listing entry."""
    return VoiceInfo(
        name=entry.get("FriendlyName") or entry.get("Name", ""),
        locale=entry.get("Locale", ""),
        voice_id=entry.get("ShortName", ""),
    )


async def list_edge_voices() -> list[VoiceInfo]:
    """Voices offered by the Edge speech service."""
    import edge_tts

    entries = await edge_tts.list_voices()
    return [voice_from_edge(entry) for entry in entries]
