"""Tests for fallback voice selection."""

from unittest.mock import AsyncMock, patch

import pytest

from fivestep.audio.playback.voices import (
    FallbackVoiceSelector,
    VoiceInfo,
    list_edge_voices,
    normalize_locale,
    voice_from_edge,
)


def voice(name: str, locale: str) -> VoiceInfo:
    return VoiceInfo(name=name, locale=locale, voice_id=name.replace(" ", "-"))


class TestNormalizeLocale:
    @pytest.mark.parametrize(
        "raw,expected",
        [("en_US", "en-US"), ("EN-us", "en-US"), ("en", "en"), ("zh_Hans_CN", "zh-HANS-CN")],
    )
    def test_normalize(self, raw, expected):
        assert normalize_locale(raw) == expected


class TestFallbackVoiceSelector:
    """Tests for tiered voice ranking."""

    def test_natural_us_wins(self):
        voices = [
            voice("Alex", "en-US"),
            voice("Google US English", "en-US"),
            voice("Microsoft Aria Online (Natural) - English (United States)", "en-US"),
        ]
        assert FallbackVoiceSelector().select(voices).name.startswith("Microsoft Aria")

    def test_google_us_before_premium(self):
        voices = [voice("Serena (Premium)", "en-GB"), voice("Google US English", "en-US")]
        assert FallbackVoiceSelector().select(voices).name == "Google US English"

    def test_premium_english_before_plain_us(self):
        voices = [voice("Fred", "en-US"), voice("Daniel (Enhanced)", "en_GB")]
        assert FallbackVoiceSelector().select(voices).name == "Daniel (Enhanced)"

    def test_natural_outside_us_is_not_top_tier(self):
        selector = FallbackVoiceSelector()
        sonia = voice("Microsoft Sonia Online (Natural) - English (United Kingdom)", "en-GB")
        assert selector.tier_of(sonia) == 4

    def test_exact_us_before_any_english(self):
        voices = [voice("Karen", "en-AU"), voice("Fred", "en_US")]
        assert FallbackVoiceSelector().select(voices).name == "Fred"

    def test_any_english(self):
        voices = [voice("Thomas", "fr-FR"), voice("Karen", "en-AU")]
        assert FallbackVoiceSelector().select(voices).name == "Karen"

    def test_no_english_voice(self):
        assert FallbackVoiceSelector().select([voice("Thomas", "fr-FR")]) is None
        assert FallbackVoiceSelector().select([]) is None

    def test_rank_is_stable_within_tier(self):
        voices = [voice("Karen", "en-AU"), voice("Moira", "en-IE"), voice("Fred", "en-US")]
        ranked = FallbackVoiceSelector().rank(voices)
        assert [v.name for v in ranked] == ["Fred", "Karen", "Moira"]

    def test_rank_drops_ineligible(self):
        ranked = FallbackVoiceSelector().rank([voice("Anna", "de-DE")])
        assert ranked == []

    def test_custom_tiers(self):
        selector = FallbackVoiceSelector(tiers=[("german", lambda v: v.locale == "de-DE")])
        assert selector.select([voice("Anna", "de-DE")]).name == "Anna"


class TestEdgeVoices:
    def test_voice_from_edge_entry(self):
        entry = {
            "Name": "Microsoft Server Speech Text to Speech Voice (en-US, AriaNeural)",
            "ShortName": "en-US-AriaNeural",
            "FriendlyName": "Microsoft Aria Online (Natural) - English (United States)",
            "Locale": "en-US",
        }
        info = voice_from_edge(entry)
        assert info.voice_id == "en-US-AriaNeural"
        assert info.locale == "en-US"
        assert "Natural" in info.name

    @pytest.mark.asyncio
    async def test_list_edge_voices(self):
        entries = [
            {"ShortName": "en-GB-SoniaNeural", "FriendlyName": "Sonia (Natural)", "Locale": "en-GB"},
        ]
        with patch("edge_tts.list_voices", new=AsyncMock(return_value=entries)):
            voices = await list_edge_voices()

        assert voices == [VoiceInfo("Sonia (Natural)", "en-GB", "en-GB-SoniaNeural")]
