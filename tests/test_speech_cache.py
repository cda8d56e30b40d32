"""Tests for the speech cache."""

import pytest

from fivestep.audio.tts.cache import SpeechCache, normalize_text


class TestNormalizeText:
    def test_trims_whitespace(self):
        assert normalize_text("  Hello there.\n") == "Hello there."

    def test_keeps_inner_text(self):
        assert normalize_text("Hello   there") == "Hello   there"


class TestSpeechCache:
    """Tests for SpeechCache."""

    def test_miss_returns_none(self):
        cache = SpeechCache()
        assert cache.get("nothing") is None
        assert cache.stats.misses == 1

    def test_put_then_get(self):
        cache = SpeechCache()
        cache.put("Hello.", b"\x01\x02")
        assert cache.get("Hello.") == b"\x01\x02"
        assert cache.stats.hits == 1

    def test_keys_are_normalized(self):
        cache = SpeechCache()
        cache.put("  Hello.  ", b"\x01\x02")
        assert cache.get("Hello.") == b"\x01\x02"
        assert "Hello.\n" in cache
        assert len(cache) == 1

    def test_one_entry_per_text(self):
        cache = SpeechCache()
        cache.put("Hello.", b"\x01\x02")
        cache.put(" Hello.", b"\x03\x04")
        assert len(cache) == 1
        assert cache.get("Hello.") == b"\x03\x04"

    def test_empty_audio_rejected(self):
        cache = SpeechCache()
        with pytest.raises(ValueError):
            cache.put("Hello.", b"")
        assert "Hello." not in cache

    def test_contains_non_string(self):
        assert 42 not in SpeechCache()

    def test_hit_rate(self):
        cache = SpeechCache()
        assert cache.stats.hit_rate == 0.0
        cache.put("a", b"\x00\x00")
        cache.get("a")
        cache.get("b")
        assert cache.stats.hit_rate == 0.5
