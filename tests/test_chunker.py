"""Tests for the text chunker."""

import pytest

from fivestep.text.chunker import chunk_text, count_words, split_segments


class TestSplitSegments:
    """Tests for sentence-like segmentation."""

    def test_splits_on_terminal_punctuation(self):
        assert split_segments("One. Two! Three?") == ["One.", "Two!", "Three?"]

    def test_keeps_punctuation_runs_together(self):
        assert split_segments("Really?! Yes...") == ["Really?!", "Yes..."]

    def test_closing_quote_stays_with_sentence(self):
        text = 'She said "hi." Then she left.'
        assert split_segments(text) == ['She said "hi."', "Then she left."]

    def test_curly_closing_quote(self):
        assert split_segments("He shouted “stop!” Nobody moved.") == [
            "He shouted “stop!”",
            "Nobody moved.",
        ]

    def test_unterminated_remainder_is_a_segment(self):
        assert split_segments("First one. and then some") == [
            "First one.",
            "and then some",
        ]

    def test_blank_segments_dropped(self):
        assert split_segments("   ") == []
        assert split_segments("Hi.   \n  ") == ["Hi."]


class TestCountWords:
    def test_whitespace_delimited(self):
        assert count_words("  the  cat\nsat ") == 3

    def test_empty(self):
        assert count_words("") == 0


class TestChunkText:
    """Tests for greedy chunk accumulation."""

    def test_two_sentences_merge_into_one_chunk(self):
        text = "Hello world. This is a test sentence with enough words here."
        assert chunk_text(text, 10) == [text]

    def test_short_input_is_single_chunk(self):
        assert chunk_text("Hi.", 10) == ["Hi."]

    def test_cat_scenario_is_one_chunk(self):
        text = "The cat sat on the mat. It was a sunny day and the cat felt happy."
        chunks = chunk_text(text, 10)
        assert len(chunks) == 1
        assert count_words(chunks[0]) == 16

    def test_emits_when_threshold_reached(self):
        text = (
            "One two three four five six seven eight nine ten. "
            "Eleven twelve. Thirteen."
        )
        assert chunk_text(text, 10) == [
            "One two three four five six seven eight nine ten.",
            "Eleven twelve. Thirteen.",
        ]

    def test_every_chunk_but_last_reaches_min_words(self):
        text = " ".join(f"Sentence number {i} is here." for i in range(12))
        chunks = chunk_text(text, 7)
        assert len(chunks) > 1
        for chunk in chunks[:-1]:
            assert count_words(chunk) >= 7

    def test_chunks_reproduce_segments(self):
        text = "A b c. D e f! G h i? J k"
        chunks = chunk_text(text, 4)
        assert " ".join(chunks) == " ".join(split_segments(text))

    def test_inner_whitespace_normalized_between_segments(self):
        text = "First sentence here.\n\nSecond sentence here."
        assert chunk_text(text, 3) == ["First sentence here.", "Second sentence here."]

    def test_min_words_one_gives_one_chunk_per_segment(self):
        assert chunk_text("A. B. C.", 1) == ["A.", "B.", "C."]

    def test_degenerate_input_returned_whole(self):
        assert chunk_text("   ", 10) == ["   "]

    def test_default_min_words(self):
        text = "One two three four five. Six seven eight nine ten. Eleven."
        assert chunk_text(text) == [
            "One two three four five. Six seven eight nine ten.",
            "Eleven.",
        ]

    def test_invalid_min_words(self):
        with pytest.raises(ValueError):
            chunk_text("Hello.", 0)
