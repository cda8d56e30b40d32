"""Text processing - transcript chunking."""

from fivestep.text.chunker import chunk_text, count_words, split_segments

__all__ = ["chunk_text", "count_words", "split_segments"]
