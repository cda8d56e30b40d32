"""Text Chunker - Splits a transcript into learner-sized chunks.

Raw text is split into sentence-like segments at runs of terminal
punctuation (optionally followed by a closing quote). Consecutive segments
are merged greedily until a chunk holds at least ``min_words`` words, so a
run of very short sentences is practised together instead of one by one.

Usage:
    chunks = chunk_text(transcript, min_words=10)
"""

from __future__ import annotations

import re

from fivestep.config.constants import CURRICULUM

# A terminated segment, or the unterminated remainder at the end of the text
SEGMENT_PATTERN = re.compile(r"""[^.!?]*[.!?]+["'”’]?|[^.!?]+$""")


def split_segments(text: str) -> list[str]:
    """Split text into trimmed, non-blank sentence-like segments."""
    segments = []
    for match in SEGMENT_PATTERN.finditer(text):
        segment = match.group(0).strip()
        if segment:
            segments.append(segment)
    return segments


def count_words(text: str) -> int:
    """Whitespace-delimited word count."""
    return len(text.split())


def chunk_text(text: str, min_words: int = CURRICULUM.MIN_CHUNK_WORDS) -> list[str]:
    """Split text into ordered learning chunks.

    Args:
        text: Raw transcript
        min_words: Minimum words per chunk (the last chunk may be shorter)

    Returns:
        Chunks in reading order. Degenerate input that yields no segments
        is returned whole as a single chunk.

    Raises:
        ValueError: If min_words is less than 1
    """
    if min_words < 1:
        raise ValueError(f"min_words must be >= 1, got {min_words}")

    segments = split_segments(text)
    if not segments:
        return [text]

    chunks: list[str] = []
    buffer: list[str] = []
    buffered_words = 0

    for segment in segments:
        buffer.append(segment)
        buffered_words += count_words(segment)
        if buffered_words >= min_words:
            chunks.append(" ".join(buffer))
            buffer = []
            buffered_words = 0

    if buffer:
        chunks.append(" ".join(buffer))

    return chunks
