"""
Builds sentence-level script segments from word timestamps.
"""

import math
from typing import List, Sequence

from .config import MatchingConfig
from .errors import InvalidTimestampError
from .types import ScriptSegment, WordTimestamp


def _validate_timestamps(words: Sequence[WordTimestamp]) -> None:
    previous_start = 0.0
    for index, word in enumerate(words):
        if not word.word or not word.word.strip():
            raise InvalidTimestampError(index, "empty word")
        if not (math.isfinite(word.start_time) and math.isfinite(word.end_time)):
            raise InvalidTimestampError(
                index, f"non-finite timing {word.start_time}-{word.end_time}"
            )
        if word.start_time < 0:
            raise InvalidTimestampError(index, f"negative start time {word.start_time}")
        if word.end_time < word.start_time:
            raise InvalidTimestampError(
                index, f"end time {word.end_time} is before start time {word.start_time}"
            )
        if word.start_time < previous_start:
            raise InvalidTimestampError(
                index, f"start time {word.start_time} is before previous word at {previous_start}"
            )
        previous_start = word.start_time


def group_words_into_sentences(words: Sequence[WordTimestamp]) -> List[List[WordTimestamp]]:
    """Split words into runs that end on '.', '?', '!' or at the last word."""
    sentences: List[List[WordTimestamp]] = []
    current: List[WordTimestamp] = []
    last_index = len(words) - 1

    for index, word in enumerate(words):
        current.append(word)
        if word.word.endswith(MatchingConfig.SENTENCE_TERMINATORS) or index == last_index:
            sentences.append(current)
            current = []

    return sentences


def segment_from_timestamps(words: Sequence[WordTimestamp]) -> List[ScriptSegment]:
    """
    Create timed script segments from word timestamps.

    Args:
        words: Word timings in speaking order (e.g. from the TTS provider)

    Returns:
        One ScriptSegment per sentence with ids seg_1, seg_2, ... and empty keywords

    Raises:
        InvalidTimestampError: If a word is empty or a timestamp is non-finite,
            negative or out of order
    """
    if not words:
        return []

    _validate_timestamps(words)

    segments: List[ScriptSegment] = []
    for index, sentence in enumerate(group_words_into_sentences(words), 1):
        start_time = sentence[0].start_time
        end_time = sentence[-1].end_time
        segments.append(
            ScriptSegment(
                id=f"{MatchingConfig.SEGMENT_ID_PREFIX}{index}",
                text=" ".join(w.word for w in sentence),
                duration=round(end_time - start_time, MatchingConfig.DURATION_DECIMALS),
                keywords=[],  # filled in by keyword enrichment
                position=start_time,
            )
        )

    return segments
