"""
Configuration for script-to-clip matching.
"""


class MatchingConfig:
    """Constants for the tag matcher and segmenter."""

    # Tag similarity weights
    EXACT_MATCH_WEIGHT = 1.0
    PARTIAL_MATCH_WEIGHT = 0.5

    # A match is only accepted when its score is strictly above this value
    MIN_MATCH_SCORE = 0.1

    # Words that close a sentence end with one of these
    SENTENCE_TERMINATORS = (".", "?", "!")

    SEGMENT_ID_PREFIX = "seg_"
    DURATION_DECIMALS = 2

    # Used to estimate segment length when the analyzer returns no duration
    WORDS_PER_SECOND = 2.5
    MIN_SEGMENT_DURATION = 1.0

    # Fill segments the AI matcher skipped using tag similarity
    FILL_UNMATCHED_WITH_TAGS = True

