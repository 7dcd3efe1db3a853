"""
Script-to-Clip Matching Module

This module splits ad scripts into timed segments and matches each segment
to one of the user's tagged video clips, using Gemini when available and
keyword/tag similarity otherwise.
"""

from .types import (
    WordTimestamp,
    ScriptSegment,
    TaggedVideo,
    VideoMatch,
    MatchingResult,
)

from .errors import (
    ScriptMatchingError,
    SegmentationError,
    NoEligibleCandidatesError,
    AIMatchingUnavailableError,
    InvalidTimestampError,
)

from .config import MatchingConfig
from .segmenter import segment_from_timestamps
from .tag_matcher import calculate_similarity, find_best_match, match_all

__all__ = [
    'WordTimestamp',
    'ScriptSegment',
    'TaggedVideo',
    'VideoMatch',
    'MatchingResult',
    'ScriptMatchingError',
    'SegmentationError',
    'NoEligibleCandidatesError',
    'AIMatchingUnavailableError',
    'InvalidTimestampError',
    'MatchingConfig',
    'segment_from_timestamps',
    'calculate_similarity',
    'find_best_match',
    'match_all',
]

__version__ = '0.1.0'
