"""
Deterministic keyword/tag matching between script segments and videos.

Used on its own when the AI matcher is unavailable, and to fill segments
the AI matcher skipped.
"""

from typing import Iterable, List, Optional, Sequence

from .config import MatchingConfig
from .types import ScriptSegment, TaggedVideo, VideoMatch


def calculate_similarity(keywords: Iterable[str], tags: Iterable[str]) -> float:
    """
    Score how well a segment's keywords describe a video's tags.

    Exact keyword/tag matches count 1, substring overlaps in either direction
    count 0.5 (first overlapping tag only). The sum is divided by the number
    of keywords, so the result is between 0 and 1.
    """
    lower_keywords = [k.lower() for k in keywords]
    lower_tags = [t.lower() for t in tags]
    if not lower_keywords or not lower_tags:
        return 0.0

    tag_set = set(lower_tags)
    matches = 0.0
    for keyword in lower_keywords:
        if keyword in tag_set:
            matches += MatchingConfig.EXACT_MATCH_WEIGHT
            continue

        for tag in lower_tags:
            # NOTE: very short keywords/tags overlap easily ("a" is in "car")
            if tag in keyword or keyword in tag:
                matches += MatchingConfig.PARTIAL_MATCH_WEIGHT
                break

    return min(matches / max(len(lower_keywords), 1), 1.0)


def find_best_match(
    segment: ScriptSegment,
    videos: Sequence[TaggedVideo],
) -> Optional[VideoMatch]:
    """
    Find the best video for a single segment.

    Videos without tags are skipped. On equal scores the earlier video wins.
    Returns None unless the best score is above MatchingConfig.MIN_MATCH_SCORE.
    """
    if segment is None or not segment.keywords or not videos:
        return None

    best_video: Optional[TaggedVideo] = None
    highest_score = 0.0

    for video in videos:
        if not video.tags:
            continue
        score = calculate_similarity(segment.keywords, video.tags)
        if score > highest_score:
            highest_score = score
            best_video = video

    if best_video is None or highest_score <= MatchingConfig.MIN_MATCH_SCORE:
        return None

    return VideoMatch(segment=segment, video=best_video, score=highest_score, source="auto")


def match_all(
    segments: Sequence[ScriptSegment],
    videos: Sequence[TaggedVideo],
) -> List[VideoMatch]:
    """Match every segment independently; segments without a match are left out."""
    matches: List[VideoMatch] = []
    for segment in segments:
        match = find_best_match(segment, videos)
        if match:
            matches.append(match)
    return matches
