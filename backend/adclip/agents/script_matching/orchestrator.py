"""
Script-to-clip matching pipeline.

1. Segments come from voiceover word timestamps when available, otherwise
   from the script analysis model.
2. The AI matcher proposes one video per segment.
3. Proposals are reconciled against the known segment and video ids.
4. If the AI matcher fails, times out or proposes nothing usable, tag
   similarity matching is used for every segment instead.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Awaitable, Callable, Dict, List, Optional, Sequence

from ..script_analysis.analyzer import analyze_script, enrich_keywords
from .ai_matcher import build_annotated_script, find_best_matches
from .config import MatchingConfig
from .errors import AIMatchingUnavailableError, NoEligibleCandidatesError, SegmentationError
from .segmenter import segment_from_timestamps
from .tag_matcher import find_best_match, match_all
from .types import MatchingResult, ScriptSegment, TaggedVideo, VideoMatch, WordTimestamp

logger = logging.getLogger(__name__)

AnalyzeFn = Callable[[str], Awaitable[List[ScriptSegment]]]
MatchFn = Callable[[str, Sequence[TaggedVideo]], Awaitable[List[Dict[str, str]]]]
EnrichFn = Callable[[Sequence[ScriptSegment]], Awaitable[List[ScriptSegment]]]


def eligible_videos(videos: Sequence[TaggedVideo]) -> List[TaggedVideo]:
    """Only videos with at least one tag can be matched."""
    return [video for video in videos if video.tags]


def assign_segment_ids(segments: Sequence[ScriptSegment]) -> List[ScriptSegment]:
    """Give segments without an id (or with a repeated id) a fresh unique one."""
    seen: set[str] = set()
    for segment in segments:
        if not segment.id or segment.id in seen:
            segment.id = f"{MatchingConfig.SEGMENT_ID_PREFIX}{uuid.uuid4().hex[:12]}"
        seen.add(segment.id)
    return list(segments)


def reconcile_pairs(
    pairs: Sequence[Dict[str, str]],
    segments: Sequence[ScriptSegment],
    videos: Sequence[TaggedVideo],
) -> tuple[List[VideoMatch], int]:
    """
    Resolve AI {segmentId, videoId} pairs into matches.

    Pairs naming an unknown segment or video are dropped. A segment keeps its
    first resolved pair. Returns the matches in segment order and the number
    of dropped pairs.
    """
    segments_by_id = {segment.id: segment for segment in segments}
    videos_by_id = {video.id: video for video in videos}

    chosen: Dict[str, VideoMatch] = {}
    dropped = 0
    for pair in pairs:
        segment = segments_by_id.get(str(pair.get("segmentId")))
        video = videos_by_id.get(str(pair.get("videoId")))
        if segment is None or video is None:
            dropped += 1
            continue
        if segment.id in chosen:
            dropped += 1
            continue
        chosen[segment.id] = VideoMatch(segment=segment, video=video, score=1.0, source="auto")

    ordered = [chosen[segment.id] for segment in segments if segment.id in chosen]
    return ordered, dropped


class ScriptMatcher:
    """
    Produces segments and matches for a user's script and video library.

    The model-backed steps are injectable so callers and tests can swap them.
    """

    def __init__(
        self,
        analyze: AnalyzeFn = analyze_script,
        match: MatchFn = find_best_matches,
        enrich: Optional[EnrichFn] = enrich_keywords,
        timeout: float = 20.0,
        fill_unmatched: bool = MatchingConfig.FILL_UNMATCHED_WITH_TAGS,
    ):
        self.analyze = analyze
        self.match = match
        self.enrich = enrich
        self.timeout = timeout
        self.fill_unmatched = fill_unmatched

    async def build_segments(
        self,
        script_text: Optional[str],
        word_timestamps: Optional[Sequence[WordTimestamp]] = None,
    ) -> List[ScriptSegment]:
        """
        Raises:
            SegmentationError: If no segments could be produced
        """
        if word_timestamps:
            segments = segment_from_timestamps(word_timestamps)
            if self.enrich is not None and segments:
                segments = await self.enrich(segments)
        else:
            if not script_text or not script_text.strip():
                raise SegmentationError("A script or voiceover timestamps are required")
            try:
                segments = await self.analyze(script_text)
            except Exception as exc:
                raise SegmentationError(f"Script analysis failed: {exc}") from exc

        if not segments:
            raise SegmentationError("Could not generate segments for the script")
        return assign_segment_ids(segments)

    async def _request_ai_pairs(
        self,
        segments: Sequence[ScriptSegment],
        videos: Sequence[TaggedVideo],
    ) -> List[Dict[str, str]]:
        try:
            return await asyncio.wait_for(
                self.match(build_annotated_script(segments), videos),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as exc:
            raise AIMatchingUnavailableError(f"AI matching timed out after {self.timeout}s") from exc
        except Exception as exc:
            raise AIMatchingUnavailableError(str(exc)) from exc

    async def match_script(
        self,
        script_text: Optional[str],
        videos: Sequence[TaggedVideo],
        word_timestamps: Optional[Sequence[WordTimestamp]] = None,
    ) -> MatchingResult:
        """
        Segment a script and match each segment to a video.

        Raises:
            NoEligibleCandidatesError: If none of the videos has tags
            SegmentationError: If the script could not be segmented
        """
        candidates = eligible_videos(videos)
        if not candidates:
            raise NoEligibleCandidatesError()

        segments = await self.build_segments(script_text, word_timestamps)

        try:
            pairs = await self._request_ai_pairs(segments, candidates)
        except AIMatchingUnavailableError as exc:
            logger.warning("AI matching unavailable, using tag matching | error=%s", exc)
            pairs = []

        matches, dropped = reconcile_pairs(pairs, segments, candidates)
        if dropped:
            logger.info("Dropped unresolvable AI pairs | dropped=%s received=%s", dropped, len(pairs))

        if not matches:
            matches = match_all(segments, candidates)
            strategy = "fallback"
        else:
            strategy = "ai"
            if self.fill_unmatched and len(matches) < len(segments):
                matches, filled = self._fill_unmatched(segments, matches, candidates)
                if filled:
                    strategy = "ai+fallback"

        logger.info(
            "Script matching complete | strategy=%s segments=%s matches=%s videos=%s",
            strategy,
            len(segments),
            len(matches),
            len(candidates),
        )
        return MatchingResult(segments=segments, matches=matches, strategy=strategy, dropped_pairs=dropped)

    def _fill_unmatched(
        self,
        segments: Sequence[ScriptSegment],
        matches: Sequence[VideoMatch],
        videos: Sequence[TaggedVideo],
    ) -> tuple[List[VideoMatch], int]:
        by_segment = {match.segment.id: match for match in matches}
        filled = 0
        for segment in segments:
            if segment.id in by_segment:
                continue
            match = find_best_match(segment, videos)
            if match:
                by_segment[segment.id] = match
                filled += 1
        ordered = [by_segment[segment.id] for segment in segments if segment.id in by_segment]
        return ordered, filled
