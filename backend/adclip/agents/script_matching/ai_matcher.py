"""
AI matching of script segments to tagged videos using Gemini.

Only segment ids/texts and video ids/names/tags are sent to the model.
"""

import asyncio
import logging
from typing import Any, Dict, List, Sequence

from ...llm.gemini import query_gemini
from ...llm.json_utils import extract_json
from .types import ScriptSegment, TaggedVideo

logger = logging.getLogger(__name__)


class AIMatchingError(RuntimeError):
    """Raised when the model call for matching fails."""


MATCHING_PROMPT = """
You are a professional video editor. Pick the video clip from the library that best fits each
spoken segment of an advertisement.

Rules:
- Use the clip names and tags as strong hints for the visual content.
- Choose clips that fit the mood and topic of the segment.
- Clips may be used for more than one segment.
- Only use segment ids and video ids exactly as listed below.

Output:
Return ONLY valid JSON in this exact shape:
{{"matches": [{{"segmentId": "...", "videoId": "..."}}]}}
Return one object per segment.

--- SCRIPT SEGMENTS ---
{script}

--- VIDEO LIBRARY ---
{library}
"""

MATCHING_SCHEMA = {
    "type": "object",
    "properties": {
        "matches": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "segmentId": {"type": "string"},
                    "videoId": {"type": "string"},
                },
                "required": ["segmentId", "videoId"],
            },
        }
    },
    "required": ["matches"],
}


def build_annotated_script(segments: Sequence[ScriptSegment]) -> str:
    """One line per segment carrying its id, so the model can refer back to it."""
    return "\n".join(
        f'- Segment (ID: "{s.id}", Duration: {s.duration}s, Text: "{s.text}")' for s in segments
    )


def build_video_library(videos: Sequence[TaggedVideo]) -> str:
    return "\n".join(
        f'- Video (ID: "{v.id}", Name: "{v.name}", Tags: [{", ".join(v.tags)}])' for v in videos
    )


def parse_pairs(raw: Any) -> List[Dict[str, str]]:
    """
    Read {segmentId, videoId} pairs from a model response.

    Also accepts the playlist shape {segmentId, videoIds: [...]}, taking the
    first clip of each playlist.
    """
    data = extract_json(raw)
    if isinstance(data, dict):
        items = data.get("matches") or data.get("playlist") or data.get("scenes") or []
    elif isinstance(data, list):
        items = data
    else:
        items = []

    pairs: List[Dict[str, str]] = []
    for item in items if isinstance(items, list) else []:
        if not isinstance(item, dict):
            continue
        segment_id = item.get("segmentId") or item.get("segment_id")
        video_id = item.get("videoId") or item.get("video_id")
        if not video_id:
            video_ids = item.get("videoIds") or item.get("video_ids") or []
            if isinstance(video_ids, list) and video_ids:
                video_id = video_ids[0]
        if segment_id and video_id:
            pairs.append({"segmentId": str(segment_id), "videoId": str(video_id)})
    return pairs


async def find_best_matches(
    annotated_script: str,
    videos: Sequence[TaggedVideo],
) -> List[Dict[str, str]]:
    """
    Ask Gemini to pair each annotated segment with a video id.

    Raises:
        AIMatchingError: If the model call fails
    """
    prompt = MATCHING_PROMPT.format(script=annotated_script, library=build_video_library(videos))
    try:
        result = await asyncio.to_thread(
            query_gemini,
            prompt,
            response_schema=MATCHING_SCHEMA,
            response_mime_type="application/json",
        )
    except Exception as exc:
        raise AIMatchingError(f"AI matching failed: {exc}") from exc

    pairs = parse_pairs(result)
    logger.info("AI matching response | pairs=%s videos=%s", len(pairs), len(videos))
    return pairs
