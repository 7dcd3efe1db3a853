"""
Script analysis agent using Gemini structured output.

Splits an ad script into scenes with visual keywords, and adds keywords to
segments that were built from voiceover timestamps.
"""

import asyncio
import logging
import math
import uuid
from typing import Any, Dict, List, Optional, Sequence

from ...config import Settings
from ...llm.gemini import query_gemini
from ...llm.json_utils import extract_json
from ..script_matching.config import MatchingConfig
from ..script_matching.types import ScriptSegment

logger = logging.getLogger(__name__)


class ScriptAnalysisError(RuntimeError):
    """Raised when the model cannot split a script into segments."""


ANALYSIS_PROMPT = """
You are an experienced video editor preparing an advertisement.
Split the script below into short scenes that can each be covered by one video clip.

Rules:
- Keep the original wording. Every part of the script must appear in exactly one scene, in order.
- A scene is usually one sentence.
- For each scene give 3-6 lowercase visual keywords describing what the viewer should see
  (objects, places, actions, moods). Prefer single nouns like "beach", "coffee", "running".
- Estimate the spoken duration of each scene in seconds.

Output:
Return ONLY valid JSON in this exact shape:
{{"segments": [{{"text": "...", "keywords": ["..."], "duration": 3.5}}]}}

Script:
{script}
"""

ANALYSIS_SCHEMA = {
    "type": "object",
    "properties": {
        "segments": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "text": {"type": "string"},
                    "keywords": {"type": "array", "items": {"type": "string"}},
                    "duration": {"type": "number"},
                },
                "required": ["text", "keywords"],
            },
        }
    },
    "required": ["segments"],
}

KEYWORD_PROMPT = """
You are tagging scenes of an advertisement voiceover so matching video clips can be found.
For each scene give 3-6 lowercase visual keywords (objects, places, actions, moods).

Output:
Return ONLY valid JSON in this exact shape:
{{"segments": [{{"id": "...", "keywords": ["..."]}}]}}

Scenes:
{scenes}
"""

KEYWORD_SCHEMA = {
    "type": "object",
    "properties": {
        "segments": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "id": {"type": "string"},
                    "keywords": {"type": "array", "items": {"type": "string"}},
                },
                "required": ["id", "keywords"],
            },
        }
    },
    "required": ["segments"],
}


def _clean_keywords(raw: Any) -> List[str]:
    if not isinstance(raw, list):
        return []
    keywords: List[str] = []
    for item in raw:
        if not isinstance(item, str):
            continue
        keyword = item.strip().lower()
        if keyword and keyword not in keywords:
            keywords.append(keyword)
    return keywords


def _estimate_duration(text: str) -> float:
    words = len(text.split())
    estimate = round(words / MatchingConfig.WORDS_PER_SECOND, MatchingConfig.DURATION_DECIMALS)
    return max(estimate, MatchingConfig.MIN_SEGMENT_DURATION)


def _segment_items(data: Any) -> List[Any]:
    if isinstance(data, dict):
        items = data.get("segments") or data.get("scenes") or []
    elif isinstance(data, list):
        items = data
    else:
        items = []
    return items if isinstance(items, list) else []


def parse_analysis(raw: Any) -> List[ScriptSegment]:
    """Turn a model response into segments with fresh ids and running positions."""
    segments: List[ScriptSegment] = []
    position = 0.0

    for item in _segment_items(extract_json(raw)):
        if not isinstance(item, dict):
            continue
        text = str(item.get("text") or "").strip()
        if not text:
            continue

        duration: Optional[float]
        try:
            duration = float(item["duration"]) if item.get("duration") is not None else None
        except (TypeError, ValueError):
            duration = None
        if duration is None or not math.isfinite(duration) or duration <= 0:
            duration = _estimate_duration(text)

        segments.append(
            ScriptSegment(
                id=str(item.get("id") or f"{MatchingConfig.SEGMENT_ID_PREFIX}{uuid.uuid4().hex[:12]}"),
                text=text,
                duration=duration,
                keywords=_clean_keywords(item.get("keywords")),
                position=round(position, MatchingConfig.DURATION_DECIMALS),
            )
        )
        position += duration

    return segments


async def _ask_gemini(prompt: str, schema: Dict[str, Any], timeout: float) -> Any:
    return await asyncio.wait_for(
        asyncio.to_thread(
            query_gemini,
            prompt,
            response_schema=schema,
            response_mime_type="application/json",
        ),
        timeout=timeout,
    )


async def analyze_script(script_text: str, timeout: Optional[float] = None) -> List[ScriptSegment]:
    """
    Split a script into segments with keywords.

    Raises:
        ScriptAnalysisError: If the script is empty, the model call fails,
            or the response contains no segments
    """
    if not script_text or not script_text.strip():
        raise ScriptAnalysisError("Script cannot be empty")

    timeout = timeout if timeout is not None else Settings.SCRIPT_ANALYSIS_TIMEOUT
    try:
        result = await _ask_gemini(
            ANALYSIS_PROMPT.format(script=script_text.strip()), ANALYSIS_SCHEMA, timeout
        )
    except asyncio.TimeoutError as exc:
        raise ScriptAnalysisError(f"Script analysis timed out after {timeout}s") from exc
    except Exception as exc:
        raise ScriptAnalysisError(f"Script analysis failed: {exc}") from exc

    segments = parse_analysis(result)
    if not segments:
        raise ScriptAnalysisError("Script analysis returned no segments")

    logger.info("Script analysis complete | segments=%s", len(segments))
    return segments


async def enrich_keywords(
    segments: Sequence[ScriptSegment],
    timeout: Optional[float] = None,
) -> List[ScriptSegment]:
    """
    Return copies of the segments with keywords from Gemini.

    Segments that already have keywords are kept as they are. If the model
    call fails the segments are returned unchanged.
    """
    pending = [segment for segment in segments if not segment.keywords]
    if not pending:
        return list(segments)

    scenes = "\n".join(f'- id: "{s.id}", text: "{s.text}"' for s in pending)
    timeout = timeout if timeout is not None else Settings.SCRIPT_ANALYSIS_TIMEOUT
    try:
        result = await _ask_gemini(KEYWORD_PROMPT.format(scenes=scenes), KEYWORD_SCHEMA, timeout)
    except Exception as exc:
        logger.warning("Keyword enrichment failed, keeping segments without keywords | error=%s", exc)
        return list(segments)

    keywords_by_id: Dict[str, List[str]] = {}
    for item in _segment_items(extract_json(result)):
        if isinstance(item, dict) and item.get("id"):
            keywords_by_id[str(item["id"])] = _clean_keywords(item.get("keywords"))

    enriched: List[ScriptSegment] = []
    for segment in segments:
        keywords = segment.keywords or keywords_by_id.get(segment.id, [])
        enriched.append(
            ScriptSegment(
                id=segment.id,
                text=segment.text,
                duration=segment.duration,
                keywords=list(keywords),
                position=segment.position,
            )
        )
    return enriched
