from __future__ import annotations

import logging
from typing import Any, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from ...agents.script_analysis.analyzer import ScriptAnalysisError, analyze_script
from ...agents.script_matching.errors import (
    InvalidTimestampError,
    NoEligibleCandidatesError,
    SegmentationError,
)
from ...agents.script_matching.orchestrator import ScriptMatcher
from ...agents.script_matching.segmenter import segment_from_timestamps
from ...agents.script_matching.types import WordTimestamp
from ...auth.dependencies import User
from ...db.media_catalog import MediaCatalog
from ...db.workflow_state import WorkflowStateStore
from ..dependencies import (
    get_media_catalog,
    get_script_matcher,
    get_workflow_state_store,
    rate_limited,
)

logger = logging.getLogger(__name__)

router = APIRouter()


class WordTimestampIn(BaseModel):
    word: str = Field(..., min_length=1)
    startTime: float = Field(..., ge=0)
    endTime: float = Field(..., ge=0)

    def to_domain(self) -> WordTimestamp:
        return WordTimestamp(word=self.word, start_time=self.startTime, end_time=self.endTime)


class AnalyzeScriptRequest(BaseModel):
    script: str = Field(..., min_length=1)


class SegmentsFromTimestampsRequest(BaseModel):
    word_timestamps: list[WordTimestampIn]


class SegmentsResponse(BaseModel):
    success: bool
    segments: list[dict[str, Any]]


class MatchVideosRequest(BaseModel):
    script: Optional[str] = None
    word_timestamps: Optional[list[WordTimestampIn]] = None
    project_id: Optional[str] = None


class MatchVideosResponse(BaseModel):
    success: bool
    segments: list[dict[str, Any]]
    matches: list[dict[str, Any]]
    strategy: Literal["ai", "ai+fallback", "fallback"]
    unmatched_segment_ids: list[str]
    total_videos: int


@router.post("/analyze-script", response_model=SegmentsResponse)
async def analyze_script_endpoint(
    request: AnalyzeScriptRequest,
    user: User = Depends(rate_limited("default")),
):
    if not request.script.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Script is required")

    logger.info("Analyzing script | user=%s chars=%s", user.sub, len(request.script))
    try:
        segments = await analyze_script(request.script)
    except ScriptAnalysisError as exc:
        logger.error("Script analysis failed | user=%s error=%s", user.sub, exc)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc

    return SegmentsResponse(success=True, segments=[s.to_dict() for s in segments])


@router.post(
    "/segments/from-timestamps",
    response_model=SegmentsResponse,
    dependencies=[Depends(rate_limited("default"))],
)
async def segments_from_timestamps_endpoint(request: SegmentsFromTimestampsRequest):
    try:
        segments = segment_from_timestamps([w.to_domain() for w in request.word_timestamps])
    except InvalidTimestampError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
    return SegmentsResponse(success=True, segments=[s.to_dict() for s in segments])


@router.post("/match-videos", response_model=MatchVideosResponse)
async def match_videos_endpoint(
    request: MatchVideosRequest,
    user: User = Depends(rate_limited("default")),
    catalog: MediaCatalog = Depends(get_media_catalog),
    matcher: ScriptMatcher = Depends(get_script_matcher),
    state_store: WorkflowStateStore = Depends(get_workflow_state_store),
):
    has_script = bool(request.script and request.script.strip())
    if not has_script and not request.word_timestamps:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Either script or word_timestamps is required",
        )

    videos = catalog.list_tagged_videos(user.sub)
    logger.info(
        "Matching videos | user=%s videos=%s timestamps=%s",
        user.sub,
        len(videos),
        len(request.word_timestamps or []),
    )

    words = [w.to_domain() for w in request.word_timestamps or []]
    try:
        result = await matcher.match_script(request.script, videos, word_timestamps=words)
    except NoEligibleCandidatesError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except InvalidTimestampError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
    except SegmentationError as exc:
        logger.error("Segmentation failed | user=%s error=%s", user.sub, exc)
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc

    if request.project_id:
        state_store.save_matching_result(user.sub, request.project_id, result)

    payload = result.to_dict()
    return MatchVideosResponse(
        success=True,
        segments=payload["segments"],
        matches=payload["matches"],
        strategy=result.strategy,
        unmatched_segment_ids=payload["unmatched_segment_ids"],
        total_videos=len(videos),
    )
