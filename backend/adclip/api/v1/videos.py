from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from typing import Any, Dict, List

from ...auth.dependencies import User
from ...db.media_catalog import MediaCatalog, VideoNotFoundError
from ..dependencies import get_media_catalog, rate_limited

router = APIRouter(prefix="/videos")


class UpdateTagsRequest(BaseModel):
    tags: List[str] = Field(default_factory=list, max_length=50)


class UpdateTagsResponse(BaseModel):
    success: bool
    video: Dict[str, Any]


@router.put("/{video_id}/tags", response_model=UpdateTagsResponse)
async def update_video_tags(
    video_id: str,
    request: UpdateTagsRequest,
    user: User = Depends(rate_limited("default")),
    catalog: MediaCatalog = Depends(get_media_catalog),
):
    try:
        video = catalog.update_tags(user.sub, video_id, request.tags)
    except VideoNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return UpdateTagsResponse(success=True, video=video.to_dict())
