"""
Read access to a user's tagged videos, plus tag updates.
"""
from __future__ import annotations

import logging
from typing import Any, Protocol

from ..agents.script_matching.types import TaggedVideo
from .supabase import SupabaseClient, get_supabase

logger = logging.getLogger(__name__)

VIDEOS_TABLE = "videos"


class VideoNotFoundError(LookupError):
    """Raised when a video does not exist or belongs to another user."""


def normalize_tags(tags: list[str]) -> list[str]:
    """Strip, lower-case and de-duplicate tags, keeping their order."""
    normalized: list[str] = []
    for tag in tags:
        cleaned = str(tag).strip().lower()
        if cleaned and cleaned not in normalized:
            normalized.append(cleaned)
    return normalized


class MediaCatalog(Protocol):
    def list_tagged_videos(self, user_id: str) -> list[TaggedVideo]:
        ...

    def update_tags(self, user_id: str, video_id: str, tags: list[str]) -> TaggedVideo:
        ...


class InMemoryMediaCatalog:
    """Catalog backed by a dict of user id -> videos. Used for tests and local runs."""

    def __init__(self, videos_by_user: dict[str, list[TaggedVideo]] | None = None):
        self._videos: dict[str, list[TaggedVideo]] = {
            user_id: list(videos) for user_id, videos in (videos_by_user or {}).items()
        }

    def add(self, user_id: str, video: TaggedVideo) -> None:
        self._videos.setdefault(user_id, []).append(video)

    def list_tagged_videos(self, user_id: str) -> list[TaggedVideo]:
        return [video for video in self._videos.get(user_id, []) if video.tags]

    def update_tags(self, user_id: str, video_id: str, tags: list[str]) -> TaggedVideo:
        for video in self._videos.get(user_id, []):
            if video.id == video_id:
                video.tags = normalize_tags(tags)
                return video
        raise VideoNotFoundError(f"Video {video_id} not found")


class SupabaseMediaCatalog:
    """Catalog over the Supabase `videos` table."""

    def __init__(self, supabase: SupabaseClient | None = None):
        self._supabase = supabase

    @property
    def supabase(self) -> SupabaseClient:
        if self._supabase is None:
            self._supabase = get_supabase()
        return self._supabase

    @staticmethod
    def _to_video(row: dict[str, Any]) -> TaggedVideo:
        return TaggedVideo.from_dict(row)

    def list_tagged_videos(self, user_id: str) -> list[TaggedVideo]:
        result = (
            self.supabase.client.table(VIDEOS_TABLE)
            .select("id, name, tags, url, path, duration")
            .eq("user_id", user_id)
            .neq("tags", "{}")
            .execute()
        )
        videos = [self._to_video(row) for row in (result.data or [])]
        # NULL tag arrays pass the neq filter
        return [video for video in videos if video.tags]

    def update_tags(self, user_id: str, video_id: str, tags: list[str]) -> TaggedVideo:
        result = (
            self.supabase.client.table(VIDEOS_TABLE)
            .update({"tags": normalize_tags(tags)})
            .eq("id", video_id)
            .eq("user_id", user_id)
            .execute()
        )
        if not result.data:
            raise VideoNotFoundError(f"Video {video_id} not found")
        logger.info("Updated video tags | video_id=%s tags=%s", video_id, len(result.data[0].get("tags") or []))
        return self._to_video(result.data[0])
