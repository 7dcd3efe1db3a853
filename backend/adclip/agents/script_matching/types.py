"""
Shared types for script-to-clip matching.
These are simple dataclasses with no heavy dependencies.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional

MatchSource = Literal["auto", "manual"]


def _pick(data: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


@dataclass(frozen=True)
class WordTimestamp:
    """A single spoken word with its timing in seconds."""
    word: str
    start_time: float
    end_time: float


@dataclass
class ScriptSegment:
    """Represents a sentence-level piece of the script."""
    id: str
    text: str
    duration: float
    keywords: List[str] = field(default_factory=list)
    position: float = 0.0  # start offset in seconds

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "duration": self.duration,
            "keywords": list(self.keywords),
            "position": self.position,
        }


@dataclass
class TaggedVideo:
    """Represents a user's video clip and its tags."""
    id: str
    name: str
    tags: List[str] = field(default_factory=list)
    url: str = ""
    path: Optional[str] = None
    duration: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TaggedVideo":
        duration = data.get("duration")
        return cls(
            id=str(_pick(data, "id", "_id", default="")),
            name=str(_pick(data, "name", default="")),
            tags=[str(tag) for tag in (data.get("tags") or [])],
            url=str(_pick(data, "url", default="")),
            path=data.get("path"),
            duration=float(duration) if duration is not None else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "tags": list(self.tags),
            "url": self.url,
            "path": self.path,
            "duration": self.duration,
        }


@dataclass
class VideoMatch:
    """Represents a segment paired with a video and its score."""
    segment: ScriptSegment
    video: TaggedVideo
    score: float
    start_time: Optional[float] = None
    end_time: Optional[float] = None
    source: MatchSource = "auto"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "segment": self.segment.to_dict(),
            "video": self.video.to_dict(),
            "score": self.score,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "source": self.source,
        }


@dataclass
class MatchingResult:
    """Segments and matches produced for one script."""
    segments: List[ScriptSegment]
    matches: List[VideoMatch]
    strategy: Literal["ai", "ai+fallback", "fallback"]
    dropped_pairs: int = 0

    @property
    def unmatched_segment_ids(self) -> List[str]:
        matched = {match.segment.id for match in self.matches}
        return [segment.id for segment in self.segments if segment.id not in matched]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "segments": [segment.to_dict() for segment in self.segments],
            "matches": [match.to_dict() for match in self.matches],
            "strategy": self.strategy,
            "unmatched_segment_ids": self.unmatched_segment_ids,
        }
