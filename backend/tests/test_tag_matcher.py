"""
Tests for keyword/tag similarity and best-match selection.
"""

import pytest

from adclip.agents.script_matching.tag_matcher import (
    calculate_similarity,
    find_best_match,
    match_all,
)
from adclip.agents.script_matching.types import ScriptSegment, TaggedVideo


def make_segment(segment_id="seg_1", keywords=None):
    return ScriptSegment(
        id=segment_id,
        text="A dog plays in the park.",
        duration=2.0,
        keywords=list(keywords or []),
        position=0.0,
    )


def make_video(video_id, tags):
    return TaggedVideo(id=video_id, name=f"{video_id}.mp4", tags=list(tags), url=f"https://cdn.example.com/{video_id}.mp4")


class TestCalculateSimilarity:
    def test_exact_and_missing_keyword(self):
        """'dog' matches exactly, 'park' matches nothing -> 1/2."""
        assert calculate_similarity(["dog", "park"], ["dog", "outdoor"]) == 0.5

    def test_empty_keywords(self):
        assert calculate_similarity([], ["dog"]) == 0

    def test_empty_tags(self):
        assert calculate_similarity(["dog"], []) == 0

    def test_case_insensitive(self):
        assert calculate_similarity(["Car"], ["car"]) == calculate_similarity(["car"], ["CAR"]) == 1.0

    def test_partial_match_tag_contains_keyword(self):
        assert calculate_similarity(["beach"], ["beachside"]) == 0.5

    def test_partial_match_keyword_contains_tag(self):
        assert calculate_similarity(["sunset"], ["sun"]) == 0.5

    def test_partial_match_counted_once_per_keyword(self):
        """Several overlapping tags still give one partial weight."""
        assert calculate_similarity(["run"], ["running", "runner", "runway"]) == 0.5

    def test_exact_match_beats_partial(self):
        assert calculate_similarity(["coffee"], ["coffeeshop", "coffee"]) == 1.0

    def test_score_is_capped_at_one(self):
        score = calculate_similarity(["dog", "dog"], ["dog"])
        assert score == 1.0

    def test_order_independent(self):
        keywords = ["city", "night", "lights", "car"]
        tags = ["nightlife", "city", "cars"]
        assert calculate_similarity(keywords, tags) == calculate_similarity(
            list(reversed(keywords)), list(reversed(tags))
        )

    @pytest.mark.parametrize(
        "keywords,tags",
        [
            (["a"], ["car"]),
            (["mountain", "snow", "ski"], ["skiing", "snow"]),
            (["x", "y", "z"], ["q"]),
            (["product"], ["product", "bottle", "product shot"]),
        ],
    )
    def test_score_is_bounded(self, keywords, tags):
        assert 0.0 <= calculate_similarity(keywords, tags) <= 1.0


class TestFindBestMatch:
    def test_no_keywords(self):
        assert find_best_match(make_segment(keywords=[]), [make_video("v1", ["dog"])]) is None

    def test_no_candidates(self):
        assert find_best_match(make_segment(keywords=["dog"]), []) is None

    def test_returns_best_candidate(self):
        segment = make_segment(keywords=["dog", "park"])
        videos = [make_video("v1", ["cat"]), make_video("v2", ["dog", "park"]), make_video("v3", ["dog"])]

        match = find_best_match(segment, videos)

        assert match is not None
        assert match.video.id == "v2"
        assert match.score == 1.0
        assert match.source == "auto"
        assert match.segment is segment

    def test_first_candidate_wins_ties(self):
        """Scores 0.05, 0.3, 0.3 -> the first 0.3 candidate (index 1)."""
        keywords = ["apple", "banana", "cherry", "dune", "eagle", "falcon", "grape", "harbor", "island", "jungle"]
        videos = [
            make_video("low", ["apples"]),
            make_video("first", ["banana", "cherry", "dune"]),
            make_video("second", ["dune", "banana", "cherry"]),
        ]
        assert calculate_similarity(keywords, videos[0].tags) == pytest.approx(0.05)

        match = find_best_match(make_segment(keywords=keywords), videos)

        assert match is not None
        assert match.video.id == "first"
        assert match.score == pytest.approx(0.3)

    def test_score_at_threshold_is_rejected(self):
        """A score of exactly 0.1 is not enough."""
        keywords = ["apple", "banana", "cherry", "dune", "eagle"]
        videos = [make_video("v1", ["apples"])]
        assert calculate_similarity(keywords, videos[0].tags) == 0.1

        assert find_best_match(make_segment(keywords=keywords), videos) is None

    def test_untagged_candidates_are_skipped(self):
        segment = make_segment(keywords=["dog"])
        videos = [make_video("untagged", []), make_video("v2", ["dog"])]

        match = find_best_match(segment, videos)
        assert match is not None
        assert match.video.id == "v2"

    def test_never_returns_low_score(self):
        segment = make_segment(keywords=["ocean", "waves", "surf", "board", "sand", "sun", "palm"])
        videos = [make_video("v1", ["palm"]), make_video("v2", ["mountain"])]

        match = find_best_match(segment, videos)
        assert match is None or match.score > 0.1


class TestMatchAll:
    def test_unmatched_segments_are_omitted(self):
        segments = [
            make_segment("seg_1", ["dog"]),
            make_segment("seg_2", ["spaceship"]),
            make_segment("seg_3", ["coffee"]),
        ]
        videos = [make_video("dog-clip", ["dog"]), make_video("coffee-clip", ["coffee", "cup"])]

        matches = match_all(segments, videos)

        assert [m.segment.id for m in matches] == ["seg_1", "seg_3"]
        assert [m.video.id for m in matches] == ["dog-clip", "coffee-clip"]

    def test_videos_can_be_reused(self):
        segments = [make_segment("seg_1", ["dog"]), make_segment("seg_2", ["dog", "puppy"])]
        videos = [make_video("dog-clip", ["dog", "puppy"])]

        matches = match_all(segments, videos)

        assert len(matches) == 2
        assert {m.video.id for m in matches} == {"dog-clip"}

    def test_empty_segments(self):
        assert match_all([], [make_video("v1", ["dog"])]) == []
