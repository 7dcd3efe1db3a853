"""
Tests for the Gemini-backed script analysis and AI matching agents.
query_gemini is monkeypatched so no network calls are made.
"""

import pytest

from adclip.agents.script_analysis import analyzer
from adclip.agents.script_analysis.analyzer import (
    ScriptAnalysisError,
    analyze_script,
    enrich_keywords,
    parse_analysis,
)
from adclip.agents.script_matching import ai_matcher
from adclip.agents.script_matching.ai_matcher import (
    AIMatchingError,
    build_annotated_script,
    find_best_matches,
    parse_pairs,
)
from adclip.agents.script_matching.types import ScriptSegment, TaggedVideo


class TestParseAnalysis:
    def test_positions_follow_durations(self):
        raw = {
            "segments": [
                {"text": "Meet the new bottle.", "keywords": ["Bottle", "product", "bottle"], "duration": 2.5},
                {"text": "Cold for 24 hours.", "keywords": ["ice"], "duration": 2},
            ]
        }

        segments = parse_analysis(raw)

        assert [s.text for s in segments] == ["Meet the new bottle.", "Cold for 24 hours."]
        assert segments[0].keywords == ["bottle", "product"]
        assert [s.position for s in segments] == [0.0, 2.5]
        assert all(s.id.startswith("seg_") for s in segments)
        assert len({s.id for s in segments}) == 2

    def test_missing_duration_is_estimated(self):
        segments = parse_analysis({"segments": [{"text": "one two three four five", "keywords": []}]})
        assert segments[0].duration == 2.0

    def test_short_text_gets_minimum_duration(self):
        segments = parse_analysis({"segments": [{"text": "Hi.", "keywords": []}]})
        assert segments[0].duration == 1.0

    @pytest.mark.parametrize("duration", ["inf", "nan", float("inf"), "-inf"])
    def test_non_finite_duration_is_estimated(self, duration):
        raw = {
            "segments": [
                {"text": "one two three four five", "keywords": [], "duration": duration},
                {"text": "Buy now!", "keywords": [], "duration": 1.5},
            ]
        }

        segments = parse_analysis(raw)

        assert segments[0].duration == 2.0
        assert [s.position for s in segments] == [0.0, 2.0]

    def test_accepts_fenced_json_text(self):
        raw = '```json\n{"segments": [{"text": "Buy now!", "keywords": ["sale"]}]}\n```'
        segments = parse_analysis(raw)
        assert [s.text for s in segments] == ["Buy now!"]

    def test_skips_empty_and_malformed_items(self):
        raw = {"segments": [{"text": "  "}, "junk", {"text": "Valid.", "keywords": "not-a-list", "duration": "x"}]}
        segments = parse_analysis(raw)
        assert len(segments) == 1
        assert segments[0].keywords == []

    def test_garbage_gives_no_segments(self):
        assert parse_analysis("I cannot help with that.") == []


class TestAnalyzeScript:
    @pytest.mark.asyncio
    async def test_returns_segments(self, monkeypatch):
        monkeypatch.setattr(
            analyzer,
            "query_gemini",
            lambda *args, **kwargs: {"segments": [{"text": "Buy now!", "keywords": ["sale"], "duration": 1.2}]},
        )

        segments = await analyze_script("Buy now!")

        assert len(segments) == 1
        assert segments[0].keywords == ["sale"]
        assert segments[0].duration == 1.2

    @pytest.mark.asyncio
    async def test_empty_script(self):
        with pytest.raises(ScriptAnalysisError):
            await analyze_script("  ")

    @pytest.mark.asyncio
    async def test_model_error(self, monkeypatch):
        def boom(*args, **kwargs):
            raise RuntimeError("quota exceeded")

        monkeypatch.setattr(analyzer, "query_gemini", boom)

        with pytest.raises(ScriptAnalysisError, match="quota exceeded"):
            await analyze_script("Buy now!")

    @pytest.mark.asyncio
    async def test_no_segments_in_response(self, monkeypatch):
        monkeypatch.setattr(analyzer, "query_gemini", lambda *args, **kwargs: {"segments": []})

        with pytest.raises(ScriptAnalysisError):
            await analyze_script("Buy now!")


class TestEnrichKeywords:
    @pytest.mark.asyncio
    async def test_adds_keywords_by_id(self, monkeypatch):
        monkeypatch.setattr(
            analyzer,
            "query_gemini",
            lambda *args, **kwargs: {"segments": [{"id": "seg_1", "keywords": ["Dog", "park"]}]},
        )
        segments = [
            ScriptSegment(id="seg_1", text="Dogs play.", duration=1.0),
            ScriptSegment(id="seg_2", text="Already tagged.", duration=1.0, keywords=["tag"]),
        ]

        enriched = await enrich_keywords(segments)

        assert [s.keywords for s in enriched] == [["dog", "park"], ["tag"]]
        assert segments[0].keywords == []

    @pytest.mark.asyncio
    async def test_model_error_keeps_segments(self, monkeypatch):
        def boom(*args, **kwargs):
            raise RuntimeError("offline")

        monkeypatch.setattr(analyzer, "query_gemini", boom)
        segments = [ScriptSegment(id="seg_1", text="Dogs play.", duration=1.0)]

        enriched = await enrich_keywords(segments)

        assert [s.id for s in enriched] == ["seg_1"]
        assert enriched[0].keywords == []


class TestAIMatcher:
    def test_annotated_script_lists_ids(self):
        text = build_annotated_script([ScriptSegment(id="seg_1", text="Hi there.", duration=0.8)])
        assert text == '- Segment (ID: "seg_1", Duration: 0.8s, Text: "Hi there.")'

    def test_parse_match_pairs(self):
        assert parse_pairs({"matches": [{"segmentId": "seg_1", "videoId": "v1"}, {"segmentId": "seg_2"}]}) == [
            {"segmentId": "seg_1", "videoId": "v1"}
        ]

    def test_parse_playlist_takes_first_clip(self):
        raw = '{"playlist": [{"segmentId": "seg_1", "videoIds": ["v2", "v3"]}, {"segmentId": "seg_2", "videoIds": []}]}'
        assert parse_pairs(raw) == [{"segmentId": "seg_1", "videoId": "v2"}]

    def test_parse_garbage(self):
        assert parse_pairs("no idea") == []

    @pytest.mark.asyncio
    async def test_find_best_matches_sends_video_identities(self, monkeypatch):
        prompts = []

        def fake_query(prompt, **kwargs):
            prompts.append(prompt)
            return {"matches": [{"segmentId": "seg_1", "videoId": "v1"}]}

        monkeypatch.setattr(ai_matcher, "query_gemini", fake_query)
        videos = [TaggedVideo(id="v1", name="dog.mp4", tags=["dog", "park"], url="https://signed.example/secret")]

        pairs = await find_best_matches('- Segment (ID: "seg_1")', videos)

        assert pairs == [{"segmentId": "seg_1", "videoId": "v1"}]
        assert 'Video (ID: "v1", Name: "dog.mp4", Tags: [dog, park])' in prompts[0]
        assert "signed.example" not in prompts[0]

    @pytest.mark.asyncio
    async def test_find_best_matches_wraps_errors(self, monkeypatch):
        def boom(*args, **kwargs):
            raise RuntimeError("503")

        monkeypatch.setattr(ai_matcher, "query_gemini", boom)

        with pytest.raises(AIMatchingError):
            await find_best_matches("", [])
