"""Tests for post content normalization."""

import pytest

from trendme.content import normalize_trend_content
from trendme.content.models import GridType, InfluencerIdentity, TrendSignal
from trendme.content.prompts import fallback_beats, padding_beat


@pytest.fixture
def identity():
    return InfluencerIdentity(name="Mara Vale", personality="witty")


@pytest.fixture
def trend():
    return TrendSignal(
        id="trend-1",
        headline="Paris bans fast fashion ads",
        summary="A new law restricts advertising.",
        source_url="https://example.com/story",
    )


class TestBeatCount:
    """slide_descriptions always matches the panel count."""

    def test_pads_three_beats_to_nine(self, identity):
        data = {"topic": "Thrift hauls", "slideDescriptions": ["a", "b", "c"]}
        trend = normalize_trend_content(data, identity=identity, grid_type=GridType.GRID_3X3)

        assert len(trend.slide_descriptions) == 9
        assert trend.slide_descriptions[:3] == ["a", "b", "c"]
        assert trend.slide_descriptions[3:] == [padding_beat("Thrift hauls", "Mara Vale")] * 6

    def test_truncates_nine_beats_to_four(self, identity):
        beats = [f"beat {i}" for i in range(9)]
        trend = normalize_trend_content(
            {"topic": "x", "slideDescriptions": beats}, identity=identity, grid_type=GridType.GRID_2X2
        )
        assert trend.slide_descriptions == beats[:4]

    def test_missing_beats_use_fallback_arc(self, identity):
        trend = normalize_trend_content({"topic": "Upcycling"}, identity=identity, grid_type=GridType.GRID_3X3)
        assert trend.slide_descriptions == fallback_beats("Upcycling", "Mara Vale")


class TestDefaults:
    """Every field is filled even from an empty response."""

    def test_empty_response(self, identity):
        trend = normalize_trend_content({}, identity=identity, grid_type=GridType.GRID_2X2)

        assert trend.topic == "Update"
        assert trend.caption == "just posting about Update..."
        assert "Mara Vale" in trend.story_narrative
        assert trend.visual_mood
        assert trend.color_palette
        assert trend.hashtags == []
        assert len(trend.slide_descriptions) == 4

    def test_topic_and_summary_fall_back_to_trend(self, identity, trend):
        result = normalize_trend_content(
            {}, identity=identity, grid_type=GridType.GRID_2X2, specific_trend=trend
        )
        assert result.topic == trend.headline
        assert result.summary == trend.summary


class TestSourceUrls:
    """Trend source first, grounding URLs after, no duplicates."""

    def test_order_and_dedup(self, identity, trend):
        result = normalize_trend_content(
            {"topic": "x"},
            identity=identity,
            grid_type=GridType.GRID_2X2,
            specific_trend=trend,
            grounding_urls=["https://a.test", "https://example.com/story", "https://a.test"],
        )
        assert result.source_urls == ["https://example.com/story", "https://a.test"]
