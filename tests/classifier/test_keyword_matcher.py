"""Tests for Tier 1 keyword matching."""

import pytest

from jobtriage.classifier.keyword_matcher import KeywordMatcher, match_keywords
from jobtriage.classifier.keywords import KeywordSet, KeywordStore, StaticKeywordSource
from jobtriage.classifier.models import Route, TrafficLight

RED_JOBS = [
    "Need to rewire the whole house",
    "Gas boiler needs replacing",
    "Crack in load bearing wall",
    "Think there might be asbestos",
    "Couple of tiles off the roof",
]

PLAIN_JOBS = [
    "shelf needs fixing",
    "Hang a picture",
    "Door not closing properly",
    "assemble a wardrobe",
    "",
]


@pytest.fixture
def matcher(store):
    return KeywordMatcher(store)


class TestCatalogMatch:
    """A catalog match dominates every keyword check."""

    @pytest.mark.parametrize("description", RED_JOBS + PLAIN_JOBS + ["leaking tap"])
    def test_catalog_match_is_green(self, matcher, description):
        result = matcher.match(description, is_already_matched=True)

        assert result.traffic_light == TrafficLight.GREEN
        assert result.recommended_route == Route.INSTANT
        assert result.confidence == 95
        assert result.signals == ["catalog match"]
        assert result.complexity_score == 2
        assert result.needs_specialist is False
        assert result.tier == 1
        assert result.reasoning is None


class TestRedKeywords:
    """RED keywords mean specialist referral."""

    @pytest.mark.parametrize("description", RED_JOBS)
    def test_red_keyword_is_red(self, matcher, description):
        result = matcher.match(description, is_already_matched=False)

        assert result.traffic_light == TrafficLight.RED
        assert result.recommended_route == Route.REFER
        assert result.complexity_score == 9
        assert result.needs_specialist is True
        assert all(signal.startswith("RED: ") for signal in result.signals)

    def test_boiler_leaking_gas(self, matcher):
        result = matcher.match("my boiler is leaking gas", is_already_matched=False)

        assert result.traffic_light == TrafficLight.RED
        assert result.recommended_route == Route.REFER
        assert result.needs_specialist is True
        assert result.confidence >= 90
        assert "RED: gas" in result.signals
        assert "RED: boiler" in result.signals

    def test_red_wins_over_amber(self, matcher):
        result = matcher.match("roof leak and some water damage", is_already_matched=False)

        assert result.traffic_light == TrafficLight.RED
        assert not any(signal.startswith("AMBER") for signal in result.signals)

    def test_case_insensitive(self, matcher):
        result = matcher.match("ASBESTOS in the garage", is_already_matched=False)

        assert result.signals == ["RED: asbestos"]

    def test_confidence_grows_with_hits_and_is_capped(self):
        keywords = KeywordSet.from_lists(["alpha", "bravo", "charlie", "delta", "echo"], [])
        descriptions = [
            "alpha",
            "alpha bravo",
            "alpha bravo charlie",
            "alpha bravo charlie delta",
            "alpha bravo charlie delta echo",
        ]

        confidences = [match_keywords(d, keywords).confidence for d in descriptions]

        assert confidences == [80, 90, 95, 95, 95]
        assert confidences == sorted(confidences)

    def test_repeated_keyword_counts_once(self):
        keywords = KeywordSet.from_lists(["gas"], [])

        result = match_keywords("gas gas gas", keywords)

        assert result.confidence == 80
        assert result.signals == ["RED: gas"]


class TestAmberDefault:
    """Unmatched jobs default to AMBER."""

    @pytest.mark.parametrize("description", PLAIN_JOBS)
    def test_no_keywords_is_amber_40(self, matcher, description):
        result = matcher.match(description, is_already_matched=False)

        assert result.traffic_light == TrafficLight.AMBER
        assert result.recommended_route == Route.VIDEO
        assert result.confidence == 40
        assert result.signals == ["no catalog match"]
        assert result.complexity_score == 5
        assert result.needs_specialist is False

    def test_shelf_needs_fixing(self, matcher):
        result = matcher.match("shelf needs fixing", is_already_matched=False)

        assert result.traffic_light == TrafficLight.AMBER
        assert result.recommended_route == Route.VIDEO
        assert result.confidence == 40
        assert result.signals == ["no catalog match"]

    def test_amber_keyword_raises_confidence(self, matcher):
        result = matcher.match("Something is leaking under the sink", is_already_matched=False)

        assert result.traffic_light == TrafficLight.AMBER
        assert result.confidence == 60
        assert result.signals == ["AMBER: leak", "AMBER: leaking"]


class TestKeywordMatcher:
    """Matcher behaviour around the keyword store."""

    @pytest.mark.asyncio
    async def test_uses_live_keywords(self):
        store = KeywordStore(StaticKeywordSource(red_keywords=["hot tub"], amber_keywords=[]))
        await store.ensure_initialized()
        matcher = KeywordMatcher(store)

        result = matcher.match("fix the hot tub heater", is_already_matched=False)

        assert result.traffic_light == TrafficLight.RED
        assert result.signals == ["RED: hot tub"]

    def test_deterministic(self, matcher):
        first = matcher.match("Small damp patch on ceiling", is_already_matched=False)
        second = matcher.match("Small damp patch on ceiling", is_already_matched=False)

        assert first == second
