"""Tier 1: instant keyword matching for traffic light classification."""

import time
from typing import Optional

from loguru import logger

from .keywords import KeywordSet, KeywordStore
from .models import ClassificationResult, Route, TrafficLight

CATALOG_MATCH_SIGNAL = "catalog match"
NO_CATALOG_MATCH_SIGNAL = "no catalog match"

CATALOG_MATCH_CONFIDENCE = 95
RED_BASE_CONFIDENCE = 70
RED_CONFIDENCE_PER_HIT = 10
RED_MAX_CONFIDENCE = 95
AMBER_HIT_CONFIDENCE = 60
AMBER_DEFAULT_CONFIDENCE = 40


class KeywordMatcher:
    """
    Deterministic keyword classifier.

    Precedence, highest first:
    1. Catalog match -> GREEN / INSTANT
    2. Any RED keyword -> RED / REFER
    3. Everything else -> AMBER / VIDEO (more confident with AMBER hits)

    Does no I/O; reads the store's current snapshot only.
    """

    def __init__(self, store: KeywordStore):
        self.store = store

    def match(self, description: str, is_already_matched: bool) -> ClassificationResult:
        start = time.perf_counter()

        if not self.store.is_initialized:
            logger.warning(
                "Keyword matcher used before the keyword store was initialized; "
                "running against default keywords"
            )

        if is_already_matched:
            result = catalog_match_result()
        else:
            result = match_keywords(description, self.store.snapshot())

        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.debug(
            f"Tier1 {result.traffic_light.value.upper()} "
            f"({', '.join(result.signals)}) in {elapsed_ms:.1f}ms"
        )
        return result


def catalog_match_result() -> ClassificationResult:
    return ClassificationResult(
        traffic_light=TrafficLight.GREEN,
        confidence=CATALOG_MATCH_CONFIDENCE,
        signals=[CATALOG_MATCH_SIGNAL],
        tier=1,
        recommended_route=Route.INSTANT,
        complexity_score=2,
        needs_specialist=False,
    )


def match_keywords(description: str, keywords: Optional[KeywordSet] = None) -> ClassificationResult:
    """Classify an unmatched description against a keyword snapshot."""
    keywords = keywords or KeywordSet.defaults()
    text = description.lower()

    red_hits = _find_hits(text, keywords.red)
    if red_hits:
        return ClassificationResult(
            traffic_light=TrafficLight.RED,
            confidence=min(RED_BASE_CONFIDENCE + RED_CONFIDENCE_PER_HIT * len(red_hits), RED_MAX_CONFIDENCE),
            signals=[f"RED: {keyword}" for keyword in red_hits],
            tier=1,
            recommended_route=Route.REFER,
            complexity_score=9,
            needs_specialist=True,
        )

    amber_hits = _find_hits(text, keywords.amber)
    return ClassificationResult(
        traffic_light=TrafficLight.AMBER,
        confidence=AMBER_HIT_CONFIDENCE if amber_hits else AMBER_DEFAULT_CONFIDENCE,
        signals=[f"AMBER: {keyword}" for keyword in amber_hits] or [NO_CATALOG_MATCH_SIGNAL],
        tier=1,
        recommended_route=Route.VIDEO,
        complexity_score=5,
        needs_specialist=False,
    )


def _find_hits(text: str, keywords: tuple[str, ...]) -> list[str]:
    hits = []
    seen = set()
    for keyword in keywords:
        needle = keyword.lower()
        if needle and needle not in seen and needle in text:
            seen.add(needle)
            hits.append(keyword)
    return hits
