"""
Job complexity classifier.

Two-tier classification of customer job descriptions:
1. Keyword matching against runtime-configurable RED/AMBER lists (instant)
2. LLM-assisted classification for inconclusive or borderline jobs

Per-job verdicts are reduced to one recommended route for the whole call.
"""

from .aggregator import aggregate_routes
from .errors import (
    ClassifierError,
    KeywordSourceError,
    Tier2Error,
    Tier2ProviderError,
    Tier2SchemaError,
    Tier2TimeoutError,
)
from .escalation import EscalationPolicy, should_escalate
from .keyword_matcher import KeywordMatcher
from .keywords import (
    ConfigKeywordSource,
    KeywordSet,
    KeywordSource,
    KeywordStore,
    StaticKeywordSource,
    TrafficLightKeywords,
)
from .llm_classifier import LLMClassifier
from .models import (
    ClassificationOutput,
    ClassificationResult,
    ClassifyOptions,
    DetectedJob,
    Route,
    RouteRecommendation,
    Tier2Context,
    TrafficLight,
)
from .orchestrator import JobClassifier

__all__ = [
    "aggregate_routes",
    "ClassificationOutput",
    "ClassificationResult",
    "ClassifierError",
    "ClassifyOptions",
    "ConfigKeywordSource",
    "DetectedJob",
    "EscalationPolicy",
    "JobClassifier",
    "KeywordMatcher",
    "KeywordSet",
    "KeywordSource",
    "KeywordSourceError",
    "KeywordStore",
    "LLMClassifier",
    "Route",
    "RouteRecommendation",
    "should_escalate",
    "StaticKeywordSource",
    "Tier2Context",
    "Tier2Error",
    "Tier2ProviderError",
    "Tier2SchemaError",
    "Tier2TimeoutError",
    "TrafficLight",
    "TrafficLightKeywords",
]
