"""Data models for the job complexity classifier."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class TrafficLight(str, Enum):
    """Severity/readiness of a single job."""
    GREEN = "green"  # Safe to price instantly
    AMBER = "amber"  # Needs visual confirmation
    RED = "red"      # Specialist or high risk

    @property
    def severity(self) -> int:
        return _SEVERITY[self]

    def __lt__(self, other: "TrafficLight") -> bool:
        if not isinstance(other, TrafficLight):
            return NotImplemented
        return self.severity < other.severity

    def __le__(self, other: "TrafficLight") -> bool:
        if not isinstance(other, TrafficLight):
            return NotImplemented
        return self.severity <= other.severity

    def __gt__(self, other: "TrafficLight") -> bool:
        if not isinstance(other, TrafficLight):
            return NotImplemented
        return self.severity > other.severity

    def __ge__(self, other: "TrafficLight") -> bool:
        if not isinstance(other, TrafficLight):
            return NotImplemented
        return self.severity >= other.severity


_SEVERITY = {
    TrafficLight.GREEN: 0,
    TrafficLight.AMBER: 1,
    TrafficLight.RED: 2,
}


class Route(str, Enum):
    """Next action for turning a job into a price."""
    INSTANT = "instant"
    VIDEO = "video"
    VISIT = "visit"
    REFER = "refer"

    @property
    def color(self) -> str:
        """Display colour used by the live-call UI."""
        return ROUTE_COLORS[self]


ROUTE_COLORS = {
    Route.INSTANT: "#22C55E",
    Route.VIDEO: "#EAB308",
    Route.VISIT: "#3B82F6",
    Route.REFER: "#EF4444",
}


@dataclass
class ClassificationResult:
    """Verdict for a single job description."""

    traffic_light: TrafficLight
    confidence: int  # 0-100
    signals: list[str]
    tier: int  # 1 = keyword match, 2 = LLM
    recommended_route: Route
    complexity_score: int  # 1-10
    needs_specialist: bool
    reasoning: Optional[str] = None  # Tier 2 only

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data: dict[str, Any] = {
            "traffic_light": self.traffic_light.value,
            "confidence": self.confidence,
            "signals": list(self.signals),
            "tier": self.tier,
            "recommended_route": self.recommended_route.value,
            "complexity_score": self.complexity_score,
            "needs_specialist": self.needs_specialist,
        }
        if self.reasoning is not None:
            data["reasoning"] = self.reasoning
        return data


@dataclass
class ClassificationOutput:
    """A classification plus how long it took."""

    result: ClassificationResult
    processing_time_ms: float


@dataclass
class DetectedJob:
    """A job picked out of a call transcript."""

    id: str
    description: str
    matched: bool = False

    # Catalog metadata, only ever used as LLM context
    catalog_id: Optional[str] = None
    catalog_name: Optional[str] = None
    price_pence: Optional[int] = None


@dataclass
class Tier2Context:
    """Extra context handed to the LLM classifier."""

    has_catalog_match: bool = False
    catalog_name: Optional[str] = None
    other_jobs: list[str] = field(default_factory=list)


@dataclass
class ClassifyOptions:
    """Per-call options for the job classifier."""

    use_tier2: bool = True
    other_job_descriptions: list[str] = field(default_factory=list)
    catalog_name: Optional[str] = None


@dataclass
class RouteRecommendation:
    """One recommended action for the whole call."""

    route: Route
    confidence: int
    reason: str
    traffic_light: Optional[TrafficLight] = None  # worst light that decided the route

    @property
    def color(self) -> str:
        # Any RED job shows red, even when the route is a visit
        if self.traffic_light == TrafficLight.RED:
            return ROUTE_COLORS[Route.REFER]
        return self.route.color

    def to_dict(self) -> dict[str, Any]:
        return {
            "route": self.route.value,
            "color": self.color,
            "reason": self.reason,
            "confidence": self.confidence,
        }
