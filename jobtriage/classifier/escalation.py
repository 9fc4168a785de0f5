"""Decides when a Tier 1 verdict deserves a Tier 2 second opinion."""

from typing import Optional, Sequence

from .keywords import BORDERLINE_KEYWORDS
from .models import ClassificationResult, TrafficLight

DEFAULT_CONFIDENCE_THRESHOLD = 70


class EscalationPolicy:
    """
    Escalate to Tier 2 when any of these hold:
    - the Tier 1 verdict is not GREEN
    - the description mentions a borderline term (minor or major, can't tell)
    - Tier 1 confidence is below the threshold
    """

    def __init__(
        self,
        borderline_keywords: Optional[Sequence[str]] = None,
        confidence_threshold: int = DEFAULT_CONFIDENCE_THRESHOLD,
    ):
        keywords = borderline_keywords if borderline_keywords is not None else BORDERLINE_KEYWORDS
        self.borderline_keywords = tuple(k.lower() for k in keywords if k.strip())
        self.confidence_threshold = confidence_threshold

    def should_escalate(self, description: str, tier1_result: ClassificationResult) -> bool:
        if tier1_result.traffic_light != TrafficLight.GREEN:
            return True

        if self.borderline_terms(description):
            return True

        return tier1_result.confidence < self.confidence_threshold

    def borderline_terms(self, description: str) -> list[str]:
        """Borderline keywords present in the description."""
        text = description.lower()
        return [k for k in self.borderline_keywords if k in text]


_default_policy = EscalationPolicy()


def should_escalate(description: str, tier1_result: ClassificationResult) -> bool:
    """Check a Tier 1 result against the default escalation policy."""
    return _default_policy.should_escalate(description, tier1_result)
