"""Reduces per-job classifications to one recommended action for the call."""

from typing import Mapping

from .models import ClassificationResult, Route, RouteRecommendation, TrafficLight

# Beyond this many uncertain jobs a visit is cheaper than several videos
AMBER_VISIT_THRESHOLD = 3


def aggregate_routes(results: Mapping[str, ClassificationResult]) -> RouteRecommendation:
    """
    Recommend one route for a whole call. The worst job decides:
    RED beats AMBER beats GREEN.
    """
    if not results:
        return RouteRecommendation(
            route=Route.VIDEO,
            confidence=0,
            reason="no jobs detected yet",
        )

    all_results = list(results.values())

    red_jobs = [r for r in all_results if r.traffic_light == TrafficLight.RED]
    if red_jobs:
        needs_referral = any(r.needs_specialist for r in red_jobs)
        action = "specialist referral" if needs_referral else "site visit"
        return RouteRecommendation(
            route=Route.REFER if needs_referral else Route.VISIT,
            confidence=max(r.confidence for r in red_jobs),
            reason=f"{_jobs(len(red_jobs))} need {action}",
            traffic_light=TrafficLight.RED,
        )

    amber_jobs = [r for r in all_results if r.traffic_light == TrafficLight.AMBER]
    if amber_jobs:
        confidence = max(r.confidence for r in amber_jobs)
        if len(amber_jobs) >= AMBER_VISIT_THRESHOLD:
            return RouteRecommendation(
                route=Route.VISIT,
                confidence=confidence,
                reason=f"{len(amber_jobs)} jobs need assessment - visit recommended",
                traffic_light=TrafficLight.AMBER,
            )
        return RouteRecommendation(
            route=Route.VIDEO,
            confidence=confidence,
            reason=f"{_jobs(len(amber_jobs))} need visual confirmation",
            traffic_light=TrafficLight.AMBER,
        )

    return RouteRecommendation(
        route=Route.INSTANT,
        confidence=max(r.confidence for r in all_results),
        reason="all jobs have catalog matches",
        traffic_light=TrafficLight.GREEN,
    )


def _jobs(count: int) -> str:
    return f"{count} job" if count == 1 else f"{count} jobs"
