"""Job classifier: combines Tier 1 keyword matching with the Tier 2 LLM fallback."""

import asyncio
import time
from typing import Optional, Sequence

from loguru import logger

from jobtriage.config.schema import ClassifierConfig
from jobtriage.providers.base import LLMProvider

from .escalation import EscalationPolicy
from .keyword_matcher import KeywordMatcher
from .keywords import ConfigKeywordSource, KeywordSource, KeywordStore
from .llm_classifier import LLMClassifier
from .models import (
    ClassificationOutput,
    ClassificationResult,
    ClassifyOptions,
    DetectedJob,
    Tier2Context,
    TrafficLight,
)


class JobClassifier:
    """
    Entry point for job complexity classification.

    Strategy:
    1. Make sure keywords are loaded from settings
    2. Always run Tier 1 first (instant)
    3. GREEN (catalog match) returns immediately
    4. Otherwise ask the escalation policy whether Tier 2 should run,
       falling back to Tier 1 if Tier 2 times out or fails
    """

    def __init__(
        self,
        store: KeywordStore,
        llm_classifier: Optional[LLMClassifier] = None,
        escalation: Optional[EscalationPolicy] = None,
    ):
        self.store = store
        self.matcher = KeywordMatcher(store)
        self.llm_classifier = llm_classifier
        self.escalation = escalation or EscalationPolicy()

    @classmethod
    def from_config(
        cls,
        config: ClassifierConfig,
        provider: Optional[LLMProvider] = None,
        keyword_source: Optional[KeywordSource] = None,
    ) -> "JobClassifier":
        """Wire a classifier from configuration."""
        store = KeywordStore(
            source=keyword_source or ConfigKeywordSource(),
            ttl_seconds=config.keyword_cache_ttl_seconds,
        )

        llm_classifier = None
        if provider and config.llm.enabled:
            llm_classifier = LLMClassifier(
                provider=provider,
                model=config.llm.model,
                timeout_ms=config.llm.timeout_ms,
                max_tokens=config.llm.max_tokens,
                temperature=config.llm.temperature,
            )

        escalation = EscalationPolicy(
            borderline_keywords=config.borderline_keywords,
            confidence_threshold=config.escalation_confidence_threshold,
        )
        return cls(store, llm_classifier=llm_classifier, escalation=escalation)

    async def initialize(self) -> None:
        """Load keywords up front; call on application startup."""
        await self.store.ensure_initialized()

    async def classify_one(
        self,
        description: str,
        is_already_matched: bool,
        options: Optional[ClassifyOptions] = None,
    ) -> ClassificationOutput:
        """Classify a single job, using Tier 2 when Tier 1 is not conclusive."""
        start = time.perf_counter()
        options = options or ClassifyOptions()

        await self.store.ensure_initialized()

        tier1_result = self.matcher.match(description, is_already_matched)

        # GREEN is already the best possible outcome
        if tier1_result.traffic_light == TrafficLight.GREEN:
            return _output(tier1_result, start)

        if self._tier2_enabled(options) and self.escalation.should_escalate(description, tier1_result):
            tier2_result = await self.llm_classifier.classify(
                description,
                Tier2Context(
                    has_catalog_match=is_already_matched,
                    catalog_name=options.catalog_name,
                    other_jobs=list(options.other_job_descriptions),
                ),
            )
            if tier2_result:
                return _output(tier2_result, start)
            logger.debug("Tier2 unavailable, falling back to Tier1 result")

        return _output(tier1_result, start)

    def classify_one_sync(self, description: str, is_already_matched: bool) -> ClassificationOutput:
        """Tier 1 only; for live transcript streaming where nothing may block."""
        start = time.perf_counter()
        result = self.matcher.match(description, is_already_matched)
        return _output(result, start)

    async def classify_many(
        self,
        jobs: Sequence[DetectedJob],
        options: Optional[ClassifyOptions] = None,
    ) -> dict[str, ClassificationResult]:
        """
        Classify every job detected in a call.

        Tier 1 runs for all jobs first; the Tier 2 calls that are needed then run
        concurrently, so the wait is bounded by the slowest single call.
        """
        options = options or ClassifyOptions()
        await self.store.ensure_initialized()

        results: dict[str, ClassificationResult] = {}
        for job in jobs:
            results[job.id] = self.matcher.match(job.description, job.matched)

        if not self._tier2_enabled(options):
            return results

        pending = [
            job for job in jobs
            if self.escalation.should_escalate(job.description, results[job.id])
        ]
        if not pending:
            return results

        logger.debug(f"Running Tier2 for {len(pending)}/{len(jobs)} jobs")
        tier2_results = await asyncio.gather(*[
            self.llm_classifier.classify(
                job.description,
                Tier2Context(
                    has_catalog_match=job.matched,
                    catalog_name=job.catalog_name,
                    other_jobs=[other.description for other in jobs if other.id != job.id],
                ),
            )
            for job in pending
        ])

        for job, tier2_result in zip(pending, tier2_results):
            if tier2_result:
                results[job.id] = tier2_result

        return results

    def _tier2_enabled(self, options: ClassifyOptions) -> bool:
        return options.use_tier2 and self.llm_classifier is not None


def _output(result: ClassificationResult, start: float) -> ClassificationOutput:
    return ClassificationOutput(
        result=result,
        processing_time_ms=(time.perf_counter() - start) * 1000,
    )
