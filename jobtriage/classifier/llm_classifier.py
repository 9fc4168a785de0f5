"""Tier 2: LLM-assisted classification for inconclusive or borderline jobs."""

import asyncio
import json
import math
import time
from typing import Any, Optional

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from jobtriage.providers.base import LLMProvider

from .errors import Tier2Error, Tier2ProviderError, Tier2SchemaError, Tier2TimeoutError
from .models import ClassificationResult, Route, Tier2Context, TrafficLight

DEFAULT_TIMEOUT_MS = 5000

COMPLEXITY_PROMPT = """You are classifying a handyman job for routing. Analyze the job description and determine:

1. TRAFFIC LIGHT:
   - GREEN: Simple job, can quote instantly with standard pricing
   - AMBER: Needs video/photos to assess properly, likely quotable after seeing
   - RED: Complex/specialist work, needs site visit or specialist referral

2. RECOMMENDED ROUTE:
   - instant: Can give price now (green jobs)
   - video: Send video for assessment (amber jobs)
   - visit: Book diagnostic visit (complex amber/red jobs)
   - refer: Refer to specialist (red jobs requiring licensed trades)

3. COMPLEXITY SCORE (1-10):
   - 1-3: Simple, routine handyman tasks
   - 4-6: Moderate, may need assessment
   - 7-8: Complex, multi-step or technical
   - 9-10: Specialist trade required

4. SPECIALIST NEEDED:
   - true: Requires licensed contractor (gas, electrical, structural)
   - false: Within general handyman scope

RED FLAGS (always RED):
- Gas work (boilers, pipes, cookers)
- Full rewiring or new circuits
- Structural changes (load bearing walls, foundations)
- Asbestos or hazardous materials
- Major building works (extensions, conversions)

AMBER FLAGS (needs visual confirmation):
- Leak/water damage (could be minor tap or major pipe burst)
- Damp (could be condensation or structural issue)
- Unspecified damage or "not sure what's wrong"
- Multiple vague jobs

Anything else that a general handyman can clearly price is GREEN.

Respond ONLY with a JSON object:
{
  "trafficLight": "green" | "amber" | "red",
  "recommendedRoute": "instant" | "video" | "visit" | "refer",
  "complexityScore": 1-10,
  "needsSpecialist": true | false,
  "confidence": 0-100,
  "signals": ["signal1", "signal2"],
  "reasoning": "brief explanation"
}

JOB DESCRIPTION:
"""

_DEFAULT_COMPLEXITY = {
    TrafficLight.GREEN: 2,
    TrafficLight.AMBER: 5,
    TrafficLight.RED: 9,
}


class Tier2Response(BaseModel):
    """Schema the LLM must answer with."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    traffic_light: TrafficLight
    recommended_route: Optional[Route] = None
    complexity_score: Optional[int] = None
    needs_specialist: bool = False
    confidence: int = 50
    signals: list[str] = Field(default_factory=list)
    reasoning: str = ""

    @field_validator("traffic_light", "recommended_route", mode="before")
    @classmethod
    def _lowercase_enum(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("complexity_score", mode="before")
    @classmethod
    def _clamp_complexity(cls, value: Any) -> Any:
        if value is None:
            return None
        return max(1, min(10, round(_finite(value))))

    @field_validator("needs_specialist", mode="before")
    @classmethod
    def _specialist_flag(cls, value: Any) -> Any:
        return False if value is None else value

    @field_validator("confidence", mode="before")
    @classmethod
    def _normalize_confidence(cls, value: Any) -> Any:
        if value is None:
            return 50
        number = _finite(value)
        # Some models answer on a 0-1 scale; integer 1 stays a percentage
        if 0.0 < number <= 1.0 and not isinstance(value, int):
            number *= 100
        return max(0, min(100, round(number)))

    @field_validator("signals", mode="before")
    @classmethod
    def _signals_list(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        return [str(item) for item in value]

    @field_validator("reasoning", mode="before")
    @classmethod
    def _reasoning_text(cls, value: Any) -> Any:
        return "" if value is None else str(value)

    def to_result(self) -> ClassificationResult:
        route = self.recommended_route or _default_route(self.traffic_light, self.needs_specialist)
        return ClassificationResult(
            traffic_light=self.traffic_light,
            confidence=self.confidence,
            signals=list(self.signals),
            tier=2,
            recommended_route=route,
            complexity_score=self.complexity_score or _DEFAULT_COMPLEXITY[self.traffic_light],
            needs_specialist=self.needs_specialist,
            reasoning=self.reasoning,
        )


def _default_route(light: TrafficLight, needs_specialist: bool) -> Route:
    if light == TrafficLight.GREEN:
        return Route.INSTANT
    if light == TrafficLight.AMBER:
        return Route.VIDEO
    return Route.REFER if needs_specialist else Route.VISIT


def _finite(value: Any) -> float:
    number = float(value)
    if not math.isfinite(number):
        raise ValueError(f"expected a finite number, got {value!r}")
    return number


class LLMClassifier:
    """LLM-assisted semantic classification with a hard timeout."""

    def __init__(
        self,
        provider: LLMProvider,
        model: str = "gpt-4o-mini",
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        max_tokens: int = 300,
        temperature: float = 0.1,
    ):
        self.provider = provider
        self.model = model
        self.timeout_ms = timeout_ms
        self.max_tokens = max_tokens
        self.temperature = temperature
        # Calls we stopped waiting for but never cancelled
        self._orphaned: set[asyncio.Task] = set()

    async def classify(
        self,
        description: str,
        context: Optional[Tier2Context] = None,
    ) -> Optional[ClassificationResult]:
        """
        Classify a job description with the LLM.

        Returns None on timeout or any failure so the caller can fall back to
        the Tier 1 result.
        """
        start = time.perf_counter()
        try:
            result = await self.classify_or_raise(description, context)
        except Tier2TimeoutError:
            elapsed_ms = (time.perf_counter() - start) * 1000
            logger.warning(f"Tier2 TIMEOUT after {elapsed_ms:.1f}ms - skipping Tier 2 classification")
            return None
        except Tier2SchemaError as e:
            elapsed_ms = (time.perf_counter() - start) * 1000
            logger.warning(f"Tier2 invalid response after {elapsed_ms:.1f}ms: {e}")
            return None
        except Tier2Error as e:
            elapsed_ms = (time.perf_counter() - start) * 1000
            logger.error(f"Tier2 error after {elapsed_ms:.1f}ms: {e}")
            return None

        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(
            f"Tier2 {result.traffic_light.value.upper()} ({result.recommended_route.value}, "
            f"complexity {result.complexity_score}) in {elapsed_ms:.1f}ms"
        )
        return result

    async def classify_or_raise(
        self,
        description: str,
        context: Optional[Tier2Context] = None,
    ) -> ClassificationResult:
        """
        Classify a job description, raising a typed Tier2Error on failure.

        Raises:
            Tier2TimeoutError: no answer within timeout_ms
            Tier2ProviderError: the provider call failed
            Tier2SchemaError: the answer was not valid JSON of the expected shape
        """
        messages = [
            {"role": "system", "content": COMPLEXITY_PROMPT},
            {"role": "user", "content": self._build_user_content(description, context)},
        ]
        content = await self._call_llm(messages)
        return self._parse_response(content).to_result()

    def _build_user_content(self, description: str, context: Optional[Tier2Context]) -> str:
        content = description

        if context:
            if context.has_catalog_match and context.catalog_name:
                content += (
                    f'\n\n[Note: This job matched to catalog entry "{context.catalog_name}" '
                    f"but needs complexity verification]"
                )
            if context.other_jobs:
                content += f"\n\n[Other jobs in this call: {', '.join(context.other_jobs)}]"

        return content

    async def _call_llm(self, messages: list[dict[str, Any]]) -> str:
        """Call the LLM with timeout; a timed-out call is left to finish on its own."""
        llm_task = asyncio.ensure_future(
            self.provider.chat(
                messages=messages,
                model=self.model,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
                response_format={"type": "json_object"},
            )
        )

        try:
            response = await asyncio.wait_for(
                asyncio.shield(llm_task),
                timeout=self.timeout_ms / 1000.0,
            )
        except asyncio.TimeoutError:
            self._orphan(llm_task)
            raise Tier2TimeoutError(self.timeout_ms)
        except asyncio.CancelledError:
            # Caller gave up; stop waiting but let the request finish
            self._orphan(llm_task)
            raise
        except Exception as e:
            raise Tier2ProviderError(f"LLM call failed: {e}") from e

        if response.is_error:
            raise Tier2ProviderError(f"LLM call failed: {response.error or response.content}")

        if not response.content:
            raise Tier2SchemaError("No content in LLM response")

        return response.content

    def _orphan(self, task: asyncio.Task) -> None:
        if task.done():
            return
        self._orphaned.add(task)
        task.add_done_callback(self._reap)

    def _reap(self, task: asyncio.Task) -> None:
        self._orphaned.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.debug(f"Abandoned Tier2 call finished with error: {task.exception()}")

    def _parse_response(self, content: str) -> Tier2Response:
        """Parse and validate the LLM JSON response."""
        text = content.strip()

        # Extract JSON if wrapped in markdown
        if "```json" in text:
            text = text.split("```json")[1].split("```")[0].strip()
        elif "```" in text:
            text = text.split("```")[1].split("```")[0].strip()

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise Tier2SchemaError(f"Response is not valid JSON: {e}", raw_response=content) from e

        if not isinstance(data, dict):
            raise Tier2SchemaError("Response JSON is not an object", raw_response=content)

        try:
            return Tier2Response.model_validate(data)
        except Exception as e:
            raise Tier2SchemaError(f"Response failed validation: {e}", raw_response=content) from e
