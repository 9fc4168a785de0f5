"""Shared fakes for classifier tests."""

import asyncio
import json
from typing import Any, Callable, Optional, Union

import pytest

from jobtriage.classifier.keywords import KeywordStore, StaticKeywordSource
from jobtriage.providers.base import LLMProvider, LLMResponse


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class FakeProvider(LLMProvider):
    """LLM provider returning canned content, optionally after a delay."""

    def __init__(
        self,
        content: Union[str, dict, Callable[[list[dict[str, Any]]], str], None] = None,
        delay: float = 0.0,
        error: Optional[Exception] = None,
        finish_reason: str = "stop",
    ):
        super().__init__()
        self.content = content
        self.delay = delay
        self.error = error
        self.finish_reason = finish_reason
        self.calls: list[dict[str, Any]] = []

    async def chat(
        self,
        messages: list[dict[str, Any]],
        model: str | None = None,
        max_tokens: int = 4096,
        temperature: float = 0.7,
        response_format: dict[str, Any] | None = None,
    ) -> LLMResponse:
        self.calls.append({
            "messages": messages,
            "model": model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "response_format": response_format,
        })
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error

        content = self.content
        if callable(content):
            content = content(messages)
        elif isinstance(content, dict):
            content = json.dumps(content)
        return LLMResponse(content=content, finish_reason=self.finish_reason)

    def get_default_model(self) -> str:
        return "fake-model"


def llm_verdict(
    traffic_light: str = "amber",
    route: str = "video",
    complexity: int = 4,
    specialist: bool = False,
    confidence: int = 80,
    signals: Optional[list[str]] = None,
    reasoning: str = "looks like a minor job",
) -> dict[str, Any]:
    return {
        "trafficLight": traffic_light,
        "recommendedRoute": route,
        "complexityScore": complexity,
        "needsSpecialist": specialist,
        "confidence": confidence,
        "signals": signals if signals is not None else ["small job"],
        "reasoning": reasoning,
    }


@pytest.fixture
def keyword_source():
    return StaticKeywordSource()


@pytest.fixture
def store(keyword_source):
    return KeywordStore(keyword_source)


@pytest.fixture
def clock():
    return FakeClock()
