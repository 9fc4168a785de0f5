"""LLM provider abstraction module."""

from jobtriage.providers.base import LLMProvider, LLMResponse
from jobtriage.providers.litellm_provider import LiteLLMProvider

__all__ = ["LLMProvider", "LLMResponse", "LiteLLMProvider"]
