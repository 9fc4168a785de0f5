"""Exceptions raised by the job classifier."""


class ClassifierError(Exception):
    """Base class for classifier errors."""


class KeywordSourceError(ClassifierError):
    """The settings source could not supply traffic light keywords."""


class Tier2Error(ClassifierError):
    """The LLM classifier could not produce a verdict."""


class Tier2TimeoutError(Tier2Error):
    """The LLM call did not answer within the timeout."""

    def __init__(self, timeout_ms: int):
        super().__init__(f"Tier 2 LLM call timed out after {timeout_ms}ms")
        self.timeout_ms = timeout_ms


class Tier2ProviderError(Tier2Error):
    """The LLM provider failed (network, auth, rate limit...)."""


class Tier2SchemaError(Tier2Error):
    """The LLM answered but the response did not match the expected schema."""

    def __init__(self, message: str, raw_response: str | None = None):
        super().__init__(message)
        self.raw_response = raw_response
