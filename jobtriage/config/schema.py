"""Configuration schema using Pydantic."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from pydantic_settings import BaseSettings, SettingsConfigDict


class Base(BaseModel):
    """Base model that accepts both camelCase and snake_case keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class KeywordsConfig(Base):
    """Runtime traffic light keywords (None = use the built-in list)."""
    red_keywords: list[str] | None = None
    amber_keywords: list[str] | None = None


class LLMClassifierConfig(Base):
    """Configuration for the Tier 2 LLM classifier."""
    enabled: bool = True
    model: str = "gpt-4o-mini"
    timeout_ms: int = 5000
    max_tokens: int = 300
    temperature: float = 0.1


class ClassifierConfig(Base):
    """Configuration for the job complexity classifier."""
    keyword_cache_ttl_seconds: float = 60.0
    escalation_confidence_threshold: int = 70
    borderline_keywords: list[str] | None = None  # None = built-in list
    keywords: KeywordsConfig = Field(default_factory=KeywordsConfig)
    llm: LLMClassifierConfig = Field(default_factory=LLMClassifierConfig)


class ProviderConfig(Base):
    """LLM provider configuration."""
    api_key: str = ""
    api_base: str | None = None
    extra_headers: dict[str, str] | None = None  # Custom headers (e.g. gateway app codes)


class LoggingConfig(Base):
    """Logging configuration."""
    level: str = "INFO"
    log_file: str | None = None
    verbose: bool = False


class Config(BaseSettings):
    """Root configuration for jobtriage."""

    model_config = SettingsConfigDict(
        env_prefix="JOBTRIAGE_",
        env_nested_delimiter="__",
    )

    classifier: ClassifierConfig = Field(default_factory=ClassifierConfig)
    provider: ProviderConfig = Field(default_factory=ProviderConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
