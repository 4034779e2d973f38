"""Configuration settings for Review Activity DB."""

from datetime import date
from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RateLimitConfig(BaseModel):
    """Configuration for rate limit monitoring.

    Controls thresholds for health status determination and
    behavior of the rate limit monitor.
    """

    healthy_threshold_pct: float = Field(
        default=50.0,
        ge=0.0,
        le=100.0,
        description="% remaining above which status is HEALTHY",
    )
    warning_threshold_pct: float = Field(
        default=20.0,
        ge=0.0,
        le=100.0,
        description="% remaining above which status is WARNING (below healthy)",
    )
    critical_threshold_pct: float = Field(
        default=5.0,
        ge=0.0,
        le=100.0,
        description="% remaining above which status is CRITICAL (below warning)",
    )
    track_from_headers: bool = Field(
        default=True,
        description="Passively track limits from response headers",
    )


class PacingConfig(BaseModel):
    """Configuration for request pacing."""

    enabled: bool = Field(
        default=True,
        description="Delay requests when a rate limit pool runs low",
    )
    min_request_interval_ms: int = Field(
        default=0,
        ge=0,
        description="Minimum milliseconds between requests",
    )
    max_request_interval_ms: int = Field(
        default=60000,
        ge=100,
        description="Maximum milliseconds between requests (60 seconds)",
    )
    reserve_buffer_pct: float = Field(
        default=10.0,
        ge=0.0,
        le=50.0,
        description="Percentage of quota to reserve as buffer",
    )


class SyncConfig(BaseModel):
    """Configuration for activity sync behavior.

    Controls the first-sync lookback, API page size and how comment
    batches are committed.
    """

    default_since: date = Field(
        default=date(2025, 1, 1),
        description="Lower bound for PR search when a user has never been synced",
    )
    page_size: int = Field(
        default=100,
        ge=1,
        le=100,
        description="Items requested per GitHub API page",
    )
    comment_batch_size: int = Field(
        default=200,
        ge=1,
        le=5000,
        description="Comments upserted per statement",
    )


class ScoringConfig(BaseModel):
    """Configuration for the LLM scoring oracle.

    Any OpenAI-compatible chat completions endpoint works.
    """

    api_url: str = Field(
        default="https://api.openai.com/v1",
        description="Base URL of the chat completions API",
    )
    api_key: str = Field(
        default="",
        description="API key for the scoring service",
    )
    model: str = Field(
        default="gpt-4o-mini",
        description="Model name sent with each request",
    )
    temperature: float = Field(
        default=0.2,
        ge=0.0,
        le=2.0,
    )
    timeout_seconds: float = Field(
        default=60.0,
        gt=0,
        description="Per-request timeout",
    )
    max_retries: int = Field(
        default=3,
        ge=0,
        le=10,
        description="Retries on transport errors and 429/5xx responses",
    )


class LoggingConfig(BaseModel):
    """Configuration for logging behavior.

    Controls file logging, rotation, and output format.
    """

    log_file: str | None = Field(
        default=None,
        description="Optional path for file logging (enables rotation)",
    )
    rotation: str = Field(
        default="10 MB",
        description="When to rotate log file (e.g., '10 MB', '1 day')",
    )
    retention: str = Field(
        default="7 days",
        description="How long to keep rotated logs",
    )
    serialize: bool = Field(
        default=False,
        description="If True, output JSON format to file",
    )


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    # --------------------------------------------------------------------------
    # Database
    # --------------------------------------------------------------------------
    database_url: str = Field(
        default="sqlite+aiosqlite:///./review_activity.db",
        description="Async database connection string",
    )

    # --------------------------------------------------------------------------
    # GitHub API
    # --------------------------------------------------------------------------
    github_token: str = Field(
        default="",
        description="GitHub personal access token",
    )
    github_api_url: str = Field(
        default="https://api.github.com",
        description="REST API base URL (set for GitHub Enterprise)",
    )
    github_web_host: str = Field(
        default="github.com",
        description="Host of PR web URLs, used to derive owner/repo",
    )

    # --------------------------------------------------------------------------
    # Application
    # --------------------------------------------------------------------------
    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Application environment",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )

    # --------------------------------------------------------------------------
    # Rate Limiting & Pacing
    # --------------------------------------------------------------------------
    rate_limit: RateLimitConfig = Field(
        default_factory=RateLimitConfig,
        description="Rate limit monitoring configuration",
    )
    pacing: PacingConfig = Field(
        default_factory=PacingConfig,
        description="Request pacing configuration",
    )

    # --------------------------------------------------------------------------
    # Sync Configuration
    # --------------------------------------------------------------------------
    sync: SyncConfig = Field(
        default_factory=SyncConfig,
        description="Activity sync behavior configuration",
    )

    # --------------------------------------------------------------------------
    # Scoring
    # --------------------------------------------------------------------------
    scoring: ScoringConfig = Field(
        default_factory=ScoringConfig,
        description="LLM scoring oracle configuration",
    )

    # --------------------------------------------------------------------------
    # Logging Configuration
    # --------------------------------------------------------------------------
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Logging configuration (file output, rotation)",
    )

    @property
    def is_production(self) -> bool:
        """Whether internal error details should be hidden from callers."""
        return self.environment == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
