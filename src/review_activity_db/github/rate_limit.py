"""Passive rate limit tracking from GitHub response headers.

Every REST response carries ``x-ratelimit-*`` headers; the monitor keeps
the latest values per resource pool so the pacer can slow down before a
pool runs dry. Search and core quotas are tracked separately.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum
from typing import Self

from pydantic import BaseModel, Field, computed_field

from review_activity_db.config import RateLimitConfig, get_settings
from review_activity_db.logging import get_logger

logger = get_logger(__name__)


class RateLimitPool(StrEnum):
    """GitHub rate limit resource pools used by this project.

    See: https://docs.github.com/en/rest/rate-limit/rate-limit
    """

    CORE = "core"
    SEARCH = "search"


class RateLimitStatus(StrEnum):
    """Rate limit health status."""

    HEALTHY = "healthy"
    WARNING = "warning"
    CRITICAL = "critical"
    EXHAUSTED = "exhausted"


class PoolRateLimit(BaseModel):
    """Quota state for one resource pool."""

    pool: RateLimitPool = Field(description="Resource pool name")
    limit: int = Field(ge=0, description="Maximum requests allowed per window")
    remaining: int = Field(ge=0, description="Requests remaining in current window")
    used: int = Field(ge=0, description="Requests used in current window")
    reset_at: datetime = Field(description="UTC datetime when limit resets")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def remaining_percent(self) -> float:
        """Percentage of the quota remaining (0.0 to 100.0)."""
        if self.limit == 0:
            return 0.0
        return (self.remaining / self.limit) * 100

    @property
    def seconds_until_reset(self) -> int:
        """Seconds until rate limit resets (0 if already past)."""
        delta = self.reset_at - datetime.now(UTC)
        return max(0, int(delta.total_seconds()))

    def get_status(
        self,
        healthy_threshold: float = 50.0,
        warning_threshold: float = 20.0,
        critical_threshold: float = 5.0,
    ) -> RateLimitStatus:
        """Classify the remaining quota against the given thresholds."""
        if self.remaining == 0:
            return RateLimitStatus.EXHAUSTED
        if self.remaining_percent >= healthy_threshold:
            return RateLimitStatus.HEALTHY
        if self.remaining_percent >= warning_threshold:
            return RateLimitStatus.WARNING
        return RateLimitStatus.CRITICAL

    @classmethod
    def from_headers(
        cls,
        headers: dict[str, str],
        default_pool: RateLimitPool = RateLimitPool.CORE,
    ) -> Self | None:
        """Parse ``x-ratelimit-*`` headers.

        Args:
            headers: Response headers (lower-case keys)
            default_pool: Pool to assume when ``x-ratelimit-resource`` is absent

        Returns:
            PoolRateLimit, or None when the response carried no rate limit headers
        """
        if "x-ratelimit-remaining" not in headers:
            return None

        resource = headers.get("x-ratelimit-resource", default_pool.value)
        try:
            pool = RateLimitPool(resource)
        except ValueError:
            pool = default_pool

        reset_ts = int(headers.get("x-ratelimit-reset", "0"))
        return cls(
            pool=pool,
            limit=int(headers.get("x-ratelimit-limit", "0")),
            remaining=int(headers.get("x-ratelimit-remaining", "0")),
            used=int(headers.get("x-ratelimit-used", "0")),
            reset_at=datetime.fromtimestamp(reset_ts, tz=UTC) if reset_ts else datetime.now(UTC),
        )


class RateLimitMonitor:
    """Tracks the most recent quota per pool from response headers.

    Usage:
        monitor = RateLimitMonitor()
        monitor.update_from_headers(dict(response.headers))
        if monitor.get_status(RateLimitPool.SEARCH) is RateLimitStatus.EXHAUSTED:
            ...
    """

    def __init__(self, config: RateLimitConfig | None = None) -> None:
        self._config = config or get_settings().rate_limit
        self._pools: dict[RateLimitPool, PoolRateLimit] = {}
        self._previous_status: dict[RateLimitPool, RateLimitStatus] = {}

    def update_from_headers(
        self,
        headers: dict[str, str],
        pool: RateLimitPool = RateLimitPool.CORE,
    ) -> None:
        """Record the quota carried by a response.

        Logs a warning when a pool degrades to a worse status.
        """
        if not self._config.track_from_headers:
            return

        limit = PoolRateLimit.from_headers(headers, pool)
        if limit is None:
            return
        self._pools[limit.pool] = limit

        status = self._status_for(limit)
        previous = self._previous_status.get(limit.pool, RateLimitStatus.HEALTHY)
        if status != previous and _SEVERITY[status] > _SEVERITY[previous]:
            logger.warning(
                "Rate limit pool {} is {} ({}/{} remaining, resets in {}s)",
                limit.pool.value,
                status.value,
                limit.remaining,
                limit.limit,
                limit.seconds_until_reset,
            )
        self._previous_status[limit.pool] = status

    def get_pool_limit(self, pool: RateLimitPool = RateLimitPool.CORE) -> PoolRateLimit | None:
        """Latest quota for ``pool``, or None if never observed."""
        return self._pools.get(pool)

    def get_status(self, pool: RateLimitPool = RateLimitPool.CORE) -> RateLimitStatus:
        """Health status for a pool (HEALTHY if unknown)."""
        limit = self.get_pool_limit(pool)
        if limit is None:
            return RateLimitStatus.HEALTHY
        return self._status_for(limit)

    def _status_for(self, limit: PoolRateLimit) -> RateLimitStatus:
        return limit.get_status(
            self._config.healthy_threshold_pct,
            self._config.warning_threshold_pct,
            self._config.critical_threshold_pct,
        )


_SEVERITY = {
    RateLimitStatus.HEALTHY: 0,
    RateLimitStatus.WARNING: 1,
    RateLimitStatus.CRITICAL: 2,
    RateLimitStatus.EXHAUSTED: 3,
}
