"""Request pacing driven by observed rate limit state.

While a pool is healthy requests go out immediately. Once it degrades,
the remaining quota (minus a reserve) is spread over the time left in
the window, with a multiplier that grows as the pool gets worse:

    delay = seconds_until_reset / max(1, remaining - reserve) * multiplier
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from review_activity_db.config import PacingConfig, get_settings
from review_activity_db.logging import get_logger

from .rate_limit import PoolRateLimit, RateLimitPool, RateLimitStatus

if TYPE_CHECKING:
    from .rate_limit import RateLimitMonitor

logger = get_logger(__name__)

_THROTTLE_MULTIPLIERS = {
    RateLimitStatus.HEALTHY: 1.0,
    RateLimitStatus.WARNING: 1.5,
    RateLimitStatus.CRITICAL: 2.0,
    RateLimitStatus.EXHAUSTED: 4.0,
}


class RequestPacer:
    """Recommends a delay before each request.

    Usage:
        pacer = RequestPacer(monitor)
        delay = pacer.get_recommended_delay(RateLimitPool.SEARCH)
        if delay > 0:
            await asyncio.sleep(delay)
        pacer.on_request_start()
        ...
        pacer.on_request_complete(headers, RateLimitPool.SEARCH)
    """

    def __init__(
        self,
        monitor: RateLimitMonitor,
        config: PacingConfig | None = None,
    ) -> None:
        self._monitor = monitor
        self._config = config or get_settings().pacing
        self._last_request_at: datetime | None = None
        self._wait_until: datetime | None = None

    @property
    def monitor(self) -> RateLimitMonitor:
        return self._monitor

    def get_recommended_delay(self, pool: RateLimitPool = RateLimitPool.CORE) -> float:
        """Seconds to wait before the next request on ``pool`` (0 = go now)."""
        min_delay = self._config.min_request_interval_ms / 1000
        if not self._config.enabled:
            return min_delay

        if self._wait_until is not None:
            wait = (self._wait_until - datetime.now(UTC)).total_seconds()
            if wait > 0:
                return wait
            self._wait_until = None

        pool_limit = self._monitor.get_pool_limit(pool)
        if pool_limit is None or self._monitor.get_status(pool) is RateLimitStatus.HEALTHY:
            return min_delay
        return self._spread_delay(pool_limit)

    def _spread_delay(self, pool_limit: PoolRateLimit) -> float:
        min_delay = self._config.min_request_interval_ms / 1000
        max_delay = self._config.max_request_interval_ms / 1000

        seconds_until_reset = pool_limit.seconds_until_reset
        if seconds_until_reset <= 0:
            return min_delay

        reserve = int(pool_limit.limit * (self._config.reserve_buffer_pct / 100))
        effective_remaining = max(1, pool_limit.remaining - reserve)
        multiplier = _THROTTLE_MULTIPLIERS[self._monitor.get_status(pool_limit.pool)]
        delay = seconds_until_reset / effective_remaining * multiplier

        return max(min_delay, min(delay, max_delay))

    def on_request_start(self) -> None:
        """Record that a request is about to be sent."""
        self._last_request_at = datetime.now(UTC)

    def on_request_complete(
        self,
        headers: dict[str, str] | None = None,
        pool: RateLimitPool = RateLimitPool.CORE,
    ) -> None:
        """Feed response headers back into the monitor."""
        if headers:
            self._monitor.update_from_headers(headers, pool)

    def force_wait_until(self, reset_at: datetime) -> None:
        """Hold every request until ``reset_at`` (after a rate limit error)."""
        self._wait_until = reset_at
        wait_seconds = max(0.0, (reset_at - datetime.now(UTC)).total_seconds())
        logger.info("Pausing requests until {} ({:.1f}s)", reset_at.isoformat(), wait_seconds)

    @property
    def last_request_at(self) -> datetime | None:
        return self._last_request_at
