"""GitHub API client module."""

from .client import GitHubClient
from .exceptions import (
    GitHubAuthenticationError,
    GitHubClientError,
    GitHubNotFoundError,
    GitHubRateLimitError,
    GitHubRetryableError,
)
from .pacer import RequestPacer
from .rate_limit import PoolRateLimit, RateLimitMonitor, RateLimitPool, RateLimitStatus

__all__ = [
    "GitHubAuthenticationError",
    "GitHubClient",
    "GitHubClientError",
    "GitHubNotFoundError",
    "GitHubRateLimitError",
    "GitHubRetryableError",
    "PoolRateLimit",
    "RateLimitMonitor",
    "RateLimitPool",
    "RateLimitStatus",
    "RequestPacer",
]
