"""Test fixtures for Review Activity DB."""

from .github_responses import (
    GITHUB_ISSUE_COMMENTS_RESPONSE,
    GITHUB_REVIEW_COMMENTS_RESPONSE,
    GITHUB_SEARCH_RESPONSE,
    GITHUB_USER_PROFILE_RESPONSE,
    RATE_LIMIT_HEADERS_HEALTHY,
    RATE_LIMIT_HEADERS_LOW,
    RATE_LIMIT_HEADERS_SEARCH_EXHAUSTED,
)

__all__ = [
    # Mock GitHub API responses
    "GITHUB_ISSUE_COMMENTS_RESPONSE",
    "GITHUB_REVIEW_COMMENTS_RESPONSE",
    "GITHUB_SEARCH_RESPONSE",
    "GITHUB_USER_PROFILE_RESPONSE",
    # Rate limit headers
    "RATE_LIMIT_HEADERS_HEALTHY",
    "RATE_LIMIT_HEADERS_LOW",
    "RATE_LIMIT_HEADERS_SEARCH_EXHAUSTED",
]
