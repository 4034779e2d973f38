"""GitHub client exceptions."""

from datetime import datetime


class GitHubClientError(Exception):
    """Base exception for GitHub client errors."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class GitHubAuthenticationError(GitHubClientError):
    """Raised when authentication fails (401) or no token is configured."""

    pass


class GitHubRetryableError(GitHubClientError):
    """Base class for errors a later sync run can expect to succeed."""

    pass


class GitHubRateLimitError(GitHubRetryableError):
    """Raised when a rate limit pool is exhausted (403/429)."""

    def __init__(self, message: str, reset_at: datetime | None = None) -> None:
        super().__init__(message, status_code=403)
        self.reset_at = reset_at


class GitHubNotFoundError(GitHubClientError):
    """Raised when a resource is not found (404)."""

    pass
