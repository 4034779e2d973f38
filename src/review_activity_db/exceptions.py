"""Domain exceptions for Review Activity DB.

GitHub API failures live in :mod:`review_activity_db.github.exceptions`;
this module covers lookups, validation and payload parsing.
"""


class ReviewActivityError(Exception):
    """Base exception for domain errors."""


class NotFoundError(ReviewActivityError):
    """Referenced entity does not exist locally."""

    entity = "Entity"

    def __init__(self, key: object) -> None:
        self.key = key
        super().__init__(f"{self.entity} not found: {key}")


class UserNotFoundError(NotFoundError):
    entity = "User"


class TeamNotFoundError(NotFoundError):
    entity = "Team"


class PullRequestNotFoundError(NotFoundError):
    entity = "Pull request"


class MissingGitHubIdError(ReviewActivityError):
    """Tracked user has no resolved GitHub account id."""

    def __init__(self, username: str) -> None:
        self.username = username
        super().__init__(f"User {username} has no GitHub id; re-register with `users add`")


class RepositoryURLError(ReviewActivityError, ValueError):
    """PR web URL does not belong to the configured host or is malformed."""

    def __init__(self, url: str, host: str) -> None:
        self.url = url
        self.host = host
        super().__init__(f"Cannot derive owner/repo from {url!r} for host {host}")


class ScoringOracleError(ReviewActivityError):
    """Scoring service could not produce a response."""


def error_payload(
    message: str,
    error: BaseException,
    environment: str = "development",
) -> dict[str, object]:
    """Failure body for callers.

    The raw error text is only included outside production.
    """
    payload: dict[str, object] = {"success": False, "message": message}
    if environment != "production":
        payload["error"] = str(error)
        payload["error_type"] = type(error).__name__
    return payload
