"""Helpers for deriving repository coordinates from PR URLs."""

from urllib.parse import urlsplit

from review_activity_db.exceptions import RepositoryURLError


def parse_repo_url(url: str, host: str) -> tuple[str, str]:
    """Extract ``(owner, repo)`` from a PR web URL on ``host``.

    Accepts both web URLs (``https://host/owner/repo/pull/1``) and API
    URLs (``https://api.host/repos/owner/repo/...``) for the same host.

    Args:
        url: Pull request URL
        host: Expected host, e.g. ``github.com`` or a GitHub Enterprise host

    Returns:
        Tuple of (owner, repo)

    Raises:
        RepositoryURLError: If the URL is on another host or has no owner/repo
    """
    parts = urlsplit(url or "")
    netloc = (parts.hostname or "").lower()
    host = host.lower()
    if netloc not in (host, f"api.{host}"):
        raise RepositoryURLError(url, host)

    segments = [s for s in parts.path.split("/") if s]
    # GitHub Enterprise serves the API under /api/v3
    if segments[:2] == ["api", "v3"]:
        segments = segments[2:]
    if segments and segments[0] == "repos":
        segments = segments[1:]
    if len(segments) < 2:
        raise RepositoryURLError(url, host)
    return segments[0], segments[1]


def repo_full_name(url: str) -> str:
    """Return ``owner/repo`` for grouping, without host validation.

    Falls back to the last two path segments when the URL is not a PR URL.
    """
    segments = [s for s in urlsplit(url or "").path.split("/") if s]
    if "pull" in segments:
        segments = segments[: segments.index("pull")]
    return "/".join(segments[-2:])
