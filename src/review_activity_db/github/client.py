"""Async GitHub API client wrapper using githubkit.

This module provides a typed async interface to the GitHub REST API
for PR search and comment retrieval with integrated rate limit monitoring.
Works against github.com and GitHub Enterprise (set ``github_api_url``).
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from datetime import UTC, date, datetime
from typing import TYPE_CHECKING, Any, TypeVar

import httpx
from githubkit import GitHub
from githubkit.exception import RequestError, RequestFailed
from pydantic import BaseModel, ValidationError

from review_activity_db.config import get_settings
from review_activity_db.logging import get_logger
from review_activity_db.schemas.github_api import (
    GitHubComment,
    GitHubSearchItem,
    GitHubUserProfile,
)

from .exceptions import (
    GitHubAuthenticationError,
    GitHubClientError,
    GitHubNotFoundError,
    GitHubRateLimitError,
)
from .rate_limit import RateLimitPool

if TYPE_CHECKING:
    from .pacer import RequestPacer
    from .rate_limit import RateLimitMonitor

logger = get_logger(__name__)

ItemT = TypeVar("ItemT", bound=BaseModel)
PageFetcher = Callable[[int], Awaitable[Any]]


class GitHubClient:
    """Async GitHub API client for PR and comment retrieval.

    Usage:
        async with GitHubClient() as client:
            prs = await client.search_pull_requests("octocat", date(2025, 1, 1))
            comments = await client.list_issue_comments("octo", "repo", 42)

    All list methods page through results with ``page_size`` items per
    request and stop at the first page shorter than that. Any failed page
    fails the whole call; no retries happen here.
    """

    def __init__(
        self,
        token: str | None = None,
        *,
        base_url: str | None = None,
        page_size: int | None = None,
        rate_monitor: RateLimitMonitor | None = None,
        pacer: RequestPacer | None = None,
    ) -> None:
        """Initialize the GitHub client.

        Args:
            token: GitHub PAT. If not provided, uses GITHUB_TOKEN from settings.
            base_url: REST API root. Defaults to ``github_api_url`` from settings.
            page_size: Items per page (max 100). Defaults to ``sync.page_size``.
            rate_monitor: Optional RateLimitMonitor updated from response headers.
            pacer: Optional RequestPacer consulted before every request.

        Raises:
            GitHubAuthenticationError: If no token is available.
        """
        settings = get_settings()
        self._token = token or settings.github_token
        if not self._token:
            raise GitHubAuthenticationError(
                "GitHub token required. Set GITHUB_TOKEN environment variable."
            )
        self._base_url = (base_url or settings.github_api_url).rstrip("/")
        self._page_size = min(page_size or settings.sync.page_size, 100)
        self._client: GitHub[Any] | None = None
        self._rate_monitor = rate_monitor
        self._pacer = pacer

    @property
    def _github(self) -> GitHub[Any]:
        """Get or create the githubkit client instance."""
        if self._client is None:
            # Retries are the caller's decision
            self._client = GitHub(self._token, base_url=self._base_url, auto_retry=False)
        return self._client

    @property
    def page_size(self) -> int:
        return self._page_size

    @property
    def rate_monitor(self) -> RateLimitMonitor | None:
        """Access the rate limit monitor (if configured)."""
        return self._rate_monitor

    async def close(self) -> None:
        """Drop the underlying githubkit client."""
        self._client = None

    async def __aenter__(self) -> GitHubClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        await self.close()

    # -------------------------------------------------------------------------
    # Rate Limit Hooks
    # -------------------------------------------------------------------------
    async def _apply_pacing(self, pool: RateLimitPool) -> None:
        if self._pacer is None:
            return

        delay = self._pacer.get_recommended_delay(pool)
        if delay > 0:
            logger.debug("Pacing: waiting {:.2f}s before {} request", delay, pool.value)
            await asyncio.sleep(delay)
        self._pacer.on_request_start()

    def _update_rate_limit_from_response(self, response: Any, pool: RateLimitPool) -> None:
        if self._rate_monitor is None and self._pacer is None:
            return

        headers = getattr(response, "headers", None)
        if headers is None:
            return
        header_dict = {k.lower(): v for k, v in headers.items()}

        if self._pacer is not None:
            self._pacer.on_request_complete(header_dict, pool)
        elif self._rate_monitor is not None:
            self._rate_monitor.update_from_headers(header_dict, pool)

    # -------------------------------------------------------------------------
    # Pagination
    # -------------------------------------------------------------------------
    async def _paginate(
        self,
        fetch_page: PageFetcher,
        model: type[ItemT],
        *,
        pool: RateLimitPool,
        description: str,
        items_key: str | None = None,
    ) -> list[ItemT]:
        """Collect every page from ``fetch_page``.

        Args:
            fetch_page: Coroutine factory taking a 1-based page number
            model: Lenient schema each raw item is validated into
            pool: Rate limit pool the endpoint draws from
            description: Human-readable target for errors and logs
            items_key: Key holding the item list (search responses), or None
                when the body is the list itself

        Returns:
            Items from all pages in API order

        Raises:
            GitHubClientError: On the first failed page
        """
        results: list[ItemT] = []
        page = 1
        while True:
            await self._apply_pacing(pool)
            try:
                resp = await fetch_page(page)
            except RequestFailed as e:
                raise self._handle_error(e, description, pool) from e
            except (RequestError, httpx.HTTPError) as e:
                raise GitHubClientError(f"Request for {description} failed: {e}") from e
            self._update_rate_limit_from_response(resp, pool)

            raw_items = self._page_items(resp, items_key, description)

            for raw in raw_items:
                try:
                    results.append(model.model_validate(raw))
                except ValidationError as e:
                    logger.warning("Skipping malformed item in {}: {}", description, e)

            if len(raw_items) < self._page_size:
                break
            page += 1

        logger.debug("Fetched {} items for {} over {} page(s)", len(results), description, page)
        return results

    @staticmethod
    def _page_items(resp: Any, items_key: str | None, description: str) -> list[Any]:
        """Raw items of one page; a body of the wrong shape is an upstream error."""
        try:
            body = resp.json()
            if items_key and body:
                body = body.get(items_key)
            body = body or []
            if not isinstance(body, list):
                raise TypeError(f"expected a list of items, got {type(body).__name__}")
        except (ValueError, AttributeError, TypeError) as e:
            raise GitHubClientError(f"Malformed response for {description}: {e}") from e
        return body

    # -------------------------------------------------------------------------
    # Search
    # -------------------------------------------------------------------------
    async def search_pull_requests(self, author: str, since: date) -> list[GitHubSearchItem]:
        """PRs by ``author`` created on or after ``since``.

        Args:
            author: GitHub handle
            since: Inclusive lower bound, day granularity

        Returns:
            Search items for every matching PR
        """
        query = f"author:{author} is:pr created:>={since.isoformat()}"
        return await self._search(query)

    async def search_open_pull_requests(self, author: str) -> list[GitHubSearchItem]:
        """Every currently open PR by ``author`` regardless of age."""
        return await self._search(f"author:{author} is:pr is:open")

    async def _search(self, query: str) -> list[GitHubSearchItem]:
        async def fetch(page: int) -> Any:
            return await self._github.rest.search.async_issues_and_pull_requests(
                q=query,
                per_page=self._page_size,
                page=page,
            )

        return await self._paginate(
            fetch,
            GitHubSearchItem,
            pool=RateLimitPool.SEARCH,
            description=f"search '{query}'",
            items_key="items",
        )

    # -------------------------------------------------------------------------
    # Comments
    # -------------------------------------------------------------------------
    async def list_issue_comments(
        self,
        owner: str,
        repo: str,
        number: int,
    ) -> list[GitHubComment]:
        """Conversation comments on a PR."""

        async def fetch(page: int) -> Any:
            return await self._github.rest.issues.async_list_comments(
                owner=owner,
                repo=repo,
                issue_number=number,
                per_page=self._page_size,
                page=page,
            )

        return await self._paginate(
            fetch,
            GitHubComment,
            pool=RateLimitPool.CORE,
            description=f"issue comments of {owner}/{repo}#{number}",
        )

    async def list_review_comments(
        self,
        owner: str,
        repo: str,
        number: int,
    ) -> list[GitHubComment]:
        """Inline review comments on a PR's diff."""

        async def fetch(page: int) -> Any:
            return await self._github.rest.pulls.async_list_review_comments(
                owner=owner,
                repo=repo,
                pull_number=number,
                per_page=self._page_size,
                page=page,
            )

        return await self._paginate(
            fetch,
            GitHubComment,
            pool=RateLimitPool.CORE,
            description=f"review comments of {owner}/{repo}#{number}",
        )

    # -------------------------------------------------------------------------
    # Users
    # -------------------------------------------------------------------------
    async def get_user(self, username: str) -> GitHubUserProfile:
        """Resolve a handle to its account profile.

        Raises:
            GitHubNotFoundError: If the account does not exist
        """
        description = f"user {username}"
        await self._apply_pacing(RateLimitPool.CORE)
        try:
            resp = await self._github.rest.users.async_get_by_username(username=username)
        except RequestFailed as e:
            raise self._handle_error(e, description, RateLimitPool.CORE) from e
        except (RequestError, httpx.HTTPError) as e:
            raise GitHubClientError(f"Request for {description} failed: {e}") from e
        self._update_rate_limit_from_response(resp, RateLimitPool.CORE)
        try:
            return GitHubUserProfile.model_validate(resp.json())
        except (ValueError, TypeError) as e:
            raise GitHubClientError(f"Malformed response for {description}: {e}") from e

    # -------------------------------------------------------------------------
    # Error Handling
    # -------------------------------------------------------------------------
    def _handle_error(
        self,
        error: RequestFailed,
        description: str,
        pool: RateLimitPool,
    ) -> GitHubClientError:
        """Convert githubkit exceptions to our custom exceptions."""
        # Error responses still report quota
        self._update_rate_limit_from_response(error.response, pool)

        status = error.response.status_code

        if status == 401:
            return GitHubAuthenticationError("Invalid GitHub token", status_code=401)
        if status in (403, 429):
            headers = error.response.headers
            remaining = headers.get("x-ratelimit-remaining")
            if status == 429 or remaining == "0":
                reset_ts = int(headers.get("x-ratelimit-reset", "0") or 0)
                reset_at = datetime.fromtimestamp(reset_ts, tz=UTC) if reset_ts else None
                if self._pacer is not None and reset_at is not None:
                    self._pacer.force_wait_until(reset_at)
                return GitHubRateLimitError(
                    f"GitHub rate limit exceeded ({pool.value}) for {description}",
                    reset_at=reset_at,
                )
            return GitHubClientError(f"Access forbidden for {description}", status_code=403)
        if status == 404:
            return GitHubNotFoundError(f"{description} not found", status_code=404)
        return GitHubClientError(
            f"GitHub API error ({status}) for {description}: {error}",
            status_code=status,
        )
