"""PR reconciliation - search, merge, upsert, then advance the watermark.

Each run fetches two sets from the search API:

1. PRs the user created on or after the last sync date (or the default
   lookback on first sync)
2. Every PR the user still has open, whatever its age

The second set re-includes long-lived open PRs whose state, labels or
comment counts changed after they fell out of the date window.
"""

from __future__ import annotations

from datetime import date

from review_activity_db.config import get_settings
from review_activity_db.db.models import TrackedUser
from review_activity_db.db.repositories import PullRequestRepository, TrackedUserRepository
from review_activity_db.exceptions import MissingGitHubIdError
from review_activity_db.github.client import GitHubClient
from review_activity_db.logging import bind_user
from review_activity_db.schemas.github_api import GitHubSearchItem
from review_activity_db.schemas.pr import PRRef

from .results import ReconciliationResult


def merge_search_results(
    primary: list[GitHubSearchItem],
    secondary: list[GitHubSearchItem],
) -> list[GitHubSearchItem]:
    """Union of two result sets, de-duplicated by remote id.

    Order follows ``primary`` then ``secondary``; when an id appears more
    than once the first occurrence wins.
    """
    merged: dict[int, GitHubSearchItem] = {}
    for item in [*primary, *secondary]:
        merged.setdefault(item.id, item)
    return list(merged.values())


class PRReconciliationService:
    """Brings a user's stored PRs in line with GitHub.

    Usage:
        async with GitHubClient() as client, get_session() as session:
            service = PRReconciliationService(
                client=client,
                user_repository=TrackedUserRepository(session),
                pr_repository=PullRequestRepository(session),
            )
            result = await service.reconcile(user)

    Ordering guarantee: ``last_pr_sync`` is written only after the PR
    upsert has been committed. A failed fetch or upsert leaves the
    watermark untouched, so the next run covers the same window again.
    """

    def __init__(
        self,
        client: GitHubClient,
        user_repository: TrackedUserRepository,
        pr_repository: PullRequestRepository,
        default_since: date | None = None,
    ) -> None:
        self._client = client
        self._user_repository = user_repository
        self._pr_repository = pr_repository
        self._default_since = default_since or get_settings().sync.default_since

    def since_date(self, user: TrackedUser) -> date:
        """Lower bound for the created-since search, at day granularity."""
        if user.last_pr_sync is not None:
            return user.last_pr_sync.date()
        return self._default_since

    async def reconcile(self, user: TrackedUser) -> ReconciliationResult:
        """Fetch, merge and persist a user's PRs.

        Args:
            user: Tracked user with a resolved ``github_id``

        Returns:
            ReconciliationResult whose ``prs`` is exactly the upserted batch

        Raises:
            MissingGitHubIdError: If the user has no remote id
            GitHubClientError: If any search page fails (nothing is written)
            SQLAlchemyError: If persisting fails (watermark not advanced)
        """
        if user.github_id is None:
            raise MissingGitHubIdError(user.github_username)

        log = bind_user(user.github_username)
        since = self.since_date(user)

        log.info("Searching PRs created since {}", since.isoformat())
        created_since = await self._client.search_pull_requests(user.github_username, since)
        still_open = await self._client.search_open_pull_requests(user.github_username)

        items = merge_search_results(created_since, still_open)
        log.info(
            "Found {} PRs ({} created since {}, {} open)",
            len(items),
            len(created_since),
            since.isoformat(),
            len(still_open),
        )

        session = self._pr_repository.session
        records = [item.to_pr_upsert(user.github_id) for item in items]
        try:
            rows = await self._pr_repository.upsert_many(records)
            prs = [PRRef.from_orm(row) for row in rows]
            await session.commit()
        except Exception:
            await session.rollback()
            raise

        synced_at = await self._user_repository.mark_pr_synced(user)
        await session.commit()
        log.info("Upserted {} PRs; last_pr_sync={}", len(prs), synced_at.isoformat())

        return ReconciliationResult(
            username=user.github_username,
            since=since,
            prs=prs,
            searched_count=len(created_since),
            open_count=len(still_open),
            synced_at=synced_at,
        )
