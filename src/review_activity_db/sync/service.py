"""Sync entry points used by the CLI.

Wires the client, repositories, reconciliation, comment worker and team
orchestrator around one session.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from review_activity_db.db.repositories import (
    PullRequestRepository,
    TeamRepository,
    TrackedUserRepository,
)
from review_activity_db.exceptions import TeamNotFoundError, UserNotFoundError
from review_activity_db.logging import bind_user
from review_activity_db.schemas.user import UserSyncStatus

from .orchestrator import TeamSyncOrchestrator
from .reconciliation import PRReconciliationService
from .results import TeamSyncResult, UserSyncResult
from .worker import CommentJob, CommentWorkerManager

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from review_activity_db.github.client import GitHubClient


class SyncService:
    """User and team sync operations.

    Usage:
        async with GitHubClient() as client, get_session() as session:
            workers = CommentWorkerManager()
            service = SyncService(session, client, workers)
            result = await service.sync_user("octocat")
            await workers.wait_all()
    """

    def __init__(
        self,
        session: AsyncSession,
        client: GitHubClient | None = None,
        workers: CommentWorkerManager | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            session: Async SQLAlchemy session
            client: GitHub client; only the sync operations need one
            workers: Comment worker manager; only the sync operations need one
        """
        self._session = session
        self._client = client
        self._workers = workers
        self._users = TrackedUserRepository(session)
        self._teams = TeamRepository(session)

    def _sync_parts(self) -> tuple[PRReconciliationService, CommentWorkerManager]:
        if self._client is None or self._workers is None:
            raise RuntimeError("Syncing requires a GitHub client and a comment worker manager")
        reconciler = PRReconciliationService(
            client=self._client,
            user_repository=self._users,
            pr_repository=PullRequestRepository(self._session),
        )
        return reconciler, self._workers

    async def sync_user(self, username: str) -> UserSyncResult:
        """Reconcile one user's PRs and start comment ingestion in the background.

        Returns as soon as PRs are stored; ``comments_processing`` is True
        because the comment phase is still running.

        Raises:
            UserNotFoundError: If the user is not tracked
            MissingGitHubIdError: If the user has no remote id
            GitHubClientError: If the search failed (nothing written)
        """
        reconciler, workers = self._sync_parts()
        user = await self._users.get_by_username(username)
        if user is None:
            raise UserNotFoundError(username)

        reconciliation = await reconciler.reconcile(user)
        workers.spawn(CommentJob(user.id, user.github_username, reconciliation.prs))
        bind_user(user.github_username).info(
            "Synced {} PRs; comment ingestion started", reconciliation.prs_synced
        )
        return UserSyncResult(username=user.github_username, reconciliation=reconciliation)

    async def sync_team(self, team_id: int) -> TeamSyncResult:
        """Sync every member of a team (see :class:`TeamSyncOrchestrator`)."""
        reconciler, workers = self._sync_parts()
        orchestrator = TeamSyncOrchestrator(
            team_repository=self._teams,
            user_repository=self._users,
            reconciler=reconciler,
            workers=workers,
        )
        return await orchestrator.sync_team(team_id)

    async def sync_status(self, username: str) -> UserSyncStatus:
        """Derived sync status for one user.

        Raises:
            UserNotFoundError: If the user is not tracked
        """
        user = await self._users.get_by_username(username)
        if user is None:
            raise UserNotFoundError(username)
        return UserSyncStatus.from_user(user)

    async def team_status(self, team_id: int) -> list[UserSyncStatus]:
        """Sync status of every member of a team, in membership order.

        Raises:
            TeamNotFoundError: If the team does not exist
        """
        team = await self._teams.get_by_id(team_id)
        if team is None:
            raise TeamNotFoundError(team_id)
        return [UserSyncStatus.from_user(m) for m in await self._teams.get_members(team_id)]
