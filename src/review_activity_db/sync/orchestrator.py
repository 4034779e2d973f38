"""Team sync - run the per-user pipeline for every member of a team.

Members are processed one after another. A failure for one member
(missing GitHub id, API error, database error) is recorded in that
member's result and the loop moves on. The team's ``last_sync`` is
advanced once the loop finishes, whatever the member outcomes.
"""

from __future__ import annotations

from review_activity_db.db.repositories import TeamRepository, TrackedUserRepository
from review_activity_db.exceptions import TeamNotFoundError, UserNotFoundError
from review_activity_db.logging import bind_team

from .reconciliation import PRReconciliationService
from .results import MemberSyncResult, TeamSyncResult
from .worker import CommentJob, CommentWorkerManager


class TeamSyncOrchestrator:
    """Syncs every member of a team with per-member failure isolation.

    Usage:
        orchestrator = TeamSyncOrchestrator(
            team_repository=TeamRepository(session),
            user_repository=TrackedUserRepository(session),
            reconciler=PRReconciliationService(client, users, prs),
            workers=CommentWorkerManager(settings.database_url),
        )
        result = await orchestrator.sync_team(team_id)
        print(result.succeeded, result.failed)
    """

    def __init__(
        self,
        team_repository: TeamRepository,
        user_repository: TrackedUserRepository,
        reconciler: PRReconciliationService,
        workers: CommentWorkerManager,
    ) -> None:
        self._team_repository = team_repository
        self._user_repository = user_repository
        self._reconciler = reconciler
        self._workers = workers

    async def sync_team(self, team_id: int) -> TeamSyncResult:
        """Reconcile each member's PRs and hand off their comments.

        Args:
            team_id: Local team id

        Returns:
            TeamSyncResult with one entry per member, in membership order

        Raises:
            TeamNotFoundError: If the team does not exist (nothing is written)
        """
        team = await self._team_repository.get_by_id(team_id)
        if team is None:
            raise TeamNotFoundError(team_id)

        # Plain values only: a rollback after a failed member expires ORM state
        members = [
            (m.id, m.github_username) for m in await self._team_repository.get_members(team_id)
        ]
        result = TeamSyncResult(team_id=team.id, team_name=team.name)
        session = self._team_repository.session

        log = bind_team(result.team_name)
        log.info("Syncing team ({} members)", len(members))
        for member_id, username in members:
            try:
                member = await self._user_repository.get_by_id(member_id)
                if member is None:
                    raise UserNotFoundError(username)
                reconciliation = await self._reconciler.reconcile(member)
                self._workers.spawn(CommentJob(member_id, username, reconciliation.prs))
            except Exception as e:
                log.opt(exception=e).warning("Sync failed for {}: {}", username, e)
                await session.rollback()
                result.members.append(MemberSyncResult.from_error(username, e))
                continue

            result.members.append(
                MemberSyncResult(
                    github_name=username,
                    success=True,
                    prs_synced=reconciliation.prs_synced,
                )
            )

        team = await self._team_repository.get_by_id(team_id)
        if team is None:
            raise TeamNotFoundError(team_id)
        result.last_sync = await self._team_repository.mark_synced(team)
        await session.commit()

        log.info(
            "Team synced: {} succeeded, {} failed, {} PRs",
            result.succeeded,
            result.failed,
            result.total_prs_synced,
        )
        return result
