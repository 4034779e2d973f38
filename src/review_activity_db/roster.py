"""Registration of tracked users and team membership."""

from __future__ import annotations

from typing import TYPE_CHECKING

from review_activity_db.db.models import Team, TrackedUser
from review_activity_db.db.repositories import TeamRepository, TrackedUserRepository
from review_activity_db.exceptions import TeamNotFoundError, UserNotFoundError
from review_activity_db.logging import get_logger

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from review_activity_db.github.client import GitHubClient

logger = get_logger(__name__)


class RosterService:
    """Adds users and teams; the sync engine only reads what this writes."""

    def __init__(self, session: AsyncSession, client: GitHubClient | None = None) -> None:
        self._session = session
        self._client = client
        self._users = TrackedUserRepository(session)
        self._teams = TeamRepository(session)

    async def register_user(self, username: str) -> tuple[TrackedUser, bool]:
        """Track a GitHub account, resolving its id through the API.

        Raises:
            GitHubNotFoundError: If the account does not exist
        """
        if self._client is None:
            raise RuntimeError("A GitHub client is required to register users")

        profile = await self._client.get_user(username)
        user, created = await self._users.create_or_update(
            profile.login or username,
            github_id=profile.id,
            display_name=profile.name,
            avatar_url=profile.avatar_url,
        )
        await self._session.commit()
        logger.info(
            "{} user {} (github_id={})",
            "Registered" if created else "Refreshed",
            user.github_username,
            user.github_id,
        )
        return user, created

    async def create_team(
        self,
        name: str,
        description: str | None = None,
        members: list[str] | None = None,
        assigned_by: str | None = None,
    ) -> Team:
        """Create a team, optionally with initial members (already tracked)."""
        team = await self._teams.create(name, description)
        if members:
            await self._add_members(team, members, assigned_by)
        await self._session.commit()
        logger.info("Created team {} (id={})", team.name, team.id)
        return team

    async def add_members(
        self,
        team_id: int,
        usernames: list[str],
        assigned_by: str | None = None,
    ) -> int:
        """Add tracked users to a team.

        Returns:
            Number of new memberships

        Raises:
            TeamNotFoundError: If the team does not exist
            UserNotFoundError: If any user is not tracked (nothing is added)
        """
        team = await self._teams.get_by_id(team_id)
        if team is None:
            raise TeamNotFoundError(team_id)
        added = await self._add_members(team, usernames, assigned_by)
        await self._session.commit()
        return added

    async def _add_members(self, team: Team, usernames: list[str], assigned_by: str | None) -> int:
        users: list[TrackedUser] = []
        for username in usernames:
            user = await self._users.get_by_username(username)
            if user is None:
                raise UserNotFoundError(username)
            users.append(user)

        added = 0
        for user in users:
            _membership, created = await self._teams.add_member(team, user, assigned_by)
            added += int(created)
        return added

    async def list_users(self) -> list[TrackedUser]:
        return await self._users.get_all()

    async def list_teams(self) -> list[Team]:
        return await self._teams.get_all()
