"""Repository for Team and TeamMembership models."""

import asyncio
from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from review_activity_db.db.models import Team, TeamMembership, TrackedUser

from .base import BaseRepository


class TeamRepository(BaseRepository[Team]):
    """Repository for teams and their memberships."""

    def __init__(
        self,
        session: AsyncSession,
        write_lock: asyncio.Lock | None = None,
    ) -> None:
        super().__init__(session, Team, write_lock)

    async def get_by_name(self, name: str) -> Team | None:
        """Get a team by its unique name."""
        return await self._get_by_field("name", name)

    async def get_members(self, team_id: int) -> list[TrackedUser]:
        """Members of a team in assignment order."""
        stmt = (
            select(TrackedUser)
            .join(TeamMembership, TeamMembership.user_id == TrackedUser.id)
            .where(TeamMembership.team_id == team_id)
            .order_by(TeamMembership.assigned_at, TeamMembership.id)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def get_member_github_ids(self, team_id: int) -> set[int]:
        """Remote ids of a team's members."""
        return {m.github_id for m in await self.get_members(team_id) if m.github_id is not None}

    async def create(self, name: str, description: str | None = None) -> Team:
        """Create a team (flushed, has ID)."""
        team = self.add(Team(name=name, description=description))
        await self.flush()
        return team

    async def add_member(
        self,
        team: Team,
        user: TrackedUser,
        assigned_by: str | None = None,
    ) -> tuple[TeamMembership, bool]:
        """Assign a user to a team.

        Returns:
            Tuple of (membership, created); existing memberships are returned as-is
        """
        stmt = select(TeamMembership).where(
            TeamMembership.team_id == team.id,
            TeamMembership.user_id == user.id,
        )
        existing = (await self._session.execute(stmt)).scalar_one_or_none()
        if existing is not None:
            return existing, False

        membership = TeamMembership(team_id=team.id, user_id=user.id, assigned_by=assigned_by)
        self._session.add(membership)
        await self.flush()
        return membership, True

    async def mark_synced(self, team: Team, at: datetime | None = None) -> datetime:
        """Advance ``teams.last_sync``."""
        stamp = at or datetime.now(UTC)
        team.last_sync = stamp
        await self.flush()
        return stamp
