"""Repository for TrackedUser model operations.

Owns the two sync watermarks; nothing else in the codebase writes them.
"""

import asyncio
from datetime import UTC, datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from review_activity_db.db.models import TrackedUser

from .base import BaseRepository


class TrackedUserRepository(BaseRepository[TrackedUser]):
    """Repository for tracked users and their sync state."""

    def __init__(
        self,
        session: AsyncSession,
        write_lock: asyncio.Lock | None = None,
    ) -> None:
        super().__init__(session, TrackedUser, write_lock)

    # -------------------------------------------------------------------------
    # Query Methods
    # -------------------------------------------------------------------------

    async def get_by_username(self, username: str) -> TrackedUser | None:
        """Get a user by GitHub handle (case-insensitive)."""
        stmt = select(TrackedUser).where(
            func.lower(TrackedUser.github_username) == username.strip().lower()
        )
        result = await self._session.execute(stmt)
        return result.scalars().first()

    async def get_by_github_id(self, github_id: int) -> TrackedUser | None:
        """Get a user by remote account id."""
        return await self._get_by_field("github_id", github_id)

    async def get_github_ids(self) -> set[int]:
        """Remote ids of every tracked user that has one."""
        stmt = select(TrackedUser.github_id).where(TrackedUser.github_id.is_not(None))
        result = await self._session.execute(stmt)
        return {gid for gid in result.scalars().all() if gid is not None}

    # -------------------------------------------------------------------------
    # Write Methods
    # -------------------------------------------------------------------------

    async def create_or_update(
        self,
        username: str,
        *,
        github_id: int | None = None,
        display_name: str | None = None,
        avatar_url: str | None = None,
    ) -> tuple[TrackedUser, bool]:
        """Register a user, or refresh the profile of an existing one.

        Returns:
            Tuple of (user, created)
        """
        user = await self.get_by_username(username)
        created = user is None
        if user is None:
            user = self.add(TrackedUser(github_username=username))

        if github_id is not None:
            user.github_id = github_id
        if display_name is not None:
            user.display_name = display_name
        if avatar_url is not None:
            user.avatar_url = avatar_url

        await self.flush()
        return user, created

    async def mark_pr_synced(self, user: TrackedUser, at: datetime | None = None) -> datetime:
        """Advance ``last_pr_sync``.

        Call only after the PR batch has been committed.
        """
        stamp = at or datetime.now(UTC)
        user.last_pr_sync = stamp
        await self.flush()
        return stamp

    async def mark_comments_synced(
        self, user: TrackedUser, at: datetime | None = None
    ) -> datetime:
        """Advance ``last_comment_sync``.

        Call only after every comment batch has been committed.
        """
        stamp = at or datetime.now(UTC)
        user.last_comment_sync = stamp
        await self.flush()
        return stamp
