"""Commit boundaries for batched writes.

Comment ingestion commits once per persisted batch instead of holding
every row in a single transaction, so a failure late in a run keeps the
batches that already landed.
"""

from __future__ import annotations

import asyncio
import contextlib
from typing import TYPE_CHECKING

from review_activity_db.logging import get_logger

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


class CommitManager:
    """Commits a session every ``batch_size`` recorded rows.

    Usage:
        commits = CommitManager(session, write_lock, batch_size=200)
        for batch in batches:
            await commits.record(await repo.upsert_many(batch))
        await commits.finalize()
    """

    def __init__(
        self,
        session: AsyncSession,
        write_lock: asyncio.Lock | None = None,
        batch_size: int = 200,
    ) -> None:
        """
        Args:
            session: Session the rows were written through
            write_lock: Lock held by writers sharing the session, if any
            batch_size: Pending row count that triggers a commit
        """
        self._session = session
        self._write_lock = write_lock
        self._batch_size = batch_size
        self.pending = 0
        self.committed = 0

    async def record(self, count: int = 1) -> int:
        """Add ``count`` written rows; commit once a full batch is pending.

        Returns:
            Rows committed by this call (0 while the batch is filling)
        """
        self.pending += count
        return await self.commit() if self.pending >= self._batch_size else 0

    async def commit(self) -> int:
        """Commit pending rows and return how many there were."""
        if not self.pending:
            return 0

        async with self._write_lock or contextlib.nullcontext():
            await self._session.commit()

        flushed, self.pending = self.pending, 0
        self.committed += flushed
        logger.debug("Committed {} rows ({} this run)", flushed, self.committed)
        return flushed

    async def finalize(self) -> int:
        return await self.commit()
