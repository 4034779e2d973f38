"""Base repository pattern implementation for async SQLAlchemy.

Provides common session handling and query helpers shared across
all repositories.
"""

import asyncio
from typing import Any, Generic, TypeVar

from sqlalchemy import func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from review_activity_db.db.models import Base

# Generic type variable for model classes
ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    """Base repository with common async session handling.

    Usage:
        class TeamRepository(BaseRepository[Team]):
            def __init__(self, session: AsyncSession) -> None:
                super().__init__(session, Team)

            async def get_by_name(self, name: str) -> Team | None:
                return await self._get_by_field("name", name)

    Concurrency:
        When multiple coroutines share the same session, pass a shared
        write_lock to serialize flushes and upsert statements.
    """

    def __init__(
        self,
        session: AsyncSession,
        model_class: type[ModelT],
        write_lock: asyncio.Lock | None = None,
    ) -> None:
        """Initialize the repository with a session.

        Args:
            session: Async SQLAlchemy session (caller manages lifecycle)
            model_class: The SQLAlchemy model class this repository manages
            write_lock: Optional lock to serialize write operations (shared across repos)
        """
        self._session = session
        self._model_class = model_class
        self._write_lock = write_lock

    @property
    def session(self) -> AsyncSession:
        """Access the underlying session."""
        return self._session

    # -------------------------------------------------------------------------
    # Common Read Operations
    # -------------------------------------------------------------------------

    async def get_by_id(self, id: int) -> ModelT | None:
        """Get an entity by its primary key ID."""
        return await self._session.get(self._model_class, id)

    async def _get_by_field(self, field_name: str, value: object) -> ModelT | None:
        stmt = select(self._model_class).where(
            getattr(self._model_class, field_name) == value
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_all(self, limit: int | None = None) -> list[ModelT]:
        """Get all entities ordered by primary key, optionally limited."""
        pk = self._model_class.id  # type: ignore[attr-defined]
        stmt = select(self._model_class).order_by(pk)
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def count(self) -> int:
        """Count total entities of this type."""
        stmt = select(func.count()).select_from(self._model_class)
        result = await self._session.execute(stmt)
        return result.scalar() or 0

    # -------------------------------------------------------------------------
    # Common Write Operations
    # -------------------------------------------------------------------------

    def add(self, entity: ModelT) -> ModelT:
        """Add an entity to the session (does not flush)."""
        self._session.add(entity)
        return entity

    async def flush(self) -> None:
        """Flush pending changes to the database.

        If a write_lock was provided, acquires it to serialize flushes.
        """
        if self._write_lock:
            async with self._write_lock:
                await self._session.flush()
        else:
            await self._session.flush()

    async def _upsert(
        self,
        rows: list[dict[str, Any]],
        conflict_column: str,
        update_columns: list[str],
    ) -> None:
        """Insert rows, updating ``update_columns`` when ``conflict_column`` collides.

        Uses the dialect's native ``ON CONFLICT DO UPDATE`` so a batch is a
        single statement regardless of how many rows already exist.

        Args:
            rows: Column-name to value mappings
            conflict_column: Unique column identifying an existing row
            update_columns: Columns overwritten on conflict

        Raises:
            NotImplementedError: If the bound dialect has no upsert support
        """
        if not rows:
            return

        dialect = self._session.get_bind().dialect.name
        if dialect == "sqlite":
            insert = sqlite.insert
        elif dialect == "postgresql":
            insert = postgresql.insert
        else:
            raise NotImplementedError(f"Upsert not supported for dialect '{dialect}'")

        stmt = insert(self._model_class).values(rows)
        stmt = stmt.on_conflict_do_update(
            index_elements=[conflict_column],
            set_={col: stmt.excluded[col] for col in update_columns},
        )
        if self._write_lock:
            async with self._write_lock:
                await self._session.execute(stmt)
        else:
            await self._session.execute(stmt)
