"""Entry store — durable, append-only storage of entries.

Learn: The store owns its engine. It is constructed explicitly, opened
in the app lifespan, handed to the EntryService, and closed on shutdown.
No module-level database handle.
"""

from typing import Optional

import structlog
from sqlalchemy import func, select
from sqlalchemy import text as sa_text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from receipt.db.engine import build_engine, build_session_factory
from receipt.db.migrate import upgrade_legacy_ids
from receipt.db.models import Base, Entry
from receipt.errors import StorageError

logger = structlog.get_logger()


class EntryStore:
    """Append-only entry table with newest-first reads."""

    def __init__(self, database_url: str, echo: bool = False):
        self.database_url = database_url
        self.echo = echo
        self._engine: Optional[AsyncEngine] = None
        self._sessions: Optional[async_sessionmaker[AsyncSession]] = None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise RuntimeError("EntryStore is not open. Call open() first.")
        return self._engine

    # ─── Lifecycle ──────────────────────────────────────

    async def open(self, migrate_legacy: bool = True) -> bool:
        """Connect, upgrade a legacy table if asked, create the schema.

        Returns True if the legacy id migration ran.
        """
        self._engine = build_engine(self.database_url, echo=self.echo)
        self._sessions = build_session_factory(self._engine)

        migrated = False
        if migrate_legacy:
            migrated = await upgrade_legacy_ids(self._engine)

        try:
            async with self._engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except SQLAlchemyError as e:
            raise StorageError(f"could not create schema: {e}") from e

        logger.info("receipt.store_opened", url=self.database_url, migrated=migrated)
        return migrated

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._sessions = None
            logger.info("receipt.store_closed")

    def _session(self) -> AsyncSession:
        if self._sessions is None:
            raise RuntimeError("EntryStore is not open. Call open() first.")
        return self._sessions()

    # ─── Operations ─────────────────────────────────────

    async def insert(self, text: str, created_at: int) -> Entry:
        """Persist one entry with a freshly generated id."""
        async with self._session() as session:
            entry = Entry(text=text, created_at=created_at)
            session.add(entry)
            try:
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                raise StorageError(f"insert failed: {e}") from e
            return entry

    async def list_all(self) -> list[Entry]:
        """All entries, newest first."""
        async with self._session() as session:
            try:
                result = await session.execute(
                    select(Entry).order_by(Entry.created_at.desc())
                )
            except SQLAlchemyError as e:
                raise StorageError(f"query failed: {e}") from e
            return list(result.scalars().all())

    async def count(self) -> int:
        async with self._session() as session:
            try:
                result = await session.execute(select(func.count()).select_from(Entry))
            except SQLAlchemyError as e:
                raise StorageError(f"count failed: {e}") from e
            return result.scalar_one()

    async def ping(self) -> None:
        try:
            async with self.engine.connect() as conn:
                await conn.execute(sa_text("SELECT 1"))
        except SQLAlchemyError as e:
            raise StorageError(f"database unreachable: {e}") from e
