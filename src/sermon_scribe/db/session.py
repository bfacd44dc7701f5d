# ABOUTME: PostgreSQL connection handling for the database record store.
# ABOUTME: One lazily built engine per process; each store call runs in its own transaction.

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from sermon_scribe.config import Settings, get_settings
from sermon_scribe.db.models import Base

log = structlog.get_logger()


class RecordDatabase:
    """Engine and session factory for the study plan and bulletin tables.

    Nothing connects until the first session or schema call, so the local
    JSON backend never needs a database driver configured.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings
        self._engine: AsyncEngine | None = None
        self._sessions: async_sessionmaker[AsyncSession] | None = None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            settings = self._settings or get_settings()
            self._engine = create_async_engine(
                settings.database_url,
                pool_size=settings.db_pool_size,
                max_overflow=settings.db_pool_max_overflow,
                pool_pre_ping=True,
                echo=settings.log_level == "DEBUG",
            )
            log.info("db_engine_created", host=settings.db_host, database=settings.db_name)
        return self._engine

    @property
    def sessions(self) -> async_sessionmaker[AsyncSession]:
        if self._sessions is None:
            # Records are handed back to callers after commit
            self._sessions = async_sessionmaker(self.engine, expire_on_commit=False, autoflush=False)
        return self._sessions

    @asynccontextmanager
    async def transaction(self) -> AsyncGenerator[AsyncSession]:
        """Yield a session that commits on exit and rolls back on any error."""
        session = self.sessions()
        try:
            yield session
            await session.commit()
        except Exception as e:
            log.warning("db_transaction_rolled_back", error_type=type(e).__name__)
            await session.rollback()
            raise
        finally:
            await session.close()

    async def create_schema(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        log.info("db_schema_ready", tables=sorted(Base.metadata.tables))

    async def dispose(self) -> None:
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._sessions = None
        log.info("db_engine_disposed")


_database = RecordDatabase()


def get_database() -> RecordDatabase:
    return _database


def get_session():
    """Transaction scope used by DatabaseRecordStore.

    Usage:
        async with get_session() as session:
            await StudyRepository(session).save(row)
    """
    return _database.transaction()


async def init_db() -> None:
    """Create the study plan and bulletin tables when missing."""
    await _database.create_schema()


async def close_db() -> None:
    await _database.dispose()
