"""Database Session Manager — async engine, per-request sessions and readiness check.

Invariants:
    - A session that sees a SQLAlchemy error is rolled back before the error
      leaves the context, and the error surfaces as DatabaseError
    - At most one DatabaseSessionManager per process; concurrent first requests
      share a single initialization (ensure_db holds _init_lock)

Design Decisions:
    - Initialized by the FastAPI lifespan; ensure_db() covers entry points where
      the lifespan never runs (serverless) instead of failing the request
    - expire_on_commit=False: PostRecord snapshots are read after commit
    - SQLite (tests, local dev) gets no pool sizing: aiosqlite uses a static pool
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.exc import (
    DBAPIError, IntegrityError, OperationalError, SQLAlchemyError,
)
from sqlalchemy.ext.asyncio import (
    AsyncSession, async_sessionmaker, create_async_engine,
)

from blog_api.config import get_settings
from blog_api.core.errors import DatabaseError

logger = logging.getLogger(__name__)

# Most specific first
_ERROR_MAP = (
    (IntegrityError, "Integrity constraint violated", "commit"),
    (OperationalError, "Connection or operational error", "execute"),
    (DBAPIError, "Database driver error", "query"),
    (SQLAlchemyError, "Database operation failed", "session"),
)


def _to_database_error(exc: SQLAlchemyError) -> DatabaseError:
    for exc_type, message, operation in _ERROR_MAP:
        if isinstance(exc, exc_type):
            return DatabaseError(message, operation)
    return DatabaseError("Database operation failed", "session")


class DatabaseSessionManager:
    """Owns the engine and hands out sessions that roll back on failure."""

    def __init__(
        self, database_url: str, pool_size: int = 10, max_overflow: int = 10,
    ):
        engine_kwargs: dict = {"pool_pre_ping": True}
        if not database_url.startswith("sqlite"):
            engine_kwargs.update(
                pool_size=pool_size, max_overflow=max_overflow, pool_recycle=3600,
            )
        self.engine = create_async_engine(database_url, **engine_kwargs)
        self._session_factory = async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        session = self._session_factory()
        try:
            yield session
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error(f"Session rolled back: {e}")
            raise _to_database_error(e) from e
        finally:
            await session.close()

    async def health_check(self) -> bool:
        """SELECT 1 through a fresh session. False on any failure."""
        try:
            async with self.session() as db:
                await db.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"DB health check failed: {e}")
            return False

    async def dispose(self) -> None:
        await self.engine.dispose()


# Initialized by the lifespan, or lazily by ensure_db
db_manager: DatabaseSessionManager | None = None
_init_lock = asyncio.Lock()


def init_db(database_url: str, **kwargs) -> DatabaseSessionManager:
    global db_manager
    db_manager = DatabaseSessionManager(database_url, **kwargs)
    logger.info("Database session manager initialized")
    return db_manager


async def ensure_db() -> DatabaseSessionManager:
    """Return the shared manager, initializing it once under a lock if needed."""
    if db_manager is not None:
        return db_manager
    async with _init_lock:
        if db_manager is None:
            settings = get_settings()
            init_db(
                settings.database_url,
                pool_size=settings.database_pool_size,
                max_overflow=settings.database_max_overflow,
            )
    return db_manager


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one session per request."""
    manager = await ensure_db()
    async with manager.session() as session:
        yield session
