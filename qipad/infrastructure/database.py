"""Database Session Manager - async engine, per-request sessions, readiness probe.

Invariants:
    - A session that raises is rolled back before the error leaves the manager
    - QipadError passes through untouched; driver errors become QipadError
      subclasses (ConflictError for unique violations, DatabaseError otherwise)
    - pool_pre_ping on every engine; pool sizing only for server databases

Design Decisions:
    - Singleton db_manager set by the API lifespan; scripts build their own
      engine (db/session.py) and never touch it
    - expire_on_commit=False: services return ORM rows after commit without
      lazy loads in async context
    - Unique violations map to 409: two concurrent joins or registrations can
      both pass the service's duplicate check, only one insert wins
"""

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

from qipad.core.errors import ConflictError, DatabaseError, QipadError

logger = logging.getLogger(__name__)


def _translate(error: SQLAlchemyError) -> QipadError:
    if isinstance(error, IntegrityError):
        logger.warning(f"Integrity violation: {error.orig}")
        return ConflictError("Resource already exists or is still referenced")
    if isinstance(error, OperationalError):
        logger.error(f"DB operational error: {error}")
        return DatabaseError("Connection or operational error", "execute")
    if isinstance(error, DBAPIError):
        logger.error(f"DB driver error: {error}")
        return DatabaseError("Database driver error", "query")
    logger.error(f"SQLAlchemy error: {error}")
    return DatabaseError("Database operation failed", "unknown")


class DatabaseSessionManager:
    """Owns the API's engine and hands out request-scoped sessions."""

    def __init__(
        self, database_url: str, pool_size: int = 20, max_overflow: int = 10,
    ):
        engine_kwargs: dict = {"pool_pre_ping": True}
        if not database_url.startswith("sqlite"):
            engine_kwargs.update(
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_recycle=3600,
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
        except QipadError:
            await session.rollback()
            raise
        except SQLAlchemyError as e:
            await session.rollback()
            raise _translate(e) from e
        finally:
            await session.close()

    async def health_check(self) -> bool:
        """True when a trivial query round-trips (readiness probe)."""
        try:
            async with self.session() as db:
                await db.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"DB health check failed: {e}")
            return False

    async def dispose(self) -> None:
        await self.engine.dispose()


db_manager: DatabaseSessionManager | None = None


def init_db(database_url: str, **kwargs) -> None:
    global db_manager
    db_manager = DatabaseSessionManager(database_url, **kwargs)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one session per request."""
    if db_manager is None:
        raise RuntimeError("Database not initialized")
    async with db_manager.session() as session:
        yield session
