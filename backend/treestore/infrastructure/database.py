"""Database Session Manager - async engine, per-request sessions and health checks.

Invariants:
    - A session that exits with an exception is rolled back before it is closed
    - SQLAlchemy exceptions leave session() only as DatabaseError (core/errors.py)
    - Pool uses pool_pre_ping; SQLite URLs skip pool sizing (single shared connection)

Design Decisions:
    - Owned by TreeStoreRuntime (bootstrap.py), no module-level singleton
    - expire_on_commit=False: records are read back after commit without a lazy load
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

from treestore.core.errors import DatabaseError, ErrorContext

logger = logging.getLogger(__name__)

# most specific first: IntegrityError and OperationalError are DBAPIErrors
_ERROR_MAP: tuple[tuple[type[SQLAlchemyError], str, str], ...] = (
    (IntegrityError, "Integrity constraint violated", "commit"),
    (OperationalError, "Connection or operational error", "execute"),
    (DBAPIError, "Database driver error", "query"),
    (SQLAlchemyError, "Database operation failed", "unknown"),
)


def to_database_error(e: SQLAlchemyError) -> DatabaseError:
    message, operation = next(
        (msg, op) for exc_type, msg, op in _ERROR_MAP if isinstance(e, exc_type)
    )
    return DatabaseError(message, operation, ErrorContext(
        operation=operation, debug_info={"driver_error": str(e)},
    ))


class DatabaseSessionManager:
    """Engine plus session factory for the tree_nodes database."""

    def __init__(
        self, database_url: str, pool_size: int = 20, max_overflow: int = 10,
    ):
        engine_kwargs = {"pool_pre_ping": True}
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
        """One AsyncSession; rolled back and re-raised as DatabaseError on failure."""
        session = self._session_factory()
        try:
            yield session
        except SQLAlchemyError as e:
            await session.rollback()
            error = to_database_error(e)
            logger.error(
                f"{error.message}: {e}",
                extra={"error_code": error.code, "operation": error.operation},
            )
            raise error from e
        finally:
            await session.close()

    async def health_check(self) -> bool:
        """True when a trivial query round-trips."""
        try:
            async with self.session() as db:
                await db.execute(text("SELECT 1"))
        except DatabaseError as e:
            logger.error(f"DB health check failed: {e}")
            return False
        return True

    async def dispose(self) -> None:
        await self.engine.dispose()
