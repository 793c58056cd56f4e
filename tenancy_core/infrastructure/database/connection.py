# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Engine lifecycle and session boundaries for the shared tenant database.

Account and progress records live in the default schema; every provisioned
account additionally owns a schema of its own on the same database. One
process-wide engine is created at startup; stores get a sessionmaker built
from whatever engine they are handed.

Example:
    await init_database(settings)
    sessionmaker = make_sessionmaker(get_engine())

    async with session_scope(sessionmaker) as session:
        result = await session.execute(select(AccountRow))
"""

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, AsyncIterator, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

if TYPE_CHECKING:
    from tenancy_core.core.config.settings import Settings

_engine: Optional[AsyncEngine] = None


class DatabaseError(Exception):
    """A store operation failed in SQLAlchemy or the driver.

    Attributes:
        message: What was being attempted.
        original_error: The exception raised underneath, if any.
    """

    def __init__(self, message: str, original_error: Optional[Exception] = None) -> None:
        super().__init__(message)
        self.message = message
        self.original_error = original_error

    def __str__(self) -> str:
        if self.original_error:
            return f"{self.message}: {self.original_error}"
        return self.message


async def init_database(settings: "Settings") -> None:
    """Create the process-wide engine.

    Args:
        settings: Settings whose database group describes the server.

    Raises:
        DatabaseError: If the engine cannot be created.
    """
    global _engine

    try:
        _engine = create_async_engine(
            settings.database.url,
            pool_size=settings.database.pool_size,
            max_overflow=settings.database.max_overflow,
            pool_pre_ping=True,
            pool_recycle=1800,
            echo=settings.debug,
        )
    except SQLAlchemyError as e:
        raise DatabaseError("Failed to create database engine", e) from e


async def close_database() -> None:
    """Dispose of the engine's pool, if one was created."""
    global _engine

    if _engine is not None:
        await _engine.dispose()
        _engine = None


def get_engine() -> AsyncEngine:
    """Get the process-wide engine.

    Raises:
        DatabaseError: If init_database() has not run.
    """
    if _engine is None:
        raise DatabaseError("Database not initialized. Call init_database() first.")
    return _engine


def make_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Build the session factory the stores use on ``engine``."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@asynccontextmanager
async def session_scope(
    sessionmaker: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    """Open a session that commits on success and rolls back on error.

    SQLAlchemy errors are re-raised as DatabaseError. Any other exception
    propagates unchanged after the rollback.

    Args:
        sessionmaker: Factory for the session.

    Yields:
        An open AsyncSession.
    """
    async with sessionmaker() as session:
        try:
            yield session
            await session.commit()
        except SQLAlchemyError as e:
            await session.rollback()
            raise DatabaseError("Database operation failed", e) from e
        except Exception:
            await session.rollback()
            raise
