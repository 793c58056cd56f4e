# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for database engine and session lifecycle."""

import os
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from tenancy_core.core.config.settings import Settings
from tenancy_core.infrastructure.database import connection
from tenancy_core.infrastructure.database.connection import (
    DatabaseError,
    close_database,
    get_engine,
    init_database,
    make_sessionmaker,
    session_scope,
)


@pytest.fixture
def settings() -> Settings:
    with patch.dict(os.environ, {}, clear=True):
        return Settings(debug=False)


@pytest.fixture
def mock_engine():
    """Create a mock AsyncEngine."""
    engine = MagicMock()
    engine.dispose = AsyncMock()
    return engine


@pytest.fixture(autouse=True)
def reset_connection_state():
    """Leave no engine behind between tests."""
    yield
    connection._engine = None


def create_mock_sessionmaker():
    session = AsyncMock()
    factory = MagicMock()
    factory.return_value.__aenter__.return_value = session
    factory.return_value.__aexit__.return_value = False
    return factory, session


class TestLifecycle:
    """Tests for init/get/close."""

    def test_get_before_init_raises(self) -> None:
        with pytest.raises(DatabaseError, match="not initialized"):
            get_engine()

    @pytest.mark.asyncio
    async def test_init_uses_database_settings(self, settings, mock_engine) -> None:
        """Test the engine is created from the DB_ settings group."""
        with patch.object(connection, "create_async_engine", return_value=mock_engine) as create:
            await init_database(settings)

        assert create.call_args.args[0] == settings.database.url
        assert create.call_args.kwargs["pool_size"] == settings.database.pool_size
        assert create.call_args.kwargs["max_overflow"] == settings.database.max_overflow
        assert get_engine() is mock_engine

    @pytest.mark.asyncio
    async def test_close_disposes_engine(self, settings, mock_engine) -> None:
        with patch.object(connection, "create_async_engine", return_value=mock_engine):
            await init_database(settings)

        await close_database()

        mock_engine.dispose.assert_awaited_once()
        with pytest.raises(DatabaseError):
            get_engine()

    @pytest.mark.asyncio
    async def test_close_without_init_is_noop(self) -> None:
        await close_database()


class TestMakeSessionmaker:
    """Tests for make_sessionmaker."""

    def test_binds_given_engine(self, mock_engine) -> None:
        """Test sessions are bound to the engine passed in."""
        factory = make_sessionmaker(mock_engine)

        assert factory.kw["bind"] is mock_engine
        assert factory.kw["expire_on_commit"] is False
        assert factory.class_ is AsyncSession


class TestSessionScope:
    """Tests for session_scope."""

    @pytest.mark.asyncio
    async def test_commits_on_success(self) -> None:
        factory, session = create_mock_sessionmaker()

        async with session_scope(factory) as s:
            assert s is session

        session.commit.assert_awaited_once()
        session.rollback.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_non_database_errors_propagate_unchanged(self) -> None:
        """Test other exceptions roll back and are not wrapped."""
        factory, session = create_mock_sessionmaker()
        error = KeyError("lessons")

        with pytest.raises(KeyError) as exc_info:
            async with session_scope(factory):
                raise error

        assert exc_info.value is error
        session.rollback.assert_awaited_once()
        session.commit.assert_not_awaited()
