# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""SQLAlchemy implementations of the account stores.

Every call opens its own session through session_scope() and commits before
returning, so each provisioning step is durable on its own. SQLAlchemy errors
surface as DatabaseError.

Example:
    >>> identity_store = SqlIdentityStore(make_sessionmaker(engine))
    >>> await identity_store.exists("alice")
    False
"""

from sqlalchemy import exists, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from tenancy_core.domains.account.models import Account, LessonProgress, ProgressRecord
from tenancy_core.infrastructure.database.connection import session_scope
from tenancy_core.infrastructure.database.models import AccountRow, ProgressRecordRow


def _to_account(row: AccountRow) -> Account:
    return Account(username=row.username, password=row.password, role=row.role)


def _to_progress(row: ProgressRecordRow) -> ProgressRecord:
    return ProgressRecord(
        username=row.username,
        lessons={
            name: LessonProgress.from_dict(name, data)
            for name, data in (row.lessons or {}).items()
        },
        created_at=row.created_at,
    )


class SqlIdentityStore:
    """Account store backed by the accounts table."""

    def __init__(self, sessionmaker: async_sessionmaker[AsyncSession]) -> None:
        self._sessionmaker = sessionmaker

    async def exists(self, username: str) -> bool:
        async with session_scope(self._sessionmaker) as session:
            result = await session.execute(
                select(exists().where(AccountRow.username == username))
            )
            return bool(result.scalar())

    async def find_by_username(self, username: str | None) -> Account | None:
        if username is None:
            return None

        async with session_scope(self._sessionmaker) as session:
            result = await session.execute(
                select(AccountRow).where(AccountRow.username == username)
            )
            row = result.scalar_one_or_none()
            return _to_account(row) if row is not None else None

    async def save(self, account: Account) -> Account:
        """Insert or update an account keyed on its username."""
        async with session_scope(self._sessionmaker) as session:
            row = await session.merge(
                AccountRow(
                    username=account.username,
                    password=account.password,
                    role=account.role,
                )
            )
            await session.flush()
            return _to_account(row)

    async def find_all(self) -> list[Account]:
        async with session_scope(self._sessionmaker) as session:
            result = await session.execute(select(AccountRow).order_by(AccountRow.username))
            return [_to_account(row) for row in result.scalars().all()]


class SqlProgressStore:
    """Progress record store backed by the progress_records table."""

    def __init__(self, sessionmaker: async_sessionmaker[AsyncSession]) -> None:
        self._sessionmaker = sessionmaker

    async def save(self, record: ProgressRecord) -> ProgressRecord:
        """Insert a progress record.

        The username column is unique, so saving a second record for the
        same account fails with DatabaseError.
        """
        async with session_scope(self._sessionmaker) as session:
            session.add(
                ProgressRecordRow(
                    username=record.username,
                    lessons=record.lessons_to_dict(),
                    created_at=record.created_at,
                )
            )
            await session.flush()
            return record

    async def update(self, record: ProgressRecord) -> ProgressRecord:
        """Replace the stored lesson progress of an existing record."""
        async with session_scope(self._sessionmaker) as session:
            result = await session.execute(
                select(ProgressRecordRow).where(ProgressRecordRow.username == record.username)
            )
            row = result.scalar_one()
            row.lessons = record.lessons_to_dict()
            return record

    async def find_by_username(self, username: str) -> ProgressRecord | None:
        async with session_scope(self._sessionmaker) as session:
            result = await session.execute(
                select(ProgressRecordRow).where(ProgressRecordRow.username == username)
            )
            row = result.scalar_one_or_none()
            return _to_progress(row) if row is not None else None
