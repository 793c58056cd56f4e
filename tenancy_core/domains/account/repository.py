# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Collaborator contracts consumed by the account service.

The account service never talks to a database driver or migration engine
directly. It depends on these protocols, which are implemented by the
SQLAlchemy stores in ``tenancy_core.infrastructure.database`` and replaced by
mocks in tests.
"""

from typing import Callable, Protocol

from tenancy_core.domains.account.models import Account, ProgressRecord


class IdentityStore(Protocol):
    """Durable username -> account mapping.

    Implementations must accept arbitrary string keys, including the empty
    string and non-ASCII text.
    """

    async def exists(self, username: str) -> bool: ...

    async def find_by_username(self, username: str | None) -> Account | None: ...

    async def save(self, account: Account) -> Account: ...

    async def find_all(self) -> list[Account] | None: ...


class ProgressStore(Protocol):
    """Durable account -> progress record mapping."""

    async def save(self, record: ProgressRecord) -> ProgressRecord: ...

    async def update(self, record: ProgressRecord) -> ProgressRecord: ...

    async def find_by_username(self, username: str) -> ProgressRecord | None: ...


class SchemaCreator(Protocol):
    """Creates the schema that isolates a tenant's data."""

    async def create_schema(self, username: str) -> None: ...


class MigrationRunner(Protocol):
    """Applies versioned migration scripts to one tenant schema."""

    async def migrate(self) -> list[str]: ...


MigrationRunnerFactory = Callable[[str], MigrationRunner]
