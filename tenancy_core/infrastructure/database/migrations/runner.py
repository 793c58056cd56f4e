# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Tenant schema migration runner.

This module provides programmatic migration execution for tenant schemas.
Every tenant shares the database but owns a schema named after its username;
migrations run with ``search_path`` pinned to that schema, and each schema
tracks its own revision in its own ``alembic_version`` table.

Used by AccountService when provisioning new tenants.

Example:
    from tenancy_core.infrastructure.database.migrations.runner import (
        TenantMigrationRunner,
    )

    runner = TenantMigrationRunner(engine, schema="alice")
    applied = await runner.migrate()
"""

import importlib
import logging
from typing import Callable

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

logger = logging.getLogger(__name__)

MIGRATIONS_PACKAGE = "tenancy_core.infrastructure.database.migrations.tenant"

# Migration files in order (must be maintained manually)
TENANT_MIGRATIONS = [
    "001_initial_lesson_tables",
    "002_add_assignment_attempts",
]


def quote_identifier(name: str) -> str:
    """Quote a name for use as a PostgreSQL identifier."""
    return '"' + name.replace('"', '""') + '"'


def get_pending_migrations(
    current_version: str | None,
    target_revision: str | None = None,
    migrations: list[str] = TENANT_MIGRATIONS,
) -> list[str]:
    """Get list of migrations to apply.

    Args:
        current_version: Current schema version.
        target_revision: Target revision to migrate to.
        migrations: Ordered revision IDs.

    Returns:
        List of revision IDs to apply in order.
    """
    if current_version is None:
        start_idx = 0
    else:
        try:
            start_idx = migrations.index(current_version) + 1
        except ValueError:
            logger.warning(
                "Current version %s not in known migrations list", current_version
            )
            return []

    if target_revision:
        try:
            end_idx = migrations.index(target_revision) + 1
        except ValueError:
            logger.warning("Target revision %s not found", target_revision)
            return []
    else:
        end_idx = len(migrations)

    return migrations[start_idx:end_idx]


def _run_upgrade_sync(connection, upgrade_fn: Callable) -> None:
    """Run upgrade function in sync context with alembic operations.

    This is needed because alembic operations are sync and use
    thread-local context.
    """
    from alembic.operations import Operations
    from alembic.runtime.migration import MigrationContext

    context = MigrationContext.configure(connection)

    with context.begin_transaction():
        with Operations.context(context):
            upgrade_fn()


class TenantMigrationRunner:
    """Applies tenant migrations to one schema.

    Attributes:
        schema: Tenant schema name.
    """

    def __init__(
        self,
        engine: AsyncEngine,
        schema: str,
        migrations: list[str] | None = None,
        package: str = MIGRATIONS_PACKAGE,
    ) -> None:
        """Initialize the runner.

        Args:
            engine: Engine for the shared database.
            schema: Tenant schema the migrations run against.
            migrations: Ordered revision IDs. Defaults to TENANT_MIGRATIONS.
            package: Package holding the migration modules.
        """
        self._engine = engine
        self.schema = schema
        self._migrations = list(TENANT_MIGRATIONS if migrations is None else migrations)
        self._package = package

    async def migrate(self, target_revision: str | None = None) -> list[str]:
        """Run pending migrations for the tenant schema.

        Args:
            target_revision: Optional specific revision to migrate to.
                If None, runs all pending migrations.

        Returns:
            List of applied migration revision IDs.

        Raises:
            ImportError: If a migration module cannot be imported.
            ValueError: If a migration module has no upgrade() function.
        """
        await self._ensure_version_table()

        current_version = await self._get_current_version()
        logger.info(
            "Schema %r at migration version: %s", self.schema, current_version or "None"
        )

        migrations_to_apply = get_pending_migrations(
            current_version, target_revision, self._migrations
        )

        if not migrations_to_apply:
            logger.info("No pending migrations for schema %r", self.schema)
            return []

        logger.info(
            "Applying %d migrations to schema %r: %s",
            len(migrations_to_apply),
            self.schema,
            ", ".join(migrations_to_apply),
        )

        applied = []
        for revision in migrations_to_apply:
            await self._apply_migration(revision)
            applied.append(revision)
            logger.info("Applied migration %s to schema %r", revision, self.schema)

        return applied

    async def check_pending(self) -> bool:
        """Check if the tenant schema has pending migrations."""
        await self._ensure_version_table()
        current_version = await self._get_current_version()
        return len(get_pending_migrations(current_version, None, self._migrations)) > 0

    async def status(self) -> dict:
        """Get detailed migration status for the tenant schema.

        Returns:
            Dict with current version, pending migrations, and all migrations.
        """
        await self._ensure_version_table()
        current_version = await self._get_current_version()
        pending = get_pending_migrations(current_version, None, self._migrations)

        return {
            "schema": self.schema,
            "current_version": current_version,
            "latest_version": self._migrations[-1] if self._migrations else None,
            "pending_count": len(pending),
            "pending_migrations": pending,
            "all_migrations": list(self._migrations),
            "is_up_to_date": len(pending) == 0,
        }

    async def _scope(self, conn: AsyncConnection) -> None:
        # SET LOCAL keeps the search_path from leaking into pooled connections
        await conn.execute(text(f"SET LOCAL search_path TO {quote_identifier(self.schema)}"))

    async def _ensure_version_table(self) -> None:
        """Create the schema's alembic_version table if not exists."""
        async with self._engine.begin() as conn:
            await self._scope(conn)
            await conn.execute(
                text("""
                    CREATE TABLE IF NOT EXISTS alembic_version (
                        version_num VARCHAR(128) NOT NULL,
                        CONSTRAINT alembic_version_pkc PRIMARY KEY (version_num)
                    )
                """)
            )

    async def _get_current_version(self) -> str | None:
        async with self._engine.begin() as conn:
            await self._scope(conn)
            result = await conn.execute(text("SELECT version_num FROM alembic_version LIMIT 1"))
            row = result.fetchone()
            return row[0] if row else None

    def _load_upgrade(self, revision: str) -> Callable:
        module_name = f"{self._package}.{revision}"
        try:
            module = importlib.import_module(module_name)
        except ImportError as e:
            raise ImportError(f"Cannot import migration {revision}: {e}") from e

        upgrade_fn: Callable | None = getattr(module, "upgrade", None)
        if upgrade_fn is None:
            raise ValueError(f"Migration {revision} has no upgrade() function")
        return upgrade_fn

    async def _apply_migration(self, revision: str) -> None:
        """Apply a single migration in its own transaction."""
        upgrade_fn = self._load_upgrade(revision)

        async with self._engine.begin() as conn:
            await self._scope(conn)
            await conn.run_sync(_run_upgrade_sync, upgrade_fn)

            await conn.execute(text("DELETE FROM alembic_version"))
            await conn.execute(
                text("INSERT INTO alembic_version (version_num) VALUES (:version)"),
                {"version": revision},
            )


def make_migration_runner_factory(
    engine: AsyncEngine,
) -> Callable[[str], TenantMigrationRunner]:
    """Build the factory the account service uses to obtain tenant runners."""

    def factory(username: str) -> TenantMigrationRunner:
        return TenantMigrationRunner(engine, schema=username)

    return factory
