# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Database infrastructure for PostgreSQL connections.

This package provides:
- Engine and session lifecycle for the shared database
- SQLAlchemy stores for accounts and progress records
- Tenant schema creation
- Per-schema tenant migrations

Example:
    from tenancy_core.infrastructure.database import (
        init_database,
        get_engine,
        make_sessionmaker,
        SqlIdentityStore,
    )

    await init_database(settings)
    store = SqlIdentityStore(make_sessionmaker(get_engine()))
"""

from tenancy_core.infrastructure.database.connection import (
    DatabaseError,
    close_database,
    get_engine,
    init_database,
    make_sessionmaker,
    session_scope,
)
from tenancy_core.infrastructure.database.migrations.runner import (
    TENANT_MIGRATIONS,
    TenantMigrationRunner,
    get_pending_migrations,
    make_migration_runner_factory,
)
from tenancy_core.infrastructure.database.models import AccountRow, Base, ProgressRecordRow
from tenancy_core.infrastructure.database.repositories import SqlIdentityStore, SqlProgressStore
from tenancy_core.infrastructure.database.schema import (
    EngineSchemaExecutor,
    InvalidSchemaNameError,
    SchemaExecutor,
    SchemaProvisioner,
    build_create_schema_statement,
)

__all__ = [
    # Connection
    "DatabaseError",
    "close_database",
    "get_engine",
    "make_sessionmaker",
    "init_database",
    "session_scope",
    # Models
    "Base",
    "AccountRow",
    "ProgressRecordRow",
    # Stores
    "SqlIdentityStore",
    "SqlProgressStore",
    # Schema
    "EngineSchemaExecutor",
    "InvalidSchemaNameError",
    "SchemaExecutor",
    "SchemaProvisioner",
    "build_create_schema_statement",
    # Migrations
    "TENANT_MIGRATIONS",
    "TenantMigrationRunner",
    "get_pending_migrations",
    "make_migration_runner_factory",
]
