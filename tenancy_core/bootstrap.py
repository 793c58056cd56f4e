# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Application wiring.

Builds a ready-to-use AccountService from settings: logging, the database
engine, the SQL stores, the schema provisioner and the migration runner
factory. An outer service layer calls init_account_service() at startup and
close_account_service() at shutdown.

Example:
    >>> service = await init_account_service()
    >>> await service.provision("alice", "secret")
    >>> await close_account_service()
"""

import logging

from sqlalchemy.ext.asyncio import AsyncEngine

from tenancy_core.core.config import Settings, get_settings
from tenancy_core.domains.account import AccountService
from tenancy_core.infrastructure.database.connection import (
    close_database,
    get_engine,
    init_database,
    make_sessionmaker,
)
from tenancy_core.infrastructure.database.migrations.runner import (
    make_migration_runner_factory,
)
from tenancy_core.infrastructure.database.models import Base
from tenancy_core.infrastructure.database.repositories import (
    SqlIdentityStore,
    SqlProgressStore,
)
from tenancy_core.infrastructure.database.schema import (
    EngineSchemaExecutor,
    SchemaProvisioner,
)
from tenancy_core.utils.logging import setup_logging

logger = logging.getLogger(__name__)

# Account service singleton
_account_service: AccountService | None = None


def build_account_service(settings: Settings, engine: AsyncEngine) -> AccountService:
    """Assemble an AccountService on an existing engine.

    Args:
        settings: Application settings.
        engine: Engine for the shared database. Stores, schema DDL and
            migrations all run on it.

    Returns:
        AccountService wired to the SQL stores.
    """
    sessionmaker = make_sessionmaker(engine)
    provisioner = SchemaProvisioner(
        EngineSchemaExecutor(engine),
        owner_role=settings.tenant_schema.owner_role,
        validate_identifiers=settings.tenant_schema.validate_identifiers,
        tolerate_existing=settings.tenant_schema.tolerate_existing,
    )
    return AccountService(
        identity_store=SqlIdentityStore(sessionmaker),
        progress_store=SqlProgressStore(sessionmaker),
        schema_provisioner=provisioner,
        migration_runner_factory=make_migration_runner_factory(engine),
        status_history=settings.tenant_schema.status_history,
    )


async def create_shared_tables(engine: AsyncEngine) -> None:
    """Create the accounts and progress_records tables if missing."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def init_account_service(
    settings: Settings | None = None,
    create_tables: bool = False,
) -> AccountService:
    """Initialize logging, the database and the account service singleton.

    Args:
        settings: Settings to use. Defaults to get_settings().
        create_tables: Create the shared tables on startup.

    Returns:
        The initialized AccountService.
    """
    global _account_service
    settings = settings or get_settings()

    setup_logging(settings)
    await init_database(settings)

    engine = get_engine()
    if create_tables:
        await create_shared_tables(engine)

    _account_service = build_account_service(settings, engine)
    logger.info("Account service initialized (environment=%s)", settings.environment)
    return _account_service


def get_account_service() -> AccountService:
    """Get the initialized account service.

    Raises:
        RuntimeError: If init_account_service() has not been called.
    """
    if _account_service is None:
        raise RuntimeError("Account service not initialized. Call init_account_service() first.")
    return _account_service


async def close_account_service() -> None:
    """Release the account service and close database connections."""
    global _account_service

    _account_service = None
    await close_database()
