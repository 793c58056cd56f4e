# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Tenant schema provisioning.

Every tenant account owns a PostgreSQL schema named exactly after its
username. The schema is created with a fixed statement shape:

    CREATE SCHEMA "<username>" authorization <owner_role>

The username is interpolated verbatim. Embedded double quotes are not
escaped, so a username containing ``"`` yields invalid or unintended DDL.
Deployments that accept untrusted usernames should enable
``validate_identifiers`` or validate usernames before they reach this layer.

Example:
    >>> provisioner = SchemaProvisioner(EngineSchemaExecutor(engine), owner_role="dba")
    >>> await provisioner.create_schema("alice")
"""

import logging
from typing import Protocol

from sqlalchemy import text
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncEngine

logger = logging.getLogger(__name__)

DEFAULT_OWNER_ROLE = "dba"

# PostgreSQL SQLSTATE for duplicate_schema
DUPLICATE_SCHEMA_SQLSTATE = "42P06"


class InvalidSchemaNameError(ValueError):
    """Raised when a username cannot be used inside a quoted identifier.

    Attributes:
        username: The rejected username.
    """

    def __init__(self, username: str) -> None:
        super().__init__("Username cannot be used as a schema name")
        self.username = username


class SchemaExecutor(Protocol):
    """Executes a single DDL statement."""

    async def execute(self, ddl: str) -> None: ...


class EngineSchemaExecutor:
    """Runs DDL statements in their own transaction on an async engine."""

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine

    async def execute(self, ddl: str) -> None:
        async with self._engine.begin() as conn:
            await conn.execute(text(ddl))


def build_create_schema_statement(username: str, owner_role: str = DEFAULT_OWNER_ROLE) -> str:
    """Build the schema-creation statement for a tenant."""
    return f'CREATE SCHEMA "{username}" authorization {owner_role}'


def _is_duplicate_schema(error: Exception) -> bool:
    if not isinstance(error, DBAPIError):
        return False
    orig = error.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    return code == DUPLICATE_SCHEMA_SQLSTATE


class SchemaProvisioner:
    """Creates tenant schemas.

    Attributes:
        _executor: DDL executor.
        _owner_role: Role each schema is authorized to.
        _validate_identifiers: Reject usernames with ``"`` or NUL.
        _tolerate_existing: Treat duplicate-schema errors as success.
    """

    def __init__(
        self,
        executor: SchemaExecutor,
        owner_role: str = DEFAULT_OWNER_ROLE,
        validate_identifiers: bool = False,
        tolerate_existing: bool = False,
    ) -> None:
        self._executor = executor
        self._owner_role = owner_role
        self._validate_identifiers = validate_identifiers
        self._tolerate_existing = tolerate_existing

    async def create_schema(self, username: str) -> None:
        """Create the schema for a tenant.

        Args:
            username: Tenant username, used verbatim as the schema name.

        Raises:
            InvalidSchemaNameError: If identifier validation is enabled and
                the username contains ``"`` or NUL.
            Exception: Whatever the executor raised, unchanged.
        """
        if self._validate_identifiers and ('"' in username or "\x00" in username):
            raise InvalidSchemaNameError(username)

        ddl = build_create_schema_statement(username, self._owner_role)

        try:
            await self._executor.execute(ddl)
        except DBAPIError as e:
            if self._tolerate_existing and _is_duplicate_schema(e):
                logger.warning("Schema for tenant %r already exists", username)
                return
            raise

        logger.info("Created schema for tenant %r", username)
