# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Account service for tenant authentication and provisioning.

This module provides the AccountService that handles:
- Authentication lookups with a fixed, non-revealing failure message
- Idempotent provisioning of a tenant account, its progress record,
  its dedicated schema and that schema's migrations
- Listing accounts
- Reading and updating tenant lesson progress

Provisioning is not transactional. Each step commits on its own and a failing
step stops the sequence without undoing earlier steps. The failing exception is
re-raised unchanged and the partial outcome stays readable through
get_provisioning_status().

Example:
    >>> service = AccountService(
    ...     identity_store, progress_store, schema_provisioner, runner_factory
    ... )
    >>> await service.provision("alice", "secret")
    >>> principal = await service.authenticate("alice")
"""

from tenancy_core.domains.account.locks import KeyedLock
from tenancy_core.domains.account.models import (
    Account,
    AuthenticatedAccount,
    ProgressRecord,
    ProvisioningResult,
    ProvisioningStep,
)
from tenancy_core.domains.account.repository import (
    IdentityStore,
    MigrationRunnerFactory,
    ProgressStore,
    SchemaCreator,
)
from tenancy_core.utils.logging import get_logger, tenant_context

logger = get_logger(__name__)

USER_NOT_FOUND_MESSAGE = "User not found"
DEFAULT_STATUS_HISTORY = 1000


class AccountServiceError(Exception):
    """Base exception for account service errors."""

    pass


class AccountNotFoundError(AccountServiceError):
    """Raised when authentication finds no account for a username.

    The message is the same for every input so callers cannot learn which
    usernames exist.
    """

    def __init__(self) -> None:
        super().__init__(USER_NOT_FOUND_MESSAGE)


class AccountService:
    """Orchestrates tenant account authentication and provisioning.

    Attributes:
        _identity_store: Username -> account store.
        _progress_store: Progress record store.
        _schema_provisioner: Creates tenant schemas.
        _migration_runner_factory: Builds a migration runner for a tenant.
        _locks: Per-username provisioning locks.
        _results: Latest provisioning outcome per username, oldest first.
    """

    def __init__(
        self,
        identity_store: IdentityStore,
        progress_store: ProgressStore,
        schema_provisioner: SchemaCreator,
        migration_runner_factory: MigrationRunnerFactory,
        locks: KeyedLock | None = None,
        status_history: int = DEFAULT_STATUS_HISTORY,
    ) -> None:
        """Initialize the account service.

        Args:
            identity_store: Username -> account store.
            progress_store: Progress record store.
            schema_provisioner: Creates tenant schemas.
            migration_runner_factory: Callable returning a runner for a tenant.
            locks: Lock registry shared with other services, if any.
            status_history: How many usernames keep a provisioning status.

        Raises:
            ValueError: If status_history is less than 1.
        """
        if status_history < 1:
            raise ValueError("status_history must be at least 1")

        self._identity_store = identity_store
        self._progress_store = progress_store
        self._schema_provisioner = schema_provisioner
        self._migration_runner_factory = migration_runner_factory
        self._locks = locks if locks is not None else KeyedLock()
        self._status_history = status_history
        self._results: dict[str, ProvisioningResult] = {}

    async def authenticate(self, username: str | None) -> AuthenticatedAccount:
        """Load an account for authentication.

        Args:
            username: Username to look up, matched exactly.

        Returns:
            The authentication-capable view of the account.

        Raises:
            AccountNotFoundError: If no account has this username.
        """
        account = await self._identity_store.find_by_username(username)
        if account is None:
            logger.debug("Authentication lookup missed")
            raise AccountNotFoundError()

        return account.materialize()

    async def provision(self, username: str, password: str) -> ProvisioningResult:
        """Create or refresh an account, provisioning new tenants fully.

        Existing accounts are only re-saved. New accounts additionally get a
        progress record, a schema named after the username, and that schema's
        migrations. Calls for the same username are serialized.

        Args:
            username: Account username, also the tenant schema name.
            password: Credential material, stored as given.

        Returns:
            The provisioning outcome.

        Raises:
            Exception: Whatever the failing collaborator raised, unchanged.
        """
        with tenant_context(username):
            async with self._locks.hold(username):
                result = ProvisioningResult(username=username)
                self._remember(result)
                step = ProvisioningStep.CHECK_EXISTENCE

                try:
                    exists = await self._identity_store.exists(username)
                    result.mark(step)

                    step = ProvisioningStep.PERSIST_ACCOUNT
                    await self._identity_store.save(Account(username=username, password=password))
                    result.mark(step)

                    if exists:
                        result.finish()
                        logger.info("Account already provisioned")
                        return result

                    result.created = True

                    step = ProvisioningStep.PERSIST_PROGRESS
                    await self._progress_store.save(ProgressRecord(username=username))
                    result.mark(step)

                    step = ProvisioningStep.PROVISION_SCHEMA
                    await self._schema_provisioner.create_schema(username)
                    result.mark(step)

                    step = ProvisioningStep.RUN_MIGRATIONS
                    runner = self._migration_runner_factory(username)
                    applied = await runner.migrate()
                    result.applied_migrations = list(applied or [])
                    result.mark(step)

                except Exception as e:
                    result.failed_step = step
                    logger.error("Provisioning failed", step=step.value, error=str(e))
                    raise
                except BaseException as e:
                    # Cancellation or interpreter exit mid-step
                    result.failed_step = step
                    logger.warning(
                        "Provisioning interrupted", step=step.value, reason=type(e).__name__
                    )
                    raise

                result.finish()
                logger.info(
                    "Account provisioned",
                    migrations=len(result.applied_migrations),
                )
                return result

    async def list_accounts(self) -> list[Account] | None:
        """Return every account exactly as the identity store reports it."""
        return await self._identity_store.find_all()

    def get_provisioning_status(self, username: str) -> ProvisioningResult | None:
        """Get the outcome of the latest provisioning call for a username.

        Only the most recent ``status_history`` usernames are kept; calls
        still running are never evicted.

        Args:
            username: Account username.

        Returns:
            The latest result, or None if it was never provisioned here or has
            been evicted.
        """
        return self._results.get(username)

    def _remember(self, result: ProvisioningResult) -> None:
        self._results.pop(result.username, None)
        self._results[result.username] = result

        while len(self._results) > self._status_history:
            stale = next(
                (name for name, r in self._results.items() if not r.in_progress),
                None,
            )
            if stale is None:
                break
            del self._results[stale]

    async def get_progress(self, username: str) -> ProgressRecord:
        """Load a tenant's lesson progress.

        Raises:
            AccountNotFoundError: If the username was never provisioned.
        """
        record = await self._progress_store.find_by_username(username)
        if record is None:
            raise AccountNotFoundError()
        return record

    async def record_assignment(
        self, username: str, lesson: str, assignment: str, solved: bool
    ) -> ProgressRecord:
        """Record one assignment submission in a tenant's progress.

        Args:
            username: Tenant username.
            lesson: Lesson the assignment belongs to.
            assignment: Assignment name.
            solved: Whether the submission solved it.

        Returns:
            The updated progress record.

        Raises:
            AccountNotFoundError: If the username was never provisioned.
        """
        with tenant_context(username):
            async with self._locks.hold(username):
                record = await self.get_progress(username)
                if solved:
                    record.assignment_solved(lesson, assignment)
                else:
                    record.assignment_failed(lesson)
                await self._progress_store.update(record)

            logger.info(
                "Assignment recorded",
                lesson=lesson,
                solved=solved,
                total_solved=record.solved_count(),
            )
        return record

    async def reset_lesson(self, username: str, lesson: str) -> ProgressRecord:
        """Clear a tenant's progress for one lesson."""
        async with self._locks.hold(username):
            record = await self.get_progress(username)
            record.reset(lesson)
            await self._progress_store.update(record)
        return record
