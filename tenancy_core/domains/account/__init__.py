# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Account domain package.

This package provides tenant account functionality including:
- Authentication lookups
- Idempotent per-tenant provisioning (account, progress, schema, migrations)
- Account listing
- Reading and updating tenant lesson progress
"""

from tenancy_core.domains.account.locks import KeyedLock
from tenancy_core.domains.account.models import (
    DEFAULT_ROLE,
    Account,
    AuthenticatedAccount,
    LessonProgress,
    MaterializationState,
    ProgressRecord,
    ProvisioningResult,
    ProvisioningStep,
)
from tenancy_core.domains.account.repository import (
    IdentityStore,
    MigrationRunner,
    MigrationRunnerFactory,
    ProgressStore,
    SchemaCreator,
)
from tenancy_core.domains.account.service import (
    USER_NOT_FOUND_MESSAGE,
    AccountNotFoundError,
    AccountService,
    AccountServiceError,
)

__all__ = [
    "AccountService",
    "AccountServiceError",
    "AccountNotFoundError",
    "USER_NOT_FOUND_MESSAGE",
    "Account",
    "AuthenticatedAccount",
    "MaterializationState",
    "DEFAULT_ROLE",
    "ProgressRecord",
    "LessonProgress",
    "ProvisioningResult",
    "ProvisioningStep",
    "IdentityStore",
    "ProgressStore",
    "SchemaCreator",
    "MigrationRunner",
    "MigrationRunnerFactory",
    "KeyedLock",
]
