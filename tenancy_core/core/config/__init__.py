# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Configuration package for tenancy-core.

Settings are loaded from environment variables (and an optional ``.env``
file) through pydantic-settings.

Example:
    >>> from tenancy_core.core.config import get_settings
    >>> settings = get_settings()
    >>> settings.tenant_schema.owner_role
    'dba'
"""

from tenancy_core.core.config.settings import (
    DatabaseSettings,
    Settings,
    TenantSchemaSettings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    "Settings",
    "get_settings",
    "clear_settings_cache",
    "DatabaseSettings",
    "TenantSchemaSettings",
]
