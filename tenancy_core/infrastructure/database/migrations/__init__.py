# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Database migrations package.

Tenant migrations live in the ``tenant`` package and are applied per tenant
schema by ``runner.TenantMigrationRunner``.
"""
