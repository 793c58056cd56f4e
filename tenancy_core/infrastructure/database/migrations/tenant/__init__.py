# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Per-tenant schema migrations, applied in the order of TENANT_MIGRATIONS."""
