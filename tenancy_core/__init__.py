"""tenancy-core.

Per-tenant account provisioning and authentication for multi-tenant
applications in which every account owns an isolated PostgreSQL schema.

Copyright (C) 2025 Global Digital Labs (gdlabs.io)
SPDX-License-Identifier: LGPL-3.0-or-later
"""

__version__ = "0.1.0"
