# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Cross-cutting helpers for tenancy-core."""

from tenancy_core.utils.logging import get_logger, setup_logging, tenant_context

__all__ = [
    "setup_logging",
    "get_logger",
    "tenant_context",
]
