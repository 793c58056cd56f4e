# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest configuration and shared fixtures.

This module provides fixtures used across all test types:
- Unit tests
- Integration tests
"""

from typing import Any

import pytest


# =============================================================================
# Environment Fixtures
# =============================================================================


@pytest.fixture(scope="session")
def test_environment() -> dict[str, str]:
    """Provide test environment variables.

    Returns:
        Dictionary of environment variables for testing.
    """
    return {
        "ENVIRONMENT": "development",
        "DEBUG": "true",
        "LOG_LEVEL": "DEBUG",
        "DB_USER": "tenancy",
        "DB_PASSWORD": "tenancy_test_password",
        "DB_HOST": "localhost",
        "DB_PORT": "34001",
        "DB_DATABASE": "tenancy_test",
        "TENANT_SCHEMA_OWNER_ROLE": "dba",
    }


# =============================================================================
# Marker Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test (requires services)"
    )


# =============================================================================
# Helper Fixtures
# =============================================================================


@pytest.fixture
def sample_username() -> str:
    """Provide a sample tenant username."""
    return "testuser"


@pytest.fixture
def sample_credentials() -> dict[str, Any]:
    """Provide sample provisioning credentials."""
    return {
        "username": "carol",
        "password": "pw123",
    }
