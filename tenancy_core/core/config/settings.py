# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Runtime configuration for tenancy-core.

Every group of options is its own BaseSettings class with its own environment
prefix (DB_, TENANT_SCHEMA_). Settings nests them and adds the process-wide
switches; a .env file in the working directory is honoured.

Example:
    >>> settings = get_settings()
    >>> settings.tenant_schema.owner_role
    'dba'
"""

from functools import lru_cache
from typing import Literal, Self

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_DB_PASSWORD = "tenancy_password"


class DatabaseSettings(BaseSettings):
    """Connection to the PostgreSQL database shared by all tenants.

    Accounts and progress records live in the default schema; each
    provisioned account additionally owns a schema named after it.

    Attributes:
        user: Login role.
        password: Login password.
        host: Server host.
        port: Server port.
        database: Database name.
        pool_size: Persistent connections kept by the engine.
        max_overflow: Extra connections allowed under load.
    """

    model_config = SettingsConfigDict(env_prefix="DB_", extra="ignore")

    user: str = "tenancy"
    password: SecretStr = SecretStr(DEFAULT_DB_PASSWORD)
    host: str = "localhost"
    port: int = 5432
    database: str = "tenancy"
    pool_size: int = 10
    max_overflow: int = 20

    def _dsn(self, scheme: str) -> str:
        secret = self.password.get_secret_value()
        return f"{scheme}://{self.user}:{secret}@{self.host}:{self.port}/{self.database}"

    @property
    def url(self) -> str:
        """asyncpg URL used by the application engine."""
        return self._dsn("postgresql+asyncpg")

    @property
    def sync_url(self) -> str:
        """Plain libpq URL for psql-style tooling."""
        return self._dsn("postgresql")


class TenantSchemaSettings(BaseSettings):
    """How tenant schemas are created.

    Attributes:
        owner_role: Role named in the AUTHORIZATION clause.
        validate_identifiers: Refuse usernames containing a double quote or
            NUL instead of sending them to the server.
        tolerate_existing: Accept an already existing schema.
        status_history: Usernames whose latest provisioning status is kept.
    """

    model_config = SettingsConfigDict(env_prefix="TENANT_SCHEMA_", extra="ignore")

    owner_role: str = "dba"
    validate_identifiers: bool = False
    tolerate_existing: bool = False
    status_history: int = Field(default=1000, ge=1)


class Settings(BaseSettings):
    """Top-level settings object.

    Attributes:
        environment: Deployment stage.
        debug: Human-readable logs even outside development.
        log_level: Minimum level for tenancy_core loggers.
        database: Shared database connection.
        tenant_schema: Tenant schema creation options.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = True
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "DEBUG"

    # Nested groups read their own prefixed variables
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    tenant_schema: TenantSchemaSettings = Field(default_factory=TenantSchemaSettings)

    @model_validator(mode="after")
    def reject_default_password_in_production(self) -> Self:
        """Refuse to start production with the shipped database password."""
        if self.is_production and self.database.password.get_secret_value() == DEFAULT_DB_PASSWORD:
            raise ValueError(
                "Database password must be changed from default in production. "
                "Set DB_PASSWORD environment variable."
            )
        return self

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings once per process; see clear_settings_cache()."""
    return Settings()


def clear_settings_cache() -> None:
    """Forget the loaded settings so the next get_settings() re-reads the environment."""
    get_settings.cache_clear()
