# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""SQLAlchemy ORM models for the shared (public) schema.

Tables:
- accounts: one row per tenant account, keyed by username
- progress_records: one row per account, unique on username
"""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Declarative base for shared-schema tables."""

    pass


class AccountRow(Base):
    """Tenant account. Table: accounts."""

    __tablename__ = "accounts"

    # Usernames are case-sensitive, unvalidated, and may be empty
    username: Mapped[str] = mapped_column(Text, primary_key=True)
    password: Mapped[str] = mapped_column(Text, nullable=False)
    role: Mapped[str] = mapped_column(String(50), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )


class ProgressRecordRow(Base):
    """Per-tenant progress tracking. Table: progress_records."""

    __tablename__ = "progress_records"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(
        Text,
        ForeignKey("accounts.username", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    lessons: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
