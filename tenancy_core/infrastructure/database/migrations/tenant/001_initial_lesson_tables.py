# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Initial tenant schema.

Tables are created unqualified; the runner pins search_path to the
tenant schema.

Revision ID: 001_initial_lesson_tables
Revises: None
Create Date: 2025-01-06
"""

from typing import Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "001_initial_lesson_tables"
down_revision: Union[str, None] = None


def upgrade() -> None:
    """Create lesson state tables."""
    op.create_table(
        "lesson_states",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=False),
            server_default=sa.text("gen_random_uuid()"),
            primary_key=True,
        ),
        sa.Column("lesson", sa.String(100), unique=True, nullable=False),
        sa.Column("payload", postgresql.JSONB, nullable=False, server_default="{}"),
        sa.Column(
            "started_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
    )


def downgrade() -> None:
    """Drop lesson state tables."""
    op.drop_table("lesson_states")
