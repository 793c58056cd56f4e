# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Add assignment attempts.

Revision ID: 002_add_assignment_attempts
Revises: 001_initial_lesson_tables
Create Date: 2025-01-20
"""

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "002_add_assignment_attempts"
down_revision: str = "001_initial_lesson_tables"


def upgrade() -> None:
    """Add assignment_attempts table."""
    op.create_table(
        "assignment_attempts",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=False),
            server_default=sa.text("gen_random_uuid()"),
            primary_key=True,
        ),
        sa.Column(
            "lesson_state_id",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("lesson_states.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("assignment", sa.String(100), nullable=False),
        sa.Column("solved", sa.Boolean, nullable=False, server_default="false"),
        sa.Column(
            "submitted_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
    )
    op.create_index(
        "ix_assignment_attempts_lesson_state_id",
        "assignment_attempts",
        ["lesson_state_id"],
    )


def downgrade() -> None:
    """Drop assignment_attempts table."""
    op.drop_index("ix_assignment_attempts_lesson_state_id", table_name="assignment_attempts")
    op.drop_table("assignment_attempts")
