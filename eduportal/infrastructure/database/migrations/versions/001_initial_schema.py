# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Initial schema: users and parent-student links.

Creates the users table (one live session token per account) and the
parent_student_links table with its unique (parent, student) pair and
cascading foreign keys.

Revision ID: 001_initial_schema
Revises:
Create Date: 2025-01-15
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create users and parent_student_links."""

    op.create_table(
        "users",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("username", sa.String(50), nullable=False),
        sa.Column("email", sa.String(100), nullable=False),
        sa.Column("password", sa.String(255), nullable=False),
        sa.Column("salt", sa.String(255), nullable=False),
        sa.Column("token", sa.String(255), nullable=True),
        sa.Column("role", sa.String(20), nullable=False),
        # 'school', 'university'; students only
        sa.Column("student_type", sa.String(20), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.UniqueConstraint("username", name="users_username_key"),
        sa.UniqueConstraint("email", name="users_email_key"),
        sa.CheckConstraint(
            "role IN ('admin', 'teacher', 'student', 'parent')",
            name="valid_user_role",
        ),
        sa.CheckConstraint(
            "student_type IN ('school', 'university') OR student_type IS NULL",
            name="valid_student_type",
        ),
    )
    op.create_index("ix_users_token", "users", ["token"])
    op.create_index("ix_users_role", "users", ["role"])

    op.create_table(
        "parent_student_links",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("parent_id", sa.Integer, nullable=False),
        sa.Column("student_id", sa.Integer, nullable=False),
        sa.Column(
            "status",
            sa.String(20),
            server_default="pending",
            nullable=False,
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["parent_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["student_id"], ["users.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("parent_id", "student_id", name="uq_parent_student_pair"),
        sa.CheckConstraint(
            "status IN ('pending', 'accepted', 'rejected')",
            name="valid_link_status",
        ),
    )
    op.create_index(
        "ix_parent_student_links_parent_id", "parent_student_links", ["parent_id"]
    )
    op.create_index(
        "ix_parent_student_links_student_id", "parent_student_links", ["student_id"]
    )
    op.create_index(
        "ix_parent_student_links_status", "parent_student_links", ["status"]
    )


def downgrade() -> None:
    """Drop parent_student_links and users."""
    op.drop_table("parent_student_links")
    op.drop_table("users")
