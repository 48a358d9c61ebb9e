"""blocked ips and user status

Revision ID: 8f3d2b61c0a7
Revises: 5c1e7a90b2d4
Create Date: 2026-10-19 15:40:07.332918

"""
from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "8f3d2b61c0a7"
down_revision: str | Sequence[str] | None = "5c1e7a90b2d4"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Add the blocked_ip table and account status columns."""
    op.create_table(
        "blocked_ip",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("ip", sa.String(length=64), nullable=False),
        sa.Column("reason", sa.Text(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("blocked_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("blocked_by", sa.String(length=64), nullable=True),
        sa.Column("unblocked_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("unblocked_by", sa.String(length=64), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_blocked_ip_ip", "blocked_ip", ["ip"])
    op.create_index("ix_blocked_ip_is_active", "blocked_ip", ["is_active"])

    with op.batch_alter_table("app_user") as batch_op:
        batch_op.add_column(
            sa.Column("status", sa.String(length=16), nullable=False, server_default="active")
        )
        batch_op.add_column(sa.Column("status_reason", sa.Text(), nullable=True))
        batch_op.add_column(
            sa.Column("status_updated_at", sa.DateTime(timezone=True), nullable=True)
        )
        batch_op.create_index("ix_app_user_status", ["status"])


def downgrade() -> None:
    """Drop account status columns and the blocked_ip table."""
    with op.batch_alter_table("app_user") as batch_op:
        batch_op.drop_index("ix_app_user_status")
        batch_op.drop_column("status_updated_at")
        batch_op.drop_column("status_reason")
        batch_op.drop_column("status")

    op.drop_index("ix_blocked_ip_is_active", table_name="blocked_ip")
    op.drop_index("ix_blocked_ip_ip", table_name="blocked_ip")
    op.drop_table("blocked_ip")
