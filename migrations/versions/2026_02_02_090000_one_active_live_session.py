"""Enforce one active live session per vendor

Revision ID: 20260202090000
Revises: 20260110120000
Create Date: 2026-02-02 09:00:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


revision = "20260202090000"
down_revision = "20260110120000"
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Older rows may already violate the rule; keep the newest active one.
    op.execute(
        """
        UPDATE vendor_live_sessions AS s
        SET is_active = false, end_time = now(), ended_by = 'admin'
        WHERE s.is_active
          AND EXISTS (
            SELECT 1 FROM vendor_live_sessions AS newer
            WHERE newer.vendor_id = s.vendor_id
              AND newer.is_active
              AND newer.start_time > s.start_time
          )
        """
    )
    op.create_index(
        "uq_vendor_live_sessions_one_active",
        "vendor_live_sessions",
        ["vendor_id"],
        unique=True,
        postgresql_where=sa.text("is_active"),
    )
    op.create_index(
        "vendor_live_sessions_auto_end_time_idx",
        "vendor_live_sessions",
        ["auto_end_time"],
    )


def downgrade() -> None:
    op.drop_index("vendor_live_sessions_auto_end_time_idx", table_name="vendor_live_sessions")
    op.drop_index("uq_vendor_live_sessions_one_active", table_name="vendor_live_sessions")
