"""initial schema

Revision ID: 20260110120000
Revises: 
Create Date: 2026-01-10 12:00:00
"""
from __future__ import annotations

import sqlalchemy as sa
from alembic import op


revision = "20260110120000"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("email", sa.String(length=255), nullable=False, unique=True),
        sa.Column("full_name", sa.String(length=120)),
        sa.Column("password", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=8), nullable=False, server_default="customer"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "vendors",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=False, unique=True),
        sa.Column("business_name", sa.String(length=160), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("subcategory", sa.String(length=80)),
        sa.Column("contact_email", sa.String(length=255)),
        sa.Column("phone", sa.String(length=40)),
        sa.Column("address", sa.String(length=255)),
        sa.Column("city", sa.String(length=120)),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="pending"),
        sa.Column("approved_by", sa.Uuid(), sa.ForeignKey("users.id")),
        sa.Column("approved_at", sa.DateTime(timezone=True)),
        sa.Column("rejection_reason", sa.Text()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True)),
    )
    op.create_index("vendors_status_idx", "vendors", ["status"])

    op.create_table(
        "platform_settings",
        sa.Column("id", sa.Boolean(), primary_key=True, server_default=sa.true()),
        sa.Column("require_vendor_approval", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("allow_auto_vendor_approval", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("maintenance_mode", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("updated_at", sa.DateTime(timezone=True)),
        sa.CheckConstraint("id", name="ck_platform_settings_singleton"),
    )
    op.execute("INSERT INTO platform_settings (id) VALUES (true)")

    op.create_table(
        "vendor_live_sessions",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("vendor_id", sa.Uuid(), sa.ForeignKey("vendors.id"), nullable=False),
        sa.Column("latitude", sa.Float()),
        sa.Column("longitude", sa.Float()),
        sa.Column("address", sa.String(length=255)),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_time", sa.DateTime(timezone=True)),
        sa.Column("auto_end_time", sa.DateTime(timezone=True)),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("ended_by", sa.String(length=20)),
        sa.Column("estimated_customers", sa.Integer()),
        sa.Column("was_scheduled_duration", sa.Integer()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint(
            "ended_by is null or ended_by in ('vendor','timer','admin')",
            name="ck_vendor_live_sessions_ended_by",
        ),
    )
    op.create_index("vendor_live_sessions_vendor_id_idx", "vendor_live_sessions", ["vendor_id"])


def downgrade() -> None:
    op.drop_index("vendor_live_sessions_vendor_id_idx", table_name="vendor_live_sessions")
    op.drop_table("vendor_live_sessions")
    op.drop_table("platform_settings")
    op.drop_index("vendors_status_idx", table_name="vendors")
    op.drop_table("vendors")
    op.drop_table("users")
