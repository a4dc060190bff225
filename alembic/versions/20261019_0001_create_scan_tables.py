"""create page_configurations and scan_reports tables

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 09:00:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "page_configurations",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("page_name", sa.String(length=255), nullable=False),
        sa.Column(
            "cms_source_id",
            sa.String(length=2048),
            nullable=False,
            comment="CMS page URL or path relative to CMS_BASE_URL",
        ),
        sa.Column("active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_page_configurations"),
        sa.UniqueConstraint("page_name", name="uq_page_configurations_page_name"),
    )
    op.create_index("ix_page_configurations_active", "page_configurations", ["active"], unique=False)

    op.create_table(
        "scan_reports",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("page_name", sa.String(length=255), nullable=False),
        sa.Column("cms_source_id", sa.String(length=2048), nullable=False),
        sa.Column("total_components", sa.Integer(), nullable=False),
        sa.Column("components_with_anomalies", sa.Integer(), nullable=False),
        sa.Column("total_anomalies", sa.Integer(), nullable=False),
        sa.Column("component_results", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False, comment="completed, error"),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column(
            "cms_is_fallback",
            sa.Boolean(),
            nullable=False,
            comment="True when the page layout came from the CMS fallback document",
        ),
        sa.Column("scan_time", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_scan_reports"),
    )
    op.create_index("ix_scan_reports_page_name", "scan_reports", ["page_name"], unique=False)
    op.create_index("ix_scan_reports_scan_time", "scan_reports", ["scan_time"], unique=False)
    op.create_index(
        "ix_scan_reports_page_name_scan_time",
        "scan_reports",
        ["page_name", "scan_time"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_scan_reports_page_name_scan_time", table_name="scan_reports")
    op.drop_index("ix_scan_reports_scan_time", table_name="scan_reports")
    op.drop_index("ix_scan_reports_page_name", table_name="scan_reports")
    op.drop_table("scan_reports")
    op.drop_index("ix_page_configurations_active", table_name="page_configurations")
    op.drop_table("page_configurations")
