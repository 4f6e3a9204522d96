"""library plans catalog

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa


revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "library_plans",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("discipline", sa.String(length=20), nullable=False),
        sa.Column("duration_weeks", sa.Integer(), nullable=False),
        sa.Column("tags", sa.JSON(), nullable=False),
        sa.Column("template", sa.JSON(), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="published"),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("duration_weeks >= 1", name="ck_library_plans_duration_weeks"),
        sa.CheckConstraint("status in ('draft','published')", name="ck_library_plans_status"),
    )
    op.create_index("ix_library_plans_discipline_status", "library_plans", ["discipline", "status"])


def downgrade() -> None:
    op.drop_index("ix_library_plans_discipline_status", table_name="library_plans")
    op.drop_table("library_plans")
