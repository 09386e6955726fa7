"""obligation_deletions: tombstones for the change feed

Revision ID: 0002_obligation_deletions
Revises: 0001_initial
Create Date: 2026-10-18 15:00:00
"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "0002_obligation_deletions"
down_revision = "0001_initial"
branch_labels = None
depends_on = None


def _has_table(name: str) -> bool:
    return name in sa.inspect(op.get_bind()).get_table_names()


def upgrade():
    if not _has_table("obligation_deletions"):
        op.create_table(
            "obligation_deletions",
            sa.Column("id", sa.Integer, primary_key=True),
            sa.Column("company_id", sa.Integer, sa.ForeignKey("companies.id", ondelete="CASCADE"), nullable=False),
            sa.Column("obligation_id", sa.String(32), nullable=False),
            sa.Column("deleted_at", sa.DateTime, nullable=False),
        )
        op.create_index(
            "ix_obligation_deletions_company_deleted",
            "obligation_deletions",
            ["company_id", "deleted_at"],
        )


def downgrade():
    op.drop_table("obligation_deletions")
