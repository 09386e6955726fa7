"""initial schema: users, companies, members, invitations, obligations, comments, reminders, insight ledger

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-18 09:00:00
"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None

CATEGORIES = ("tax_financial", "licenses_permits", "regulatory_legal")
RECURRENCES = ("one_time", "monthly", "quarterly", "annual")
STATUSES = ("pending", "in_progress", "completed", "overdue")
SEVERITIES = ("low", "medium", "high")
ROLES = ("owner", "admin", "member", "viewer")


def _has_table(name: str) -> bool:
    return name in sa.inspect(op.get_bind()).get_table_names()


def upgrade():
    if not _has_table("users"):
        op.create_table(
            "users",
            sa.Column("id", sa.Integer, primary_key=True),
            sa.Column("email", sa.String(255), nullable=False),
            sa.Column("hashed_password", sa.String, nullable=False),
            sa.Column("full_name", sa.String(255), nullable=True),
            sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.text("1")),
            sa.Column("failed_login_attempts", sa.Integer, nullable=False, server_default=sa.text("0")),
            sa.Column("locked_until", sa.DateTime, nullable=True),
            sa.Column("last_login_at", sa.DateTime, nullable=True),
            sa.Column("created_at", sa.DateTime, nullable=False),
            sa.Column("updated_at", sa.DateTime, nullable=False),
        )
        op.create_index("ix_users_email", "users", ["email"], unique=True)
        op.create_index("ix_users_locked_until", "users", ["locked_until"])

    if not _has_table("companies"):
        op.create_table(
            "companies",
            sa.Column("id", sa.Integer, primary_key=True),
            sa.Column("name", sa.String(255), nullable=False),
            sa.Column("registration_number", sa.String(64), nullable=True),
            sa.Column("industry_sector", sa.String(100), nullable=True),
            sa.Column("address", sa.String(255), nullable=True),
            sa.Column("city", sa.String(100), nullable=True),
            sa.Column("country", sa.String(100), nullable=True),
            sa.Column("contact_email", sa.String(255), nullable=True),
            sa.Column("contact_phone", sa.String(50), nullable=True),
            sa.Column("responsible_person", sa.String(255), nullable=True),
            sa.Column("responsible_person_title", sa.String(255), nullable=True),
            sa.Column("employee_count", sa.Integer, nullable=True),
            sa.Column("created_at", sa.DateTime, nullable=False),
            sa.Column("updated_at", sa.DateTime, nullable=False),
        )
        op.create_index("ix_companies_id", "companies", ["id"])
        op.create_index("ix_companies_name", "companies", ["name"])
        op.create_index("ix_companies_registration_number", "companies", ["registration_number"])

    if not _has_table("company_members"):
        op.create_table(
            "company_members",
            sa.Column("id", sa.Integer, primary_key=True),
            sa.Column("company_id", sa.Integer, sa.ForeignKey("companies.id", ondelete="CASCADE"), nullable=False),
            sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
            sa.Column("role", sa.String(20), nullable=False),
            sa.Column("created_at", sa.DateTime, nullable=False),
            sa.UniqueConstraint("company_id", "user_id", name="uq_company_members_company_user"),
            sa.CheckConstraint(f"role IN {ROLES}", name="ck_company_members_role_allowed"),
        )
        op.create_index("ix_company_members_id", "company_members", ["id"])
        op.create_index("ix_company_members_company_id", "company_members", ["company_id"])
        op.create_index("ix_company_members_user_id", "company_members", ["user_id"])

    if not _has_table("company_invitations"):
        op.create_table(
            "company_invitations",
            sa.Column("id", sa.Integer, primary_key=True),
            sa.Column("company_id", sa.Integer, sa.ForeignKey("companies.id", ondelete="CASCADE"), nullable=False),
            sa.Column("email", sa.String(255), nullable=False),
            sa.Column("role", sa.String(20), nullable=False),
            sa.Column("invited_by", sa.Integer, sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
            sa.Column("accepted_at", sa.DateTime, nullable=True),
            sa.Column("created_at", sa.DateTime, nullable=False),
        )
        op.create_index("ix_company_invitations_id", "company_invitations", ["id"])
        op.create_index("ix_company_invitations_company_id", "company_invitations", ["company_id"])
        op.create_index("ix_company_invitations_email", "company_invitations", ["email"])
        op.create_index("ix_invitations_company_email", "company_invitations", ["company_id", "email"])

    if not _has_table("obligations"):
        op.create_table(
            "obligations",
            sa.Column("id", sa.String(32), primary_key=True),
            sa.Column("company_id", sa.Integer, sa.ForeignKey("companies.id", ondelete="CASCADE"), nullable=False),
            sa.Column("created_by", sa.Integer, sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
            sa.Column("title", sa.String(255), nullable=False),
            sa.Column("description", sa.Text, nullable=True),
            sa.Column("category", sa.String(30), nullable=False),
            sa.Column("deadline", sa.Date, nullable=False),
            sa.Column("recurrence", sa.String(20), nullable=False),
            sa.Column("status", sa.String(20), nullable=False),
            sa.Column("assigned_to", sa.String(255), nullable=True),
            sa.Column("risk_level", sa.String(10), nullable=False),
            sa.Column("notes", sa.Text, nullable=True),
            sa.Column("created_at", sa.DateTime, nullable=False),
            sa.Column("updated_at", sa.DateTime, nullable=False),
            sa.CheckConstraint(f"category IN {CATEGORIES}", name="ck_obligations_category_allowed"),
            sa.CheckConstraint(f"recurrence IN {RECURRENCES}", name="ck_obligations_recurrence_allowed"),
            sa.CheckConstraint(f"status IN {STATUSES}", name="ck_obligations_status_allowed"),
            sa.CheckConstraint(f"risk_level IN {SEVERITIES}", name="ck_obligations_risk_level_allowed"),
        )
        for col in ("company_id", "created_by", "title", "category", "deadline", "status", "updated_at"):
            op.create_index(f"ix_obligations_{col}", "obligations", [col])
        op.create_index("ix_obligations_company_deadline", "obligations", ["company_id", "deadline"])
        op.create_index("ix_obligations_company_status", "obligations", ["company_id", "status"])

    if not _has_table("obligation_comments"):
        op.create_table(
            "obligation_comments",
            sa.Column("id", sa.Integer, primary_key=True),
            sa.Column("obligation_id", sa.String(32), sa.ForeignKey("obligations.id", ondelete="CASCADE"), nullable=False),
            sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
            sa.Column("content", sa.Text, nullable=False),
            sa.Column("created_at", sa.DateTime, nullable=False),
            sa.Column("updated_at", sa.DateTime, nullable=False),
        )
        op.create_index("ix_obligation_comments_id", "obligation_comments", ["id"])
        op.create_index("ix_obligation_comments_obligation_id", "obligation_comments", ["obligation_id"])
        op.create_index("ix_obligation_comments_user_id", "obligation_comments", ["user_id"])

    if not _has_table("reminder_configs"):
        op.create_table(
            "reminder_configs",
            sa.Column("id", sa.Integer, primary_key=True),
            sa.Column("obligation_id", sa.String(32), sa.ForeignKey("obligations.id", ondelete="CASCADE"), nullable=False),
            sa.Column("reminder_days", sa.JSON, nullable=False),
            sa.Column("enabled", sa.Boolean, nullable=False),
        )
        op.create_index("ix_reminder_configs_id", "reminder_configs", ["id"])
        op.create_index("ix_reminder_configs_obligation_id", "reminder_configs", ["obligation_id"], unique=True)

    if not _has_table("insight_requests"):
        op.create_table(
            "insight_requests",
            sa.Column("id", sa.Integer, primary_key=True),
            sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
            sa.Column("company_id", sa.Integer, sa.ForeignKey("companies.id", ondelete="CASCADE"), nullable=True),
            sa.Column("kind", sa.String(30), nullable=False),
            sa.Column("created_at", sa.DateTime, nullable=False),
        )
        op.create_index("ix_insight_requests_user_created", "insight_requests", ["user_id", "created_at"])


def downgrade():
    for table in (
        "insight_requests",
        "reminder_configs",
        "obligation_comments",
        "obligations",
        "company_invitations",
        "company_members",
        "companies",
        "users",
    ):
        op.drop_table(table)
