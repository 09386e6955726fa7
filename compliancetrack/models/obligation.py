# compliancetrack/models/obligation.py
import uuid
from datetime import datetime

from sqlalchemy import (
    Column, Integer, String, Text, Date, DateTime, ForeignKey,
    CheckConstraint, Index
)
from sqlalchemy.orm import relationship

from compliancetrack.db.base import Base

# NOTE: keep simple string "enums" for SQLite portability
OBLIGATION_CATEGORIES = ("tax_financial", "licenses_permits", "regulatory_legal")
OBLIGATION_RECURRENCES = ("one_time", "monthly", "quarterly", "annual")
OBLIGATION_STATUSES = ("pending", "in_progress", "completed", "overdue")
PENALTY_SEVERITIES = ("low", "medium", "high")


def _new_id() -> str:
    return uuid.uuid4().hex


class Obligation(Base):
    __tablename__ = "obligations"

    id = Column(String(32), primary_key=True, default=_new_id)

    company_id = Column(Integer, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True)
    # owning user; deadline e-mails are grouped by this column
    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    title = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=True)

    # tax_financial | licenses_permits | regulatory_legal
    category = Column(String(30), nullable=False, index=True)
    deadline = Column(Date, nullable=False, index=True)
    # one_time | monthly | quarterly | annual (descriptive only)
    recurrence = Column(String(20), nullable=False, default="one_time")
    # pending | in_progress | completed | overdue
    status = Column(String(20), nullable=False, default="pending", index=True)

    assigned_to = Column(String(255), nullable=True)
    # penalty severity (input to the computed risk tier)
    risk_level = Column(String(10), nullable=False, default="medium")
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow, index=True)

    company = relationship("Company")
    owner = relationship("User", foreign_keys=[created_by])
    comments = relationship(
        "ObligationComment",
        back_populates="obligation",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ObligationComment.created_at",
    )
    reminder = relationship(
        "ReminderConfig",
        back_populates="obligation",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        CheckConstraint(f"category IN {OBLIGATION_CATEGORIES}", name="ck_obligations_category_allowed"),
        CheckConstraint(f"recurrence IN {OBLIGATION_RECURRENCES}", name="ck_obligations_recurrence_allowed"),
        CheckConstraint(f"status IN {OBLIGATION_STATUSES}", name="ck_obligations_status_allowed"),
        CheckConstraint(f"risk_level IN {PENALTY_SEVERITIES}", name="ck_obligations_risk_level_allowed"),
        Index("ix_obligations_company_deadline", "company_id", "deadline"),
        Index("ix_obligations_company_status", "company_id", "status"),
    )

    def __repr__(self) -> str:
        return f"<Obligation id={self.id} title={self.title!r} status={self.status} deadline={self.deadline}>"
