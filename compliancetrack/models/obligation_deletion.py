# compliancetrack/models/obligation_deletion.py
from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index

from compliancetrack.db.base import Base


class ObligationDeletion(Base):
    """Tombstone written when an obligation is deleted; read by the change feed."""

    __tablename__ = "obligation_deletions"

    id = Column(Integer, primary_key=True)
    company_id = Column(Integer, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False)
    # no FK: the obligation row is gone
    obligation_id = Column(String(32), nullable=False)
    deleted_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        Index("ix_obligation_deletions_company_deleted", "company_id", "deleted_at"),
    )
