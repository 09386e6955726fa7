# compliancetrack/models/insight_request.py
from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index

from compliancetrack.db.base import Base


class InsightRequest(Base):
    """
    One row per accepted AI insight call.
    Acts as the shared sliding-window ledger for the per-user rate limit, so
    every app instance pointing at the same database sees the same counters.
    """

    __tablename__ = "insight_requests"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    company_id = Column(Integer, ForeignKey("companies.id", ondelete="CASCADE"), nullable=True)
    kind = Column(String(30), nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        Index("ix_insight_requests_user_created", "user_id", "created_at"),
    )
