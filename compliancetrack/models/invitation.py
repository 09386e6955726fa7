# compliancetrack/models/invitation.py
from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index

from compliancetrack.db.base import Base


class CompanyInvitation(Base):
    __tablename__ = "company_invitations"

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True)
    email = Column(String(255), nullable=False, index=True)  # stored lower-cased
    role = Column(String(20), nullable=False, default="viewer")
    invited_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    accepted_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        Index("ix_invitations_company_email", "company_id", "email"),
    )
