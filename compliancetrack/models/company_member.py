# compliancetrack/models/company_member.py
from datetime import datetime

from sqlalchemy import (
    Column, Integer, String, DateTime, ForeignKey, CheckConstraint, UniqueConstraint
)
from sqlalchemy.orm import relationship

from compliancetrack.db.base import Base

# owner > admin > member > viewer
COMPANY_ROLES = ("owner", "admin", "member", "viewer")


class CompanyMember(Base):
    __tablename__ = "company_members"

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(String(20), nullable=False, default="viewer")

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    company = relationship("Company", back_populates="members")
    user = relationship("User", lazy="joined")

    __table_args__ = (
        UniqueConstraint("company_id", "user_id", name="uq_company_members_company_user"),
        CheckConstraint(f"role IN {COMPANY_ROLES}", name="ck_company_members_role_allowed"),
    )

    def __repr__(self) -> str:
        return f"<CompanyMember company={self.company_id} user={self.user_id} role={self.role}>"
