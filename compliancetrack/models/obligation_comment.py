# compliancetrack/models/obligation_comment.py
from datetime import datetime

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from compliancetrack.db.base import Base


class ObligationComment(Base):
    __tablename__ = "obligation_comments"

    id = Column(Integer, primary_key=True, index=True)
    obligation_id = Column(
        String(32), ForeignKey("obligations.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    content = Column(Text, nullable=False)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    obligation = relationship("Obligation", back_populates="comments")
    author = relationship("User", lazy="joined")
