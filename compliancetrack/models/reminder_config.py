# compliancetrack/models/reminder_config.py
from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, JSON
from sqlalchemy.orm import relationship

from compliancetrack.db.base import Base

DEFAULT_REMINDER_DAYS = [30, 14, 7, 1]


class ReminderConfig(Base):
    """Per-obligation reminder schedule (days before the deadline)."""

    __tablename__ = "reminder_configs"

    id = Column(Integer, primary_key=True, index=True)
    obligation_id = Column(
        String(32),
        ForeignKey("obligations.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )
    reminder_days = Column(JSON, nullable=False, default=lambda: list(DEFAULT_REMINDER_DAYS))
    enabled = Column(Boolean, nullable=False, default=True)

    obligation = relationship("Obligation", back_populates="reminder")
