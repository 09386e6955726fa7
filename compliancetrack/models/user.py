# compliancetrack/models/user.py
from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, Boolean, text

from compliancetrack.db.base import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)

    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    full_name = Column(String(255), nullable=True)
    is_active = Column(Boolean, nullable=False, server_default=text("1"), default=True)

    # Sign-in metrics / lockout
    failed_login_attempts = Column(Integer, nullable=False, server_default=text("0"), default=0)
    locked_until = Column(DateTime, nullable=True, index=True)
    last_login_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r}>"
