# compliancetrack/crud/user.py
from typing import Optional

from sqlalchemy.orm import Session

from compliancetrack.core.security import get_password_hash
from compliancetrack.models.user import User
from compliancetrack.schemas.user import UserCreate


def get_user(db: Session, user_id: int) -> Optional[User]:
    return db.get(User, user_id)


def create_user(db: Session, data: UserCreate) -> User:
    obj = User(
        email=data.email.strip().lower(),
        hashed_password=get_password_hash(data.password),
        full_name=data.full_name,
        is_active=True,
    )
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj
