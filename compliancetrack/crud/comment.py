# compliancetrack/crud/comment.py
from typing import List, Optional

from sqlalchemy.orm import Session

from compliancetrack.models.obligation_comment import ObligationComment


def list_comments(db: Session, obligation_id: str) -> List[ObligationComment]:
    return (
        db.query(ObligationComment)
        .filter(ObligationComment.obligation_id == obligation_id)
        .order_by(ObligationComment.created_at.asc(), ObligationComment.id.asc())
        .all()
    )


def get_comment(db: Session, comment_id: int) -> Optional[ObligationComment]:
    return db.get(ObligationComment, comment_id)


def create_comment(db: Session, obligation_id: str, user_id: int, content: str) -> ObligationComment:
    obj = ObligationComment(obligation_id=obligation_id, user_id=user_id, content=content)
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


def update_comment(db: Session, obj: ObligationComment, content: str) -> ObligationComment:
    obj.content = content
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


def delete_comment(db: Session, obj: ObligationComment) -> None:
    db.delete(obj)
    db.commit()
