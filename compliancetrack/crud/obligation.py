# compliancetrack/crud/obligation.py
from datetime import datetime
from typing import List, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from compliancetrack.models.obligation import Obligation
from compliancetrack.models.obligation_deletion import ObligationDeletion
from compliancetrack.schemas.obligation import ObligationCreate, ObligationUpdate


def get_obligation(db: Session, obligation_id: str) -> Optional[Obligation]:
    return db.query(Obligation).filter(Obligation.id == obligation_id).first()


def list_obligations(
    db: Session,
    company_id: int,
    status: Optional[str] = None,
    category: Optional[str] = None,
    risk_level: Optional[str] = None,
    search: Optional[str] = None,   # partial, case-insensitive on title/description
    ids: Optional[List[str]] = None,
    sort_by: str = "deadline",
    order: str = "asc",
) -> List[Obligation]:
    q = db.query(Obligation).filter(Obligation.company_id == company_id)

    if status:
        q = q.filter(Obligation.status == status)
    if category:
        q = q.filter(Obligation.category == category)
    if risk_level:
        q = q.filter(Obligation.risk_level == risk_level)
    if ids is not None:
        q = q.filter(Obligation.id.in_(ids))
    if search:
        like_value = f"%{search.strip().lower()}%"
        q = q.filter(
            or_(
                func.lower(Obligation.title).like(like_value),
                func.lower(Obligation.description).like(like_value),
            )
        )

    allowed_sort_cols = {
        "title": Obligation.title,
        "category": Obligation.category,
        "deadline": Obligation.deadline,
        "status": Obligation.status,
        "risk_level": Obligation.risk_level,
        "created_at": Obligation.created_at,
        "updated_at": Obligation.updated_at,
    }
    sort_col = allowed_sort_cols.get(sort_by, Obligation.deadline)
    if (order or "asc").lower() == "desc":
        sort_col = sort_col.desc()

    # stable ordering: tie-break by creation time, then id
    return q.order_by(sort_col, Obligation.created_at.asc(), Obligation.id.asc()).all()


def list_open_obligations_due_by(db: Session, last_day) -> List[Obligation]:
    """Not-completed obligations of every tenant due on or before last_day."""
    return (
        db.query(Obligation)
        .filter(Obligation.status != "completed", Obligation.deadline <= last_day)
        .order_by(Obligation.deadline.asc(), Obligation.id.asc())
        .all()
    )


def changed_since(db: Session, company_id: int, since: datetime) -> List[str]:
    rows = (
        db.query(Obligation.id)
        .filter(Obligation.company_id == company_id, Obligation.updated_at > since)
        .order_by(Obligation.updated_at.asc(), Obligation.id.asc())
        .all()
    )
    return [oid for (oid,) in rows]


def deleted_since(db: Session, company_id: int, since: datetime) -> List[str]:
    rows = (
        db.query(ObligationDeletion.obligation_id)
        .filter(ObligationDeletion.company_id == company_id, ObligationDeletion.deleted_at > since)
        .order_by(ObligationDeletion.deleted_at.asc(), ObligationDeletion.id.asc())
        .all()
    )
    return [oid for (oid,) in rows]


def create_obligation(
    db: Session, company_id: int, payload: ObligationCreate, user_id: Optional[int] = None
) -> Obligation:
    obj = Obligation(
        company_id=company_id,
        created_by=user_id,
        **payload.model_dump(),
    )
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


def update_obligation(db: Session, obj: Obligation, payload: ObligationUpdate) -> Obligation:
    data = payload.model_dump(exclude_unset=True)
    for k, v in data.items():
        # required columns cannot be cleared by an explicit null
        if v is None and k in {"title", "category", "deadline", "recurrence", "status", "risk_level"}:
            continue
        setattr(obj, k, v)

    # last write wins; always touch updated_at so the change feed sees it
    obj.updated_at = datetime.utcnow()
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


def delete_obligation(db: Session, obj: Obligation) -> None:
    # tombstone in the same transaction so the change feed sees the delete
    db.add(ObligationDeletion(company_id=obj.company_id, obligation_id=obj.id))
    db.delete(obj)
    db.commit()
