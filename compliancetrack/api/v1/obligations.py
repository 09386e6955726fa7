# compliancetrack/api/v1/obligations.py
from datetime import date, datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from compliancetrack.core.auth import get_db, get_current_user
from compliancetrack.core.tenancy import (
    ensure_company_read,
    ensure_company_write,
    ensure_obligation_read,
    ensure_obligation_write,
)
from compliancetrack.crud.obligation import (
    changed_since as crud_changed_since,
    deleted_since as crud_deleted_since,
    create_obligation as crud_create_obligation,
    delete_obligation as crud_delete_obligation,
    list_obligations as crud_list_obligations,
    update_obligation as crud_update_obligation,
)
from compliancetrack.models.user import User
from compliancetrack.schemas.obligation import (
    ObligationChangesOut,
    ObligationCreate,
    ObligationOut,
    ObligationUpdate,
)
from compliancetrack.services.dates import try_days_until_deadline
from compliancetrack.services.labels import normalize_category
from compliancetrack.services.risk import risk_tier

router = APIRouter()


def to_obligation_out(o, today: Optional[date] = None) -> ObligationOut:
    """ORM row -> response model with the per-read derived fields filled in."""
    today = today or date.today()
    out = ObligationOut.model_validate(o)
    days = try_days_until_deadline(o.deadline, today)
    out.days_until_deadline = days
    out.risk_tier = risk_tier(o.status, o.risk_level, days)
    out.is_overdue = o.status == "overdue" or (
        o.status != "completed" and days is not None and days < 0
    )
    return out


@router.get("/companies/{company_id}/obligations", response_model=List[ObligationOut])
def list_obligations(
    company_id: int,
    status_f: Optional[str] = Query(None, alias="status"),
    category: Optional[str] = Query(None),
    risk_level: Optional[str] = Query(None),
    search: Optional[str] = Query(None, description="Case-insensitive match on title/description."),
    sort_by: str = Query("deadline"),
    order: str = Query("asc"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_company_read(db, current_user, company_id)
    rows = crud_list_obligations(
        db,
        company_id,
        status=status_f,
        category=normalize_category(category) if category else None,
        risk_level=risk_level,
        search=search,
        sort_by=sort_by,
        order=order,
    )
    today = date.today()
    return [to_obligation_out(r, today) for r in rows]


@router.post(
    "/companies/{company_id}/obligations",
    response_model=ObligationOut,
    status_code=status.HTTP_201_CREATED,
)
def create_obligation(
    company_id: int,
    payload: ObligationCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_company_write(db, current_user, company_id)
    obj = crud_create_obligation(db, company_id, payload, user_id=current_user.id)
    return to_obligation_out(obj)


@router.get("/companies/{company_id}/obligations/changes", response_model=ObligationChangesOut)
def obligation_changes(
    company_id: int,
    since: datetime = Query(..., description="ISO timestamp of the previous poll (UTC)."),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Ids of obligations written or deleted after `since`; poll again with the
    returned server_time.
    """
    ensure_company_read(db, current_user, company_id)
    server_time = datetime.utcnow()
    if since.tzinfo is not None:
        # stored timestamps are naive UTC
        since = since.astimezone(timezone.utc).replace(tzinfo=None)
    return ObligationChangesOut(
        server_time=server_time,
        changed_ids=crud_changed_since(db, company_id, since),
        deleted_ids=crud_deleted_since(db, company_id, since),
    )


@router.get("/obligations/{obligation_id}", response_model=ObligationOut)
def get_obligation(
    obligation_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    obj, _ = ensure_obligation_read(db, current_user, obligation_id)
    return to_obligation_out(obj)


@router.patch("/obligations/{obligation_id}", response_model=ObligationOut)
def update_obligation(
    obligation_id: str,
    payload: ObligationUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    obj, _ = ensure_obligation_write(db, current_user, obligation_id)
    obj = crud_update_obligation(db, obj, payload)
    return to_obligation_out(obj)


@router.delete("/obligations/{obligation_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_obligation(
    obligation_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    obj, _ = ensure_obligation_write(db, current_user, obligation_id)
    crud_delete_obligation(db, obj)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
