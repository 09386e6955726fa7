# compliancetrack/api/v1/insights.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from compliancetrack.core.auth import get_db, get_current_user
from compliancetrack.core.tenancy import ensure_company_read
from compliancetrack.crud.company import get_company
from compliancetrack.crud.obligation import list_obligations
from compliancetrack.models.user import User
from compliancetrack.schemas.insights import InsightOut, InsightRequestIn
from compliancetrack.services import insights as insights_service

router = APIRouter()


@router.post("/companies/{company_id}/insights", response_model=InsightOut)
def create_insight(
    company_id: int,
    payload: InsightRequestIn,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Free-text AI analysis of the tenant's obligations. Advisory only: nothing
    stored is changed. 429 when the per-user limit or the gateway throttles,
    402 when gateway credits are exhausted, 502/503 on gateway failure.
    """
    ensure_company_read(db, current_user, company_id)
    rows = list_obligations(db, company_id, ids=payload.obligation_ids)
    result = insights_service.generate_insight(
        db,
        user_id=current_user.id,
        company=get_company(db, company_id),
        kind=payload.kind,
        obligations=rows,
    )
    return InsightOut(**result)
