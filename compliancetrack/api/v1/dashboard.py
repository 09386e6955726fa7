# compliancetrack/api/v1/dashboard.py
from datetime import date

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from compliancetrack.api.v1.obligations import to_obligation_out
from compliancetrack.core.auth import get_db, get_current_user
from compliancetrack.core.tenancy import ensure_company_read
from compliancetrack.crud.obligation import list_obligations
from compliancetrack.models.user import User
from compliancetrack.schemas.dashboard import (
    DashboardOut,
    DashboardStats,
    RiskIndicatorsOut,
    RiskMatrixCell,
    UpcomingItem,
)
from compliancetrack.services.dashboard import compute_dashboard_stats, upcoming
from compliancetrack.services.risk import RISK_TIERS, obligation_risk, risk_matrix, risk_score

router = APIRouter()


@router.get("/companies/{company_id}/dashboard", response_model=DashboardOut)
def company_dashboard(
    company_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Summary counters, breakdowns and the next deadlines, recomputed on every call."""
    ensure_company_read(db, current_user, company_id)
    today = date.today()
    rows = list_obligations(db, company_id)

    return DashboardOut(
        company_id=company_id,
        stats=DashboardStats(**compute_dashboard_stats(rows, today)),
        upcoming=[
            UpcomingItem(
                obligation=to_obligation_out(item["obligation"], today),
                days_until_deadline=item["days_until_deadline"],
                risk_tier=item["risk_tier"],
            )
            for item in upcoming(rows, today)
        ],
    )


@router.get("/companies/{company_id}/risk-indicators", response_model=RiskIndicatorsOut)
def risk_indicators(
    company_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_company_read(db, current_user, company_id)
    today = date.today()
    rows = list_obligations(db, company_id)

    tiers = [obligation_risk(r, today) for r in rows]
    grouped = {tier: [] for tier in RISK_TIERS}
    for r, tier in zip(rows, tiers):
        grouped[tier].append(to_obligation_out(r, today))

    return RiskIndicatorsOut(
        company_id=company_id,
        risk_score=risk_score(tiers),
        counts={tier: len(grouped[tier]) for tier in RISK_TIERS},
        high=grouped["high"],
        medium=grouped["medium"],
        low=grouped["low"],
        matrix=[RiskMatrixCell(**c) for c in risk_matrix(rows, today)],
    )
