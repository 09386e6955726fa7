# compliancetrack/schemas/dashboard.py
from typing import Dict, List

from pydantic import BaseModel

from compliancetrack.schemas.obligation import ObligationOut, RiskTier


class DashboardStats(BaseModel):
    total_obligations: int
    upcoming_in_7_days: int
    upcoming_in_30_days: int
    upcoming_in_90_days: int
    overdue_count: int
    completed_count: int
    compliance_score: int
    by_category: Dict[str, int]
    by_status: Dict[str, int]
    by_risk: Dict[str, int]


class UpcomingItem(BaseModel):
    obligation: ObligationOut
    days_until_deadline: int
    risk_tier: RiskTier


class DashboardOut(BaseModel):
    company_id: int
    stats: DashboardStats
    upcoming: List[UpcomingItem]


class RiskMatrixCell(BaseModel):
    likelihood: RiskTier
    impact: RiskTier
    count: int
    obligation_ids: List[str]


class RiskIndicatorsOut(BaseModel):
    company_id: int
    risk_score: int
    counts: Dict[str, int]
    high: List[ObligationOut]
    medium: List[ObligationOut]
    low: List[ObligationOut]
    matrix: List[RiskMatrixCell]
