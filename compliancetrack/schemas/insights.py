# compliancetrack/schemas/insights.py
from datetime import datetime
from typing import List, Optional, Literal

from pydantic import BaseModel, Field

InsightKind = Literal["risk_analysis", "compliance_score", "recommendations", "deadline_summary"]


class InsightRequestIn(BaseModel):
    kind: InsightKind
    obligation_ids: Optional[List[str]] = Field(
        None, description="Restrict the analysis to these obligations (default: all)."
    )


class InsightOut(BaseModel):
    kind: InsightKind
    insight: str
    generated_at: datetime
