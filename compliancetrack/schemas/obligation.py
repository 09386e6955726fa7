# compliancetrack/schemas/obligation.py
from datetime import date, datetime
from typing import List, Optional, Literal

from pydantic import BaseModel, Field, ConfigDict, constr, field_validator

from compliancetrack.services.labels import normalize_category

ObligationCategory = Literal["tax_financial", "licenses_permits", "regulatory_legal"]
ObligationRecurrence = Literal["one_time", "monthly", "quarterly", "annual"]
ObligationStatus = Literal["pending", "in_progress", "completed", "overdue"]
PenaltySeverity = Literal["low", "medium", "high"]
RiskTier = Literal["low", "medium", "high"]


class ObligationBase(BaseModel):
    title: constr(strip_whitespace=True, min_length=1, max_length=255) = Field(
        ..., description="Short obligation label."
    )
    description: Optional[str] = Field(None, description="Free-text description.")
    category: ObligationCategory = Field(
        ..., description="tax_financial | licenses_permits | regulatory_legal (tax/license/regulatory accepted)."
    )
    deadline: date = Field(..., description="Calendar deadline (YYYY-MM-DD).")
    recurrence: ObligationRecurrence = Field(
        "one_time", description="Descriptive only; no instances are generated."
    )
    status: ObligationStatus = Field("pending", description="Any status may be set at any time.")
    assigned_to: Optional[constr(strip_whitespace=True, max_length=255)] = Field(
        None, description="Free-text responsible party."
    )
    risk_level: PenaltySeverity = Field(
        "medium", description="Penalty severity (input to the computed risk tier)."
    )
    notes: Optional[str] = Field(None, description="Freeform notes.")

    @field_validator("category", mode="before")
    @classmethod
    def _normalize_category(cls, v):
        return normalize_category(v) if isinstance(v, str) else v


class ObligationCreate(ObligationBase):
    pass


class ObligationUpdate(BaseModel):
    # All optional for PATCH
    title: Optional[constr(strip_whitespace=True, min_length=1, max_length=255)] = None
    description: Optional[str] = None
    category: Optional[ObligationCategory] = None
    deadline: Optional[date] = None
    recurrence: Optional[ObligationRecurrence] = None
    status: Optional[ObligationStatus] = None
    assigned_to: Optional[constr(strip_whitespace=True, max_length=255)] = None
    risk_level: Optional[PenaltySeverity] = None
    notes: Optional[str] = None

    @field_validator("category", mode="before")
    @classmethod
    def _normalize_category(cls, v):
        return normalize_category(v) if isinstance(v, str) else v


class ObligationOut(ObligationBase):
    model_config = ConfigDict(from_attributes=True)

    id: str
    company_id: int
    created_by: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    # derived per read, never stored
    days_until_deadline: Optional[int] = None
    risk_tier: Optional[RiskTier] = None
    is_overdue: bool = False


class ObligationChangesOut(BaseModel):
    server_time: datetime
    changed_ids: List[str]
    deleted_ids: List[str] = []
