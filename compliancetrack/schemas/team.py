# compliancetrack/schemas/team.py
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, ConfigDict

from compliancetrack.schemas.company import CompanyRole


class MemberOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    company_id: int
    user_id: int
    role: CompanyRole
    email: Optional[str] = None
    full_name: Optional[str] = None
    created_at: datetime


class MemberRoleUpdate(BaseModel):
    role: CompanyRole


class InvitationCreate(BaseModel):
    email: EmailStr
    role: CompanyRole = "viewer"


class InvitationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    company_id: int
    email: str
    role: CompanyRole
    invited_by: Optional[int] = None
    accepted_at: Optional[datetime] = None
    created_at: datetime
