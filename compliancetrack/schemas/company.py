# compliancetrack/schemas/company.py
from datetime import datetime
from typing import Optional, Literal

from pydantic import BaseModel, EmailStr, Field, ConfigDict

CompanyRole = Literal["owner", "admin", "member", "viewer"]


class CompanyBase(BaseModel):
    name: str = Field(..., min_length=2, max_length=255)
    registration_number: Optional[str] = Field(None, max_length=64)
    industry_sector: Optional[str] = Field(None, max_length=100)
    address: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = None
    responsible_person: Optional[str] = None
    responsible_person_title: Optional[str] = None
    employee_count: Optional[int] = Field(None, ge=0)


class CompanyCreate(CompanyBase):
    pass


class CompanyUpdate(BaseModel):
    # partial update: only fields actually sent are applied
    name: Optional[str] = Field(None, min_length=2, max_length=255)
    registration_number: Optional[str] = Field(None, max_length=64)
    industry_sector: Optional[str] = Field(None, max_length=100)
    address: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = None
    responsible_person: Optional[str] = None
    responsible_person_title: Optional[str] = None
    employee_count: Optional[int] = Field(None, ge=0)


class CompanyOut(CompanyBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    # looser than the input type so legacy rows still serialise
    contact_email: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class MyCompanyOut(CompanyOut):
    role: CompanyRole
