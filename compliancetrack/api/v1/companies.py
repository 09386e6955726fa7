# compliancetrack/api/v1/companies.py
import logging
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from compliancetrack.core.auth import get_db, get_current_user
from compliancetrack.core.tenancy import ensure_company_manage, ensure_company_read
from compliancetrack.crud.company import (
    create_company as crud_create_company,
    get_company as crud_get_company,
    list_companies_for_user,
    update_company as crud_update_company,
)
from compliancetrack.models.user import User
from compliancetrack.schemas.company import CompanyCreate, CompanyOut, CompanyUpdate, MyCompanyOut

router = APIRouter()
log = logging.getLogger("compliancetrack.companies")


def _to_out(x) -> CompanyOut:
    return CompanyOut.model_validate(x)


@router.get("/companies", response_model=List[MyCompanyOut])
def list_my_companies(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Companies the caller belongs to, with the caller's role in each."""
    return [
        MyCompanyOut(**_to_out(c).model_dump(), role=role)
        for c, role in list_companies_for_user(db, current_user.id)
    ]


@router.post("/companies", response_model=MyCompanyOut, status_code=status.HTTP_201_CREATED)
def create_company(
    payload: CompanyCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    obj = crud_create_company(db, payload, owner_id=current_user.id)
    log.info("Company created company_id=%s owner=%s", obj.id, current_user.id)
    return MyCompanyOut(**_to_out(obj).model_dump(), role="owner")


@router.get("/companies/{company_id}", response_model=CompanyOut)
def get_company(
    company_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_company_read(db, current_user, company_id)
    return _to_out(crud_get_company(db, company_id))


@router.patch("/companies/{company_id}", response_model=CompanyOut)
def update_company(
    company_id: int,
    payload: CompanyUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_company_manage(db, current_user, company_id)
    obj = crud_update_company(db, crud_get_company(db, company_id), payload)
    return _to_out(obj)
