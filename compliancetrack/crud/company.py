# compliancetrack/crud/company.py
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from compliancetrack.models.company import Company
from compliancetrack.models.company_member import CompanyMember
from compliancetrack.schemas.company import CompanyCreate, CompanyUpdate


def get_company(db: Session, company_id: int) -> Optional[Company]:
    return db.get(Company, company_id)


def list_companies_for_user(db: Session, user_id: int) -> List[Tuple[Company, str]]:
    """Companies the user belongs to, with the user's role in each."""
    rows = (
        db.query(Company, CompanyMember.role)
        .join(CompanyMember, CompanyMember.company_id == Company.id)
        .filter(CompanyMember.user_id == user_id)
        .order_by(Company.name.asc(), Company.id.asc())
        .all()
    )
    return [(c, role) for c, role in rows]


def create_company(db: Session, data: CompanyCreate, owner_id: int) -> Company:
    obj = Company(**data.model_dump())
    db.add(obj)
    db.flush()
    # the creator owns the new tenant
    db.add(CompanyMember(company_id=obj.id, user_id=owner_id, role="owner"))
    db.commit()
    db.refresh(obj)
    return obj


def update_company(db: Session, obj: Company, data: CompanyUpdate) -> Company:
    payload = data.model_dump(exclude_unset=True)
    if "name" in payload and not payload["name"]:
        payload.pop("name")
    for k, v in payload.items():
        setattr(obj, k, v)
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj
