# compliancetrack/core/tenancy.py
from __future__ import annotations

from typing import Optional, Tuple

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from compliancetrack.models.company_member import CompanyMember
from compliancetrack.models.obligation import Obligation
from compliancetrack.models.user import User


# ---- Role helpers ------------------------------------------------------------

MANAGER_ROLES = {"owner", "admin"}
WRITER_ROLES = {"owner", "admin", "member"}
READER_ROLES = {"owner", "admin", "member", "viewer"}


def _role(member: Optional[CompanyMember]) -> str:
    return (member.role or "").strip().lower() if member else ""


def can_read(member: Optional[CompanyMember]) -> bool:
    return _role(member) in READER_ROLES


def can_write(member: Optional[CompanyMember]) -> bool:
    return _role(member) in WRITER_ROLES


def can_manage(member: Optional[CompanyMember]) -> bool:
    """Company profile and team management: owner or admin."""
    return _role(member) in MANAGER_ROLES


def is_owner(member: Optional[CompanyMember]) -> bool:
    return _role(member) == "owner"


# ---- Membership lookups ------------------------------------------------------

def get_membership(db: Session, user_id: int, company_id: int) -> Optional[CompanyMember]:
    return (
        db.query(CompanyMember)
        .filter(
            CompanyMember.user_id == user_id,
            CompanyMember.company_id == company_id,
        )
        .first()
    )


# ---- Hard guards (raise 403/404) ---------------------------------------------

def _ensure_member(db: Session, user: User, company_id: int) -> CompanyMember:
    member = get_membership(db, user.id, company_id)
    if member is None:
        # a missing company and another tenant's company look the same
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Company not found")
    return member


def ensure_company_read(db: Session, user: User, company_id: int) -> CompanyMember:
    member = _ensure_member(db, user, company_id)
    if not can_read(member):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Read access denied.")
    return member


def ensure_company_write(db: Session, user: User, company_id: int) -> CompanyMember:
    member = _ensure_member(db, user, company_id)
    if not can_write(member):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Viewers cannot modify company data.",
        )
    return member


def ensure_company_manage(db: Session, user: User, company_id: int) -> CompanyMember:
    member = _ensure_member(db, user, company_id)
    if not can_manage(member):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Owner or admin privileges required.",
        )
    return member


# ---- Obligation-level guards -------------------------------------------------

def _get_obligation_or_404(db: Session, obligation_id: str) -> Obligation:
    obj = db.get(Obligation, obligation_id)
    if obj is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Obligation not found")
    return obj


def ensure_obligation_read(
    db: Session, user: User, obligation_id: str
) -> Tuple[Obligation, CompanyMember]:
    obj = _get_obligation_or_404(db, obligation_id)
    member = get_membership(db, user.id, obj.company_id)
    if not can_read(member):
        # same answer as a missing row: obligations of other tenants are invisible
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Obligation not found")
    return obj, member


def ensure_obligation_write(
    db: Session, user: User, obligation_id: str
) -> Tuple[Obligation, CompanyMember]:
    obj, member = ensure_obligation_read(db, user, obligation_id)
    if not can_write(member):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Viewers cannot modify obligations.",
        )
    return obj, member
