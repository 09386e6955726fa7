# compliancetrack/crud/team.py
from datetime import datetime
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from compliancetrack.models.company_member import CompanyMember
from compliancetrack.models.invitation import CompanyInvitation


def _norm_email(email: str) -> str:
    return (email or "").strip().lower()


# ---- Members -----------------------------------------------------------------

def list_members(db: Session, company_id: int) -> List[CompanyMember]:
    return (
        db.query(CompanyMember)
        .filter(CompanyMember.company_id == company_id)
        .order_by(CompanyMember.created_at.asc(), CompanyMember.id.asc())
        .all()
    )


def get_member(db: Session, company_id: int, member_id: int) -> Optional[CompanyMember]:
    return (
        db.query(CompanyMember)
        .filter(CompanyMember.company_id == company_id, CompanyMember.id == member_id)
        .first()
    )


def count_owners(db: Session, company_id: int) -> int:
    return (
        db.query(func.count(CompanyMember.id))
        .filter(CompanyMember.company_id == company_id, CompanyMember.role == "owner")
        .scalar()
        or 0
    )


def update_member_role(db: Session, member: CompanyMember, role: str) -> CompanyMember:
    member.role = role
    db.add(member)
    db.commit()
    db.refresh(member)
    return member


def remove_member(db: Session, member: CompanyMember) -> None:
    db.delete(member)
    db.commit()


# ---- Invitations -------------------------------------------------------------

def list_invitations(db: Session, company_id: int, include_accepted: bool = False) -> List[CompanyInvitation]:
    q = db.query(CompanyInvitation).filter(CompanyInvitation.company_id == company_id)
    if not include_accepted:
        q = q.filter(CompanyInvitation.accepted_at.is_(None))
    return q.order_by(CompanyInvitation.created_at.desc(), CompanyInvitation.id.desc()).all()


def get_invitation(db: Session, invitation_id: int) -> Optional[CompanyInvitation]:
    return db.get(CompanyInvitation, invitation_id)


def get_pending_invitation(db: Session, company_id: int, email: str) -> Optional[CompanyInvitation]:
    return (
        db.query(CompanyInvitation)
        .filter(
            CompanyInvitation.company_id == company_id,
            CompanyInvitation.email == _norm_email(email),
            CompanyInvitation.accepted_at.is_(None),
        )
        .first()
    )


def create_invitation(
    db: Session, company_id: int, email: str, role: str, invited_by: Optional[int]
) -> CompanyInvitation:
    obj = CompanyInvitation(
        company_id=company_id,
        email=_norm_email(email),
        role=role,
        invited_by=invited_by,
    )
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


def delete_invitation(db: Session, obj: CompanyInvitation) -> None:
    db.delete(obj)
    db.commit()


def accept_invitation(db: Session, inv: CompanyInvitation, user_id: int) -> CompanyMember:
    """Turn the invitation into a membership; an existing membership keeps its role."""
    member = (
        db.query(CompanyMember)
        .filter(CompanyMember.company_id == inv.company_id, CompanyMember.user_id == user_id)
        .first()
    )
    if member is None:
        member = CompanyMember(company_id=inv.company_id, user_id=user_id, role=inv.role)
        db.add(member)
    inv.accepted_at = datetime.utcnow()
    db.add(inv)
    db.commit()
    db.refresh(member)
    return member
