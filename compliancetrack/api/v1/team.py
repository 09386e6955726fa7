# compliancetrack/api/v1/team.py
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from compliancetrack.core.auth import get_db, get_current_user
from compliancetrack.core.tenancy import ensure_company_manage, ensure_company_read, is_owner
from compliancetrack.crud import team as crud
from compliancetrack.models.user import User
from compliancetrack.schemas.team import (
    InvitationCreate,
    InvitationOut,
    MemberOut,
    MemberRoleUpdate,
)

router = APIRouter()
log = logging.getLogger("compliancetrack.team")


def _member_out(m) -> MemberOut:
    return MemberOut(
        id=m.id,
        company_id=m.company_id,
        user_id=m.user_id,
        role=m.role,
        email=m.user.email if m.user else None,
        full_name=m.user.full_name if m.user else None,
        created_at=m.created_at,
    )


def _get_member_or_404(db: Session, company_id: int, member_id: int):
    m = crud.get_member(db, company_id, member_id)
    if not m:
        raise HTTPException(status_code=404, detail="Member not found")
    return m


def _guard_owner_change(db: Session, actor, target) -> None:
    """Only owners touch owners, and the last owner cannot be demoted or removed."""
    if target.role == "owner":
        if not is_owner(actor):
            raise HTTPException(status_code=403, detail="Only an owner can change another owner.")
        if crud.count_owners(db, target.company_id) <= 1:
            raise HTTPException(status_code=409, detail="A company must keep at least one owner.")


# ---- Members -----------------------------------------------------------------

@router.get("/companies/{company_id}/members", response_model=List[MemberOut])
def list_members(
    company_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_company_read(db, current_user, company_id)
    return [_member_out(m) for m in crud.list_members(db, company_id)]


@router.patch("/companies/{company_id}/members/{member_id}", response_model=MemberOut)
def update_member_role(
    company_id: int,
    member_id: int,
    payload: MemberRoleUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    actor = ensure_company_manage(db, current_user, company_id)
    target = _get_member_or_404(db, company_id, member_id)
    if payload.role == target.role:
        return _member_out(target)
    if payload.role == "owner" and not is_owner(actor):
        raise HTTPException(status_code=403, detail="Only an owner can grant ownership.")
    _guard_owner_change(db, actor, target)

    m = crud.update_member_role(db, target, payload.role)
    log.info("Member role changed company_id=%s member_id=%s role=%s", company_id, member_id, m.role)
    return _member_out(m)


@router.delete("/companies/{company_id}/members/{member_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_member(
    company_id: int,
    member_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    actor = ensure_company_manage(db, current_user, company_id)
    target = _get_member_or_404(db, company_id, member_id)
    _guard_owner_change(db, actor, target)
    crud.remove_member(db, target)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ---- Invitations -------------------------------------------------------------

@router.get("/companies/{company_id}/invitations", response_model=List[InvitationOut])
def list_invitations(
    company_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_company_manage(db, current_user, company_id)
    return [InvitationOut.model_validate(i) for i in crud.list_invitations(db, company_id)]


@router.post(
    "/companies/{company_id}/invitations",
    response_model=InvitationOut,
    status_code=status.HTTP_201_CREATED,
)
def create_invitation(
    company_id: int,
    payload: InvitationCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    actor = ensure_company_manage(db, current_user, company_id)
    if payload.role == "owner" and not is_owner(actor):
        raise HTTPException(status_code=403, detail="Only an owner can invite another owner.")
    if crud.get_pending_invitation(db, company_id, payload.email):
        raise HTTPException(status_code=409, detail="An invitation for this email is already pending.")

    inv = crud.create_invitation(db, company_id, payload.email, payload.role, invited_by=current_user.id)
    return InvitationOut.model_validate(inv)


@router.delete("/companies/{company_id}/invitations/{invitation_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_invitation(
    company_id: int,
    invitation_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_company_manage(db, current_user, company_id)
    inv = crud.get_invitation(db, invitation_id)
    if not inv or inv.company_id != company_id:
        raise HTTPException(status_code=404, detail="Invitation not found")
    crud.delete_invitation(db, inv)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/invitations/{invitation_id}/accept", response_model=MemberOut)
def accept_invitation(
    invitation_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    inv = crud.get_invitation(db, invitation_id)
    # invitations addressed to someone else are invisible
    if not inv or inv.email != (current_user.email or "").strip().lower():
        raise HTTPException(status_code=404, detail="Invitation not found")
    if inv.accepted_at is not None:
        raise HTTPException(status_code=409, detail="Invitation already accepted")

    member = crud.accept_invitation(db, inv, current_user.id)
    log.info("Invitation accepted company_id=%s user_id=%s", inv.company_id, current_user.id)
    return _member_out(member)
