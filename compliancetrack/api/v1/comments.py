# compliancetrack/api/v1/comments.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from compliancetrack.core.auth import get_db, get_current_user
from compliancetrack.core.tenancy import (
    can_manage,
    can_write,
    ensure_obligation_read,
    ensure_obligation_write,
    get_membership,
)
from compliancetrack.crud import comment as crud
from compliancetrack.models.obligation import Obligation
from compliancetrack.models.user import User
from compliancetrack.schemas.comment import CommentCreate, CommentOut, CommentUpdate

router = APIRouter()


def _to_out(c) -> CommentOut:
    out = CommentOut.model_validate(c)
    if c.author is not None:
        out.author_name = c.author.full_name or c.author.email
    return out


def _get_comment_scoped(db: Session, user: User, comment_id: int):
    """Comment plus the caller's membership in the owning company (404 outside it)."""
    c = crud.get_comment(db, comment_id)
    if not c:
        raise HTTPException(status_code=404, detail="Comment not found")
    obligation = db.get(Obligation, c.obligation_id)
    member = get_membership(db, user.id, obligation.company_id) if obligation else None
    if member is None:
        raise HTTPException(status_code=404, detail="Comment not found")
    return c, member


@router.get("/obligations/{obligation_id}/comments", response_model=List[CommentOut])
def list_comments(
    obligation_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_obligation_read(db, current_user, obligation_id)
    return [_to_out(c) for c in crud.list_comments(db, obligation_id)]


@router.post(
    "/obligations/{obligation_id}/comments",
    response_model=CommentOut,
    status_code=status.HTTP_201_CREATED,
)
def add_comment(
    obligation_id: str,
    payload: CommentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_obligation_write(db, current_user, obligation_id)
    c = crud.create_comment(db, obligation_id, current_user.id, payload.content)
    return _to_out(c)


@router.patch("/comments/{comment_id}", response_model=CommentOut)
def edit_comment(
    comment_id: int,
    payload: CommentUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    c, member = _get_comment_scoped(db, current_user, comment_id)
    if c.user_id != current_user.id or not can_write(member):
        raise HTTPException(status_code=403, detail="Only the author can edit this comment.")
    return _to_out(crud.update_comment(db, c, payload.content))


@router.delete("/comments/{comment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_comment(
    comment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    c, member = _get_comment_scoped(db, current_user, comment_id)
    is_author = c.user_id == current_user.id and can_write(member)
    if not (is_author or can_manage(member)):
        raise HTTPException(status_code=403, detail="Not allowed to delete this comment.")
    crud.delete_comment(db, c)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
