# compliancetrack/api/v1/reminders.py
from datetime import date
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from compliancetrack.core.auth import get_db, get_current_user
from compliancetrack.core.tenancy import (
    ensure_company_read,
    ensure_obligation_read,
    ensure_obligation_write,
)
from compliancetrack.crud.obligation import list_obligations
from compliancetrack.crud.reminder import get_reminder, list_company_reminders, upsert_reminder
from compliancetrack.models.user import User
from compliancetrack.schemas.reminder import ReminderConfigIn, ReminderConfigOut, ReminderPreview
from compliancetrack.services.reminders import effective_config, upcoming_reminders

router = APIRouter()


@router.get("/companies/{company_id}/reminders/upcoming", response_model=List[ReminderPreview])
def list_upcoming_reminders(
    company_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Preview of reminder triggers active today (nearest deadlines first, at most 5)."""
    ensure_company_read(db, current_user, company_id)
    obligations = list_obligations(db, company_id)
    configs = {r.obligation_id: r for r in list_company_reminders(db, company_id)}
    return [ReminderPreview(**p) for p in upcoming_reminders(obligations, configs, date.today())]


@router.get("/obligations/{obligation_id}/reminder", response_model=ReminderConfigOut)
def get_reminder_config(
    obligation_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_obligation_read(db, current_user, obligation_id)
    return ReminderConfigOut(**effective_config(obligation_id, get_reminder(db, obligation_id)))


@router.put("/obligations/{obligation_id}/reminder", response_model=ReminderConfigOut)
def put_reminder_config(
    obligation_id: str,
    payload: ReminderConfigIn,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_obligation_write(db, current_user, obligation_id)
    obj = upsert_reminder(db, obligation_id, payload)
    return ReminderConfigOut(**effective_config(obligation_id, obj))
