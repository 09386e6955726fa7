# compliancetrack/crud/reminder.py
from typing import List, Optional

from sqlalchemy.orm import Session

from compliancetrack.models.obligation import Obligation
from compliancetrack.models.reminder_config import ReminderConfig
from compliancetrack.schemas.reminder import ReminderConfigIn


def get_reminder(db: Session, obligation_id: str) -> Optional[ReminderConfig]:
    return db.query(ReminderConfig).filter(ReminderConfig.obligation_id == obligation_id).first()


def upsert_reminder(db: Session, obligation_id: str, payload: ReminderConfigIn) -> ReminderConfig:
    obj = get_reminder(db, obligation_id)
    if obj is None:
        obj = ReminderConfig(obligation_id=obligation_id)
    obj.reminder_days = list(payload.reminder_days)
    obj.enabled = payload.enabled
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


def list_company_reminders(db: Session, company_id: int) -> List[ReminderConfig]:
    return (
        db.query(ReminderConfig)
        .join(Obligation, Obligation.id == ReminderConfig.obligation_id)
        .filter(Obligation.company_id == company_id)
        .all()
    )
