# compliancetrack/schemas/reminder.py
from datetime import date
from typing import List

from pydantic import BaseModel, Field, ConfigDict, conint, field_validator

from compliancetrack.models.reminder_config import DEFAULT_REMINDER_DAYS


class ReminderConfigIn(BaseModel):
    reminder_days: List[conint(ge=0, le=365)] = Field(
        default_factory=lambda: list(DEFAULT_REMINDER_DAYS),
        description="Days before the deadline at which a reminder is due.",
    )
    enabled: bool = True

    @field_validator("reminder_days")
    @classmethod
    def _dedupe_sorted(cls, v):
        # largest lead time first, like the defaults
        return sorted(set(v), reverse=True)


class ReminderConfigOut(ReminderConfigIn):
    model_config = ConfigDict(from_attributes=True)

    obligation_id: str


class ReminderPreview(BaseModel):
    obligation_id: str
    title: str
    deadline: date
    days_until_deadline: int
    reminder_day: int
