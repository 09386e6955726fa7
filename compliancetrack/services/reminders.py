# compliancetrack/services/reminders.py
from __future__ import annotations

from datetime import date
from typing import Any, Dict, Iterable, List, Mapping, Optional

from compliancetrack.models.reminder_config import DEFAULT_REMINDER_DAYS
from compliancetrack.services.dates import try_days_until_deadline

PREVIEW_LIMIT = 5


def default_config(obligation_id: str) -> Dict[str, Any]:
    return {"obligation_id": obligation_id, "reminder_days": list(DEFAULT_REMINDER_DAYS), "enabled": True}


def effective_config(obligation_id: str, stored: Optional[Any]) -> Dict[str, Any]:
    """Stored reminder settings, or the defaults when none were saved."""
    if stored is None:
        return default_config(obligation_id)
    return {
        "obligation_id": obligation_id,
        "reminder_days": list(stored.reminder_days or []),
        "enabled": bool(stored.enabled),
    }


def upcoming_reminders(
    obligations: Iterable[Any],
    configs: Mapping[str, Any],
    today: Optional[date] = None,
    limit: Optional[int] = PREVIEW_LIMIT,
) -> List[Dict[str, Any]]:
    """
    Reminder triggers that are currently active: for every open obligation
    whose effective config is enabled, each configured day d with
    0 <= days_until_deadline <= d. Nearest deadline first; triggers of one
    obligation keep the order of its config.
    """
    previews: List[Dict[str, Any]] = []
    for o in obligations:
        if o.status == "completed":
            continue
        cfg = effective_config(o.id, configs.get(o.id))
        if not cfg["enabled"]:
            continue
        days = try_days_until_deadline(o.deadline, today)
        if days is None or days < 0:
            continue
        for d in cfg["reminder_days"]:
            if days <= d:
                previews.append(
                    {
                        "obligation_id": o.id,
                        "title": o.title,
                        "deadline": o.deadline,
                        "days_until_deadline": days,
                        "reminder_day": d,
                    }
                )

    # stable: equal distances keep input and config order
    previews.sort(key=lambda p: p["days_until_deadline"])
    return previews[:limit] if limit is not None else previews
