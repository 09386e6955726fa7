# compliancetrack/services/dates.py
from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Mapping, Optional

from compliancetrack.core.errors import InvalidDeadlineError

log = logging.getLogger("compliancetrack.dates")


def field_of(record: Any, *names: str, default: Any = None) -> Any:
    """
    Read the first present field from an ORM row, Pydantic model or plain dict.
    Several names allow storage and display spellings (risk_level / penaltySeverity).
    """
    for name in names:
        if isinstance(record, Mapping):
            if name in record:
                return record[name]
        elif hasattr(record, name):
            return getattr(record, name)
    return default


def parse_deadline(value: Any) -> date:
    """
    Coerce a deadline to a calendar date.

    Accepts date, datetime (date part) and ISO strings ('YYYY-MM-DD' or a full
    timestamp, trailing 'Z' tolerated). Anything else raises InvalidDeadlineError.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        s = value.strip()
        if not s:
            raise InvalidDeadlineError(value)
        try:
            return date.fromisoformat(s[:10]) if len(s) == 10 else _parse_timestamp(s)
        except ValueError:
            raise InvalidDeadlineError(value) from None
    raise InvalidDeadlineError(value)


def _parse_timestamp(s: str) -> date:
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    return datetime.fromisoformat(s).date()


def days_until_deadline(deadline: Any, today: Optional[date] = None) -> int:
    """Signed whole calendar days from today to deadline (0 = due today)."""
    today = today or date.today()
    return (parse_deadline(deadline) - today).days


def try_days_until_deadline(deadline: Any, today: Optional[date] = None) -> Optional[int]:
    """Like days_until_deadline, but returns None (and logs) for a malformed deadline."""
    try:
        return days_until_deadline(deadline, today)
    except InvalidDeadlineError:
        log.warning("Skipping malformed deadline %r", deadline)
        return None
