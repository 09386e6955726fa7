from datetime import date, datetime

import pytest

from compliancetrack.core.errors import InvalidDeadlineError
from compliancetrack.services.dates import (
    days_until_deadline,
    field_of,
    parse_deadline,
    try_days_until_deadline,
)

TODAY = date(2024, 1, 15)


def test_future_past_and_today():
    assert days_until_deadline("2024-01-20", TODAY) == 5
    assert days_until_deadline("2024-01-10", TODAY) == -5
    assert days_until_deadline("2024-01-15", TODAY) == 0


def test_accepts_date_datetime_and_timestamps():
    assert days_until_deadline(date(2024, 2, 14), TODAY) == 30
    assert days_until_deadline(datetime(2024, 1, 16, 23, 59), TODAY) == 1
    assert parse_deadline("2024-03-01T10:00:00Z") == date(2024, 3, 1)
    assert parse_deadline(" 2024-03-01 ") == date(2024, 3, 1)


def test_crosses_year_and_leap_day():
    assert days_until_deadline("2024-03-01", date(2024, 2, 28)) == 2
    assert days_until_deadline("2025-01-01", date(2024, 12, 31)) == 1


@pytest.mark.parametrize("bad", ["", "not-a-date", "2024-13-01", None, 42])
def test_malformed_deadline_raises(bad):
    with pytest.raises(InvalidDeadlineError):
        days_until_deadline(bad, TODAY)


def test_invalid_deadline_is_a_value_error():
    with pytest.raises(ValueError):
        parse_deadline("31/12/2024")


def test_try_variant_returns_none():
    assert try_days_until_deadline("garbage", TODAY) is None
    assert try_days_until_deadline("2024-01-16", TODAY) == 1


def test_deterministic_for_fixed_today():
    assert days_until_deadline("2024-06-30", TODAY) == days_until_deadline("2024-06-30", TODAY)


def test_field_of_reads_dicts_and_objects():
    class Row:
        risk_level = "high"

    assert field_of({"penaltySeverity": "low"}, "risk_level", "penaltySeverity") == "low"
    assert field_of(Row(), "risk_level") == "high"
    assert field_of({}, "missing", default="x") == "x"
