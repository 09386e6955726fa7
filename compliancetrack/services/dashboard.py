# compliancetrack/services/dashboard.py
from __future__ import annotations

from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Sequence

from compliancetrack.models.obligation import OBLIGATION_CATEGORIES, OBLIGATION_STATUSES
from compliancetrack.services.dates import field_of, try_days_until_deadline
from compliancetrack.services.labels import normalize_category
from compliancetrack.services.risk import RISK_TIERS, risk_tier, round_half_up

UPCOMING_WINDOWS = (7, 30, 90)


# -----------------------------
# Per-record derivation
# -----------------------------
def _derive(o: Any, today: date) -> Dict[str, Any]:
    status = field_of(o, "status")
    days = try_days_until_deadline(field_of(o, "deadline"), today)
    return {
        "record": o,
        "status": status,
        "category": normalize_category(field_of(o, "category")),
        "days": days,
        "risk": risk_tier(
            status,
            field_of(o, "risk_level", "penalty_severity", "penaltySeverity"),
            days,
        ),
    }


def _derive_all(obligations: Iterable[Any], today: Optional[date]) -> List[Dict[str, Any]]:
    today = today or date.today()
    return [_derive(o, today) for o in obligations]


def _is_upcoming(d: Dict[str, Any], n: int) -> bool:
    return d["status"] != "completed" and d["days"] is not None and 0 <= d["days"] <= n


def _is_overdue(d: Dict[str, Any]) -> bool:
    if d["status"] == "overdue":
        return True
    return d["status"] != "completed" and d["days"] is not None and d["days"] < 0


def _is_compliant(d: Dict[str, Any]) -> bool:
    if d["status"] == "completed":
        return True
    return d["status"] != "overdue" and d["days"] is not None and d["days"] >= 0


def _count_by(derived: Sequence[Dict[str, Any]], key: str, members: Sequence[str]) -> Dict[str, int]:
    out = {m: 0 for m in members}
    for d in derived:
        v = d[key]
        if v in out:
            out[v] += 1
    return out


# -----------------------------
# Public API
# -----------------------------
def upcoming_in_n_days(obligations: Iterable[Any], n: int, today: Optional[date] = None) -> int:
    """Open obligations due between today and today + n days (both inclusive)."""
    return sum(1 for d in _derive_all(obligations, today) if _is_upcoming(d, n))


def compliance_score(obligations: Iterable[Any], today: Optional[date] = None) -> int:
    """
    Share (0..100) of obligations that are completed or still on time.
    An empty list scores 100: nothing to be non-compliant about.
    """
    derived = _derive_all(obligations, today)
    if not derived:
        return 100
    compliant = sum(1 for d in derived if _is_compliant(d))
    return round_half_up(100 * compliant / len(derived))


def compute_dashboard_stats(obligations: Iterable[Any], today: Optional[date] = None) -> Dict[str, Any]:
    """
    Summary counters and chart breakdowns for one tenant's obligation list.
    Pure function of (obligations, today): nothing is persisted or mutated.
    """
    derived = _derive_all(obligations, today)
    total = len(derived)
    completed = sum(1 for d in derived if d["status"] == "completed")
    compliant = sum(1 for d in derived if _is_compliant(d))

    stats: Dict[str, Any] = {"total_obligations": total}
    for n in UPCOMING_WINDOWS:
        stats[f"upcoming_in_{n}_days"] = sum(1 for d in derived if _is_upcoming(d, n))
    stats.update(
        {
            "overdue_count": sum(1 for d in derived if _is_overdue(d)),
            "completed_count": completed,
            "compliance_score": round_half_up(100 * compliant / total) if total else 100,
            "by_category": _count_by(derived, "category", OBLIGATION_CATEGORIES),
            "by_status": _count_by(derived, "status", OBLIGATION_STATUSES),
            "by_risk": _count_by(derived, "risk", RISK_TIERS),
        }
    )
    return stats


def upcoming(
    obligations: Iterable[Any],
    today: Optional[date] = None,
    *,
    within_days: int = 30,
    limit: Optional[int] = 8,
) -> List[Dict[str, Any]]:
    """
    Open obligations due within `within_days` (overdue ones included), most
    urgent first. Items: {"obligation", "days_until_deadline", "risk_tier"}.
    """
    rows = [
        d for d in _derive_all(obligations, today)
        if d["status"] != "completed" and d["days"] is not None and d["days"] <= within_days
    ]
    rows.sort(key=lambda d: d["days"])
    if limit is not None:
        rows = rows[:limit]
    return [
        {"obligation": d["record"], "days_until_deadline": d["days"], "risk_tier": d["risk"]}
        for d in rows
    ]
