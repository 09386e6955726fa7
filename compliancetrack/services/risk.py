# compliancetrack/services/risk.py
from __future__ import annotations

import math
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from compliancetrack.services.dates import field_of, try_days_until_deadline

RISK_TIERS = ("high", "medium", "low")

# severity -> ((max_days, tier), ...) checked in descending order of urgency;
# unknown severities fall back to the "low" band
SEVERITY_BANDS: Dict[str, tuple] = {
    "high": ((7, "high"), (30, "medium")),
    "medium": ((5, "high"), (14, "medium")),
    "low": ((3, "high"), (7, "medium")),
}

RISK_LABELS = {
    "high": "High Risk",
    "medium": "Medium Risk",
    "low": "Low Risk",
}

TIER_WEIGHTS = {"high": 3, "medium": 2, "low": 1}


def round_half_up(x: float) -> int:
    """Percentages round .5 upwards (round() would round half to even)."""
    return int(math.floor(x + 0.5))


def risk_tier(status: Optional[str], penalty_severity: Optional[str], days_until_deadline: Optional[int]) -> str:
    """
    Computed urgency tier of an obligation.

      1. completed                       -> low (always)
      2. overdue, or deadline in the past -> high (always)
      3. otherwise by penalty severity, first matching band wins (<= inclusive):
           high:   <=7 high,  <=30 medium, else low
           medium: <=5 high,  <=14 medium, else low
           low/*:  <=3 high,  <=7 medium,  else low

    Unknown date (days_until_deadline=None): high unless completed.
    """
    if status == "completed":
        return "low"
    if status == "overdue" or (days_until_deadline is not None and days_until_deadline < 0):
        return "high"
    if days_until_deadline is None:
        return "high"

    bands = SEVERITY_BANDS.get(penalty_severity or "", SEVERITY_BANDS["low"])
    for max_days, tier in bands:
        if days_until_deadline <= max_days:
            return tier
    return "low"


def obligation_risk(obligation: Any, today: Optional[date] = None) -> str:
    """risk_tier applied to a single obligation record."""
    return risk_tier(
        field_of(obligation, "status"),
        field_of(obligation, "risk_level", "penalty_severity", "penaltySeverity"),
        try_days_until_deadline(field_of(obligation, "deadline"), today),
    )


def risk_label(tier: str) -> str:
    return RISK_LABELS.get(tier, tier)


# -----------------------------
# Risk indicators
# -----------------------------
def risk_score(tiers: Iterable[str]) -> int:
    """
    Weighted exposure 0..100 (lower is better): high=3, medium=2, low=1,
    normalised by the all-high maximum. Empty input scores 0.
    """
    tiers = list(tiers)
    if not tiers:
        return 0
    weighted = sum(TIER_WEIGHTS.get(t, 1) for t in tiers)
    return round_half_up(weighted / (len(tiers) * 3) * 100)


def likelihood_for_days(days: Optional[int]) -> str:
    """Likelihood axis of the risk matrix: how soon the deadline bites."""
    if days is None or days <= 7:
        return "high"
    if days <= 30:
        return "medium"
    return "low"


def risk_matrix(obligations: Iterable[Any], today: Optional[date] = None) -> List[Dict[str, Any]]:
    """
    3x3 likelihood x impact grid over open obligations.
    Impact is the stored penalty severity; completed obligations are left out.
    Cells are ordered high->low likelihood, then high->low impact.
    """
    cells: Dict[tuple, Dict[str, Any]] = {}
    for likelihood in RISK_TIERS:
        for impact in RISK_TIERS:
            cells[(likelihood, impact)] = {
                "likelihood": likelihood,
                "impact": impact,
                "count": 0,
                "obligation_ids": [],
            }

    for o in obligations:
        if field_of(o, "status") == "completed":
            continue
        impact = field_of(o, "risk_level", "penalty_severity", "penaltySeverity")
        likelihood = likelihood_for_days(try_days_until_deadline(field_of(o, "deadline"), today))
        cell = cells.get((likelihood, impact))
        if cell is None:
            continue
        cell["count"] += 1
        cell["obligation_ids"].append(field_of(o, "id"))

    return list(cells.values())
