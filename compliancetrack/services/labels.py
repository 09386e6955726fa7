# compliancetrack/services/labels.py
from typing import Optional

from compliancetrack.models.obligation import OBLIGATION_CATEGORIES

CATEGORY_LABELS = {
    "tax_financial": "Tax & Financial",
    "licenses_permits": "Licenses & Permits",
    "regulatory_legal": "Regulatory & Legal",
}

# short display-side spellings accepted on input
CATEGORY_ALIASES = {
    "tax": "tax_financial",
    "license": "licenses_permits",
    "regulatory": "regulatory_legal",
}

STATUS_LABELS = {
    "pending": "Pending",
    "in_progress": "In Progress",
    "completed": "Completed",
    "overdue": "Overdue",
}


def normalize_category(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    v = value.strip().lower()
    if v in OBLIGATION_CATEGORIES:
        return v
    return CATEGORY_ALIASES.get(v, v)


def category_label(value: Optional[str]) -> str:
    key = normalize_category(value) or ""
    return CATEGORY_LABELS.get(key, value or "")


def status_label(value: Optional[str]) -> str:
    return STATUS_LABELS.get(value or "", value or "")
