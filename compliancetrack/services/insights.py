# compliancetrack/services/insights.py
from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Sequence

from openai import OpenAI, APIStatusError, APIError
from sqlalchemy import func
from sqlalchemy.orm import Session

from compliancetrack.core import config
from compliancetrack.core.errors import InsightGatewayError, RateLimitExceeded
from compliancetrack.models.company import Company
from compliancetrack.models.insight_request import InsightRequest

log = logging.getLogger("compliancetrack.insights")

INSIGHT_KINDS = ("risk_analysis", "compliance_score", "recommendations", "deadline_summary")
EMPTY_INSIGHT = "No analysis available."
RATE_WINDOW_SECONDS = 60

# ---------------------------------
# Prompt-injection hygiene
# ---------------------------------
_INJECTION_PATTERNS = (
    re.compile(r"IGNORE\s*(ALL\s*)?(PREVIOUS\s*)?(INSTRUCTIONS?)?", re.IGNORECASE),
    re.compile(r"SYSTEM\s*(PROMPT)?", re.IGNORECASE),
    re.compile(r"\bASSISTANT\b", re.IGNORECASE),
    re.compile(r"\bUSER\b:", re.IGNORECASE),
    re.compile(r"```"),
)


def sanitize_text(text: Optional[str], max_length: int = 500) -> str:
    """Strip instruction-like phrases, cut to max_length, trim."""
    if not text:
        return ""
    out = str(text)
    for pat in _INJECTION_PATTERNS:
        out = pat.sub("", out)
    return out[:max_length].strip()


def sanitize_obligation(o: Any) -> Dict[str, Any]:
    deadline = getattr(o, "deadline", None)
    return {
        "id": o.id,
        "title": sanitize_text(o.title, 200),
        "description": sanitize_text(o.description, 500),
        "category": o.category,
        "deadline": deadline.isoformat() if deadline is not None else None,
        "status": o.status,
        "risk_level": o.risk_level,
        "notes": sanitize_text(o.notes, 300),
    }


def sanitize_company(company: Optional[Company]) -> Optional[Dict[str, Any]]:
    if company is None:
        return None
    return {
        "name": sanitize_text(company.name, 200),
        "industry": sanitize_text(company.industry_sector, 100),
        "employee_count": company.employee_count,
    }


# ---------------------------------
# Prompts (EN)
# ---------------------------------
_SYSTEM_PROMPTS = {
    "risk_analysis": (
        "You are an expert corporate compliance consultant. Analyse the obligations provided "
        "and write a concise, professional risk analysis. Give practical, prioritised recommendations."
    ),
    "compliance_score": (
        "You are a compliance analyst. Compute a compliance score from the obligations provided, "
        "taking deadlines, status and penalty severity into account. Answer with a score from "
        "0 to 100 and a short explanation."
    ),
    "recommendations": (
        "You are a strategic corporate compliance advisor. Give 3-5 priority recommendations "
        "based on the current situation. Be concise and actionable."
    ),
    "deadline_summary": (
        "You are a deadline management assistant. Write an executive summary of the upcoming "
        "deadlines and the actions they require."
    ),
}


def build_prompts(
    kind: str, obligations: Sequence[Dict[str, Any]], company: Optional[Dict[str, Any]]
) -> Dict[str, str]:
    if kind not in _SYSTEM_PROMPTS:
        raise ValueError(f"Unknown insight kind: {kind}")

    if kind == "recommendations":
        user = (
            "Based on these obligations and the company profile, write recommendations:\n\n"
            f"Company: {json.dumps(company)}\nObligations: {json.dumps(list(obligations))}"
        )
    else:
        lead = {
            "risk_analysis": "Analyse these compliance obligations and produce a risk report:",
            "compliance_score": "Compute the compliance score for these obligations:",
            "deadline_summary": "Summarise the deadlines of these obligations:",
        }[kind]
        user = f"{lead}\n\n{json.dumps(list(obligations), indent=2)}"

    return {"system": _SYSTEM_PROMPTS[kind], "user": user}


# ---------------------------------
# Rate limit (DB-backed sliding window)
# ---------------------------------
def check_rate_limit(
    db: Session,
    user_id: int,
    *,
    limit: Optional[int] = None,
    now: Optional[datetime] = None,
) -> None:
    """Raise RateLimitExceeded when the user already has `limit` calls in the last minute."""
    limit = config.AI_RATE_LIMIT_PER_MINUTE if limit is None else limit
    now = now or datetime.utcnow()
    window_start = now - timedelta(seconds=RATE_WINDOW_SECONDS)

    count, oldest = (
        db.query(func.count(InsightRequest.id), func.min(InsightRequest.created_at))
        .filter(InsightRequest.user_id == user_id, InsightRequest.created_at > window_start)
        .one()
    )
    if (count or 0) >= limit:
        retry_after = RATE_WINDOW_SECONDS
        if oldest is not None:
            retry_after = max(1, int((oldest - window_start).total_seconds()) + 1)
        log.warning("Insight rate limit hit user_id=%s count=%s", user_id, count)
        raise RateLimitExceeded(retry_after=retry_after)


def record_request(
    db: Session, user_id: int, company_id: Optional[int], kind: str, now: Optional[datetime] = None
) -> InsightRequest:
    row = InsightRequest(
        user_id=user_id,
        company_id=company_id,
        kind=kind,
        created_at=now or datetime.utcnow(),
    )
    db.add(row)
    db.commit()
    return row


# ---------------------------------
# Gateway client
# ---------------------------------
@dataclass(frozen=True)
class InsightResult:
    text: str
    model: str


class InsightClient:
    """Chat-completions call against an OpenAI-compatible gateway."""

    def __init__(self, base_url: str, api_key: str, model: str, timeout: float = 60.0) -> None:
        # no automatic retries: a failure goes straight back to the caller
        self._client = OpenAI(base_url=base_url, api_key=api_key, timeout=timeout, max_retries=0)
        self.model = model

    def complete(self, *, system_prompt: str, user_prompt: str) -> InsightResult:
        try:
            resp = self._client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                max_tokens=1000,
                temperature=0.7,
            )
        except APIStatusError as e:
            log.error("AI gateway error status=%s body=%s", e.status_code, getattr(e, "body", None))
            if e.status_code == 429:
                raise InsightGatewayError(
                    "Rate limit exceeded, please try again later.", upstream_status=429
                ) from e
            if e.status_code == 402:
                raise InsightGatewayError(
                    "Credits exhausted, please top up your account.", upstream_status=402
                ) from e
            raise InsightGatewayError(
                f"AI gateway error: {e.status_code}", upstream_status=e.status_code
            ) from e
        except APIError as e:
            log.error("AI gateway unreachable: %s", e)
            raise InsightGatewayError("AI gateway unreachable.") from e

        text = ""
        if resp.choices:
            text = (resp.choices[0].message.content or "").strip()
        return InsightResult(text=text or EMPTY_INSIGHT, model=self.model)


def get_insight_client() -> InsightClient:
    if not config.AI_GATEWAY_URL or not config.AI_GATEWAY_API_KEY:
        raise InsightGatewayError("AI gateway is not configured.", upstream_status=503)
    return InsightClient(
        base_url=config.AI_GATEWAY_URL,
        api_key=config.AI_GATEWAY_API_KEY,
        model=config.AI_GATEWAY_MODEL,
        timeout=config.AI_GATEWAY_TIMEOUT,
    )


# ---------------------------------
# Orchestration
# ---------------------------------
def generate_insight(
    db: Session,
    *,
    user_id: int,
    company: Company,
    kind: str,
    obligations: List[Any],
    client: Optional[InsightClient] = None,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Sanitise tenant data, apply the per-user limit and ask the gateway for
    free text. Stored obligations are never modified.
    """
    now = now or datetime.utcnow()
    check_rate_limit(db, user_id, now=now)
    client = client or get_insight_client()
    record_request(db, user_id, company.id, kind, now=now)

    prompts = build_prompts(
        kind,
        [sanitize_obligation(o) for o in obligations],
        sanitize_company(company),
    )
    log.info(
        "Processing AI insight request kind=%s company_id=%s obligations=%d",
        kind, company.id, len(obligations),
    )
    result = client.complete(system_prompt=prompts["system"], user_prompt=prompts["user"])
    log.info("AI insight generated kind=%s model=%s", kind, result.model)

    return {"insight": result.text, "kind": kind, "generated_at": now}
