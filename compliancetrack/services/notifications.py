# compliancetrack/services/notifications.py
from __future__ import annotations

import html
import logging
from collections import OrderedDict
from datetime import date, timedelta
from typing import Any, Dict, List, Optional, Sequence, Tuple

import httpx
from sqlalchemy.orm import Session

from compliancetrack.core import config
from compliancetrack.core.errors import EmailDeliveryError
from compliancetrack.crud.obligation import list_open_obligations_due_by
from compliancetrack.models.obligation import Obligation
from compliancetrack.models.user import User
from compliancetrack.services.dates import try_days_until_deadline
from compliancetrack.services.risk import obligation_risk

log = logging.getLogger("compliancetrack.notifications")

RISK_COLORS = {"high": "#ea580c", "medium": "#ca8a04", "low": "#16a34a"}


# ---------------------------------
# Selection
# ---------------------------------
def collect_due_obligations(
    db: Session, today: Optional[date] = None, window_days: Optional[int] = None
) -> List[Obligation]:
    """Open obligations of every tenant due within the window, overdue ones included."""
    today = today or date.today()
    window = config.DEADLINE_EMAIL_WINDOW_DAYS if window_days is None else window_days
    return list_open_obligations_due_by(db, today + timedelta(days=window))


def group_by_owner(obligations: Sequence[Obligation]) -> "OrderedDict[int, List[Obligation]]":
    grouped: "OrderedDict[int, List[Obligation]]" = OrderedDict()
    for o in obligations:
        if o.created_by is None:
            continue
        grouped.setdefault(o.created_by, []).append(o)
    return grouped


# ---------------------------------
# Message template (subject/html)
# ---------------------------------
def _time_left(days: Optional[int]) -> Tuple[str, str]:
    if days is None or days <= 0:
        return "OVERDUE", "#dc2626"
    color = "#ea580c" if days <= 7 else "#16a34a"
    return (f"{days} day" if days == 1 else f"{days} days"), color


def render_deadline_email(
    user_name: str, obligations: Sequence[Any], today: Optional[date] = None
) -> Tuple[str, str]:
    today = today or date.today()
    n = len(obligations)
    subject = f"{n} deadline{'' if n == 1 else 's'} approaching"

    rows = []
    for o in obligations:
        days = try_days_until_deadline(o.deadline, today)
        left, left_color = _time_left(days)
        tier = obligation_risk(o, today)
        deadline = o.deadline.strftime("%d/%m/%Y") if hasattr(o.deadline, "strftime") else str(o.deadline)
        rows.append(
            "<tr>"
            f'<td style="padding:12px;border-bottom:1px solid #e5e7eb;"><strong>{html.escape(o.title or "")}</strong></td>'
            f'<td style="padding:12px;border-bottom:1px solid #e5e7eb;">{html.escape(deadline)}</td>'
            f'<td style="padding:12px;border-bottom:1px solid #e5e7eb;"><span style="color:{left_color}">{left}</span></td>'
            f'<td style="padding:12px;border-bottom:1px solid #e5e7eb;">'
            f'<span style="background-color:{RISK_COLORS.get(tier, "#ca8a04")};color:white;padding:2px 8px;'
            f'border-radius:4px;font-size:12px;">{tier.upper()}</span></td>'
            "</tr>"
        )

    link = html.escape(config.APP_PUBLIC_URL.rstrip("/") + "/obligations", quote=True)
    body = f"""<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><title>Compliance deadline notice</title></head>
<body style="font-family:Arial,sans-serif;line-height:1.6;color:#333;max-width:600px;margin:0 auto;padding:20px;">
  <div style="background:#1e40af;padding:20px;border-radius:8px 8px 0 0;">
    <h1 style="color:white;margin:0;font-size:24px;">Deadline notice</h1>
    <p style="color:rgba(255,255,255,0.9);margin:5px 0 0 0;">ComplianceTrack</p>
  </div>
  <div style="background:#f9fafb;padding:20px;border:1px solid #e5e7eb;border-top:none;">
    <p>Hello <strong>{html.escape(user_name or "there")}</strong>,</p>
    <p>You have <strong>{n}</strong> obligation{'' if n == 1 else 's'} coming due that need{'s' if n == 1 else ''} your attention:</p>
    <table style="width:100%;border-collapse:collapse;background:white;margin:20px 0;">
      <thead>
        <tr style="background:#f3f4f6;">
          <th style="padding:12px;text-align:left;">Obligation</th>
          <th style="padding:12px;text-align:left;">Deadline</th>
          <th style="padding:12px;text-align:left;">Time left</th>
          <th style="padding:12px;text-align:left;">Risk</th>
        </tr>
      </thead>
      <tbody>
        {''.join(rows)}
      </tbody>
    </table>
    <p><a href="{link}" style="background:#1e40af;color:white;padding:12px 24px;text-decoration:none;border-radius:6px;">Open obligations</a></p>
    <p style="color:#6b7280;font-size:12px;margin-top:30px;">This e-mail was sent automatically by ComplianceTrack.</p>
  </div>
</body>
</html>
"""
    return subject, body


# ---------------------------------
# Transport
# ---------------------------------
class EmailClient:
    """Transactional e-mail API: JSON POST with a bearer key."""

    def __init__(
        self,
        api_url: Optional[str] = None,
        api_key: Optional[str] = None,
        sender: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.api_url = api_url or config.EMAIL_API_URL
        self.api_key = api_key if api_key is not None else config.EMAIL_API_KEY
        self.sender = sender or config.EMAIL_FROM
        self.timeout = timeout or config.EMAIL_TIMEOUT
        self._transport = transport

    def send(self, to: str, subject: str, html_body: str) -> Dict[str, Any]:
        if not self.api_key:
            raise EmailDeliveryError("E-mail API key is not configured.")
        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                resp = client.post(
                    self.api_url,
                    headers={"Authorization": f"Bearer {self.api_key}"},
                    json={"from": self.sender, "to": [to], "subject": subject, "html": html_body},
                )
        except httpx.HTTPError as e:
            raise EmailDeliveryError(f"E-mail API unreachable: {e}") from e

        if not resp.is_success:
            raise EmailDeliveryError(
                f"Failed to send email: {resp.status_code}",
                details={"status": resp.status_code, "body": resp.text[:500]},
            )
        try:
            return resp.json()
        except ValueError:
            return {}


# ---------------------------------
# Daily cycle
# ---------------------------------
def run_deadline_notifications(
    db: Session,
    today: Optional[date] = None,
    client: Optional[EmailClient] = None,
    window_days: Optional[int] = None,
) -> Dict[str, Any]:
    """
    One pass: collect due obligations, group them per owning user and send
    one e-mail each. A failed send is recorded and the loop moves on.
    """
    today = today or date.today()
    client = client or EmailClient()

    grouped = group_by_owner(collect_due_obligations(db, today, window_days))
    sent = 0
    errors: List[str] = []

    for user_id, items in grouped.items():
        user = db.get(User, user_id)
        if user is None or not user.email or user.is_active is False:
            log.warning("No active recipient for user_id=%s, skipping", user_id)
            continue

        subject, body = render_deadline_email(user.full_name or "there", items, today)
        try:
            client.send(user.email, subject, body)
        except EmailDeliveryError as e:
            log.error("Failed to send deadline e-mail to %s: %s", user.email, e.message)
            errors.append(f"{user.email}: {e.message}")
            continue
        sent += 1
        log.info("Deadline e-mail sent to %s for %d obligations", user.email, len(items))

    return {"sent": sent, "total_users": len(grouped), "errors": errors}
