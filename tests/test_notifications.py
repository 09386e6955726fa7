import json
from datetime import date, timedelta

import httpx
import pytest

from compliancetrack.core.errors import EmailDeliveryError
from compliancetrack.models.company import Company
from compliancetrack.models.obligation import Obligation
from compliancetrack.models.user import User
from compliancetrack.services.notifications import (
    EmailClient,
    collect_due_obligations,
    group_by_owner,
    render_deadline_email,
    run_deadline_notifications,
)

TODAY = date(2024, 1, 15)


class FakeEmailClient:
    def __init__(self, fail_for=()):
        self.sent = []
        self.fail_for = set(fail_for)

    def send(self, to, subject, html_body):
        if to in self.fail_for:
            raise EmailDeliveryError("Failed to send email: 500")
        self.sent.append((to, subject, html_body))
        return {"id": "msg"}


@pytest.fixture()
def seeded(db_session):
    alice = User(email="alice@example.com", full_name="Alice", hashed_password="x")
    bob = User(email="bob@example.com", full_name="Bob <b>", hashed_password="x")
    company = Company(name="Acme")
    db_session.add_all([alice, bob, company])
    db_session.commit()

    def ob(title, days, owner, status="pending", severity="medium"):
        return Obligation(
            company_id=company.id,
            created_by=owner.id if owner else None,
            title=title,
            category="tax_financial",
            deadline=TODAY + timedelta(days=days),
            status=status,
            risk_level=severity,
        )

    db_session.add_all([
        ob("Alice soon", 3, alice, severity="high"),
        ob("Alice overdue", -2, alice),
        ob("Alice later", 20, alice),
        ob("Alice done", 1, alice, status="completed"),
        ob("Bob <script>", 7, bob),
        ob("Orphan", 1, None),
    ])
    db_session.commit()
    return {"alice": alice, "bob": bob}


def test_collect_window_includes_overdue_excludes_completed(db_session, seeded):
    titles = [o.title for o in collect_due_obligations(db_session, TODAY, 7)]
    assert titles[0] == "Alice overdue"
    assert set(titles) == {"Alice overdue", "Alice soon", "Bob <script>", "Orphan"}


def test_group_by_owner_skips_unowned(db_session, seeded):
    grouped = group_by_owner(collect_due_obligations(db_session, TODAY, 7))
    assert set(grouped) == {seeded["alice"].id, seeded["bob"].id}
    assert len(grouped[seeded["alice"].id]) == 2


def test_render_escapes_and_marks_overdue():
    obs = [
        Obligation(title="<b>VAT</b>", deadline=TODAY - timedelta(days=1), status="pending", risk_level="low"),
        Obligation(title="Permit", deadline=TODAY + timedelta(days=1), status="pending", risk_level="low"),
    ]
    subject, body = render_deadline_email("Ann & Co", obs, TODAY)
    assert subject == "2 deadlines approaching"
    assert "&lt;b&gt;VAT&lt;/b&gt;" in body
    assert "<b>VAT</b>" not in body
    assert "Ann &amp; Co" in body
    assert "OVERDUE" in body
    assert "1 day" in body
    assert "HIGH" in body  # computed tier, not the stored severity

    subject_one, _ = render_deadline_email("Ann", obs[:1], TODAY)
    assert subject_one == "1 deadline approaching"


def test_run_cycle_one_failure_does_not_stop_others(db_session, seeded):
    fake = FakeEmailClient(fail_for={"bob@example.com"})
    result = run_deadline_notifications(db_session, today=TODAY, client=fake, window_days=7)

    assert result["sent"] == 1
    assert result["total_users"] == 2
    assert len(result["errors"]) == 1 and result["errors"][0].startswith("bob@example.com")
    to, subject, _ = fake.sent[0]
    assert to == "alice@example.com"
    assert subject == "2 deadlines approaching"


def test_email_client_posts_json_with_bearer_key():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["auth"] = request.headers["authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"id": "email_1"})

    client = EmailClient(
        api_url="https://mail.test/emails",
        api_key="key-123",
        sender="CT <ct@example.com>",
        transport=httpx.MockTransport(handler),
    )
    assert client.send("a@example.com", "Hi", "<p>x</p>") == {"id": "email_1"}
    assert seen["auth"] == "Bearer key-123"
    assert seen["body"] == {"from": "CT <ct@example.com>", "to": ["a@example.com"], "subject": "Hi", "html": "<p>x</p>"}


def test_email_client_non_2xx_raises():
    client = EmailClient(
        api_url="https://mail.test/emails",
        api_key="key",
        transport=httpx.MockTransport(lambda r: httpx.Response(422, text="bad sender")),
    )
    with pytest.raises(EmailDeliveryError) as ei:
        client.send("a@example.com", "Hi", "x")
    assert ei.value.details["status"] == 422
