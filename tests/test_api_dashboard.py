import csv
import io
import json
import re
from datetime import date, timedelta

from openpyxl import load_workbook


def _seed(client, company_id, headers):
    today = date.today()
    specs = [
        ("VAT return", "tax", 3, "high", "pending"),
        ("Fire permit", "license", 20, "medium", "in_progress"),
        ("GDPR audit", "regulatory", -2, "low", "pending"),
        ("Payroll filing", "tax", 60, "low", "completed"),
    ]
    ids = {}
    for title, category, days, severity, status in specs:
        r = client.post(
            f"/api/v1/companies/{company_id}/obligations",
            json={
                "title": title,
                "category": category,
                "deadline": (today + timedelta(days=days)).isoformat(),
                "risk_level": severity,
                "status": status,
            },
            headers=headers,
        )
        assert r.status_code == 201, r.text
        ids[title] = r.json()["id"]
    return ids


def test_dashboard_stats(client, company_id, owner_headers):
    ids = _seed(client, company_id, owner_headers)
    r = client.get(f"/api/v1/companies/{company_id}/dashboard", headers=owner_headers)
    assert r.status_code == 200
    body = r.json()
    stats = body["stats"]

    assert stats["total_obligations"] == 4
    assert stats["upcoming_in_7_days"] == 1
    assert stats["upcoming_in_30_days"] == 2
    assert stats["overdue_count"] == 1
    assert stats["completed_count"] == 1
    assert stats["compliance_score"] == 75
    assert stats["by_category"] == {"tax_financial": 2, "licenses_permits": 1, "regulatory_legal": 1}
    assert stats["by_risk"] == {"high": 2, "medium": 0, "low": 2}

    upcoming_ids = [u["obligation"]["id"] for u in body["upcoming"]]
    assert upcoming_ids == [ids["GDPR audit"], ids["VAT return"], ids["Fire permit"]]


def test_empty_dashboard_scores_full(client, company_id, owner_headers):
    stats = client.get(f"/api/v1/companies/{company_id}/dashboard", headers=owner_headers).json()["stats"]
    assert stats["total_obligations"] == 0
    assert stats["compliance_score"] == 100


def test_risk_indicators(client, company_id, owner_headers):
    ids = _seed(client, company_id, owner_headers)
    r = client.get(f"/api/v1/companies/{company_id}/risk-indicators", headers=owner_headers)
    assert r.status_code == 200
    body = r.json()

    assert body["counts"] == {"high": 2, "medium": 0, "low": 2}
    assert {o["id"] for o in body["high"]} == {ids["VAT return"], ids["GDPR audit"]}
    # (3*2 + 1*2) / 12
    assert body["risk_score"] == 67
    assert len(body["matrix"]) == 9
    cell = next(c for c in body["matrix"] if c["likelihood"] == "high" and c["impact"] == "high")
    assert cell["obligation_ids"] == [ids["VAT return"]]
    assert sum(c["count"] for c in body["matrix"]) == 3


# ---- Reminders ---------------------------------------------------------------

def test_reminder_defaults_and_update(client, company_id, owner_headers, member):
    oid = _seed(client, company_id, owner_headers)["Fire permit"]
    url = f"/api/v1/obligations/{oid}/reminder"

    r = client.get(url, headers=owner_headers)
    assert r.json() == {"obligation_id": oid, "reminder_days": [30, 14, 7, 1], "enabled": True}

    r = client.put(url, json={"reminder_days": [1, 21, 21, 3], "enabled": True}, headers=owner_headers)
    assert r.status_code == 200
    assert r.json()["reminder_days"] == [21, 3, 1]
    assert client.get(url, headers=owner_headers).json()["reminder_days"] == [21, 3, 1]

    assert client.put(url, json={"reminder_days": [400]}, headers=owner_headers).status_code == 422

    viewer = member("viewer@example.com", "viewer")
    assert client.put(url, json={"enabled": False}, headers=viewer).status_code == 403


def test_upcoming_reminders_preview(client, company_id, owner_headers):
    ids = _seed(client, company_id, owner_headers)
    url = f"/api/v1/companies/{company_id}/reminders/upcoming"

    previews = client.get(url, headers=owner_headers).json()
    # VAT return (3 days) matches 30/14/7, Fire permit (20 days) matches 30
    assert [(p["obligation_id"], p["reminder_day"]) for p in previews] == [
        (ids["VAT return"], 30),
        (ids["VAT return"], 14),
        (ids["VAT return"], 7),
        (ids["Fire permit"], 30),
    ]

    client.put(f"/api/v1/obligations/{ids['VAT return']}/reminder", json={"enabled": False},
               headers=owner_headers)
    previews = client.get(url, headers=owner_headers).json()
    assert [p["obligation_id"] for p in previews] == [ids["Fire permit"]]


# ---- Exports -----------------------------------------------------------------

def test_csv_export(client, company_id, owner_headers):
    _seed(client, company_id, owner_headers)
    client.post(
        f"/api/v1/companies/{company_id}/obligations",
        json={"title": "=HYPERLINK(\"x\")", "category": "tax", "deadline": date.today().isoformat()},
        headers=owner_headers,
    )
    r = client.get(f"/api/v1/companies/{company_id}/exports/obligations", headers=owner_headers)
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/csv")
    assert r.headers["cache-control"] == "no-store"
    assert re.search(
        rf"attachment; filename=obligations_{company_id}_\d{{8}}-\d{{6}}\.csv",
        r.headers["content-disposition"],
    )

    rows = list(csv.DictReader(io.StringIO(r.text)))
    assert len(rows) == 5
    assert {row["title"] for row in rows} >= {"VAT return", "'=HYPERLINK(\"x\")"}
    assert next(row for row in rows if row["title"] == "GDPR audit")["risk"] == "high"


def test_json_and_xlsx_exports(client, company_id, owner_headers):
    _seed(client, company_id, owner_headers)
    base = f"/api/v1/companies/{company_id}/exports/obligations"

    records = json.loads(client.get(base, params={"format": "json"}, headers=owner_headers).content)
    assert len(records) == 4
    assert {"id", "days_until_deadline", "risk_tier"} <= set(records[0])

    r = client.get(base, params={"format": "xlsx"}, headers=owner_headers)
    assert r.headers["content-disposition"].endswith(".xlsx")
    ws = load_workbook(io.BytesIO(r.content)).active
    assert ws.max_row == 5


def test_pdf_reports(client, company_id, owner_headers):
    _seed(client, company_id, owner_headers)
    base = f"/api/v1/companies/{company_id}/exports/obligations"
    for report in ("compliance", "risk"):
        r = client.get(base, params={"format": "pdf", "report": report}, headers=owner_headers)
        assert r.status_code == 200
        assert r.headers["content-type"] == "application/pdf"
        assert r.content.startswith(b"%PDF")


def test_export_rejects_unknown_format_and_outsiders(client, company_id, owner_headers, login):
    base = f"/api/v1/companies/{company_id}/exports/obligations"
    assert client.get(base, params={"format": "docx"}, headers=owner_headers).status_code == 422
    outsider = login("outsider@example.com")
    assert client.get(base, headers=outsider).status_code == 404
