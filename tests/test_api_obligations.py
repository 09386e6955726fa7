from datetime import date, datetime, timedelta


def _obligation(client, company_id, headers, **overrides):
    body = {
        "title": "Quarterly VAT return",
        "category": "tax_financial",
        "deadline": (date.today() + timedelta(days=10)).isoformat(),
        "risk_level": "high",
    }
    body.update(overrides)
    r = client.post(f"/api/v1/companies/{company_id}/obligations", json=body, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()


# ---- Auth --------------------------------------------------------------------

def test_register_duplicate_email_conflicts(client, owner_headers):
    r = client.post(
        "/api/v1/register",
        json={"email": "OWNER@example.com", "password": "another-pass", "full_name": "Dup"},
    )
    assert r.status_code == 409


def test_me_requires_token(client, owner_headers):
    assert client.get("/api/v1/me").status_code == 401
    r = client.get("/api/v1/me", headers=owner_headers)
    assert r.status_code == 200
    assert r.json()["email"] == "owner@example.com"


def test_login_lockout_after_repeated_failures(client, owner_headers, monkeypatch):
    monkeypatch.setattr("compliancetrack.core.auth.MAX_FAILED_ATTEMPTS", 2)
    for _ in range(2):
        r = client.post("/api/v1/login", data={"username": "owner@example.com", "password": "wrong"})
        assert r.status_code == 401
    r = client.post("/api/v1/login", data={"username": "owner@example.com", "password": "s3cret-pass!"})
    assert r.status_code == 423


# ---- CRUD --------------------------------------------------------------------

def test_create_returns_derived_fields(client, company_id, owner_headers):
    ob = _obligation(client, company_id, owner_headers)
    assert ob["company_id"] == company_id
    assert ob["status"] == "pending"
    assert ob["recurrence"] == "one_time"
    assert ob["days_until_deadline"] == 10
    assert ob["risk_tier"] == "medium"  # high severity, 8..30 days
    assert ob["is_overdue"] is False


def test_category_alias_is_normalised(client, company_id, owner_headers):
    ob = _obligation(client, company_id, owner_headers, category="license")
    assert ob["category"] == "licenses_permits"

    r = client.get(
        f"/api/v1/companies/{company_id}/obligations",
        params={"category": "license"},
        headers=owner_headers,
    )
    assert [o["id"] for o in r.json()] == [ob["id"]]


def test_validation_error_envelope(client, company_id, owner_headers):
    r = client.post(
        f"/api/v1/companies/{company_id}/obligations",
        json={"title": "", "category": "gardening", "deadline": "not-a-date"},
        headers=owner_headers,
    )
    assert r.status_code == 422
    body = r.json()
    assert body["ok"] is False
    assert body["error"]["type"] == "validation_error"
    fields = {tuple(e["loc"])[-1] for e in body["error"]["details"]}
    assert {"title", "category", "deadline"} <= fields
    assert r.headers["X-Request-ID"] == body["error"]["trace_id"]


def test_list_filters_search_and_sort(client, company_id, owner_headers):
    today = date.today()
    a = _obligation(client, company_id, owner_headers, title="Fire safety permit",
                    category="licenses_permits", deadline=(today + timedelta(days=40)).isoformat())
    b = _obligation(client, company_id, owner_headers, title="Annual VAT",
                    description="Submit the FIRE form", deadline=(today + timedelta(days=2)).isoformat())
    c = _obligation(client, company_id, owner_headers, title="GDPR review", category="regulatory_legal",
                    status="completed", deadline=(today - timedelta(days=1)).isoformat())

    url = f"/api/v1/companies/{company_id}/obligations"
    ids = [o["id"] for o in client.get(url, headers=owner_headers).json()]
    assert ids == [c["id"], b["id"], a["id"]]

    ids = [o["id"] for o in client.get(url, params={"order": "desc"}, headers=owner_headers).json()]
    assert ids == [a["id"], b["id"], c["id"]]

    found = client.get(url, params={"search": "fire"}, headers=owner_headers).json()
    assert {o["id"] for o in found} == {a["id"], b["id"]}

    done = client.get(url, params={"status": "completed"}, headers=owner_headers).json()
    assert [o["id"] for o in done] == [c["id"]]
    assert done[0]["risk_tier"] == "low"
    assert done[0]["is_overdue"] is False


def test_patch_updates_fields_and_keeps_required_ones(client, company_id, owner_headers):
    ob = _obligation(client, company_id, owner_headers)
    r = client.patch(
        f"/api/v1/obligations/{ob['id']}",
        json={"status": "completed", "title": None, "notes": "filed"},
        headers=owner_headers,
    )
    assert r.status_code == 200, r.text
    data = r.json()
    assert data["status"] == "completed"
    assert data["title"] == "Quarterly VAT return"
    assert data["notes"] == "filed"
    assert data["risk_tier"] == "low"


def test_past_deadline_is_overdue_and_high(client, company_id, owner_headers):
    ob = _obligation(client, company_id, owner_headers, risk_level="low",
                     deadline=(date.today() - timedelta(days=3)).isoformat())
    assert ob["days_until_deadline"] == -3
    assert ob["is_overdue"] is True
    assert ob["risk_tier"] == "high"


def test_delete_removes_comments(client, company_id, owner_headers):
    ob = _obligation(client, company_id, owner_headers)
    r = client.post(f"/api/v1/obligations/{ob['id']}/comments", json={"content": "hi"}, headers=owner_headers)
    comment_id = r.json()["id"]

    assert client.delete(f"/api/v1/obligations/{ob['id']}", headers=owner_headers).status_code == 204
    assert client.get(f"/api/v1/obligations/{ob['id']}", headers=owner_headers).status_code == 404
    assert client.delete(f"/api/v1/comments/{comment_id}", headers=owner_headers).status_code == 404


# ---- Tenancy -----------------------------------------------------------------

def test_outsider_cannot_see_other_tenant(client, company_id, owner_headers, login):
    ob = _obligation(client, company_id, owner_headers)
    outsider = login("outsider@example.com")

    assert client.get(f"/api/v1/obligations/{ob['id']}", headers=outsider).status_code == 404
    assert client.patch(f"/api/v1/obligations/{ob['id']}", json={"status": "completed"},
                        headers=outsider).status_code == 404
    # another tenant's company answers like a missing one
    assert client.get(f"/api/v1/companies/{company_id}/obligations", headers=outsider).status_code == 404
    assert client.get(f"/api/v1/companies/{company_id}", headers=outsider).status_code == 404
    assert client.get("/api/v1/companies/999999/obligations", headers=outsider).status_code == 404
    assert client.get("/api/v1/companies", headers=outsider).json() == []


def test_viewer_reads_but_cannot_write(client, company_id, owner_headers, member):
    ob = _obligation(client, company_id, owner_headers)
    viewer = member("viewer@example.com", "viewer")

    assert client.get(f"/api/v1/obligations/{ob['id']}", headers=viewer).status_code == 200
    r = client.post(
        f"/api/v1/companies/{company_id}/obligations",
        json={"title": "x", "category": "tax", "deadline": date.today().isoformat()},
        headers=viewer,
    )
    assert r.status_code == 403
    assert r.json()["ok"] is False
    assert client.delete(f"/api/v1/obligations/{ob['id']}", headers=viewer).status_code == 403


def test_member_can_write(client, company_id, owner_headers, member):
    writer = member("writer@example.com", "member")
    ob = _obligation(client, company_id, writer, title="Business licence renewal", category="license")
    r = client.patch(f"/api/v1/obligations/{ob['id']}", json={"status": "in_progress"}, headers=owner_headers)
    assert r.json()["status"] == "in_progress"


# ---- Change feed -------------------------------------------------------------

def test_changes_feed_reports_writes_after_since(client, company_id, owner_headers):
    before = (datetime.utcnow() - timedelta(seconds=5)).isoformat()
    ob = _obligation(client, company_id, owner_headers)

    r = client.get(
        f"/api/v1/companies/{company_id}/obligations/changes",
        params={"since": before},
        headers=owner_headers,
    )
    assert r.status_code == 200
    assert r.json()["changed_ids"] == [ob["id"]]

    later = (datetime.utcnow() + timedelta(minutes=1)).isoformat()
    r = client.get(
        f"/api/v1/companies/{company_id}/obligations/changes",
        params={"since": later},
        headers=owner_headers,
    )
    assert r.json()["changed_ids"] == []


def test_changes_feed_accepts_aware_timestamps(client, company_id, owner_headers):
    ob = _obligation(client, company_id, owner_headers)
    r = client.get(
        f"/api/v1/companies/{company_id}/obligations/changes",
        params={"since": "2000-01-01T00:00:00+02:00"},
        headers=owner_headers,
    )
    assert r.json()["changed_ids"] == [ob["id"]]


def test_changes_feed_reports_deletes(client, company_id, owner_headers):
    kept = _obligation(client, company_id, owner_headers, title="Kept")
    gone = _obligation(client, company_id, owner_headers, title="Gone")
    since = (datetime.utcnow() - timedelta(seconds=1)).isoformat()

    assert client.delete(f"/api/v1/obligations/{gone['id']}", headers=owner_headers).status_code == 204

    body = client.get(
        f"/api/v1/companies/{company_id}/obligations/changes",
        params={"since": since},
        headers=owner_headers,
    ).json()
    assert body["deleted_ids"] == [gone["id"]]
    assert gone["id"] not in body["changed_ids"]
    assert kept["id"] in body["changed_ids"]

    later = client.get(
        f"/api/v1/companies/{company_id}/obligations/changes",
        params={"since": body["server_time"]},
        headers=owner_headers,
    ).json()
    assert later["deleted_ids"] == []


def test_health_probes(client):
    assert client.get("/api/healthz").status_code == 200
    assert client.get("/api/readyz").status_code == 200
