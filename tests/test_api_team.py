from datetime import date, timedelta


def _members(client, company_id, headers):
    r = client.get(f"/api/v1/companies/{company_id}/members", headers=headers)
    assert r.status_code == 200
    return {m["email"]: m for m in r.json()}


def _obligation_id(client, company_id, headers):
    r = client.post(
        f"/api/v1/companies/{company_id}/obligations",
        json={"title": "Annual accounts", "category": "tax", "deadline": (date.today() + timedelta(days=20)).isoformat()},
        headers=headers,
    )
    assert r.status_code == 201, r.text
    return r.json()["id"]


# ---- Companies ---------------------------------------------------------------

def test_creator_becomes_owner(client, company_id, owner_headers):
    mine = client.get("/api/v1/companies", headers=owner_headers).json()
    assert [(c["id"], c["role"]) for c in mine] == [(company_id, "owner")]
    assert _members(client, company_id, owner_headers)["owner@example.com"]["role"] == "owner"


def test_only_managers_edit_company_profile(client, company_id, owner_headers, member):
    writer = member("writer@example.com", "member")
    r = client.patch(f"/api/v1/companies/{company_id}", json={"industry_sector": "Food"}, headers=writer)
    assert r.status_code == 403

    r = client.patch(f"/api/v1/companies/{company_id}", json={"industry_sector": "Food"}, headers=owner_headers)
    assert r.status_code == 200
    assert r.json()["industry_sector"] == "Food"
    assert r.json()["name"] == "Acme S.r.l."


# ---- Invitations -------------------------------------------------------------

def test_invitation_lifecycle(client, company_id, owner_headers, login):
    r = client.post(
        f"/api/v1/companies/{company_id}/invitations",
        json={"email": "New.Hire@Example.com", "role": "member"},
        headers=owner_headers,
    )
    assert r.status_code == 201
    inv = r.json()
    assert inv["email"] == "new.hire@example.com"

    dup = client.post(
        f"/api/v1/companies/{company_id}/invitations",
        json={"email": "new.hire@example.com"},
        headers=owner_headers,
    )
    assert dup.status_code == 409

    stranger = login("stranger@example.com")
    assert client.post(f"/api/v1/invitations/{inv['id']}/accept", headers=stranger).status_code == 404

    hire = login("new.hire@example.com")
    r = client.post(f"/api/v1/invitations/{inv['id']}/accept", headers=hire)
    assert r.status_code == 200
    assert r.json()["role"] == "member"
    assert client.post(f"/api/v1/invitations/{inv['id']}/accept", headers=hire).status_code == 409

    pending = client.get(f"/api/v1/companies/{company_id}/invitations", headers=owner_headers).json()
    assert pending == []


def test_admin_cannot_invite_owner(client, company_id, member):
    admin = member("admin@example.com", "admin")
    r = client.post(
        f"/api/v1/companies/{company_id}/invitations",
        json={"email": "boss@example.com", "role": "owner"},
        headers=admin,
    )
    assert r.status_code == 403


def test_viewer_cannot_invite(client, company_id, member):
    viewer = member("viewer@example.com", "viewer")
    r = client.post(
        f"/api/v1/companies/{company_id}/invitations",
        json={"email": "x@example.com"},
        headers=viewer,
    )
    assert r.status_code == 403


def test_revoke_invitation(client, company_id, owner_headers):
    inv = client.post(
        f"/api/v1/companies/{company_id}/invitations",
        json={"email": "temp@example.com"},
        headers=owner_headers,
    ).json()
    url = f"/api/v1/companies/{company_id}/invitations/{inv['id']}"
    assert client.delete(url, headers=owner_headers).status_code == 204
    assert client.delete(url, headers=owner_headers).status_code == 404


# ---- Roles -------------------------------------------------------------------

def test_last_owner_cannot_be_demoted_or_removed(client, company_id, owner_headers):
    owner = _members(client, company_id, owner_headers)["owner@example.com"]
    url = f"/api/v1/companies/{company_id}/members/{owner['id']}"
    assert client.patch(url, json={"role": "admin"}, headers=owner_headers).status_code == 409
    assert client.delete(url, headers=owner_headers).status_code == 409


def test_admin_cannot_touch_owner(client, company_id, owner_headers, member):
    admin = member("admin@example.com", "admin")
    owner = _members(client, company_id, owner_headers)["owner@example.com"]
    r = client.patch(
        f"/api/v1/companies/{company_id}/members/{owner['id']}",
        json={"role": "viewer"},
        headers=admin,
    )
    assert r.status_code == 403


def test_role_change_takes_effect(client, company_id, owner_headers, member):
    user = member("promoted@example.com", "viewer")
    target = _members(client, company_id, owner_headers)["promoted@example.com"]

    r = client.patch(
        f"/api/v1/companies/{company_id}/members/{target['id']}",
        json={"role": "member"},
        headers=owner_headers,
    )
    assert r.status_code == 200
    assert r.json()["role"] == "member"
    _obligation_id(client, company_id, user)

    r = client.delete(f"/api/v1/companies/{company_id}/members/{target['id']}", headers=owner_headers)
    assert r.status_code == 204
    assert client.get(f"/api/v1/companies/{company_id}/obligations", headers=user).status_code == 404


def test_second_owner_allows_demotion(client, company_id, owner_headers, member):
    member("coowner@example.com", "owner")
    owner = _members(client, company_id, owner_headers)["owner@example.com"]
    r = client.patch(
        f"/api/v1/companies/{company_id}/members/{owner['id']}",
        json={"role": "admin"},
        headers=owner_headers,
    )
    assert r.status_code == 200
    assert r.json()["role"] == "admin"


# ---- Comments ----------------------------------------------------------------

def test_comment_permissions(client, company_id, owner_headers, member):
    oid = _obligation_id(client, company_id, owner_headers)
    writer = member("writer@example.com", "member")
    viewer = member("viewer@example.com", "viewer")

    r = client.post(f"/api/v1/obligations/{oid}/comments", json={"content": "  Filed draft  "}, headers=writer)
    assert r.status_code == 201
    comment = r.json()
    assert comment["content"] == "Filed draft"
    assert comment["author_name"] == "Test User"

    assert client.post(f"/api/v1/obligations/{oid}/comments", json={"content": "hi"},
                       headers=viewer).status_code == 403
    assert len(client.get(f"/api/v1/obligations/{oid}/comments", headers=viewer).json()) == 1

    url = f"/api/v1/comments/{comment['id']}"
    assert client.patch(url, json={"content": "edited"}, headers=owner_headers).status_code == 403
    r = client.patch(url, json={"content": "edited"}, headers=writer)
    assert r.status_code == 200 and r.json()["content"] == "edited"

    assert client.delete(url, headers=viewer).status_code == 403
    # managers may moderate
    assert client.delete(url, headers=owner_headers).status_code == 204


def test_comment_validation_and_outsiders(client, company_id, owner_headers, login):
    oid = _obligation_id(client, company_id, owner_headers)
    r = client.post(f"/api/v1/obligations/{oid}/comments", json={"content": "x" * 2001}, headers=owner_headers)
    assert r.status_code == 422
    cid = client.post(f"/api/v1/obligations/{oid}/comments", json={"content": "ok"},
                      headers=owner_headers).json()["id"]

    outsider = login("outsider@example.com")
    assert client.get(f"/api/v1/obligations/{oid}/comments", headers=outsider).status_code == 404
    assert client.delete(f"/api/v1/comments/{cid}", headers=outsider).status_code == 404
