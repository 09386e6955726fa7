from __future__ import annotations

import os
import sys
from collections.abc import Generator
from datetime import date

# configure before the package reads its environment
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ["ENABLE_CREATE_ALL"] = "0"
os.environ["ENABLE_SCHEDULER"] = "0"

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from compliancetrack.core.auth import get_db
from compliancetrack.main import app
from compliancetrack.models import Base

TODAY = date(2024, 1, 15)
PASSWORD = "s3cret-pass!"


@pytest.fixture()
def db_engine():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _fk_on(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON;")
        cursor.close()

    Base.metadata.create_all(engine)
    return engine


@pytest.fixture()
def db_session(db_engine) -> Generator[Session, None, None]:
    TestingSessionLocal = sessionmaker(bind=db_engine, autoflush=False, autocommit=False, class_=Session)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def client(db_session: Session) -> Generator[TestClient, None, None]:
    def _override_get_db() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def register_and_login(client: TestClient, email: str, full_name: str = "Test User") -> dict:
    r = client.post("/api/v1/register", json={"email": email, "password": PASSWORD, "full_name": full_name})
    assert r.status_code == 201, r.text
    r = client.post("/api/v1/login", data={"username": email, "password": PASSWORD})
    assert r.status_code == 200, r.text
    return {"Authorization": f"Bearer {r.json()['access_token']}"}


@pytest.fixture()
def owner_headers(client: TestClient) -> dict:
    return register_and_login(client, "owner@example.com", "Olivia Owner")


@pytest.fixture()
def company_id(client: TestClient, owner_headers: dict) -> int:
    r = client.post(
        "/api/v1/companies",
        json={"name": "Acme S.r.l.", "registration_number": "IT123", "industry_sector": "Retail"},
        headers=owner_headers,
    )
    assert r.status_code == 201, r.text
    return r.json()["id"]


def add_member(client: TestClient, company_id: int, owner_headers: dict, email: str, role: str) -> dict:
    """Register `email`, invite it with `role` and accept; returns its auth headers."""
    headers = register_and_login(client, email)
    r = client.post(
        f"/api/v1/companies/{company_id}/invitations",
        json={"email": email, "role": role},
        headers=owner_headers,
    )
    assert r.status_code == 201, r.text
    r = client.post(f"/api/v1/invitations/{r.json()['id']}/accept", headers=headers)
    assert r.status_code == 200, r.text
    return headers


@pytest.fixture()
def login(client: TestClient):
    """login(email) -> auth headers for a freshly registered user."""
    return lambda email, full_name="Test User": register_and_login(client, email, full_name)


@pytest.fixture()
def member(client: TestClient, company_id: int, owner_headers: dict):
    """member(email, role) -> auth headers of a user who joined the company with that role."""
    return lambda email, role: add_member(client, company_id, owner_headers, email, role)
