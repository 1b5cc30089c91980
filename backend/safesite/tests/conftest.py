import os
os.environ["TESTING"] = "1"
os.environ.setdefault("SECRET_KEY", "test-secret")
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

import sys
from pathlib import Path

import uuid

sys.path.append(str(Path(__file__).resolve().parents[2]))

from safesite.main import app
from safesite.database import Base, get_db, enable_sqlite_foreign_keys

SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False, "timeout": 30},
)
enable_sqlite_foreign_keys(engine)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base.metadata.drop_all(bind=engine)
Base.metadata.create_all(bind=engine)

def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()

app.dependency_overrides[get_db] = override_get_db


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db_session():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


def unique_name(prefix: str = "Zone") -> str:
    return f"{prefix} {uuid.uuid4().hex[:10]}"


def register_user(client, *, username: str | None = None, password: str = "admin1234"):
    """Register a fresh user and return the auth response body."""

    username = username or f"tech_{uuid.uuid4().hex[:12]}"
    payload = {
        "email": f"{username}@example.com",
        "username": username,
        "password": password,
    }
    resp = client.post("/api/auth/register", json=payload)
    assert resp.status_code == 201, f"Registration failed for {username}: {resp.status_code} {resp.text}"
    return resp.json()


def ensure_auth_headers(client, *, username: str | None = None):
    """Return (headers, user payload) for a freshly registered user."""

    body = register_user(client, username=username)
    return {"Authorization": f"Bearer {body['token']}"}, body["user"]


def create_zone(client, headers, *, name: str | None = None, color: str | None = None):
    payload = {"name": name or unique_name()}
    if color is not None:
        payload["color"] = color
    resp = client.post("/api/hazard-zones", json=payload, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


def create_protocol(client, headers, **overrides):
    payload = {"name": "Daily Safety Check", "frequency": "DAILY", "targetCount": 1}
    payload.update(overrides)
    resp = client.post("/api/protocols", json=payload, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()
