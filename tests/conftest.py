"""Pytest fixtures."""

import os
import uuid

TEST_DATABASE_URL = "sqlite:///./test.db"
# Settings are read at import time; point the app at the test database first.
os.environ["DATABASE_URL"] = TEST_DATABASE_URL

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from safesignal.db.base import Base  # noqa: E402
from safesignal.db.session import get_db  # noqa: E402
from safesignal.main import app  # noqa: E402
from safesignal.models import Alert, AlertNotification, EmergencyContact, Profile, UserRole  # noqa: E402,F401 - register for create_all

engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="session")
def setup_db():
    """Create tables once for test session."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(setup_db):
    """Test client with overridden DB."""
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def db(setup_db):
    """Session for calling services directly."""
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


def unique_email(prefix: str = "p") -> str:
    return f"{prefix}_{uuid.uuid4().hex[:8]}@test.com"


def register_and_login(client, prefix: str = "p", full_name: str = "Test User") -> tuple[str, dict]:
    """Register a profile and return (token, profile json)."""
    email = unique_email(prefix)
    me = client.post(
        "/auth/register",
        json={"email": email, "password": "pass", "full_name": full_name},
    ).json()
    token = client.post("/auth/login", json={"email": email, "password": "pass"}).json()["access_token"]
    return token, me


def auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def make_operator(profile_id: int, role: str = "admin") -> None:
    """Grant an operator role straight in the database."""
    from safesignal.models.enums import AppRole
    from safesignal.services.role_service import grant_role

    session = TestingSessionLocal()
    try:
        grant_role(session, profile_id, AppRole(role))
    finally:
        session.close()
