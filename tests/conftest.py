from __future__ import annotations

import os
import tempfile

import pytest
from fastapi.testclient import TestClient

_DB_DIR = tempfile.mkdtemp(prefix="partyhub-tests-")

# Ensure auth mode + storage are set before app import
os.environ.setdefault("DATABASE_URL", f"sqlite:///{_DB_DIR}/partyhub.db")
os.environ.setdefault("AUTH_MODE", "dev")
os.environ.setdefault("ENV", "local")
os.environ.setdefault("JWT_SECRET", "test_jwt_secret_32_chars_minimum")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("NOTIFICATIONS_ENABLED", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("STORAGE_ROOT", f"{_DB_DIR}/storage")

from partyhub.db import SessionLocal, engine  # noqa: E402
from partyhub.main import app  # noqa: E402
from partyhub.models import Base, User  # noqa: E402
from tests.helpers import auth, future  # noqa: E402


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


@pytest.fixture
def db_session():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(autouse=True)
def clean_db():
    # Ensure a clean slate for each test
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def make_user(db_session):
    def _make(username: str) -> User:
        user = User(external_id=f"dev:{username}", username=username, display_name=username)
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make


@pytest.fixture
def create_party(client: TestClient):
    def _create(host: str = "host", **overrides) -> dict:
        payload = {"title": "Rooftop Party", "starts_at": future()}
        payload.update(overrides)
        resp = client.post("/v1/parties", json=payload, headers=auth(host))
        assert resp.status_code == 201, resp.text
        return resp.json()["data"]["party"]

    return _create
