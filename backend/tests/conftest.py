import os
import shutil
import tempfile
import uuid
from pathlib import Path

import pytest

# Point the app at a throwaway database before anything imports it.
_DB_DIR = Path(tempfile.mkdtemp(prefix="campus-pilot-tests-"))
os.environ["DATABASE_URL"] = f"sqlite:///{_DB_DIR / 'app.db'}"
os.environ["ENV"] = "dev"
os.environ["JWT_SECRET"] = "test-secret-for-campus-pilot-suite"
os.environ["JWT_ALGORITHM"] = "HS256"
os.environ["TIMEZONE"] = "UTC"

from fastapi.testclient import TestClient  # noqa: E402
from sqlmodel import Session  # noqa: E402

from app import models  # noqa: E402
from app.database import engine  # noqa: E402
from app.main import app  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def reset_db():
    """Ensure a fresh SQLite database for tests."""
    yield
    engine.dispose()
    shutil.rmtree(_DB_DIR, ignore_errors=True)


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def db():
    with Session(engine) as session:
        yield session


def unique_email(prefix="student"):
    return f"{prefix}-{uuid.uuid4().hex[:10]}@campuspilot.org"


def registration(email=None, password="correct-horse"):
    return {
        "email": email or unique_email(),
        "password": password,
        "fullName": "Test Student",
        "registerNumber": "REG-001",
        "department": "CSE",
        "year": 2,
        "semester": 3,
    }


@pytest.fixture
def make_registration():
    return registration


@pytest.fixture
def register_user(client):
    """Factory: register + login a fresh user, return (user_id, headers)."""
    def _register(password="correct-horse"):
        body = registration(password=password)
        r = client.post("/auth/register", json=body)
        assert r.status_code == 201, r.text
        user_id = r.json()["id"]
        r2 = client.post("/auth/login", json={"email": body["email"], "password": password})
        assert r2.status_code == 200, r2.text
        token = r2.json()["access_token"]
        return user_id, {"Authorization": f"Bearer {token}"}
    return _register


@pytest.fixture
def user(db):
    """A user row created directly in the store."""
    row = models.User(email=unique_email(), password_hash="x", full_name="Direct User", department="CSE")
    db.add(row)
    db.commit()
    db.refresh(row)
    return row
