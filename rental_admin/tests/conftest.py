import json
import os
from datetime import timedelta
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool
from sqlalchemy.orm import sessionmaker

# CRITICAL: configure the environment BEFORE importing any rental_admin module
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["TESTING"] = "true"
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ["ROLE_POLICY"] = json.dumps(
    {"admin@example.com": "admin", "staff@example.com": "staff"}
)

from rental_admin.main import app
from rental_admin.config import settings
from rental_admin.database import Base
from rental_admin.dependencies import get_db
from rental_admin.services.activity_log import ActivityLog
from rental_admin.services.auth_service import create_access_token
from rental_admin.services.file_store import LocalFileStore

ADMIN_EMAIL = "admin@example.com"
STAFF_EMAIL = "staff@example.com"


@pytest.fixture(scope="session")
def test_engine():
    return create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,  # share same in-memory DB across connections
    )


@pytest.fixture()
def db_session(test_engine):
    TestingSessionLocal = sessionmaker(
        autocommit=False, autoflush=False, bind=test_engine
    )
    # Fresh schema per test
    Base.metadata.drop_all(bind=test_engine)
    Base.metadata.create_all(bind=test_engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(autouse=True)
def override_get_db(test_engine, db_session):
    TestingSessionLocal = sessionmaker(
        autocommit=False, autoflush=False, bind=test_engine
    )

    def test_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = test_get_db
    # Disable rate limiter globally for tests
    app.state.limiter.enabled = False
    yield
    app.dependency_overrides.pop(get_db, None)


@pytest.fixture(autouse=True)
def isolated_storage(monkeypatch, tmp_path):
    """Point uploads and the activity log at a per-test temporary directory."""
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(tmp_path / "uploads"))
    monkeypatch.setattr(settings, "ACTIVITY_LOG_PATH", str(tmp_path / "logs.json"))
    yield


@pytest.fixture()
def upload_dir(tmp_path):
    return tmp_path / "uploads"


@pytest.fixture()
def file_store():
    return LocalFileStore()


@pytest.fixture()
def activity_log():
    return ActivityLog()


def auth_headers(email: str, role: str, user_id: int = 1) -> dict:
    token = create_access_token(email, user_id, role, timedelta(minutes=30))
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def admin_headers():
    return auth_headers(ADMIN_EMAIL, "admin", 1)


@pytest.fixture()
def staff_headers():
    return auth_headers(STAFF_EMAIL, "staff", 2)


@pytest.fixture()
def client():
    return TestClient(app)
