"""Pytest configuration: an isolated SQLite database and log directory per run."""

import os
import tempfile

# Point the settings at throwaway locations BEFORE importing anything from app
_TMP_DIR = tempfile.mkdtemp(prefix="paytrack-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'test_paytrack.sqlite')}"
os.environ["SECRET_KEY"] = "test-secret-key-not-for-production"
os.environ["ALLOWED_HOSTS"] = "testserver,localhost,127.0.0.1"
os.environ["SETUP_RATE_LIMIT"] = "1000/minute"
os.environ["DAILY_SUBMISSION_LIMIT"] = "5"
os.environ["LOG_DIR"] = os.path.join(_TMP_DIR, "logs")
os.environ.pop("ADMIN_EMAIL", None)
os.environ.pop("ADMIN_PASSWORD", None)

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel

from app.core.users import Principal, current_active_user
from app.db.engine_sync import create_sync_db_and_tables, sync_engine
from app.main import app
from app.models.user import User
from app.services.user_service import UserService

DEFAULT_PASSWORD = "secret123"


@pytest.fixture(autouse=True)
def reset_db():
    """Fresh tables for every test."""
    SQLModel.metadata.drop_all(sync_engine)
    create_sync_db_and_tables()
    yield


@pytest.fixture
def session():
    with Session(sync_engine) as session:
        yield session


@pytest.fixture
def users(session):
    return UserService(session)


@pytest.fixture
def admin(users):
    return users.create_first_admin("admin@example.com", DEFAULT_PASSWORD, "Admin")


@pytest.fixture
def make_subadmin(users, admin):
    def _make(email="sub@example.com", name="Sub Admin", **kwargs):
        return users.create_subadmin(email, DEFAULT_PASSWORD, name, created_by=admin.id, **kwargs)

    return _make


@pytest.fixture
def make_client(users, admin):
    def _make(email="client@example.com", name="Client", **kwargs):
        return users.create_client(email, DEFAULT_PASSWORD, name, created_by=admin.id, **kwargs)

    return _make


@pytest.fixture
def principal_of(session):
    def _principal(user: User) -> Principal:
        session.refresh(user)
        return Principal.from_user(user)

    return _principal


@pytest.fixture
def api():
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture
def as_user(session):
    """
    Authenticate subsequent API calls as `user` by overriding the
    fastapi-users dependency with a detached copy of the row.
    """

    def _as(user: User) -> User:
        session.refresh(user)
        detached = User(**user.model_dump())
        app.dependency_overrides[current_active_user] = lambda: detached
        return detached

    yield _as
    app.dependency_overrides.pop(current_active_user, None)

