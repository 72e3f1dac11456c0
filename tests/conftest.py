"""Pytest configuration and shared fixtures."""

import os

# Must be set before anything under changerawr reads the settings
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("NOTIFICATIONS_ENABLED", "false")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import changerawr.db.models  # noqa: F401  registers every table on Base.metadata
from changerawr.api.deps import get_db
from changerawr.core.security import create_access_token
from changerawr.db.base import Base
from changerawr.db.session import build_engine

from tests.factories import create_project, create_user


engine = build_engine("sqlite://", poolclass=StaticPool)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db_session():
    """A session on a fresh in-memory schema."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def client(db_session):
    """Test client whose requests share ``db_session``."""
    from changerawr.api.main import app

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture()
def admin(db_session):
    return create_user(db_session, role="ADMIN", name="Ada Admin")


@pytest.fixture()
def staff(db_session):
    return create_user(db_session, role="STAFF", name="Sam Staff")


@pytest.fixture()
def viewer(db_session):
    return create_user(db_session, role="VIEWER", name="Vic Viewer")


@pytest.fixture()
def project(db_session):
    """Project that requires approval and does not allow auto-publish."""
    return create_project(db_session, require_approval=True, allow_auto_publish=False)


@pytest.fixture()
def auth_headers():
    """Build bearer headers for a user."""
    def _headers(user) -> dict:
        return {"Authorization": f"Bearer {create_access_token(user.id)}"}
    return _headers


@pytest.fixture()
def session_factory(db_session):
    """Session factory bound to the test database, for code that opens its own sessions."""
    return TestingSessionLocal
