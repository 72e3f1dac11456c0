"""Tests for authentication, user management and project endpoints."""

import uuid

import pytest

from changerawr.core.security import get_password_hash
from changerawr.db.models import AuditLog, Project, User

from tests.factories import create_user


pytestmark = pytest.mark.integration


class TestSetup:
    """POST /api/auth/setup"""

    def test_first_admin(self, client, db_session):
        response = client.post(
            "/api/auth/setup",
            json={"email": "Owner@Example.com", "password": "correct-horse", "name": "Owner"},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["email"] == "owner@example.com"
        assert data["role"] == "ADMIN"
        assert "passwordHash" not in data

    def test_only_once(self, client, db_session, admin):
        db_session.commit()
        response = client.post("/api/auth/setup", json={"email": "late@example.com", "password": "correct-horse"})
        assert response.status_code == 409


class TestLogin:
    """POST /api/auth/login"""

    @pytest.fixture()
    def member(self, db_session):
        user = create_user(db_session, email="member@example.com", password_hash=get_password_hash("s3cret-pass"))
        db_session.commit()
        return user

    def test_login_and_me(self, client, member):
        response = client.post("/api/auth/login", data={"username": "Member@example.com", "password": "s3cret-pass"})

        assert response.status_code == 200
        token = response.json()["access_token"]
        assert response.json()["token_type"] == "bearer"

        me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert me.status_code == 200
        assert me.json()["email"] == "member@example.com"
        assert me.json()["lastLogin"] is not None

    def test_wrong_password_is_audited(self, client, db_session, member):
        response = client.post("/api/auth/login", data={"username": "member@example.com", "password": "nope"})

        assert response.status_code == 401
        assert response.json() == {"error": "Incorrect email or password"}
        log = db_session.query(AuditLog).filter(AuditLog.action == "LOGIN_FAILED").one()
        assert log.severity == "critical"
        assert log.user_id == member.id

    def test_inactive_user(self, client, db_session, member):
        member.is_active = False
        db_session.commit()

        response = client.post("/api/auth/login", data={"username": "member@example.com", "password": "s3cret-pass"})

        assert response.status_code == 403


class TestCurrentUser:
    """GET /api/auth/me"""

    def test_no_token(self, client):
        response = client.get("/api/auth/me")
        assert response.status_code == 401
        assert response.json() == {"error": "Could not validate credentials"}
        assert response.headers["www-authenticate"] == "Bearer"

    def test_bad_token(self, client):
        response = client.get("/api/auth/me", headers={"Authorization": "Bearer garbage"})
        assert response.status_code == 401

    def test_deactivated_user(self, client, db_session, staff, auth_headers):
        headers = auth_headers(staff)
        staff.is_active = False
        db_session.commit()

        assert client.get("/api/auth/me", headers=headers).status_code == 401


class TestUsers:
    """/api/users"""

    def test_admin_creates_staff(self, client, db_session, admin, auth_headers):
        response = client.post(
            "/api/users",
            json={"email": "New@Example.com", "password": "longenough", "role": "STAFF"},
            headers=auth_headers(admin),
        )

        assert response.status_code == 201
        assert response.json()["role"] == "STAFF"
        assert db_session.query(User).filter(User.email == "new@example.com").count() == 1

    def test_duplicate_email(self, client, db_session, admin, staff, auth_headers):
        db_session.commit()
        response = client.post(
            "/api/users",
            json={"email": staff.email, "password": "longenough"},
            headers=auth_headers(admin),
        )
        assert response.status_code == 409

    def test_unknown_role(self, client, admin, auth_headers):
        response = client.post(
            "/api/users",
            json={"email": "x@example.com", "password": "longenough", "role": "OWNER"},
            headers=auth_headers(admin),
        )
        assert response.status_code == 400

    def test_staff_cannot_manage_users(self, client, staff, auth_headers):
        assert client.get("/api/users", headers=auth_headers(staff)).status_code == 403


class TestProjects:
    """/api/projects"""

    def test_create_project(self, client, db_session, admin, auth_headers):
        response = client.post(
            "/api/projects",
            json={"name": "Mobile App", "requireApproval": False, "allowAutoPublish": True},
            headers=auth_headers(admin),
        )

        assert response.status_code == 201
        data = response.json()
        assert data["slug"] == "mobile-app"
        assert data["requireApproval"] is False
        assert data["allowAutoPublish"] is True
        project = db_session.get(Project, uuid.UUID(data["id"]))
        assert project.changelog is not None

    def test_duplicate_slug_gets_suffix(self, client, admin, auth_headers):
        first = client.post("/api/projects", json={"name": "Web"}, headers=auth_headers(admin)).json()
        second = client.post("/api/projects", json={"name": "Web"}, headers=auth_headers(admin)).json()

        assert first["slug"] == "web"
        assert second["slug"].startswith("web-")

    def test_staff_cannot_create(self, client, staff, auth_headers):
        response = client.post("/api/projects", json={"name": "Nope"}, headers=auth_headers(staff))
        assert response.status_code == 403

    def test_update_settings(self, client, db_session, admin, project, auth_headers):
        """Test a policy change is saved and audited."""
        response = client.patch(
            f"/api/projects/{project.id}/settings",
            json={"allowAutoPublish": True},
            headers=auth_headers(admin),
        )

        assert response.status_code == 200
        assert response.json()["allowAutoPublish"] is True
        assert response.json()["requireApproval"] is True
        log = db_session.query(AuditLog).filter(AuditLog.action == "PROJECT_SETTINGS_UPDATED").one()
        assert log.details == {"old": {"allow_auto_publish": False}, "new": {"allow_auto_publish": True}}

    def test_staff_cannot_configure(self, client, staff, project, auth_headers):
        response = client.patch(
            f"/api/projects/{project.id}/settings",
            json={"allowAutoPublish": True},
            headers=auth_headers(staff),
        )
        assert response.status_code == 403

    def test_viewer_reads_settings(self, client, viewer, project, auth_headers):
        response = client.get(f"/api/projects/{project.id}/settings", headers=auth_headers(viewer))
        assert response.status_code == 200
        assert response.json()["requireApproval"] is True
