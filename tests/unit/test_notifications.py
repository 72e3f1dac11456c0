"""Tests for request decision notifications."""

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from changerawr.core.config import Settings
from changerawr.services.notifications import NotificationService, build_decision_context

from tests.factories import create_entry, create_request, create_user


@pytest.fixture()
def reviewed_request(db_session, admin, project):
    requester = create_user(db_session, role="STAFF", name="Riley", email="riley@example.com")
    entry = create_entry(db_session, project=project, title="Dark mode")
    request = create_request(db_session, staff=requester, project=project, entry=entry)
    request.status = "APPROVED"
    request.admin_id = admin.id
    request.comment = "Nice work"
    db_session.flush()
    return request


def enabled_service(**overrides) -> NotificationService:
    service = NotificationService()
    service.settings = Settings(_env_file=None, notifications_enabled=True, **overrides)
    return service


class TestBuildDecisionContext:
    def test_context_fields(self, reviewed_request, admin, project):
        context = build_decision_context(reviewed_request, "Dark mode")

        assert context["to_email"] == "riley@example.com"
        assert context["status"] == "APPROVED"
        assert context["staff_name"] == "Riley"
        assert context["admin_name"] == admin.name
        assert context["request_label"] == "publish"
        assert context["target"] == '"Dark mode"'
        assert context["project_name"] == project.name
        assert context["project_url"].endswith(f"/dashboard/projects/{project.id}")
        assert "Nice work" in context["comment_line"]

    def test_opted_out_requester(self, db_session, reviewed_request):
        """Test requesters who disabled notifications get no context."""
        reviewed_request.staff.notifications_enabled = False
        assert build_decision_context(reviewed_request) is None


class TestNotificationService:
    """Test delivery decisions."""

    def test_no_context_sends_nothing(self):
        assert asyncio.run(enabled_service().notify_request_decision(None)) is False

    def test_disabled_by_settings(self, reviewed_request):
        service = NotificationService()
        service.settings = Settings(_env_file=None, notifications_enabled=False, smtp_host="smtp.example.com")
        context = build_decision_context(reviewed_request)
        assert asyncio.run(service.notify_request_decision(context)) is False

    def test_no_smtp_host_skips_delivery(self, reviewed_request):
        context = build_decision_context(reviewed_request)
        assert asyncio.run(enabled_service().notify_request_decision(context)) is False

    def test_sends_email(self, reviewed_request):
        """Test the rendered email is handed to aiosmtplib."""
        context = build_decision_context(reviewed_request, "Dark mode")
        service = enabled_service(smtp_host="smtp.example.com", smtp_port=2525)

        with patch("changerawr.services.notifications.aiosmtplib.send", new=AsyncMock()) as send:
            assert asyncio.run(service.notify_request_decision(context)) is True

        message = send.call_args.args[0]
        assert message["To"] == "riley@example.com"
        assert message["Subject"] == "[Changerawr] Your publish request was approved"
        assert send.call_args.kwargs["hostname"] == "smtp.example.com"
        assert send.call_args.kwargs["port"] == 2525

    def test_smtp_failure_is_swallowed(self, reviewed_request):
        """Test delivery errors are logged and reported as not sent."""
        context = build_decision_context(reviewed_request)
        service = enabled_service(smtp_host="smtp.example.com")

        with patch(
            "changerawr.services.notifications.aiosmtplib.send",
            new=AsyncMock(side_effect=OSError("connection refused")),
        ):
            assert asyncio.run(service.notify_request_decision(context)) is False
