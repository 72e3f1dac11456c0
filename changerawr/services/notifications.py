"""Email notifications for request decisions.

The requester of a changelog request is told when an admin approves or
rejects it. Delivery happens after the review transaction has committed;
failures are logged and never reach the API caller.
"""

import logging
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Any, Dict, Optional

import aiosmtplib

from changerawr.core.config import get_settings
from changerawr.db.models import ChangelogRequest

logger = logging.getLogger(__name__)


REQUEST_TYPE_LABELS = {
    "ALLOW_PUBLISH": "publish",
    "DELETE_ENTRY": "delete entry",
    "DELETE_TAG": "delete tag",
    "DELETE_PROJECT": "delete project",
}

EMAIL_TEMPLATES = {
    "APPROVED": {
        "subject": "[Changerawr] Your {request_label} request was approved",
        "body": """
Hi {staff_name},

Your {request_label} request for {target} in {project_name} was approved by {admin_name}.
{comment_line}
View the project at: {project_url}

---
Changerawr
        """,
    },
    "REJECTED": {
        "subject": "[Changerawr] Your {request_label} request was rejected",
        "body": """
Hi {staff_name},

Your {request_label} request for {target} in {project_name} was rejected by {admin_name}.
{comment_line}
View the project at: {project_url}

---
Changerawr
        """,
    },
}


def build_decision_context(request: ChangelogRequest, target_title: Optional[str] = None) -> Optional[Dict[str, Any]]:
    """
    Snapshot what the decision email needs while the request is still bound
    to its session. Returns None when the requester opted out.
    """
    staff = request.staff
    if staff is None or not staff.notifications_enabled:
        return None

    settings = get_settings()
    admin = request.admin
    project = request.project
    return {
        "to_email": staff.email,
        "status": request.status,
        "staff_name": staff.name or staff.email,
        "admin_name": (admin.name or admin.email) if admin else "an administrator",
        "request_label": REQUEST_TYPE_LABELS.get(request.type, request.type),
        "target": f'"{target_title}"' if target_title else "the requested item",
        "project_name": project.name if project else "your project",
        "project_url": f"{settings.app_url.rstrip('/')}/dashboard/projects/{request.project_id}",
        "comment_line": f"\nComment: {request.comment}\n" if request.comment else "",
    }


class NotificationService:
    """Sends decision emails over SMTP."""

    def __init__(self):
        self.settings = get_settings()

    async def notify_request_decision(self, context: Optional[Dict[str, Any]]) -> bool:
        """
        Email the requester about a review decision.

        Returns:
            True if an email was handed to the SMTP server
        """
        if not context or not self.settings.notifications_enabled:
            return False

        template = EMAIL_TEMPLATES.get(context["status"])
        if not template:
            logger.warning(f"No email template for request status: {context['status']}")
            return False

        subject = template["subject"].format(**context)
        body = template["body"].format(**context)

        try:
            return await self._deliver_email(context["to_email"], subject, body)
        except Exception:
            logger.exception(f"Failed to send request decision email to {context['to_email']}")
            return False

    async def _deliver_email(self, to_email: str, subject: str, body: str) -> bool:
        """Actually deliver the email via SMTP."""
        if not self.settings.smtp_host:
            logger.warning("SMTP not configured, skipping email delivery")
            return False

        msg = MIMEMultipart()
        msg["From"] = f"{self.settings.smtp_from_name} <{self.settings.smtp_from_email}>"
        msg["To"] = to_email
        msg["Subject"] = subject
        msg.attach(MIMEText(body, "plain"))

        await aiosmtplib.send(
            msg,
            hostname=self.settings.smtp_host,
            port=self.settings.smtp_port,
            username=self.settings.smtp_user,
            password=self.settings.smtp_password,
            start_tls=self.settings.smtp_use_tls,
        )
        logger.info(f"Sent request decision email to {to_email}")
        return True


async def send_request_decision(context: Optional[Dict[str, Any]]) -> None:
    """Background task entry point."""
    await NotificationService().notify_request_decision(context)
