"""Audit logging helpers.

``AuditLogger`` is used by the workflow services and routers to record
mutations and decisions. It only adds rows to the session; the caller
owns the transaction.
"""

import uuid
from typing import Optional, Dict, Any

from fastapi import Request

from changerawr.db.models.audit import AuditLog, AuditSeverity


# Sensitive fields to redact from logs
SENSITIVE_FIELDS = {
    "password",
    "password_hash",
    "token",
    "access_token",
    "secret",
    "smtp_password",
}


def get_client_ip(request: Request) -> str:
    """Extract client IP from request, handling proxies."""
    # Check X-Forwarded-For header (set by reverse proxies)
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        # Take the first IP (original client)
        return forwarded.split(",")[0].strip()

    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip

    if request.client:
        return request.client.host

    return "unknown"


def redact_sensitive(data: Any) -> Any:
    """Redact sensitive fields from data."""
    if isinstance(data, dict):
        return {
            k: "[REDACTED]" if k.lower() in SENSITIVE_FIELDS else redact_sensitive(v)
            for k, v in data.items()
        }
    elif isinstance(data, list):
        return [redact_sensitive(item) for item in data]
    return data


class AuditLogger:
    """
    Utility class for logging audit events.

    Usage:
        AuditLogger(db, request, current_user).log(
            action="ENTRY_PUBLISHED",
            resource_type="entry",
            resource_id=entry.id,
            project_id=project.id,
        )

    ``request`` and ``user`` may be None for system actions such as the
    scheduled publishing sweep.
    """

    def __init__(self, db, request: Optional[Request] = None, user=None):
        self.db = db
        self.request = request
        self.user = user

    def log(
        self,
        action: str,
        resource_type: str,
        resource_id: Optional[uuid.UUID] = None,
        *,
        project_id: Optional[uuid.UUID] = None,
        details: Optional[Dict[str, Any]] = None,
        severity: AuditSeverity = AuditSeverity.INFO,
    ) -> AuditLog:
        """Log an audit event."""
        entry = AuditLog.create_entry(
            action=action,
            resource_type=resource_type,
            user_id=self.user.id if self.user else None,
            resource_id=resource_id,
            project_id=project_id,
            details=redact_sensitive(details) if details else None,
            ip_address=get_client_ip(self.request) if self.request else None,
            user_agent=self.request.headers.get("user-agent") if self.request else None,
            severity=severity,
        )
        self.db.add(entry)
        self.db.flush()
        return entry
