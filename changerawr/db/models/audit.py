"""Audit log model for Changerawr.

Entries are append-only: the application never updates or deletes them.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Optional, Dict, Any
from sqlalchemy import Column, String, DateTime, JSON, ForeignKey, Text, Index, Uuid
from sqlalchemy.orm import relationship

from changerawr.db.base import Base


class AuditSeverity(str, Enum):
    """Severity levels for audit log entries."""
    INFO = "info"         # Standard operations
    WARNING = "warning"   # Destructive or policy-relevant actions
    CRITICAL = "critical" # Security-relevant events (login failures, permission denials)


class AuditLog(Base):
    """Append-only record of a workflow mutation or decision."""
    __tablename__ = "audit_logs"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    # Actor information
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    ip_address = Column(String(45), nullable=True)
    user_agent = Column(Text, nullable=True)

    # Action details
    action = Column(String(100), nullable=False, index=True)
    resource_type = Column(String(100), nullable=False)
    resource_id = Column(Uuid, nullable=True)
    project_id = Column(Uuid, nullable=True, index=True)
    details = Column(JSON, nullable=True)

    severity = Column(String(20), nullable=False, default="info")
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships (read-only for querying)
    user = relationship("User", back_populates="audit_logs")

    __table_args__ = (
        Index("ix_audit_logs_created_at_id", "created_at", "id"),
    )

    def __repr__(self) -> str:
        return f"<AuditLog {self.action} on {self.resource_type} by user {self.user_id}>"

    @classmethod
    def create_entry(
        cls,
        action: str,
        resource_type: str,
        *,
        user_id: Optional[uuid.UUID] = None,
        resource_id: Optional[uuid.UUID] = None,
        project_id: Optional[uuid.UUID] = None,
        details: Optional[Dict[str, Any]] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
        severity: AuditSeverity = AuditSeverity.INFO,
    ) -> "AuditLog":
        """
        Factory method to create a new audit log entry.

        Args:
            action: Action performed (e.g., 'ENTRY_PUBLISHED', 'REQUEST_APPROVED')
            resource_type: Type of resource (e.g., 'entry', 'request', 'tag')
            user_id: ID of user performing action (None for system actions)
            resource_id: ID of affected resource
            project_id: Project the resource belongs to
            details: Additional context
            ip_address: Client IP address
            user_agent: Client user agent string
            severity: Log severity level
        """
        return cls(
            action=action,
            resource_type=resource_type,
            user_id=user_id,
            resource_id=resource_id,
            project_id=project_id,
            details=details,
            ip_address=ip_address,
            user_agent=user_agent,
            severity=severity.value if isinstance(severity, AuditSeverity) else severity,
            created_at=datetime.utcnow(),
        )
