"""Changelog request model.

Stores staff-initiated changes that wait for an administrator's decision.
"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, ForeignKey, Text, Index, Uuid, text
from sqlalchemy.orm import relationship

from changerawr.db.base import Base


class ChangelogRequest(Base):
    """
    A queued publish or delete awaiting admin review.

    Partial unique indexes over PENDING rows keep one pending request per
    target. ``pending_key`` is written by the request ledger: the request
    type, or a shared key when any pending request blocks the entry.
    """
    __tablename__ = "changelog_requests"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    type = Column(String(20), nullable=False)      # ALLOW_PUBLISH, DELETE_ENTRY, DELETE_TAG, DELETE_PROJECT
    status = Column(String(20), nullable=False, default="PENDING", index=True)

    # Actors
    staff_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    admin_id = Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    # Targets
    project_id = Column(Uuid, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    changelog_entry_id = Column(
        Uuid, ForeignKey("changelog_entries.id", ondelete="SET NULL"), nullable=True, index=True
    )
    changelog_tag_id = Column(Uuid, ForeignKey("changelog_tags.id", ondelete="SET NULL"), nullable=True)

    pending_key = Column(String(20), nullable=True)

    comment = Column(Text, nullable=True)
    reviewed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    # Relationships
    staff = relationship("User", foreign_keys=[staff_id], back_populates="requests")
    admin = relationship("User", foreign_keys=[admin_id])
    project = relationship("Project", back_populates="requests")
    entry = relationship("ChangelogEntry", back_populates="requests")
    tag = relationship("ChangelogTag")

    __table_args__ = (
        Index(
            "uq_changelog_requests_pending_entry",
            "changelog_entry_id",
            "pending_key",
            unique=True,
            postgresql_where=text("status = 'PENDING'"),
            sqlite_where=text("status = 'PENDING'"),
        ),
        Index(
            "uq_changelog_requests_pending_tag",
            "changelog_tag_id",
            "type",
            unique=True,
            postgresql_where=text("status = 'PENDING'"),
            sqlite_where=text("status = 'PENDING'"),
        ),
        Index(
            "uq_changelog_requests_pending_project_deletion",
            "project_id",
            "type",
            unique=True,
            postgresql_where=text("status = 'PENDING' AND type = 'DELETE_PROJECT'"),
            sqlite_where=text("status = 'PENDING' AND type = 'DELETE_PROJECT'"),
        ),
    )

    def __repr__(self) -> str:
        return f"<ChangelogRequest {self.type} [{self.status}]>"
