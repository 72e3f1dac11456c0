"""Scheduled publishing.

An entry with ``scheduled_at`` set is published by the periodic sweep
once that time has passed.
"""

import logging
from datetime import datetime
from typing import Callable, List, Optional
from uuid import UUID

from sqlalchemy import and_
from sqlalchemy.orm import Session

from changerawr.core.audit import AuditLogger
from changerawr.core.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from changerawr.db.models import ChangelogEntry, Project

from .applier import PublicationApplier
from .classifier import can_schedule
from .policy import PublicationPolicy

logger = logging.getLogger(__name__)


class SchedulingService:
    def __init__(self, db: Session, audit: Optional[AuditLogger] = None,
                 clock: Callable[[], datetime] = datetime.utcnow):
        self.db = db
        self.audit = audit
        self.clock = clock
        self.applier = PublicationApplier(db, clock=clock)

    def _load(self, project_id: UUID, entry_id: UUID, user) -> ChangelogEntry:
        project = self.db.query(Project).filter(Project.id == project_id).first()
        if project is None:
            raise NotFoundError("Project not found")
        if not can_schedule(user.role, PublicationPolicy.from_project(project)):
            raise AuthorizationError("Not allowed to schedule entries on this project")
        return self.applier.get_entry(entry_id, project.id)

    def schedule(self, project_id: UUID, entry_id: UUID, user, scheduled_at: datetime) -> ChangelogEntry:
        """
        Schedule a draft entry for publication.

        ``scheduled_at`` is naive UTC.
        """
        entry = self._load(project_id, entry_id, user)
        if entry.published_at is not None:
            raise ConflictError("Cannot schedule an already published entry")
        if scheduled_at <= self.clock():
            raise ValidationError(
                "Scheduled time must be in the future",
                details=[{"field": "scheduledAt", "message": "must be in the future"}],
            )

        entry.scheduled_at = scheduled_at
        self.db.flush()
        self._audit(user).log(
            action="ENTRY_SCHEDULED",
            resource_type="entry",
            resource_id=entry.id,
            project_id=project_id,
            details={"scheduledAt": scheduled_at.isoformat()},
        )
        return entry

    def unschedule(self, project_id: UUID, entry_id: UUID, user) -> ChangelogEntry:
        entry = self._load(project_id, entry_id, user)
        if entry.scheduled_at is None:
            raise ValidationError("Entry is not scheduled")

        entry.scheduled_at = None
        self.db.flush()
        self._audit(user).log(
            action="ENTRY_UNSCHEDULED",
            resource_type="entry",
            resource_id=entry.id,
            project_id=project_id,
        )
        return entry

    def publish_due_entries(self, now: Optional[datetime] = None) -> List[ChangelogEntry]:
        """Publish every draft whose scheduled time has passed."""
        now = now or self.clock()
        due = self.db.query(ChangelogEntry).filter(
            and_(
                ChangelogEntry.scheduled_at.isnot(None),
                ChangelogEntry.scheduled_at <= now,
                ChangelogEntry.published_at.is_(None),
            )
        ).all()

        audit = self._audit(None)
        published = []
        for entry in due:
            entry.published_at = now
            entry.scheduled_at = None
            audit.log(
                action="ENTRY_PUBLISHED",
                resource_type="entry",
                resource_id=entry.id,
                project_id=entry.project_id,
                details={"title": entry.title, "scheduled": True},
            )
            published.append(entry)

        self.db.flush()
        if published:
            logger.info(f"Published {len(published)} scheduled entries")
        return published

    def _audit(self, user) -> AuditLogger:
        return self.audit or AuditLogger(self.db, user=user)
