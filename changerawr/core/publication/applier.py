"""State transition applier for changelog entries.

Entry states:

    DRAFT (published_at is NULL) <--> PUBLISHED (published_at set)
    either --delete_entry--> DELETED (row removed)

Every operation is a single-row update or delete on the caller's session.
The applier flushes; committing is left to the caller.
"""

import logging
from datetime import datetime
from typing import Callable, Optional
from uuid import UUID

from sqlalchemy import and_
from sqlalchemy.orm import Session

from changerawr.core.errors import NotFoundError
from changerawr.db.models import Changelog, ChangelogEntry

logger = logging.getLogger(__name__)


class PublicationApplier:
    """Performs authorized publication mutations on entries."""

    def __init__(self, db: Session, clock: Callable[[], datetime] = datetime.utcnow):
        self.db = db
        self.clock = clock

    def get_entry(self, entry_id: UUID, project_id: Optional[UUID] = None) -> ChangelogEntry:
        """
        Load an entry, optionally requiring it to belong to a project.

        Raises:
            NotFoundError: If the entry does not exist or lives in another project
        """
        query = self.db.query(ChangelogEntry).filter(ChangelogEntry.id == entry_id)
        if project_id is not None:
            query = query.join(Changelog).filter(
                and_(
                    Changelog.id == ChangelogEntry.changelog_id,
                    Changelog.project_id == project_id,
                )
            )
        entry = query.first()
        if entry is None:
            raise NotFoundError("Entry not found")
        return entry

    def publish(self, entry_id: UUID, project_id: Optional[UUID] = None) -> ChangelogEntry:
        """Set published_at to now. Re-publishing refreshes the timestamp."""
        entry = self.get_entry(entry_id, project_id)
        entry.published_at = self.clock()
        entry.scheduled_at = None
        self.db.flush()
        logger.info(f"Published entry {entry.id}")
        return entry

    def unpublish(self, entry_id: UUID, project_id: Optional[UUID] = None) -> ChangelogEntry:
        """Clear published_at. Drafts are left untouched."""
        entry = self.get_entry(entry_id, project_id)
        if entry.published_at is not None:
            entry.published_at = None
            self.db.flush()
            logger.info(f"Unpublished entry {entry.id}")
        return entry

    def delete_entry(self, entry_id: UUID, project_id: Optional[UUID] = None) -> ChangelogEntry:
        """
        Remove the entry row.

        Tag associations go with it through the junction table's cascade.
        The returned instance is detached from the database but keeps its
        loaded attributes.
        """
        entry = self.get_entry(entry_id, project_id)
        # Loaded so the deleted entry can still be rendered
        _ = list(entry.tags)
        self.db.delete(entry)
        self.db.flush()
        logger.info(f"Deleted entry {entry.id}")
        return entry
