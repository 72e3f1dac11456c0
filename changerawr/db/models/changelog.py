"""Changelog and changelog entry models.

An entry's publication state lives entirely in ``published_at``:
NULL means draft, any timestamp means published.
"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Text, ForeignKey, Table, Index, Uuid
from sqlalchemy.orm import relationship

from changerawr.db.base import Base


entry_tags = Table(
    "changelog_entry_tags",
    Base.metadata,
    Column("entry_id", Uuid, ForeignKey("changelog_entries.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", Uuid, ForeignKey("changelog_tags.id", ondelete="CASCADE"), primary_key=True, index=True),
)


class Changelog(Base):
    __tablename__ = "changelogs"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    project_id = Column(Uuid, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, unique=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    project = relationship("Project", back_populates="changelog")
    entries = relationship("ChangelogEntry", back_populates="changelog", cascade="all, delete-orphan")


class ChangelogEntry(Base):
    __tablename__ = "changelog_entries"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    changelog_id = Column(Uuid, ForeignKey("changelogs.id", ondelete="CASCADE"), nullable=False, index=True)

    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    version = Column(String(100), nullable=True)

    published_at = Column(DateTime, nullable=True)
    scheduled_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    changelog = relationship("Changelog", back_populates="entries")
    tags = relationship("ChangelogTag", secondary=entry_tags, back_populates="entries", order_by="ChangelogTag.name")
    requests = relationship("ChangelogRequest", back_populates="entry", passive_deletes=True)

    __table_args__ = (
        Index("ix_changelog_entries_scheduled_published", "scheduled_at", "published_at"),
    )

    @property
    def is_published(self) -> bool:
        return self.published_at is not None

    @property
    def project_id(self):
        return self.changelog.project_id if self.changelog else None

    def __repr__(self) -> str:
        state = "published" if self.is_published else "draft"
        return f"<ChangelogEntry {self.title!r} [{state}]>"
